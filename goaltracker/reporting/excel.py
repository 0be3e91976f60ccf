"""
Excel Export

Writes report tables into a styled openpyxl workbook:
- Bold, filled header row with borders
- Currency and percent number formats by column kind
- Bold totals row
"""

from io import BytesIO
from typing import Iterable, Optional

import structlog
from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter

from goaltracker.reporting.tables import COUNT, MONEY, PERCENT, ReportTable

logger = structlog.get_logger(__name__)

HEADER_FILL_COLOR = "1F2937"
HEADER_FONT_COLOR = "FFFFFF"
PERCENT_FORMAT = '0.0"%"'
COUNT_FORMAT = "#,##0"


class ReportWorkbook:
    """
    Excel report generator.

    Usage:
        workbook = ReportWorkbook(currency="CRC")
        workbook.add_sheet("Advisors", [admin_report_table(board)], info=["Date: 2024-05-10"])
        excel_bytes = workbook.to_bytes()
    """

    def __init__(self, currency: str = "CRC"):
        self.currency = currency
        self.wb = Workbook()
        self._has_sheets = False
        self._init_styles()

    def _init_styles(self):
        self.header_fill = PatternFill(
            start_color=HEADER_FILL_COLOR,
            end_color=HEADER_FILL_COLOR,
            fill_type="solid",
        )
        self.header_font = Font(bold=True, color=HEADER_FONT_COLOR, size=11)
        self.title_font = Font(bold=True, size=14)
        self.bold_font = Font(bold=True)

        thin = Side(style="thin", color="000000")
        self.cell_border = Border(left=thin, right=thin, top=thin, bottom=thin)

        self.center_align = Alignment(horizontal="center", vertical="center")
        self.right_align = Alignment(horizontal="right", vertical="center")

        self.currency_format = f'"{self.currency}" #,##0.00'

    def _number_format(self, kind: str) -> Optional[str]:
        return {
            MONEY: self.currency_format,
            PERCENT: PERCENT_FORMAT,
            COUNT: COUNT_FORMAT,
        }.get(kind)

    def add_sheet(
        self,
        name: str,
        tables: Iterable[ReportTable],
        title: Optional[str] = None,
        info: Iterable[str] = (),
    ) -> None:
        """Write one or more tables on a new sheet, one below the other"""
        if not self._has_sheets:
            ws = self.wb.active
            ws.title = name[:31]
            self._has_sheets = True
        else:
            ws = self.wb.create_sheet(name[:31])

        row = 1
        if title:
            ws.cell(row=row, column=1, value=title).font = self.title_font
            row += 1
        for line in info:
            ws.cell(row=row, column=1, value=line)
            row += 1
        if row > 1:
            row += 1

        widths = {}
        for table in tables:
            row = self._write_table(ws, table, row, widths)
            row += 2

        for col_idx, width in widths.items():
            ws.column_dimensions[get_column_letter(col_idx)].width = min(max(width + 2, 10), 40)

    def _write_table(self, ws, table: ReportTable, start_row: int, widths: dict) -> int:
        ws.cell(row=start_row, column=1, value=table.title).font = self.bold_font
        header_row = start_row + 1
        columns = table.frame.columns

        for col_idx, column in enumerate(columns, 1):
            cell = ws.cell(row=header_row, column=col_idx, value=column)
            cell.fill = self.header_fill
            cell.font = self.header_font
            cell.alignment = self.center_align
            cell.border = self.cell_border
            widths[col_idx] = max(widths.get(col_idx, 0), len(str(column)))

        last_index = table.frame.height - 1
        row_idx = header_row
        for index, record in enumerate(table.frame.iter_rows()):
            row_idx = header_row + 1 + index
            is_totals = table.has_totals_row and index == last_index
            for col_idx, (column, value) in enumerate(zip(columns, record), 1):
                cell = ws.cell(row=row_idx, column=col_idx, value=value)
                cell.border = self.cell_border
                number_format = self._number_format(table.kind(column))
                if number_format:
                    cell.number_format = number_format
                    cell.alignment = self.right_align
                if is_totals:
                    cell.font = self.bold_font
                widths[col_idx] = max(widths.get(col_idx, 0), len(str(value)) if value is not None else 0)
        return row_idx

    def to_bytes(self) -> BytesIO:
        output = BytesIO()
        self.wb.save(output)
        output.seek(0)
        logger.debug("Excel report generated", sheets=self.wb.sheetnames)
        return output

"""
PDF Export

Renders report tables with reportlab platypus. Amounts are formatted here
and only here, e.g. ``CRC 1,234.00``.
"""

from io import BytesIO
from typing import Iterable, List, Optional

import structlog
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from goaltracker.reporting.tables import COUNT, MONEY, PERCENT, ReportTable

logger = structlog.get_logger(__name__)


def format_money(value: Optional[float], currency: str = "CRC") -> str:
    return f"{currency} {value or 0:,.2f}"


def format_cell(value, kind: str, currency: str) -> str:
    if value is None:
        return "BREAK" if kind == MONEY else ""
    if kind == MONEY:
        return format_money(value, currency)
    if kind == PERCENT:
        return f"{value:.1f}%"
    if kind == COUNT:
        return f"{value:,.0f}"
    return str(value)


def _table_flowable(table: ReportTable, currency: str) -> Table:
    columns = table.frame.columns
    data: List[List[str]] = [list(columns)]
    for record in table.frame.iter_rows():
        data.append([
            format_cell(value, table.kind(column), currency)
            for column, value in zip(columns, record)
        ])

    style = [
        ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor("#1F2937")),
        ("TEXTCOLOR", (0, 0), (-1, 0), colors.whitesmoke),
        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ("FONTSIZE", (0, 0), (-1, -1), 8),
        ("GRID", (0, 0), (-1, -1), 0.3, colors.HexColor("#94A3B8")),
        ("ALIGN", (1, 1), (-1, -1), "RIGHT"),
    ]
    if table.has_totals_row and table.frame.height:
        style += [
            ("FONTNAME", (0, -1), (-1, -1), "Helvetica-Bold"),
            ("BACKGROUND", (0, -1), (-1, -1), colors.HexColor("#E5E7EB")),
        ]

    flowable = Table(data, repeatRows=1)
    flowable.setStyle(TableStyle(style))
    return flowable


def render_pdf(
    title: str,
    tables: Iterable[ReportTable],
    info: Iterable[str] = (),
    currency: str = "CRC",
    wide: bool = False,
) -> BytesIO:
    """
    Build a PDF document with a title, info lines and one table per section.

    ``wide`` switches to landscape for tables with many columns.
    """
    buffer = BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=landscape(A4) if wide else A4,
        rightMargin=12 * mm,
        leftMargin=12 * mm,
        topMargin=12 * mm,
        bottomMargin=12 * mm,
        title=title,
    )
    styles = getSampleStyleSheet()
    story = [Paragraph(title, styles["Title"])]
    for line in info:
        story.append(Paragraph(line, styles["Normal"]))
    story.append(Spacer(1, 8))

    for table in tables:
        story.append(Paragraph(table.title, styles["Heading3"]))
        story.append(_table_flowable(table, currency))
        story.append(Spacer(1, 10))

    doc.build(story)
    buffer.seek(0)
    logger.debug("PDF report generated", title=title)
    return buffer

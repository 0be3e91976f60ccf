"""
Unit Tests - Reports
"""
from dataclasses import replace
from datetime import date

import pytest
from openpyxl import load_workbook

from goaltracker.engine import GoalAllocationEngine, MatrixRow, MatrixSheet, StoreMetricRecord, store_hourly_rows, store_totals
from goaltracker.reporting import ReportFormat, admin_report, advisor_report, format_money, matrix_report, store_metrics_report
from goaltracker.reporting.documents import safe_filename
from goaltracker.reporting.pdf import format_cell
from goaltracker.reporting.tables import (
    MONEY,
    TOTALS_LABEL,
    admin_report_table,
    hour_label,
    matrix_table,
    store_metrics_table,
)


class TestReportTables:
    """Tests for the report frames"""

    def test_admin_table_has_totals_row(self, two_hour_snapshot):
        """Test one row per advisor plus the totals row"""
        table = admin_report_table(GoalAllocationEngine(two_hour_snapshot).goal_board())

        assert table.frame.columns == ["Advisor", "Goal", "Sales", "Tickets", "Compliance"]
        assert table.frame["Advisor"].to_list() == ["Ana", "Beto", TOTALS_LABEL]
        assert table.frame["Goal"][-1] == pytest.approx(100000)
        assert table.frame["Sales"][-1] == pytest.approx(95000)
        assert table.has_totals_row

    def test_store_metrics_table_totals(self, two_hour_snapshot):
        """Test the store table ends with summed traffic and sales"""
        engine = GoalAllocationEngine(two_hour_snapshot)
        rows = store_hourly_rows(engine, [
            StoreMetricRecord(hour=9, traffic=100, tickets=20, current_sales=30000),
            StoreMetricRecord(hour=10, traffic=50, tickets=10, current_sales=20000),
        ])
        table = store_metrics_table(rows, store_totals(rows, two_hour_snapshot.advisors))

        assert table.frame.height == 3
        assert table.frame["Hour"][-1] == TOTALS_LABEL

    def test_matrix_table_marks_breaks(self):
        """Test break cells are empty and totals exclude them"""
        sheet = MatrixSheet(9, 10, [MatrixRow(id="r1", name="Ana", values={9: 100, 10: 200}, breaks={10})])
        table = matrix_table(sheet)

        assert table.frame[hour_label(10)][0] is None
        assert table.frame["Total Goal"].to_list() == [100, 100]

    def test_hour_label(self):
        """Test 12-hour clock labels"""
        assert hour_label(9) == "9:00 AM"
        assert hour_label(12) == "12:00 PM"
        assert hour_label(13) == "1:00 PM"
        assert hour_label(0) == "12:00 AM"


class TestFormatting:
    """Tests for PDF cell formatting"""

    def test_money(self):
        """Test currency amounts use thousands separators and two decimals"""
        assert format_money(1234.5, "CRC") == "CRC 1,234.50"
        assert format_money(None, "USD") == "USD 0.00"

    def test_break_cell(self):
        """Test missing money values render as a break"""
        assert format_cell(None, MONEY, "CRC") == "BREAK"


class TestSafeFilename:
    """Tests for download filenames"""

    def test_accents_are_folded(self):
        """Test accented names reduce to plain ASCII"""
        assert safe_filename("josé peña") == "jose-pena"
        assert safe_filename("đức") == "uc"

    def test_header_breaking_characters_removed(self):
        """Test quotes, slashes and angle brackets never reach the filename"""
        assert safe_filename('ana "la jefa"') == "ana-la-jefa"
        assert safe_filename("ana <3") == "ana-3"
        assert safe_filename("a/b\\c") == "a-b-c"

    def test_fallback(self):
        """Test a name with nothing printable falls back"""
        assert safe_filename("王芳", fallback="advisor") == "advisor"
        assert safe_filename("") == "report"

    def test_advisor_report_name_is_ascii(self, two_hour_snapshot):
        """Test a non-Latin-1 advisor name still gives an ASCII filename"""
        engine = GoalAllocationEngine(two_hour_snapshot)
        progress = replace(engine.advisor_progress("ana"), name="Đức")
        document = advisor_report(progress, engine.advisor_breakdown("ana"), date(2024, 5, 10), ReportFormat.PDF)

        assert document.filename == "goal-uc-2024-05-10.pdf"
        document.filename.encode("ascii")


class TestDocuments:
    """Tests for rendered Excel and PDF documents"""

    def test_admin_excel(self, two_hour_snapshot):
        """Test the admin workbook opens and carries the advisor rows"""
        board = GoalAllocationEngine(two_hour_snapshot).goal_board()
        document = admin_report(board, ReportFormat.XLSX)

        assert document.filename.endswith(".xlsx")
        workbook = load_workbook(document.content)
        values = [cell for row in workbook.active.iter_rows(values_only=True) for cell in row]
        assert "Ana" in values
        assert TOTALS_LABEL in values

    def test_admin_pdf(self, two_hour_snapshot):
        """Test the admin PDF is a PDF document"""
        board = GoalAllocationEngine(two_hour_snapshot).goal_board()
        document = admin_report(board, ReportFormat.PDF)

        assert document.media_type == "application/pdf"
        assert document.content.getvalue().startswith(b"%PDF")

    def test_advisor_report(self, two_hour_snapshot):
        """Test the personal report is named after the advisor and the day"""
        engine = GoalAllocationEngine(two_hour_snapshot)
        document = advisor_report(
            engine.advisor_progress("ana"),
            engine.advisor_breakdown("ana"),
            date(2024, 5, 10),
            ReportFormat.XLSX,
        )

        assert document.filename == "goal-ana-2024-05-10.xlsx"
        workbook = load_workbook(document.content)
        values = [cell for row in workbook.active.iter_rows(values_only=True) for cell in row]
        assert "Shortfall" in values

    def test_store_metrics_pdf(self, two_hour_snapshot):
        """Test the store metrics report renders in landscape without errors"""
        engine = GoalAllocationEngine(two_hour_snapshot)
        rows = store_hourly_rows(engine, [])
        document = store_metrics_report(
            rows, store_totals(rows, two_hour_snapshot.advisors), date(2024, 5, 10), ReportFormat.PDF
        )

        assert document.content.getvalue().startswith(b"%PDF")

    def test_matrix_excel(self):
        """Test the matrix workbook holds the totals row"""
        document = matrix_report(MatrixSheet(), ReportFormat.XLSX)

        workbook = load_workbook(document.content)
        first_column = [row[0] for row in workbook.active.iter_rows(values_only=True)]
        assert TOTALS_LABEL in first_column

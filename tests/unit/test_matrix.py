"""
Unit Tests - Goal Matrix
"""
import pytest

from goaltracker.engine import MatrixRow, MatrixSheet
from goaltracker.engine.matrix import MATRIX_DEFAULT_ROWS


@pytest.fixture
def sheet() -> MatrixSheet:
    """Two rows over 9:00-11:00"""
    return MatrixSheet(9, 11, [
        MatrixRow(id="r1", name="Ana", values={9: 100, 10: 200, 11: 300}, sales={9: 90, 10: 250}),
        MatrixRow(id="r2", name="Beto", values={9: 50, 10: 50, 11: 50}, sales={11: 40}),
    ])


class TestMatrixSheet:
    """Tests for MatrixSheet"""

    def test_initial_state(self):
        """Test a new grid has the default hours and empty rows"""
        sheet = MatrixSheet()

        assert sheet.hours == list(range(9, 19))
        assert len(sheet.rows) == MATRIX_DEFAULT_ROWS
        assert len({row.id for row in sheet.rows}) == MATRIX_DEFAULT_ROWS
        assert sheet.totals().grand_total == 0

    def test_totals(self, sheet):
        """Test row, column and grand totals"""
        totals = sheet.totals()

        assert totals.row_totals == {"r1": 600, "r2": 150}
        assert totals.row_sales == {"r1": 340, "r2": 40}
        assert totals.col_totals == {9: 150, 10: 250, 11: 350}
        assert totals.col_sales == {9: 90, 10: 250, 11: 40}
        assert totals.grand_total == 750
        assert totals.grand_sales == 380
        assert totals.difference == 370

    def test_break_excludes_goal(self, sheet):
        """Test a break cell's goal is left out of row and column totals"""
        sheet.toggle_cell_break("r1", 10)
        totals = sheet.totals()

        assert totals.row_totals["r1"] == 400
        assert totals.col_totals[10] == 50
        assert totals.col_sales[10] == 250

    def test_toggle_cell_break_twice(self, sheet):
        """Test toggling a cell break off again restores the total"""
        sheet.toggle_cell_break("r1", 10)
        sheet.toggle_cell_break("r1", 10)

        assert sheet.totals().row_totals["r1"] == 600

    def test_column_break_sets_all_then_clears_all(self, sheet):
        """Test column toggle adds to every row unless all rows already have it"""
        sheet.toggle_cell_break("r1", 9)

        sheet.toggle_column_break(9)
        assert all(9 in row.breaks for row in sheet.rows)
        assert sheet.totals().col_totals[9] == 0

        sheet.toggle_column_break(9)
        assert all(9 not in row.breaks for row in sheet.rows)

    def test_manual_total_overrides_cell_sales(self, sheet):
        """Test a pinned total wins over later cell edits until cleared"""
        sheet.set_manual_total("r1", 1000)
        sheet.set_sale("r1", 11, 500)

        assert sheet.totals().row_sales["r1"] == 1000
        assert sheet.totals().grand_sales == 1040

        sheet.clear_manual_total("r1")
        assert sheet.totals().row_sales["r1"] == 840

    def test_time_range_keeps_cells(self, sheet):
        """Test narrowing the range hides cells without deleting them"""
        sheet.set_time_range(9, 10)
        assert sheet.totals().row_totals["r1"] == 300

        sheet.set_time_range(9, 11)
        assert sheet.totals().row_totals["r1"] == 600

    def test_row_actions(self, sheet):
        """Test adding, renaming and deleting rows"""
        row = sheet.add_row("Carla")
        sheet.rename_row(row.id, "Carla M.")
        sheet.set_value(row.id, 9, 10)

        assert sheet.row(row.id).name == "Carla M."
        assert sheet.totals().col_totals[9] == 160

        sheet.delete_row("r2")
        assert [r.id for r in sheet.rows] == ["r1", row.id]
        with pytest.raises(KeyError):
            sheet.row("r2")

    def test_summaries(self, sheet):
        """Test per-row compliance figures"""
        sheet.set_manual_total("r2", 150)
        summaries = {item.row_id: item for item in sheet.summaries()}

        assert summaries["r1"].difference == 260
        assert summaries["r1"].remaining == 260
        assert summaries["r2"].compliance == pytest.approx(100)
        assert summaries["r2"].manual is True

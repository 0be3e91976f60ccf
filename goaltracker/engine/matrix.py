"""
Matrix Tracker

Free-form goal grid: one row per person, one column per hour. Each cell
holds a goal value and a sale value; a cell may be flagged as a break, in
which case its goal is left out of every total. A row's sales total can be
pinned to a manually entered figure, which then takes precedence over the
sum of its cells until cleared.
"""

import uuid
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set

from .metrics import compliance, remaining, surplus
from .window import time_window

MATRIX_DEFAULT_START_HOUR = 9
MATRIX_DEFAULT_END_HOUR = 18
MATRIX_DEFAULT_ROWS = 5


def _new_row_id() -> str:
    return str(uuid.uuid4())


@dataclass
class MatrixRow:
    id: str = field(default_factory=_new_row_id)
    name: str = ""
    values: Dict[int, float] = field(default_factory=dict)
    sales: Dict[int, float] = field(default_factory=dict)
    breaks: Set[int] = field(default_factory=set)
    manual_total_sale: Optional[float] = None

    @property
    def has_manual_total(self) -> bool:
        return self.manual_total_sale is not None


@dataclass
class MatrixRowSummary:
    row_id: str
    name: str
    goal: float
    sales: float
    difference: float
    compliance: float
    remaining: float
    surplus: float
    manual: bool


@dataclass
class MatrixTotals:
    row_totals: Dict[str, float]
    row_sales: Dict[str, float]
    col_totals: Dict[int, float]
    col_sales: Dict[int, float]
    grand_total: float
    grand_sales: float

    @property
    def difference(self) -> float:
        """Positive while the grid is short of its goal"""
        return self.grand_total - self.grand_sales


class MatrixSheet:
    """
    Editable grid state plus its totals.

    Example:
        sheet = MatrixSheet()
        row = sheet.rows[0]
        sheet.set_value(row.id, 10, 5000)
        sheet.set_manual_total(row.id, 4200)
        sheet.totals().grand_sales
    """

    def __init__(
        self,
        start_hour: int = MATRIX_DEFAULT_START_HOUR,
        end_hour: int = MATRIX_DEFAULT_END_HOUR,
        rows: Optional[List[MatrixRow]] = None,
    ):
        self.start_hour = start_hour
        self.end_hour = end_hour
        if rows is None:
            rows = [MatrixRow() for _ in range(MATRIX_DEFAULT_ROWS)]
        self.rows: List[MatrixRow] = list(rows)

    @property
    def hours(self) -> List[int]:
        return time_window(self.start_hour, self.end_hour)

    def row(self, row_id: str) -> MatrixRow:
        for row in self.rows:
            if row.id == row_id:
                return row
        raise KeyError(f"Matrix row {row_id} not found")

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    def add_row(self, name: str = "") -> MatrixRow:
        row = MatrixRow(name=name)
        self.rows.append(row)
        return row

    def delete_row(self, row_id: str) -> None:
        self.rows = [row for row in self.rows if row.id != row_id]

    def rename_row(self, row_id: str, name: str) -> None:
        self.row(row_id).name = name

    def set_value(self, row_id: str, hour: int, value: float) -> None:
        self.row(row_id).values[hour] = value

    def set_sale(self, row_id: str, hour: int, value: float) -> None:
        self.row(row_id).sales[hour] = value

    def set_manual_total(self, row_id: str, value: Optional[float]) -> None:
        """Pin the row's sales total; None clears the override"""
        self.row(row_id).manual_total_sale = value

    def clear_manual_total(self, row_id: str) -> None:
        self.set_manual_total(row_id, None)

    def toggle_cell_break(self, row_id: str, hour: int) -> None:
        breaks = self.row(row_id).breaks
        if hour in breaks:
            breaks.discard(hour)
        else:
            breaks.add(hour)

    def toggle_column_break(self, hour: int) -> None:
        """Remove the break from every row if all have it, otherwise add it to all"""
        if all(hour in row.breaks for row in self.rows):
            for row in self.rows:
                row.breaks.discard(hour)
        else:
            for row in self.rows:
                row.breaks.add(hour)

    def set_time_range(self, start_hour: int, end_hour: int) -> None:
        """Cells outside the new range are kept but no longer counted"""
        self.start_hour = start_hour
        self.end_hour = end_hour

    # ------------------------------------------------------------------
    # Calculations
    # ------------------------------------------------------------------

    def row_goal(self, row: MatrixRow) -> float:
        return sum(
            row.values.get(hour, 0.0) or 0.0
            for hour in self.hours
            if hour not in row.breaks
        )

    def computed_row_sales(self, row: MatrixRow) -> float:
        return sum(row.sales.get(hour, 0.0) or 0.0 for hour in self.hours)

    def row_sales(self, row: MatrixRow) -> float:
        """Manual total when pinned, otherwise the live sum of cell sales"""
        if row.manual_total_sale is not None:
            return row.manual_total_sale
        return self.computed_row_sales(row)

    def totals(self) -> MatrixTotals:
        hours = self.hours
        col_totals = {hour: 0.0 for hour in hours}
        col_sales = {hour: 0.0 for hour in hours}
        row_totals = {}
        row_sales = {}
        for row in self.rows:
            for hour in hours:
                if hour not in row.breaks:
                    col_totals[hour] += row.values.get(hour, 0.0) or 0.0
                col_sales[hour] += row.sales.get(hour, 0.0) or 0.0
            row_totals[row.id] = self.row_goal(row)
            row_sales[row.id] = self.row_sales(row)
        return MatrixTotals(
            row_totals=row_totals,
            row_sales=row_sales,
            col_totals=col_totals,
            col_sales=col_sales,
            grand_total=sum(row_totals.values()),
            grand_sales=sum(row_sales.values()),
        )

    def summaries(self) -> List[MatrixRowSummary]:
        results = []
        for row in self.rows:
            goal = self.row_goal(row)
            sales = self.row_sales(row)
            results.append(MatrixRowSummary(
                row_id=row.id,
                name=row.name,
                goal=goal,
                sales=sales,
                difference=goal - sales,
                compliance=compliance(sales, goal),
                remaining=remaining(sales, goal),
                surplus=surplus(sales, goal),
                manual=row.has_manual_total,
            ))
        return results

"""
Report Tables

Turns engine results into polars DataFrames shared by the Excel and PDF
writers. Values stay raw numbers here; formatting happens at render time
from each column's kind.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

import polars as pl

from goaltracker.engine import AdvisorHourShare, AdvisorProgress, GoalBoard, MatrixSheet, StoreHourRow, StoreTotals
from goaltracker.engine.metrics import average_ticket, compliance, conversion_rate

MONEY = "money"
PERCENT = "percent"
COUNT = "count"
TEXT = "text"

TOTALS_LABEL = "TOTALS"


@dataclass
class ReportTable:
    """A titled frame plus the display kind of each column"""
    title: str
    frame: pl.DataFrame
    kinds: Dict[str, str] = field(default_factory=dict)
    has_totals_row: bool = False

    def kind(self, column: str) -> str:
        return self.kinds.get(column, TEXT)


def hour_label(hour: int) -> str:
    """12-hour clock label, e.g. ``1:00 PM``"""
    hour12 = hour - 12 if hour > 12 else (12 if hour == 0 else hour)
    suffix = "PM" if hour >= 12 else "AM"
    return f"{hour12}:00 {suffix}"


def admin_report_table(board: GoalBoard) -> ReportTable:
    """Advisor, Goal, Sales, Tickets and Compliance per advisor plus totals"""
    rows = [
        {
            "Advisor": item.name,
            "Goal": item.goal,
            "Sales": item.total_sales,
            "Tickets": item.tickets_count,
            "Compliance": item.compliance,
        }
        for item in board.advisors
    ]
    rows.append({
        "Advisor": TOTALS_LABEL,
        "Goal": board.total_goal,
        "Sales": board.total_sales,
        "Tickets": board.total_tickets,
        "Compliance": board.total_compliance,
    })
    frame = pl.DataFrame(
        rows,
        schema={
            "Advisor": pl.Utf8,
            "Goal": pl.Float64,
            "Sales": pl.Float64,
            "Tickets": pl.Int64,
            "Compliance": pl.Float64,
        },
    )
    return ReportTable(
        title="Advisor goals",
        frame=frame,
        kinds={"Goal": MONEY, "Sales": MONEY, "Tickets": COUNT, "Compliance": PERCENT},
        has_totals_row=True,
    )


def advisor_summary_table(progress: AdvisorProgress) -> ReportTable:
    """Single advisor's goal against reported figures, including the shortfall"""
    frame = pl.DataFrame(
        [{
            "Advisor": progress.name,
            "Goal": progress.goal,
            "Sales": progress.total_sales,
            "Tickets": progress.tickets_count,
            "Compliance": progress.compliance,
            "Shortfall": progress.remaining,
            "Surplus": progress.surplus,
            "Average Ticket": progress.average_ticket,
        }],
        schema={
            "Advisor": pl.Utf8,
            "Goal": pl.Float64,
            "Sales": pl.Float64,
            "Tickets": pl.Int64,
            "Compliance": pl.Float64,
            "Shortfall": pl.Float64,
            "Surplus": pl.Float64,
            "Average Ticket": pl.Float64,
        },
    )
    return ReportTable(
        title="Personal goal",
        frame=frame,
        kinds={
            "Goal": MONEY,
            "Sales": MONEY,
            "Tickets": COUNT,
            "Compliance": PERCENT,
            "Shortfall": MONEY,
            "Surplus": MONEY,
            "Average Ticket": MONEY,
        },
    )


def advisor_breakdown_table(shares: Sequence[AdvisorHourShare]) -> ReportTable:
    frame = pl.DataFrame(
        [
            {
                "Hour": hour_label(share.hour),
                "Weight": share.weight,
                "Store Goal": share.store_goal,
                "Active Advisors": share.active_count,
                "Active": "Yes" if share.is_active else "Break",
                "My Goal": share.share,
            }
            for share in shares
        ],
        schema={
            "Hour": pl.Utf8,
            "Weight": pl.Float64,
            "Store Goal": pl.Float64,
            "Active Advisors": pl.Int64,
            "Active": pl.Utf8,
            "My Goal": pl.Float64,
        },
    )
    return ReportTable(
        title="Hourly breakdown",
        frame=frame,
        kinds={"Weight": PERCENT, "Store Goal": MONEY, "Active Advisors": COUNT, "My Goal": MONEY},
    )


def store_metrics_table(rows: Sequence[StoreHourRow], totals: Optional[StoreTotals] = None) -> ReportTable:
    records = [
        {
            "Hour": hour_label(row.hour),
            "Goal": row.store_goal,
            "Cumulative Goal": row.cumulative_goal,
            "Traffic": row.traffic,
            "Tickets": row.tickets,
            "Conversion": row.conversion_rate,
            "Last Year": row.last_year_sales,
            "Sales": row.current_sales,
            "Growth": row.growth,
            "Average Ticket": row.average_ticket,
        }
        for row in rows
    ]
    if totals is not None:
        traffic = sum(row.traffic for row in rows)
        tickets = sum(row.tickets for row in rows)
        records.append({
            "Hour": TOTALS_LABEL,
            "Goal": sum(row.store_goal for row in rows),
            "Cumulative Goal": rows[-1].cumulative_goal if rows else 0.0,
            "Traffic": traffic,
            "Tickets": tickets,
            "Conversion": conversion_rate(tickets, traffic),
            "Last Year": totals.last_year_sales,
            "Sales": totals.store_sales,
            "Growth": totals.growth,
            "Average Ticket": average_ticket(totals.store_sales, tickets),
        })
    frame = pl.DataFrame(
        records,
        schema={
            "Hour": pl.Utf8,
            "Goal": pl.Float64,
            "Cumulative Goal": pl.Float64,
            "Traffic": pl.Float64,
            "Tickets": pl.Float64,
            "Conversion": pl.Float64,
            "Last Year": pl.Float64,
            "Sales": pl.Float64,
            "Growth": pl.Float64,
            "Average Ticket": pl.Float64,
        },
    )
    return ReportTable(
        title="Store metrics",
        frame=frame,
        kinds={
            "Goal": MONEY,
            "Cumulative Goal": MONEY,
            "Traffic": COUNT,
            "Tickets": COUNT,
            "Conversion": PERCENT,
            "Last Year": MONEY,
            "Sales": MONEY,
            "Growth": PERCENT,
            "Average Ticket": MONEY,
        },
        has_totals_row=totals is not None,
    )


def store_totals_table(totals: StoreTotals) -> ReportTable:
    frame = pl.DataFrame(
        {
            "Store Sales": [totals.store_sales],
            "Advisor Sales": [totals.advisor_sales],
            "Difference": [totals.difference],
            "Last Year": [totals.last_year_sales],
            "Growth": [totals.growth],
        }
    )
    return ReportTable(
        title="Summary",
        frame=frame,
        kinds={
            "Store Sales": MONEY,
            "Advisor Sales": MONEY,
            "Difference": MONEY,
            "Last Year": MONEY,
            "Growth": PERCENT,
        },
    )


def matrix_table(sheet: MatrixSheet) -> ReportTable:
    """Goal grid with break cells left empty, plus row and column totals"""
    hours = sheet.hours
    totals = sheet.totals()
    labels = [hour_label(hour) for hour in hours]

    records: List[dict] = []
    for row in sheet.rows:
        record = {"Name": row.name}
        for hour, label in zip(hours, labels):
            record[label] = None if hour in row.breaks else (row.values.get(hour, 0.0) or 0.0)
        goal = totals.row_totals[row.id]
        sales = totals.row_sales[row.id]
        record.update({
            "Total Goal": goal,
            "Total Sales": sales,
            "Difference": goal - sales,
            "Compliance": compliance(sales, goal),
        })
        records.append(record)

    footer = {"Name": TOTALS_LABEL}
    for hour, label in zip(hours, labels):
        footer[label] = totals.col_totals[hour]
    footer.update({
        "Total Goal": totals.grand_total,
        "Total Sales": totals.grand_sales,
        "Difference": totals.difference,
        "Compliance": compliance(totals.grand_sales, totals.grand_total),
    })
    records.append(footer)

    schema = {"Name": pl.Utf8}
    schema.update({label: pl.Float64 for label in labels})
    schema.update({
        "Total Goal": pl.Float64,
        "Total Sales": pl.Float64,
        "Difference": pl.Float64,
        "Compliance": pl.Float64,
    })
    kinds = {label: MONEY for label in labels}
    kinds.update({"Total Goal": MONEY, "Total Sales": MONEY, "Difference": MONEY, "Compliance": PERCENT})
    return ReportTable(
        title="Goal matrix",
        frame=pl.DataFrame(records, schema=schema),
        kinds=kinds,
        has_totals_row=True,
    )

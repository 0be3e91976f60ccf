"""
Derived Metrics

Pure arithmetic over allocation results and reported actuals:
- Compliance, remaining and surplus against a goal
- Conversion rate, average ticket and year-over-year growth
- Store hourly rows and totals for the metrics dashboard

Every ratio guards its denominator the same way: a zero (or negative)
denominator yields 0, never an exception, NaN or infinity.
"""

from collections import defaultdict
from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Tuple, TYPE_CHECKING

from .snapshot import AdvisorRecord, StoreMetricRecord

if TYPE_CHECKING:
    from .allocation import GoalAllocationEngine

METRIC_FIELDS = ("traffic", "tickets", "last_year_sales", "current_sales")


def compliance(actual: float, goal: float) -> float:
    """Actual as a percentage of goal"""
    return actual / goal * 100 if goal > 0 else 0.0


def remaining(actual: float, goal: float) -> float:
    """Shortfall still needed to reach the goal"""
    return max(0.0, goal - actual)


def surplus(actual: float, goal: float) -> float:
    """Amount sold beyond the goal"""
    return max(0.0, actual - goal)


def conversion_rate(tickets: float, traffic: float) -> float:
    """Tickets per visitor, as a percentage"""
    return tickets / traffic * 100 if traffic > 0 else 0.0


def growth(current: float, last_year: float) -> float:
    """Year-over-year growth, as a percentage"""
    return (current / last_year - 1) * 100 if last_year > 0 else 0.0


def average_ticket(sales: float, tickets: float) -> float:
    return sales / tickets if tickets > 0 else 0.0


@dataclass
class StoreHourRow:
    """One hour of the store metrics table"""
    hour: int
    store_goal: float
    cumulative_goal: float
    traffic: float
    tickets: float
    conversion_rate: float
    last_year_sales: float
    current_sales: float
    growth: float
    average_ticket: float


@dataclass
class StoreTotals:
    """Store-level summary cards"""
    store_sales: float
    advisor_sales: float
    difference: float
    last_year_sales: float
    growth: float


def store_hourly_rows(
    engine: "GoalAllocationEngine",
    metrics: Iterable[StoreMetricRecord],
) -> List[StoreHourRow]:
    """
    Build the hourly store table over the session window.

    Hours without a metric record show zeros; metric records outside the
    window are ignored.
    """
    by_hour = {metric.hour: metric for metric in metrics}
    rows = []
    for hour in engine.hours:
        metric = by_hour.get(hour) or StoreMetricRecord(hour=hour)
        rows.append(StoreHourRow(
            hour=hour,
            store_goal=engine.hourly_store_goal(hour),
            cumulative_goal=engine.cumulative_store_goal(hour),
            traffic=metric.traffic,
            tickets=metric.tickets,
            conversion_rate=conversion_rate(metric.tickets, metric.traffic),
            last_year_sales=metric.last_year_sales,
            current_sales=metric.current_sales,
            growth=growth(metric.current_sales, metric.last_year_sales),
            average_ticket=average_ticket(metric.current_sales, metric.tickets),
        ))
    return rows


def store_totals(
    rows: Iterable[StoreHourRow],
    advisors: Iterable[AdvisorRecord],
) -> StoreTotals:
    """Compare store sales with the sum of advisor self-reports"""
    rows = list(rows)
    store_sales = sum(row.current_sales for row in rows)
    last_year_sales = sum(row.last_year_sales for row in rows)
    advisor_sales = sum(advisor.total_sales or 0.0 for advisor in advisors)
    return StoreTotals(
        store_sales=store_sales,
        advisor_sales=advisor_sales,
        difference=store_sales - advisor_sales,
        last_year_sales=last_year_sales,
        growth=growth(store_sales, last_year_sales),
    )


def metric_fields(metrics: Iterable[StoreMetricRecord]) -> Dict[Tuple[int, str], float]:
    """Flatten metric records into (hour, field) cells for an edit buffer"""
    cells = {}
    for metric in metrics:
        for name in METRIC_FIELDS:
            cells[(metric.hour, name)] = getattr(metric, name)
    return cells


def records_from_fields(cells: Mapping[Tuple[int, str], float]) -> List[StoreMetricRecord]:
    """Rebuild metric records from (hour, field) cells, missing fields as 0"""
    grouped: Dict[int, Dict[str, float]] = defaultdict(dict)
    for (hour, name), value in cells.items():
        if name not in METRIC_FIELDS:
            raise ValueError(f"Unknown store metric field: {name}")
        grouped[hour][name] = value or 0.0
    return [
        StoreMetricRecord(hour=hour, **values)
        for hour, values in sorted(grouped.items())
    ]

"""
Unit Tests - Derived Metrics
"""
import pytest

from goaltracker.engine import (
    GoalAllocationEngine,
    StoreMetricRecord,
    average_ticket,
    compliance,
    conversion_rate,
    growth,
    remaining,
    store_hourly_rows,
    store_totals,
    surplus,
)
from goaltracker.engine.metrics import metric_fields, records_from_fields


class TestRatios:
    """Tests for guarded ratios"""

    def test_compliance(self):
        """Test actual over goal as a percentage"""
        assert compliance(75, 100) == pytest.approx(75)
        assert compliance(150, 100) == pytest.approx(150)

    def test_zero_denominators_yield_zero(self):
        """Test every ratio returns 0 for a zero denominator"""
        assert compliance(500, 0) == 0
        assert conversion_rate(5, 0) == 0
        assert growth(500, 0) == 0
        assert average_ticket(500, 0) == 0

    def test_remaining_and_surplus_are_never_negative(self):
        """Test shortfall and surplus are clamped at zero"""
        assert remaining(80, 100) == 20
        assert remaining(120, 100) == 0
        assert surplus(120, 100) == 20
        assert surplus(80, 100) == 0

    def test_conversion_and_growth(self):
        """Test conversion rate and year-over-year growth"""
        assert conversion_rate(25, 100) == pytest.approx(25)
        assert growth(110, 100) == pytest.approx(10)
        assert growth(90, 100) == pytest.approx(-10)


class TestStoreMetrics:
    """Tests for the store metrics table"""

    def test_rows_cover_the_window(self, two_hour_snapshot):
        """Test one row per window hour, zero-filled where nothing was recorded"""
        engine = GoalAllocationEngine(two_hour_snapshot)
        rows = store_hourly_rows(engine, [
            StoreMetricRecord(hour=9, traffic=80, tickets=20, last_year_sales=40000, current_sales=44000),
            StoreMetricRecord(hour=15, traffic=10, tickets=5, current_sales=1000),
        ])

        assert [row.hour for row in rows] == [9, 10]
        first, second = rows
        assert first.store_goal == pytest.approx(60000)
        assert first.conversion_rate == pytest.approx(25)
        assert first.growth == pytest.approx(10)
        assert first.average_ticket == pytest.approx(2200)
        assert second.traffic == 0
        assert second.cumulative_goal == pytest.approx(100000)

    def test_store_totals_compare_with_advisors(self, two_hour_snapshot):
        """Test store sales against the sum of advisor self-reports"""
        engine = GoalAllocationEngine(two_hour_snapshot)
        rows = store_hourly_rows(engine, [
            StoreMetricRecord(hour=9, last_year_sales=50000, current_sales=60000),
            StoreMetricRecord(hour=10, last_year_sales=30000, current_sales=40000),
        ])
        totals = store_totals(rows, two_hour_snapshot.advisors)

        assert totals.store_sales == pytest.approx(100000)
        assert totals.advisor_sales == pytest.approx(95000)
        assert totals.difference == pytest.approx(5000)
        assert totals.growth == pytest.approx(25)

    def test_edit_cells_round_trip(self):
        """Test flattening records to cells and rebuilding them with an edit"""
        cells = metric_fields([StoreMetricRecord(hour=9, traffic=10, tickets=2)])
        cells[(9, "current_sales")] = 5000
        cells[(10, "traffic")] = 7

        records = records_from_fields(cells)

        assert records[0] == StoreMetricRecord(hour=9, traffic=10, tickets=2, current_sales=5000)
        assert records[1] == StoreMetricRecord(hour=10, traffic=7)

    def test_unknown_cell_field(self):
        """Test an unknown field name is rejected"""
        with pytest.raises(ValueError):
            records_from_fields({(9, "returns"): 3})

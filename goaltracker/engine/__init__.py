"""
Goal Allocation Engine
"""
from .allocation import AdvisorHourShare, AdvisorProgress, GoalAllocationEngine, GoalBoard, HourlyGoal
from .matrix import MatrixRow, MatrixSheet, MatrixTotals
from .metrics import (
    StoreHourRow,
    StoreTotals,
    average_ticket,
    compliance,
    conversion_rate,
    growth,
    remaining,
    store_hourly_rows,
    store_totals,
    surplus,
)
from .overlay import EditBuffer, FieldOverlay
from .snapshot import (
    AdvisorRecord,
    AvailabilityRecord,
    SessionConfig,
    SessionSnapshot,
    StoreMetricRecord,
    WeightRecord,
)
from .validation import ConfigWarning, configuration_warnings, is_duplicate_advisor_name
from .window import DEFAULT_END_HOUR, DEFAULT_START_HOUR, resolve_hour_range, time_window

__all__ = [
    "GoalAllocationEngine",
    "GoalBoard",
    "HourlyGoal",
    "AdvisorHourShare",
    "AdvisorProgress",
    "MatrixRow",
    "MatrixSheet",
    "MatrixTotals",
    "StoreHourRow",
    "StoreTotals",
    "average_ticket",
    "compliance",
    "conversion_rate",
    "growth",
    "remaining",
    "surplus",
    "store_hourly_rows",
    "store_totals",
    "EditBuffer",
    "FieldOverlay",
    "SessionConfig",
    "SessionSnapshot",
    "WeightRecord",
    "AdvisorRecord",
    "AvailabilityRecord",
    "StoreMetricRecord",
    "ConfigWarning",
    "configuration_warnings",
    "is_duplicate_advisor_name",
    "DEFAULT_START_HOUR",
    "DEFAULT_END_HOUR",
    "resolve_hour_range",
    "time_window",
]

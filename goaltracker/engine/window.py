"""
Time Window, Hourly Weights and Availability

Leaf components of the goal allocation engine:
- Time window: the inclusive list of business hours for a session
- Weight distribution: share of the daily goal attributed to each hour
- Availability resolver: whether an advisor counts as active in an hour
"""

from typing import Dict, Iterable, List, Optional, Sequence, Tuple, TYPE_CHECKING

if TYPE_CHECKING:
    from .snapshot import AvailabilityRecord, WeightRecord

DEFAULT_START_HOUR = 9
DEFAULT_END_HOUR = 21


def resolve_hour_range(
    start_hour: Optional[int],
    end_hour: Optional[int],
    default_start: int = DEFAULT_START_HOUR,
    default_end: int = DEFAULT_END_HOUR,
) -> Tuple[int, int]:
    """Apply the default business hours to an unconfigured session"""
    start = default_start if start_hour is None else start_hour
    end = default_end if end_hour is None else end_hour
    return start, end


def time_window(start_hour: int, end_hour: int) -> List[int]:
    """
    Enumerate the hours of the business window, both ends inclusive.

    A degenerate range (start after end) yields an empty window rather
    than an error.
    """
    return list(range(start_hour, end_hour + 1))


class WeightDistribution:
    """
    Hourly split of the daily goal.

    Weights for hours outside the window are kept for inspection but never
    contribute to a goal. Percentages are not required to sum to 100.
    """

    def __init__(
        self,
        total_daily_goal: float,
        weights: Iterable["WeightRecord"],
        hours: Sequence[int],
    ):
        self.total_daily_goal = total_daily_goal or 0.0
        self.hours = list(hours)
        self._window = set(self.hours)
        self._weights: Dict[int, float] = {}
        for weight in weights:
            self._weights[weight.hour_start] = weight.percentage or 0.0

    def weight_for(self, hour: int) -> float:
        """Stored percentage for the hour, 0 when no record exists"""
        return self._weights.get(hour, 0.0)

    def in_window(self, hour: int) -> bool:
        return hour in self._window

    def hourly_store_goal(self, hour: int) -> float:
        """Store goal for one hour; hours outside the window contribute nothing"""
        if hour not in self._window:
            return 0.0
        return self.total_daily_goal * self.weight_for(hour) / 100

    def total_percentage(self) -> float:
        """Sum of the in-window percentages"""
        return sum(self.weight_for(hour) for hour in self.hours)

    def stale_hours(self) -> List[int]:
        """Hours holding a non-zero weight outside the current window"""
        return sorted(
            hour for hour, pct in self._weights.items()
            if hour not in self._window and pct
        )

    def as_dict(self) -> Dict[int, float]:
        """In-window weights keyed by hour, zero-filled"""
        return {hour: self.weight_for(hour) for hour in self.hours}


class AvailabilityResolver:
    """Sparse availability overrides with a default-active policy"""

    def __init__(self, records: Iterable["AvailabilityRecord"]):
        self._overrides: Dict[Tuple[str, int], bool] = {
            (record.advisor_id, record.hour_start): bool(record.is_active)
            for record in records
        }

    def override(self, advisor_id: str, hour: int) -> Optional[bool]:
        """Explicit flag for the pair, or None when nothing was recorded"""
        return self._overrides.get((advisor_id, hour))

    def is_active(self, advisor_id: str, hour: int) -> bool:
        override = self.override(advisor_id, hour)
        return True if override is None else override

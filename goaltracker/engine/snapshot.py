"""
Session Snapshot

Immutable, persistence-agnostic records consumed by the goal allocation engine.
Services build a snapshot from database rows; every consumer (admin board,
advisor portal, reports) computes from the same structure.
"""

from dataclasses import dataclass, replace
from datetime import date
from typing import Iterable, Mapping, Optional, Tuple

from .window import DEFAULT_END_HOUR, DEFAULT_START_HOUR, resolve_hour_range


@dataclass(frozen=True)
class SessionConfig:
    """Goal configuration for one business day"""
    total_daily_goal: float = 0.0
    start_hour: Optional[int] = None
    end_hour: Optional[int] = None
    session_id: Optional[str] = None
    session_date: Optional[date] = None


@dataclass(frozen=True)
class WeightRecord:
    """Share of the daily goal (0-100) attributed to one hour"""
    hour_start: int
    percentage: float


@dataclass(frozen=True)
class AdvisorRecord:
    """Advisor with self-reported cumulative figures"""
    advisor_id: str
    name: str
    total_sales: float = 0.0
    tickets_count: int = 0


@dataclass(frozen=True)
class AvailabilityRecord:
    """Explicit availability flag; absence of a record means active"""
    advisor_id: str
    hour_start: int
    is_active: bool


@dataclass(frozen=True)
class StoreMetricRecord:
    """Store-wide figures for one hour"""
    hour: int
    traffic: float = 0.0
    tickets: float = 0.0
    last_year_sales: float = 0.0
    current_sales: float = 0.0


@dataclass(frozen=True)
class SessionSnapshot:
    """
    Everything the allocation engine needs for one session.

    Built once per request from the persistence layer (or from merged
    unsaved edits for previews) and never mutated afterwards.
    """
    session: SessionConfig
    weights: Tuple[WeightRecord, ...] = ()
    advisors: Tuple[AdvisorRecord, ...] = ()
    availability: Tuple[AvailabilityRecord, ...] = ()
    default_start_hour: int = DEFAULT_START_HOUR
    default_end_hour: int = DEFAULT_END_HOUR
    store_metrics: Tuple[StoreMetricRecord, ...] = ()

    @classmethod
    def build(
        cls,
        session: SessionConfig,
        weights: Iterable[WeightRecord] = (),
        advisors: Iterable[AdvisorRecord] = (),
        availability: Iterable[AvailabilityRecord] = (),
        store_metrics: Iterable[StoreMetricRecord] = (),
        default_start_hour: int = DEFAULT_START_HOUR,
        default_end_hour: int = DEFAULT_END_HOUR,
    ) -> "SessionSnapshot":
        """Create a snapshot from any iterables of records"""
        return cls(
            session=session,
            weights=tuple(weights),
            advisors=tuple(advisors),
            availability=tuple(availability),
            store_metrics=tuple(store_metrics),
            default_start_hour=default_start_hour,
            default_end_hour=default_end_hour,
        )

    @property
    def hour_range(self) -> Tuple[int, int]:
        """Active (start, end) hours with defaults applied"""
        return resolve_hour_range(
            self.session.start_hour,
            self.session.end_hour,
            self.default_start_hour,
            self.default_end_hour,
        )

    def with_overrides(
        self,
        total_daily_goal: Optional[float] = None,
        weights: Optional[Mapping[int, float]] = None,
        store_metrics: Optional[Iterable[StoreMetricRecord]] = None,
    ) -> "SessionSnapshot":
        """
        Return a copy with locally edited values merged in.

        ``weights`` replaces the whole distribution (it is expected to be the
        merged view of stored weights and pending edits).
        """
        snapshot = self
        if total_daily_goal is not None:
            snapshot = replace(
                snapshot,
                session=replace(snapshot.session, total_daily_goal=total_daily_goal),
            )
        if weights is not None:
            snapshot = replace(
                snapshot,
                weights=tuple(
                    WeightRecord(hour_start=hour, percentage=pct)
                    for hour, pct in sorted(weights.items())
                ),
            )
        if store_metrics is not None:
            snapshot = replace(snapshot, store_metrics=tuple(store_metrics))
        return snapshot

"""
Configuration Checks

Non-fatal consistency warnings for a session's configuration, and the
roster name rule. Warnings are informational: calculations always proceed
with whatever values are present.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List

from .allocation import GoalAllocationEngine
from .snapshot import SessionSnapshot

DEFAULT_WEIGHTS_TOLERANCE = 0.1


class WarningCode(str, Enum):
    """Configuration warning kinds"""
    WEIGHTS_SUM = "weights_sum"
    WEIGHT_OUTSIDE_WINDOW = "weight_outside_window"
    HOUR_WITHOUT_ADVISORS = "hour_without_advisors"


@dataclass
class ConfigWarning:
    code: WarningCode
    message: str
    hours: List[int] = field(default_factory=list)


def configuration_warnings(
    snapshot: SessionSnapshot,
    tolerance: float = DEFAULT_WEIGHTS_TOLERANCE,
) -> List[ConfigWarning]:
    """Inspect a session snapshot and report inconsistencies"""
    engine = GoalAllocationEngine(snapshot)
    warnings: List[ConfigWarning] = []

    total = engine.weights.total_percentage()
    if abs(total - 100) > tolerance:
        warnings.append(ConfigWarning(
            code=WarningCode.WEIGHTS_SUM,
            message=f"Hourly weights add up to {total:g}% instead of 100%",
        ))

    stale = engine.weights.stale_hours()
    if stale:
        warnings.append(ConfigWarning(
            code=WarningCode.WEIGHT_OUTSIDE_WINDOW,
            message="Weights outside the business hours are ignored",
            hours=stale,
        ))

    if snapshot.advisors:
        uncovered = [
            hour for hour in engine.hours
            if engine.hourly_store_goal(hour) > 0 and engine.active_count(hour) == 0
        ]
        if uncovered:
            warnings.append(ConfigWarning(
                code=WarningCode.HOUR_WITHOUT_ADVISORS,
                message="Hours with a goal but no active advisor are not assigned to anyone",
                hours=uncovered,
            ))

    return warnings


def normalize_advisor_name(name: str) -> str:
    return (name or "").strip()


def is_duplicate_advisor_name(name: str, existing: Iterable[str]) -> bool:
    """Case-insensitive match of a trimmed name against the roster"""
    candidate = normalize_advisor_name(name).casefold()
    return any(normalize_advisor_name(other).casefold() == candidate for other in existing)

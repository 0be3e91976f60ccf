"""
Persistence Services
"""
from .advisors import AdvisorService
from .errors import (
    GoalTrackerError,
    PersistenceError,
    NotFoundError,
    SessionNotFoundError,
    AdvisorNotFoundError,
    TemplateNotFoundError,
    InvalidAccessTokenError,
    DuplicateError,
    DuplicateAdvisorError,
    DuplicateTemplateError,
    InvalidValueError,
)
from .sessions import SessionService, store_today
from .snapshots import load_snapshot
from .store_metrics import StoreMetricsService
from .templates import TemplateService

__all__ = [
    "AdvisorService",
    "SessionService",
    "StoreMetricsService",
    "TemplateService",
    "load_snapshot",
    "store_today",
    "GoalTrackerError",
    "PersistenceError",
    "NotFoundError",
    "SessionNotFoundError",
    "AdvisorNotFoundError",
    "TemplateNotFoundError",
    "InvalidAccessTokenError",
    "DuplicateError",
    "DuplicateAdvisorError",
    "DuplicateTemplateError",
    "InvalidValueError",
]

"""
Database Module
"""
from .connection import init_database, close_database, get_db, get_db_dependency, check_database_health
from .models import (
    Base,
    DailySession,
    HourlyWeight,
    Advisor,
    AdvisorAvailability,
    StoreHourlyMetric,
    SessionTemplate,
)

__all__ = [
    "init_database",
    "close_database",
    "get_db",
    "get_db_dependency",
    "check_database_health",
    "Base",
    "DailySession",
    "HourlyWeight",
    "Advisor",
    "AdvisorAvailability",
    "StoreHourlyMetric",
    "SessionTemplate",
]

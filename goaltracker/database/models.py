"""
Database Models

Persistence schema for the daily goal tracker:

- DailySession: one business day with its total goal and business hours
- HourlyWeight: share of the daily goal attributed to each hour
- Advisor: salesperson on a session's roster, reached through a private link
- AdvisorAvailability: sparse per-hour overrides (absence means active)
- StoreHourlyMetric: store-wide traffic, tickets and sales per hour
- SessionTemplate: reusable hour range and weight distribution
"""

from datetime import datetime, date
from typing import Optional, List
import uuid

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
    Uuid,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    """Base class for all database models"""
    pass


class DailySession(Base):
    """
    Daily Session

    Goal configuration for one business day. ``start_hour`` and ``end_hour``
    stay NULL until configured; readers fall back to the default hours.
    """
    __tablename__ = "daily_sessions"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    session_date: Mapped[date] = mapped_column("date", Date, unique=True, nullable=False)
    total_daily_goal: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    start_hour: Mapped[Optional[int]] = mapped_column(Integer)
    end_hour: Mapped[Optional[int]] = mapped_column(Integer)

    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), onupdate=func.now()
    )

    weights: Mapped[List["HourlyWeight"]] = relationship(
        back_populates="session", cascade="all, delete-orphan"
    )
    advisors: Mapped[List["Advisor"]] = relationship(
        back_populates="session", cascade="all, delete-orphan"
    )
    store_metrics: Mapped[List["StoreHourlyMetric"]] = relationship(
        back_populates="session", cascade="all, delete-orphan"
    )

    __table_args__ = (
        CheckConstraint("total_daily_goal >= 0", name="ck_daily_sessions_goal_positive"),
    )


class HourlyWeight(Base):
    """Percentage (0-100) of the daily goal for one hour of one session"""
    __tablename__ = "hourly_weights"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    session_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("daily_sessions.id", ondelete="CASCADE"), nullable=False
    )
    hour_start: Mapped[int] = mapped_column(Integer, nullable=False)
    percentage: Mapped[float] = mapped_column(Float, nullable=False, default=0)

    session: Mapped["DailySession"] = relationship(back_populates="weights")

    __table_args__ = (
        UniqueConstraint("session_id", "hour_start", name="uq_hourly_weights_session_hour"),
    )


class Advisor(Base):
    """
    Advisor

    Sales totals are self-reported cumulative figures for the day.
    ``access_token`` is the unguessable secret embedded in the advisor link.
    """
    __tablename__ = "advisors"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    session_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("daily_sessions.id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    access_token: Mapped[str] = mapped_column(String(128), unique=True, nullable=False)
    total_sales: Mapped[float] = mapped_column(Float, default=0)
    tickets_count: Mapped[int] = mapped_column(Integer, default=0)

    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())

    session: Mapped["DailySession"] = relationship(back_populates="advisors")
    availability: Mapped[List["AdvisorAvailability"]] = relationship(
        back_populates="advisor", cascade="all, delete-orphan"
    )

    __table_args__ = (
        Index("ix_advisors_session", "session_id"),
    )


class AdvisorAvailability(Base):
    """Explicit availability flag for one advisor and hour"""
    __tablename__ = "advisor_availability"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    advisor_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("advisors.id", ondelete="CASCADE"), nullable=False
    )
    hour_start: Mapped[int] = mapped_column(Integer, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    advisor: Mapped["Advisor"] = relationship(back_populates="availability")

    __table_args__ = (
        UniqueConstraint("advisor_id", "hour_start", name="uq_advisor_availability_hour"),
    )


class StoreHourlyMetric(Base):
    """Store-wide figures for one hour of one session"""
    __tablename__ = "store_hourly_metrics"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    session_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("daily_sessions.id", ondelete="CASCADE"), nullable=False
    )
    hour: Mapped[int] = mapped_column(Integer, nullable=False)
    traffic: Mapped[float] = mapped_column(Float, default=0)
    tickets: Mapped[float] = mapped_column(Float, default=0)
    last_year_sales: Mapped[float] = mapped_column(Float, default=0)
    current_sales: Mapped[float] = mapped_column(Float, default=0)

    session: Mapped["DailySession"] = relationship(back_populates="store_metrics")

    __table_args__ = (
        UniqueConstraint("session_id", "hour", name="uq_store_hourly_metrics_session_hour"),
    )


class SessionTemplate(Base):
    """
    Session Template

    ``weights`` is a JSON list of ``{"hour_start": int, "percentage": float}``.
    """
    __tablename__ = "session_templates"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(120), unique=True, nullable=False)
    start_hour: Mapped[int] = mapped_column(Integer, nullable=False)
    end_hour: Mapped[int] = mapped_column(Integer, nullable=False)
    weights: Mapped[list] = mapped_column(JSON, nullable=False, default=list)

    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())

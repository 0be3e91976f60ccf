"""
API Schemas

Request and response models shared by several routers. Amounts are raw
numbers; clients format them.
"""

from datetime import date
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, model_validator

from goaltracker.engine import (
    AdvisorHourShare,
    AdvisorProgress,
    ConfigWarning,
    GoalAllocationEngine,
    GoalBoard,
)


class WeightItem(BaseModel):
    hour_start: int = Field(..., ge=0, le=23)
    percentage: float = Field(..., ge=0, le=100)


class WarningResponse(BaseModel):
    code: str
    message: str
    hours: List[int] = []

    @classmethod
    def from_warning(cls, warning: ConfigWarning) -> "WarningResponse":
        return cls(code=warning.code.value, message=warning.message, hours=warning.hours)


class SessionResponse(BaseModel):
    """Session configuration with the business hours actually in effect"""
    id: UUID
    date: date
    total_daily_goal: float
    start_hour: Optional[int]
    end_hour: Optional[int]
    effective_start_hour: int
    effective_end_hour: int
    hours: List[int]

    @classmethod
    def from_engine(cls, engine: GoalAllocationEngine) -> "SessionResponse":
        session = engine.snapshot.session
        return cls(
            id=UUID(session.session_id),
            date=session.session_date,
            total_daily_goal=session.total_daily_goal,
            start_hour=session.start_hour,
            end_hour=session.end_hour,
            effective_start_hour=engine.start_hour,
            effective_end_hour=engine.end_hour,
            hours=engine.hours,
        )


class HourlyGoalResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    hour: int
    weight: float
    store_goal: float
    cumulative_goal: float
    active_count: int
    share_per_active: float


class AdvisorProgressResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    advisor_id: UUID
    name: str
    goal: float
    total_sales: float
    tickets_count: int
    compliance: float
    remaining: float
    surplus: float
    average_ticket: float
    goal_reached: bool

    @classmethod
    def from_progress(cls, progress: AdvisorProgress) -> "AdvisorProgressResponse":
        return cls.model_validate(progress)


class AdvisorHourResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    hour: int
    weight: float
    store_goal: float
    active_count: int
    is_active: bool
    share: float

    @classmethod
    def from_share(cls, share: AdvisorHourShare) -> "AdvisorHourResponse":
        return cls.model_validate(share)


class BoardResponse(BaseModel):
    """Admin dashboard payload"""
    session: SessionResponse
    weight_total: float
    curve: List[HourlyGoalResponse]
    advisors: List[AdvisorProgressResponse]
    total_goal: float
    total_sales: float
    total_tickets: int
    total_compliance: float
    daily_remaining: float
    daily_surplus: float
    warnings: List[WarningResponse]

    @classmethod
    def build(
        cls,
        engine: GoalAllocationEngine,
        board: GoalBoard,
        warnings: List[ConfigWarning],
    ) -> "BoardResponse":
        return cls(
            session=SessionResponse.from_engine(engine),
            weight_total=board.weight_total,
            curve=[HourlyGoalResponse.model_validate(point) for point in board.curve],
            advisors=[AdvisorProgressResponse.from_progress(item) for item in board.advisors],
            total_goal=board.total_goal,
            total_sales=board.total_sales,
            total_tickets=board.total_tickets,
            total_compliance=board.total_compliance,
            daily_remaining=board.daily_remaining,
            daily_surplus=board.daily_surplus,
            warnings=[WarningResponse.from_warning(w) for w in warnings],
        )


class BreakdownResponse(BaseModel):
    """One advisor's goal, progress and hour-by-hour split"""
    date: Optional[date]
    progress: AdvisorProgressResponse
    hours: List[AdvisorHourResponse]


class HoursUpdate(BaseModel):
    start_hour: int = Field(..., ge=0, le=23)
    end_hour: int = Field(..., ge=0, le=23)

    @model_validator(mode="after")
    def check_order(self) -> "HoursUpdate":
        if self.start_hour >= self.end_hour:
            raise ValueError("start_hour must be before end_hour")
        return self

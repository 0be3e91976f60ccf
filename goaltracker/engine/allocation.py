"""
Goal Allocation Engine

Splits the session's daily goal across hours (by weight) and, inside each
hour, evenly across the advisors active in that hour:

    hourly_store_goal(h) = total_daily_goal * weight(h) / 100
    share(a, h)          = hourly_store_goal(h) / active_count(h)   if a is active in h
    personal_goal(a)     = sum of share(a, h) over the window

An hour with no active advisor contributes nothing to anyone; its goal is
not redistributed. No rounding is applied here.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .metrics import average_ticket, compliance, remaining, surplus
from .snapshot import AdvisorRecord, SessionConfig, SessionSnapshot
from .window import AvailabilityResolver, WeightDistribution, time_window


@dataclass
class HourlyGoal:
    """Store goal curve point"""
    hour: int
    weight: float
    store_goal: float
    cumulative_goal: float
    active_count: int
    share_per_active: float


@dataclass
class AdvisorHourShare:
    """One advisor's slice of one hour"""
    hour: int
    weight: float
    store_goal: float
    active_count: int
    is_active: bool
    share: float


@dataclass
class AdvisorProgress:
    """Personal goal next to the advisor's reported figures"""
    advisor_id: str
    name: str
    goal: float
    total_sales: float
    tickets_count: int
    compliance: float
    remaining: float
    surplus: float
    average_ticket: float

    @property
    def goal_reached(self) -> bool:
        return self.total_sales >= self.goal


@dataclass
class GoalBoard:
    """Admin dashboard: every advisor's progress plus session totals"""
    session: SessionConfig
    hours: List[int]
    weight_total: float
    curve: List[HourlyGoal] = field(default_factory=list)
    advisors: List[AdvisorProgress] = field(default_factory=list)
    total_goal: float = 0.0
    total_sales: float = 0.0
    total_tickets: int = 0
    total_compliance: float = 0.0
    daily_remaining: float = 0.0
    daily_surplus: float = 0.0


class GoalAllocationEngine:
    """
    Single implementation of the goal split used by every consumer.

    Example:
        engine = GoalAllocationEngine(snapshot)
        engine.personal_goal(advisor_id)
        engine.cumulative_store_goal(14)
    """

    def __init__(self, snapshot: SessionSnapshot):
        self.snapshot = snapshot
        start, end = snapshot.hour_range
        self.start_hour = start
        self.end_hour = end
        self.hours = time_window(start, end)
        self.weights = WeightDistribution(
            snapshot.session.total_daily_goal, snapshot.weights, self.hours
        )
        self.availability = AvailabilityResolver(snapshot.availability)
        self._advisors: Dict[str, AdvisorRecord] = {
            advisor.advisor_id: advisor for advisor in snapshot.advisors
        }
        self._active_counts: Dict[int, int] = {
            hour: sum(
                1 for advisor_id in self._advisors
                if self.availability.is_active(advisor_id, hour)
            )
            for hour in self.hours
        }

    # ------------------------------------------------------------------
    # Store level
    # ------------------------------------------------------------------

    def hourly_store_goal(self, hour: int) -> float:
        return self.weights.hourly_store_goal(hour)

    def cumulative_store_goal(self, upto_hour: int) -> float:
        """Running store goal for every window hour up to and including ``upto_hour``"""
        return sum(
            self.hourly_store_goal(hour) for hour in self.hours if hour <= upto_hour
        )

    def active_count(self, hour: int) -> int:
        """Advisors of the whole roster active in ``hour``"""
        if hour in self._active_counts:
            return self._active_counts[hour]
        return sum(
            1 for advisor_id in self._advisors
            if self.availability.is_active(advisor_id, hour)
        )

    def goal_curve(self) -> List[HourlyGoal]:
        curve = []
        cumulative = 0.0
        for hour in self.hours:
            store_goal = self.hourly_store_goal(hour)
            cumulative += store_goal
            count = self.active_count(hour)
            curve.append(HourlyGoal(
                hour=hour,
                weight=self.weights.weight_for(hour),
                store_goal=store_goal,
                cumulative_goal=cumulative,
                active_count=count,
                share_per_active=store_goal / count if count > 0 else 0.0,
            ))
        return curve

    # ------------------------------------------------------------------
    # Advisor level
    # ------------------------------------------------------------------

    def advisor(self, advisor_id: str) -> AdvisorRecord:
        try:
            return self._advisors[advisor_id]
        except KeyError:
            raise KeyError(f"Advisor {advisor_id} is not part of this session") from None

    def is_active(self, advisor_id: str, hour: int) -> bool:
        return self.availability.is_active(advisor_id, hour)

    def advisor_hour_share(self, advisor_id: str, hour: int) -> float:
        """Contribution of ``hour`` to the advisor's personal goal"""
        self.advisor(advisor_id)
        if hour not in self._active_counts:
            return 0.0
        count = self.active_count(hour)
        if count == 0 or not self.is_active(advisor_id, hour):
            return 0.0
        return self.hourly_store_goal(hour) / count

    def personal_goal(self, advisor_id: str) -> float:
        return sum(self.advisor_hour_share(advisor_id, hour) for hour in self.hours)

    def personal_goals(self) -> Dict[str, float]:
        return {advisor_id: self.personal_goal(advisor_id) for advisor_id in self._advisors}

    def advisor_breakdown(self, advisor_id: str) -> List[AdvisorHourShare]:
        """Hour-by-hour view of one advisor's goal"""
        rows = []
        for hour in self.hours:
            rows.append(AdvisorHourShare(
                hour=hour,
                weight=self.weights.weight_for(hour),
                store_goal=self.hourly_store_goal(hour),
                active_count=self.active_count(hour),
                is_active=self.is_active(advisor_id, hour),
                share=self.advisor_hour_share(advisor_id, hour),
            ))
        return rows

    def advisor_progress(self, advisor_id: str, goal: Optional[float] = None) -> AdvisorProgress:
        advisor = self.advisor(advisor_id)
        goal = self.personal_goal(advisor_id) if goal is None else goal
        sales = advisor.total_sales or 0.0
        tickets = advisor.tickets_count or 0
        return AdvisorProgress(
            advisor_id=advisor.advisor_id,
            name=advisor.name,
            goal=goal,
            total_sales=sales,
            tickets_count=tickets,
            compliance=compliance(sales, goal),
            remaining=remaining(sales, goal),
            surplus=surplus(sales, goal),
            average_ticket=average_ticket(sales, tickets),
        )

    # ------------------------------------------------------------------
    # Board
    # ------------------------------------------------------------------

    def goal_board(self) -> GoalBoard:
        """Personal goals, progress and totals for the whole roster"""
        goals = self.personal_goals()
        progress = [
            self.advisor_progress(advisor.advisor_id, goals[advisor.advisor_id])
            for advisor in self.snapshot.advisors
        ]
        total_goal = sum(goals.values())
        total_sales = sum(item.total_sales for item in progress)
        daily_goal = self.snapshot.session.total_daily_goal or 0.0
        return GoalBoard(
            session=self.snapshot.session,
            hours=list(self.hours),
            weight_total=self.weights.total_percentage(),
            curve=self.goal_curve(),
            advisors=progress,
            total_goal=total_goal,
            total_sales=total_sales,
            total_tickets=sum(item.tickets_count for item in progress),
            total_compliance=compliance(total_sales, total_goal),
            daily_remaining=remaining(total_sales, daily_goal),
            daily_surplus=surplus(total_sales, daily_goal),
        )

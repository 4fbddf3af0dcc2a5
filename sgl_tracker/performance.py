"""Dashboard aggregation: weekly sales performance, cohort conversion and follow-ups."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Dict, Iterable, List, Optional, Sequence

from .dates import is_in_week, parse_date
from .models import UNASSIGNED_COHORT, CohortTier, Lead, OnboardedLeader, Salesperson

WEEKLY_TARGET = 6
FOLLOW_UP_DAYS = 3

HIGH_TIER_THRESHOLD = 66
MEDIUM_TIER_THRESHOLD = 33


@dataclass(slots=True)
class SalesPerformance:
    salesperson_name: str
    upgraded_count: int = 0
    ordered_count: int = 0
    progress: float = 0.0


@dataclass(slots=True)
class WeeklyPerformance:
    """Per-salesperson rows plus window totals for one dashboard week.

    The totals count every leader in the window, including leaders without an
    assigned salesperson, so they can exceed the sum of the rows.
    """

    week_start: datetime
    week_end: datetime
    rows: List[SalesPerformance] = field(default_factory=list)
    total_upgraded: int = 0
    total_ordered: int = 0


@dataclass(slots=True)
class CohortInsight:
    name: str
    total_leads: int
    promoted_leads: int
    conversion_rate: float
    tier: CohortTier

    @property
    def display_rate(self) -> str:
        return f"{self.conversion_rate:.1f}%"


def progress_towards(upgraded: int, weekly_target: int = WEEKLY_TARGET) -> float:
    """Percentage of ``weekly_target`` reached, capped at 100."""

    if weekly_target <= 0:
        return 0.0
    return min(upgraded / weekly_target * 100, 100.0)


def weekly_performance(
    leaders: Sequence[OnboardedLeader],
    sales_team: Sequence[Salesperson],
    week_start: datetime,
    week_end: datetime,
    salesperson_filter: Optional[str] = None,
    *,
    weekly_target: int = WEEKLY_TARGET,
) -> WeeklyPerformance:
    """Count upgrades and orders per salesperson for leaders upgraded in the week.

    Every salesperson in scope gets a row, even without activity. A leader
    assigned to a name that is not on the team still gets its own row, after
    the team rows.
    """

    in_window = [
        leader
        for leader in leaders
        if is_in_week(leader.upgrade_date, week_start, week_end)
        and (not salesperson_filter or leader.salesperson == salesperson_filter)
    ]

    team = [person for person in sales_team if not salesperson_filter or person.name == salesperson_filter]
    counts: Dict[str, SalesPerformance] = {}
    for person in team:
        counts.setdefault(person.name, SalesPerformance(salesperson_name=person.name))

    for leader in in_window:
        if not leader.salesperson:
            continue
        row = counts.setdefault(leader.salesperson, SalesPerformance(salesperson_name=leader.salesperson))
        row.upgraded_count += 1
        if leader.ordered:
            row.ordered_count += 1

    rows = list(counts.values())
    for row in rows:
        row.progress = progress_towards(row.upgraded_count, weekly_target)

    return WeeklyPerformance(
        week_start=week_start,
        week_end=week_end,
        rows=rows,
        total_upgraded=len(in_window),
        total_ordered=sum(1 for leader in in_window if leader.ordered),
    )


def classify_rate(conversion_rate: float) -> CohortTier:
    if conversion_rate > HIGH_TIER_THRESHOLD:
        return CohortTier.HIGH
    if conversion_rate > MEDIUM_TIER_THRESHOLD:
        return CohortTier.MEDIUM
    return CohortTier.LOW


def cohort_insights(leads: Iterable[Lead], leaders: Iterable[OnboardedLeader]) -> List[CohortInsight]:
    """All-time conversion per cohort, largest cohort first.

    A lead counts as promoted when a leader with its id exists. Leads without a
    cohort are grouped under ``"Unassigned"``.
    """

    promoted_ids = {leader.id for leader in leaders}
    totals: Dict[str, List[int]] = {}
    for lead in leads:
        counts = totals.setdefault(lead.cohort or UNASSIGNED_COHORT, [0, 0])
        counts[0] += 1
        if lead.id in promoted_ids:
            counts[1] += 1

    insights: List[CohortInsight] = []
    for name, (total, promoted) in totals.items():
        rate = promoted / total * 100 if total > 0 else 0.0
        insights.append(
            CohortInsight(
                name=name,
                total_leads=total,
                promoted_leads=promoted,
                conversion_rate=rate,
                tier=classify_rate(rate),
            )
        )
    # sorted() is stable, so equal-sized cohorts keep their encounter order.
    return sorted(insights, key=lambda insight: insight.total_leads, reverse=True)


def needs_follow_up(
    leader: OnboardedLeader,
    today: Optional[date] = None,
    threshold_days: int = FOLLOW_UP_DAYS,
) -> bool:
    """Flag unordered leaders whose upgrade is ``threshold_days`` or more days old."""

    if leader.ordered:
        return False
    upgraded = parse_date(leader.upgrade_date)
    if upgraded is None:
        return False
    return ((today or date.today()) - upgraded).days >= threshold_days


def follow_up_leaders(
    leaders: Iterable[OnboardedLeader],
    today: Optional[date] = None,
    threshold_days: int = FOLLOW_UP_DAYS,
) -> List[OnboardedLeader]:
    return [leader for leader in leaders if needs_follow_up(leader, today, threshold_days)]


__all__ = [
    "WEEKLY_TARGET",
    "FOLLOW_UP_DAYS",
    "SalesPerformance",
    "WeeklyPerformance",
    "CohortInsight",
    "progress_towards",
    "weekly_performance",
    "classify_rate",
    "cohort_insights",
    "needs_follow_up",
    "follow_up_leaders",
]

"""Sales pipeline tracker: team, leads, onboarded leaders, check-ins and dashboard."""

from .checkin import check_in, check_ins_on, has_checked_in
from .dates import WeekOption, WeekRange, format_date, is_in_week, recent_weeks, week_range
from .errors import (
    AlreadyPromotedError,
    DuplicateCheckInError,
    NotFoundError,
    StoreError,
    TrackerError,
    ValidationError,
)
from .models import (
    CheckInRecord,
    CohortTier,
    Lead,
    LeadStatus,
    OnboardedLeader,
    Salesperson,
)
from .performance import (
    WEEKLY_TARGET,
    CohortInsight,
    SalesPerformance,
    WeeklyPerformance,
    cohort_insights,
    needs_follow_up,
    weekly_performance,
)
from .phone import is_normalized, normalize_phone
from .promotion import promote, promote_lead
from .service import TrackerService
from .store import JsonFileStore, MemoryStore, TrackerRepository

__all__ = [
    "Salesperson",
    "Lead",
    "LeadStatus",
    "OnboardedLeader",
    "CheckInRecord",
    "CohortTier",
    "TrackerError",
    "ValidationError",
    "NotFoundError",
    "AlreadyPromotedError",
    "DuplicateCheckInError",
    "StoreError",
    "normalize_phone",
    "is_normalized",
    "WeekRange",
    "WeekOption",
    "format_date",
    "week_range",
    "is_in_week",
    "recent_weeks",
    "promote",
    "promote_lead",
    "WEEKLY_TARGET",
    "SalesPerformance",
    "WeeklyPerformance",
    "CohortInsight",
    "weekly_performance",
    "cohort_insights",
    "needs_follow_up",
    "check_in",
    "check_ins_on",
    "has_checked_in",
    "MemoryStore",
    "JsonFileStore",
    "TrackerRepository",
    "TrackerService",
]

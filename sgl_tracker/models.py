"""Record models for the sales pipeline: team, leads, onboarded leaders and check-ins."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Mapping, Optional


DEFAULT_SOURCE = "From List"
UNASSIGNED_COHORT = "Unassigned"


class LeadStatus(str, Enum):
    """Pipeline status of a lead, stored by its display value."""

    NOT_CONTACTED = "Not contacted"
    CONTACTED = "Contacted"
    NEEDS_FOLLOW_UP = "Needs follow-up"
    APPOINTMENT_SET = "Appointment set"
    AWAITING_DECISION = "Awaiting decision"
    CONVERTED = "Converted"
    NOT_INTERESTED = "Not interested"

    @classmethod
    def parse(cls, value: "str | LeadStatus") -> "LeadStatus":
        """Accept either the display value or the member name, case-insensitively."""

        if isinstance(value, LeadStatus):
            return value
        text = str(value).strip()
        for status in cls:
            if text.lower() in {status.value.lower(), status.name.lower()}:
                return status
        options = ", ".join(status.value for status in cls)
        raise ValueError(f"Unknown lead status '{value}'. Expected one of: {options}")


class CohortTier(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


# --- Stored records ---

@dataclass(slots=True)
class Salesperson:
    """A member of the sales team. Leads and check-ins refer to them by name."""

    id: str
    name: str
    phone: str
    region: str
    joined_date: str

    def to_record(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "phone": self.phone,
            "region": self.region,
            "joinedDate": self.joined_date,
        }

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "Salesperson":
        return cls(
            id=str(record["id"]),
            name=record.get("name", ""),
            phone=record.get("phone", ""),
            region=record.get("region", ""),
            joined_date=record.get("joinedDate", ""),
        )


@dataclass(slots=True)
class Lead:
    """A prospect in the pipeline.

    Active leads are the ones with ``is_promoted`` unset; a promoted lead has a
    matching :class:`OnboardedLeader` with the same ``id``.
    """

    id: str
    name: str
    phone: str
    location: str
    status: LeadStatus = LeadStatus.NOT_CONTACTED
    remark: Optional[str] = None
    appointment: Optional[str] = None
    salesperson: Optional[str] = None
    source: str = DEFAULT_SOURCE
    cohort: Optional[str] = None
    is_promoted: bool = False

    def to_record(self) -> Dict[str, Any]:
        record: Dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "phone": self.phone,
            "location": self.location,
            "status": self.status.value,
            "source": self.source,
            "isPromoted": self.is_promoted,
        }
        record.update(
            {
                key: value
                for key, value in {
                    "remark": self.remark,
                    "appointment": self.appointment,
                    "salesperson": self.salesperson,
                    "cohort": self.cohort,
                }.items()
                if value is not None
            }
        )
        return record

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "Lead":
        return cls(
            id=str(record["id"]),
            name=record.get("name", ""),
            phone=record.get("phone", ""),
            location=record.get("location", ""),
            status=LeadStatus.parse(record.get("status") or LeadStatus.NOT_CONTACTED),
            remark=record.get("remark"),
            appointment=record.get("appointment"),
            salesperson=record.get("salesperson"),
            source=record.get("source") or DEFAULT_SOURCE,
            cohort=record.get("cohort"),
            is_promoted=bool(record.get("isPromoted", False)),
        )


@dataclass(slots=True)
class OnboardedLeader:
    """A lead promoted to leader. ``name`` and ``phone`` are frozen at promotion."""

    id: str
    name: str
    phone: str
    location: str
    upgrade_date: str
    ordered: bool = False
    salesperson: Optional[str] = None
    source: str = DEFAULT_SOURCE
    cohort: Optional[str] = None
    remark: Optional[str] = None

    def to_record(self) -> Dict[str, Any]:
        record: Dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "phone": self.phone,
            "location": self.location,
            "upgradeDate": self.upgrade_date,
            "ordered": self.ordered,
            "source": self.source,
        }
        record.update(
            {
                key: value
                for key, value in {
                    "salesperson": self.salesperson,
                    "cohort": self.cohort,
                    "remark": self.remark,
                }.items()
                if value is not None
            }
        )
        return record

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "OnboardedLeader":
        return cls(
            id=str(record["id"]),
            name=record.get("name", ""),
            phone=record.get("phone", ""),
            location=record.get("location", ""),
            upgrade_date=record.get("upgradeDate", ""),
            ordered=bool(record.get("ordered", False)),
            salesperson=record.get("salesperson"),
            source=record.get("source") or DEFAULT_SOURCE,
            cohort=record.get("cohort"),
            remark=record.get("remark"),
        )


@dataclass(slots=True)
class CheckInRecord:
    """One daily check-in. ``date`` is YYYY-MM-DD, ``timestamp`` an ISO instant."""

    id: str
    salesperson_name: str
    date: str
    timestamp: str

    def to_record(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "salespersonName": self.salesperson_name,
            "date": self.date,
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "CheckInRecord":
        return cls(
            id=str(record["id"]),
            salesperson_name=record.get("salespersonName", ""),
            date=record.get("date", ""),
            timestamp=record.get("timestamp", ""),
        )


def clean_optional(value: Optional[str]) -> Optional[str]:
    """Strip free text and turn blank values into ``None``."""

    if value is None:
        return None
    text = str(value).strip()
    return text or None


__all__ = [
    "DEFAULT_SOURCE",
    "UNASSIGNED_COHORT",
    "LeadStatus",
    "CohortTier",
    "Salesperson",
    "Lead",
    "OnboardedLeader",
    "CheckInRecord",
    "clean_optional",
]

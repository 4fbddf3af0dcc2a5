"""Application service: every user operation as a read-modify-write on the store."""
from __future__ import annotations

import logging
import threading
import uuid
from dataclasses import replace
from datetime import date, datetime
from pathlib import Path
from typing import List, Optional, Union

from . import checkin, io, performance, promotion
from .config import TrackerSettings
from .dates import WeekOption, format_date, parse_date, recent_weeks, week_range
from .errors import NotFoundError, ValidationError
from .models import (
    DEFAULT_SOURCE,
    CheckInRecord,
    Lead,
    LeadStatus,
    OnboardedLeader,
    Salesperson,
    clean_optional,
)
from .phone import is_normalized, normalize_phone
from .store import RecordStore, TrackerRepository

LOGGER = logging.getLogger(__name__)

_UNSET = object()


class TrackerService:
    """Runs tracker operations against a record store.

    Each mutating call loads the collections it needs, computes the next
    collections with the pure core functions and saves them back. A lock keeps
    concurrent callers from interleaving those steps.
    """

    def __init__(self, store: RecordStore, settings: Optional[TrackerSettings] = None) -> None:
        self._repository = TrackerRepository(store)
        self._settings = settings or TrackerSettings()
        self._lock = threading.Lock()

    @property
    def settings(self) -> TrackerSettings:
        return self._settings

    @property
    def repository(self) -> TrackerRepository:
        return self._repository

    # --- Sales team ---

    def sales_team(self) -> List[Salesperson]:
        return self._repository.sales_team()

    def add_salesperson(self, name: str, phone: str, region: str, joined_date: str) -> Salesperson:
        values = {
            "Name": clean_optional(name),
            "Phone": clean_optional(phone),
            "Region": clean_optional(region),
            "Joined Date": clean_optional(joined_date),
        }
        missing = [label for label, value in values.items() if not value]
        if missing:
            raise ValidationError.missing(missing)

        person = Salesperson(
            id=uuid.uuid4().hex,
            name=values["Name"],
            phone=_normalized_or_warn(values["Phone"], values["Name"]),
            region=values["Region"],
            joined_date=values["Joined Date"],
        )
        with self._lock:
            team = self._repository.sales_team()
            team.append(person)
            self._repository.save_sales_team(team)
        LOGGER.info("Added salesperson %s", person.name)
        return person

    # --- Leads ---

    def leads(self) -> List[Lead]:
        return self._repository.leads()

    def active_leads(self) -> List[Lead]:
        return [lead for lead in self._repository.leads() if not lead.is_promoted]

    def add_lead(
        self,
        name: str,
        phone: str,
        location: str,
        salesperson: str,
        *,
        status: Union[LeadStatus, str] = LeadStatus.NOT_CONTACTED,
        source: str = DEFAULT_SOURCE,
        remark: Optional[str] = None,
        appointment: Optional[str] = None,
        cohort: Optional[str] = None,
    ) -> Lead:
        values = {
            "Name": clean_optional(name),
            "Phone": clean_optional(phone),
            "Location": clean_optional(location),
            "Salesperson": clean_optional(salesperson),
            "Status": status or None,
            "Source": clean_optional(source),
        }
        missing = [label for label, value in values.items() if not value]
        if missing:
            raise ValidationError.missing(missing)

        lead = Lead(
            id=uuid.uuid4().hex,
            name=values["Name"],
            phone=_normalized_or_warn(values["Phone"], values["Name"]),
            location=values["Location"],
            status=_parse_status(status),
            remark=clean_optional(remark),
            appointment=clean_optional(appointment),
            salesperson=values["Salesperson"],
            source=values["Source"],
            cohort=clean_optional(cohort),
            is_promoted=False,
        )
        with self._lock:
            leads = self._repository.leads()
            leads.append(lead)
            self._repository.save_leads(leads)
        LOGGER.info("Added lead %s", lead.name)
        return lead

    def update_lead(
        self,
        lead_id: str,
        *,
        status: Union[LeadStatus, str, None] = None,
        remark: object = _UNSET,
        appointment: object = _UNSET,
        salesperson: object = _UNSET,
    ) -> Lead:
        """Edit the status, remark, appointment or salesperson of a lead."""

        changes = {}
        if status is not None:
            changes["status"] = _parse_status(status)
        for key, value in (("remark", remark), ("appointment", appointment), ("salesperson", salesperson)):
            if value is not _UNSET:
                changes[key] = clean_optional(value)

        with self._lock:
            leads = self._repository.leads()
            index = _index_of(leads, lead_id, "Lead")
            leads[index] = replace(leads[index], **changes)
            self._repository.save_leads(leads)
        return leads[index]

    def import_leads(self, path: Union[str, Path]) -> io.ImportReport:
        """Append the accepted rows of a spreadsheet to the lead list."""

        report = io.import_leads(path)
        if report.leads:
            with self._lock:
                leads = self._repository.leads()
                leads.extend(report.leads)
                self._repository.save_leads(leads)
            LOGGER.info("Imported %s leads from %s", len(report.leads), path)
        return report

    def export_leads(self, directory: Union[str, Path], *, today: Optional[date] = None, suffix: str = ".csv") -> Path:
        leads = self.active_leads()
        if not leads:
            raise ValidationError("No leads to export.")
        return io.export_leads(leads, directory, today=today, suffix=suffix)

    # --- Promotion and onboarded leaders ---

    def promote_lead(self, lead_id: str, *, today: Optional[date] = None) -> OnboardedLeader:
        with self._lock:
            previous_leaders = self._repository.onboarded_leaders()
            leads, leaders, leader = promotion.promote_lead(
                self._repository.leads(),
                previous_leaders,
                lead_id,
                today=today,
            )
            self._repository.save_onboarded_leaders(leaders)
            try:
                self._repository.save_leads(leads)
            except Exception:
                # The lead is still active, so the new leader must go too.
                LOGGER.error("Saving leads failed; rolling back promotion of %s", lead_id)
                self._repository.save_onboarded_leaders(previous_leaders)
                raise
        return leader

    def onboarded_leaders(self) -> List[OnboardedLeader]:
        return self._repository.onboarded_leaders()

    def update_leader(
        self,
        leader_id: str,
        *,
        ordered: Optional[bool] = None,
        remark: object = _UNSET,
        salesperson: object = _UNSET,
    ) -> OnboardedLeader:
        """Edit the ordered flag, remark or salesperson. Name and phone stay frozen."""

        changes = {}
        if ordered is not None:
            changes["ordered"] = bool(ordered)
        for key, value in (("remark", remark), ("salesperson", salesperson)):
            if value is not _UNSET:
                changes[key] = clean_optional(value)

        with self._lock:
            leaders = self._repository.onboarded_leaders()
            index = _index_of(leaders, leader_id, "Onboarded leader")
            leaders[index] = replace(leaders[index], **changes)
            self._repository.save_onboarded_leaders(leaders)
        return leaders[index]

    def follow_ups(self, today: Optional[date] = None) -> List[OnboardedLeader]:
        return performance.follow_up_leaders(
            self._repository.onboarded_leaders(),
            today,
            self._settings.follow_up_days,
        )

    def export_leaders(self, directory: Union[str, Path], *, today: Optional[date] = None, suffix: str = ".csv") -> Path:
        leaders = self._repository.onboarded_leaders()
        if not leaders:
            raise ValidationError("No onboarded leaders to export.")
        return io.export_leaders(leaders, directory, today=today, suffix=suffix)

    # --- Check-ins ---

    def check_in(self, salesperson_name: str, today: Optional[date] = None, *, now: Optional[datetime] = None) -> CheckInRecord:
        with self._lock:
            records = self._repository.check_ins()
            record = checkin.check_in(records, salesperson_name, today, now=now)
            records.append(record)
            self._repository.save_check_ins(records)
        return record

    def has_checked_in(self, salesperson_name: str, today: Optional[date] = None) -> bool:
        day = format_date(today or date.today())
        return checkin.has_checked_in(self._repository.check_ins(), salesperson_name, day)

    def check_ins_on(self, day: Optional[date] = None) -> List[CheckInRecord]:
        return checkin.check_ins_on(self._repository.check_ins(), format_date(day or date.today()))

    # --- Dashboard ---

    def recent_weeks(self, count: Optional[int] = None, today: Optional[date] = None) -> List[WeekOption]:
        return recent_weeks(self._settings.recent_weeks if count is None else count, today)

    def weekly_performance(
        self,
        week_value: Optional[str] = None,
        salesperson: Optional[str] = None,
    ) -> performance.WeeklyPerformance:
        """Performance for the week containing ``week_value`` (default: this week)."""

        if week_value:
            parsed = parse_date(week_value)
            if parsed is None:
                raise ValidationError(f"Invalid week '{week_value}'; expected YYYY-MM-DD.")
            week = week_range(parsed)
        else:
            week = week_range()
        return performance.weekly_performance(
            self._repository.onboarded_leaders(),
            self._repository.sales_team(),
            week.week_start,
            week.week_end,
            salesperson,
            weekly_target=self._settings.weekly_target,
        )

    def cohort_insights(self) -> List[performance.CohortInsight]:
        return performance.cohort_insights(self._repository.leads(), self._repository.onboarded_leaders())


def _normalized_or_warn(phone: str, owner: str) -> str:
    normalized = normalize_phone(phone)
    if not is_normalized(normalized):
        LOGGER.warning("Phone for %s may be incorrect; expected +251...", owner)
    return normalized


def _parse_status(status: Union[LeadStatus, str]) -> LeadStatus:
    try:
        return LeadStatus.parse(status)
    except ValueError as exc:
        raise ValidationError(str(exc)) from exc


def _index_of(records, record_id: str, label: str) -> int:
    for index, record in enumerate(records):
        if record.id == record_id:
            return index
    raise NotFoundError(f"{label} '{record_id}' not found.")

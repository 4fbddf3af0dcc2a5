"""Tests for :class:`sgl_tracker.service.TrackerService` against an in-memory store."""
from __future__ import annotations

from datetime import date

import pytest

from sgl_tracker.config import TrackerSettings
from sgl_tracker.errors import AlreadyPromotedError, DuplicateCheckInError, NotFoundError, ValidationError
from sgl_tracker.models import LeadStatus
from sgl_tracker.service import TrackerService
from sgl_tracker.store import MemoryStore


@pytest.fixture
def service() -> TrackerService:
    return TrackerService(MemoryStore(), TrackerSettings(weekly_target=2))


def test_add_salesperson_normalizes_phone(service: TrackerService) -> None:
    person = service.add_salesperson("Abebe", "0911 223 344", "Addis Ababa", "2024-01-15")

    assert person.phone == "+251911223344"
    assert service.sales_team() == [person]


def test_add_salesperson_requires_every_field(service: TrackerService) -> None:
    with pytest.raises(ValidationError) as excinfo:
        service.add_salesperson("Abebe", "", "Addis Ababa", " ")

    assert "Phone" in str(excinfo.value)
    assert "Joined Date" in str(excinfo.value)
    assert service.sales_team() == []


def test_add_lead_keeps_unparseable_phone(service: TrackerService) -> None:
    lead = service.add_lead("Almaz", "12-34", "Bole", "Abebe", cohort="Q3")

    assert lead.phone == "12-34"
    assert lead.status is LeadStatus.NOT_CONTACTED
    assert lead.source == "From List"
    assert lead.is_promoted is False


def test_add_lead_validation_leaves_store_untouched(service: TrackerService) -> None:
    with pytest.raises(ValidationError):
        service.add_lead("Almaz", "0946123456", "Bole", "")
    with pytest.raises(ValidationError):
        service.add_lead("Almaz", "0946123456", "Bole", "Abebe", status="Maybe")

    assert service.leads() == []


def test_update_lead_changes_only_editable_fields(service: TrackerService) -> None:
    lead = service.add_lead("Almaz", "0946123456", "Bole", "Abebe")

    updated = service.update_lead(lead.id, status="Appointment set", appointment="2024-05-03", remark="")

    assert updated.status is LeadStatus.APPOINTMENT_SET
    assert updated.appointment == "2024-05-03"
    assert updated.remark is None
    assert updated.salesperson == "Abebe"
    assert service.leads() == [updated]

    with pytest.raises(NotFoundError):
        service.update_lead("missing", status="Contacted")


def test_promote_lead_moves_lead_to_leaders_once(service: TrackerService) -> None:
    lead = service.add_lead("Almaz", "0946123456", "Bole", "Abebe", remark="Call back", cohort="Q3")

    leader = service.promote_lead(lead.id, today=date(2024, 5, 1))

    assert leader.id == lead.id
    assert leader.remark == "Call back"
    assert service.active_leads() == []
    assert service.leads()[0].is_promoted is True
    assert service.onboarded_leaders() == [leader]

    with pytest.raises(AlreadyPromotedError):
        service.promote_lead(lead.id)
    assert len(service.onboarded_leaders()) == 1


def test_update_leader_keeps_name_and_phone(service: TrackerService) -> None:
    lead = service.add_lead("Almaz", "0946123456", "Bole", "Abebe")
    service.promote_lead(lead.id)

    leader = service.update_leader(lead.id, ordered=True, salesperson="Sara")

    assert leader.ordered is True
    assert leader.salesperson == "Sara"
    assert (leader.name, leader.phone) == ("Almaz", "+251946123456")
    with pytest.raises(NotFoundError):
        service.update_leader("missing", ordered=True)


def test_follow_ups_use_configured_threshold() -> None:
    service = TrackerService(MemoryStore(), TrackerSettings(follow_up_days=5))
    lead = service.add_lead("Almaz", "0946123456", "Bole", "Abebe")
    service.promote_lead(lead.id, today=date(2024, 5, 1))

    assert service.follow_ups(date(2024, 5, 5)) == []
    assert [leader.id for leader in service.follow_ups(date(2024, 5, 6))] == [lead.id]


def test_check_in_once_per_day(service: TrackerService) -> None:
    service.check_in("Abebe", date(2024, 5, 1))

    with pytest.raises(DuplicateCheckInError):
        service.check_in("Abebe", date(2024, 5, 1))

    assert service.has_checked_in("Abebe", date(2024, 5, 1))
    assert not service.has_checked_in("Abebe", date(2024, 5, 2))
    assert len(service.check_ins_on(date(2024, 5, 1))) == 1


def test_dashboard_uses_configured_target(service: TrackerService) -> None:
    service.add_salesperson("Abebe", "0911223344", "Addis", "2024-01-01")
    lead = service.add_lead("Almaz", "0946123456", "Bole", "Abebe", cohort="Q3")
    service.add_lead("Kebede", "0946123457", "Piassa", "Abebe", cohort="Q3")
    service.promote_lead(lead.id, today=date(2024, 5, 1))

    weekly = service.weekly_performance("2024-04-30")

    assert weekly.total_upgraded == 1
    assert weekly.rows[0].progress == pytest.approx(50.0)
    assert service.cohort_insights()[0].conversion_rate == pytest.approx(50.0)

    with pytest.raises(ValidationError):
        service.weekly_performance("week 18")


def test_exports_reject_empty_collections(service: TrackerService, tmp_path) -> None:
    with pytest.raises(ValidationError):
        service.export_leads(tmp_path)
    with pytest.raises(ValidationError):
        service.export_leaders(tmp_path)


def test_recent_weeks_count_from_settings_or_argument() -> None:
    service = TrackerService(MemoryStore(), TrackerSettings(recent_weeks=4))

    assert len(service.recent_weeks(today=date(2024, 5, 1))) == 4
    assert service.recent_weeks(0, today=date(2024, 5, 1)) == []


class _LeadsSaveFails(MemoryStore):
    def __init__(self) -> None:
        super().__init__()
        self.fail_leads = False

    def save(self, key, value) -> None:
        if key == "leads" and self.fail_leads:
            raise OSError("disk full")
        super().save(key, value)


def test_promote_lead_rolls_back_leader_when_leads_save_fails() -> None:
    store = _LeadsSaveFails()
    service = TrackerService(store)
    lead = service.add_lead("Almaz", "0946123456", "Bole", "Abebe")

    store.fail_leads = True
    with pytest.raises(OSError):
        service.promote_lead(lead.id, today=date(2024, 5, 1))

    assert service.onboarded_leaders() == []
    assert service.leads()[0].is_promoted is False

    store.fail_leads = False
    leader = service.promote_lead(lead.id, today=date(2024, 5, 1))
    assert service.onboarded_leaders() == [leader]
    assert service.active_leads() == []


def test_has_checked_in_matches_stripped_name(service: TrackerService) -> None:
    service.check_in(" Abebe ", date(2024, 5, 1))

    assert service.has_checked_in(" Abebe ", date(2024, 5, 1))
    with pytest.raises(DuplicateCheckInError):
        service.check_in(" Abebe ", date(2024, 5, 1))

"""Unit tests for :mod:`sgl_tracker.promotion`."""
from __future__ import annotations

from datetime import date

import pytest

from sgl_tracker.errors import AlreadyPromotedError, NotFoundError
from sgl_tracker.models import Lead, LeadStatus, OnboardedLeader
from sgl_tracker.promotion import promote, promote_lead


def _lead(lead_id: str = "1", **overrides) -> Lead:
    values = dict(
        id=lead_id,
        name="Almaz Tadesse",
        phone="+251946123456",
        location="Bole",
        status=LeadStatus.APPOINTMENT_SET,
        remark="Interested in group buying",
        salesperson="Abebe",
        source="Referral",
        cohort="Q3-2024",
    )
    values.update(overrides)
    return Lead(**values)


def test_promote_copies_lead_fields_to_new_leader() -> None:
    lead = _lead()

    updated, leader = promote(lead, today=date(2024, 5, 2))

    assert updated.is_promoted is True
    assert lead.is_promoted is False
    assert leader == OnboardedLeader(
        id="1",
        name="Almaz Tadesse",
        phone="+251946123456",
        location="Bole",
        upgrade_date="2024-05-02",
        ordered=False,
        salesperson="Abebe",
        source="Referral",
        cohort="Q3-2024",
        remark="Interested in group buying",
    )


def test_promote_without_lead_raises_not_found() -> None:
    with pytest.raises(NotFoundError):
        promote(None)


def test_promote_lead_updates_both_collections() -> None:
    leads = [_lead("1"), _lead("2", name="Kebede")]

    next_leads, next_leaders, leader = promote_lead(leads, [], "2", today=date(2024, 5, 2))

    assert [lead.is_promoted for lead in next_leads] == [False, True]
    assert next_leaders == [leader]
    assert leader.id == "2" and leader.name == "Kebede"
    assert leads[1].is_promoted is False


def test_promote_lead_rejects_unknown_id() -> None:
    with pytest.raises(NotFoundError):
        promote_lead([_lead("1")], [], "missing")


def test_promote_lead_rejects_second_promotion() -> None:
    next_leads, next_leaders, _ = promote_lead([_lead("1")], [], "1")

    with pytest.raises(AlreadyPromotedError):
        promote_lead(next_leads, next_leaders, "1")


def test_promote_lead_rejects_when_leader_already_exists() -> None:
    existing = OnboardedLeader(id="1", name="Almaz", phone="", location="", upgrade_date="2024-05-01")

    with pytest.raises(AlreadyPromotedError):
        promote_lead([_lead("1")], [existing], "1")

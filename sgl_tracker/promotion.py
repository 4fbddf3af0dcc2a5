"""Promotion of leads to onboarded leaders."""
from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date
from typing import List, Optional, Sequence, Tuple

from .dates import format_date
from .errors import AlreadyPromotedError, NotFoundError
from .models import Lead, OnboardedLeader

LOGGER = logging.getLogger(__name__)


def promote(lead: Optional[Lead], today: Optional[date] = None) -> Tuple[Lead, OnboardedLeader]:
    """Return the promoted copy of ``lead`` together with its new leader record.

    The leader takes the lead's id and carries over name, phone, location,
    salesperson, source, cohort and remark. This function keeps no history, so
    calling it twice for the same lead produces two leaders with the same id;
    use :func:`promote_lead` when working with stored collections.
    """

    if lead is None:
        raise NotFoundError("Lead not found to promote.")

    upgrade_date = format_date(today or date.today())
    leader = OnboardedLeader(
        id=lead.id,
        name=lead.name,
        phone=lead.phone,
        location=lead.location,
        upgrade_date=upgrade_date,
        ordered=False,
        salesperson=lead.salesperson,
        source=lead.source,
        cohort=lead.cohort,
        remark=lead.remark,
    )
    return replace(lead, is_promoted=True), leader


def promote_lead(
    leads: Sequence[Lead],
    leaders: Sequence[OnboardedLeader],
    lead_id: str,
    *,
    today: Optional[date] = None,
) -> Tuple[List[Lead], List[OnboardedLeader], OnboardedLeader]:
    """Promote ``lead_id`` and return the next lead and leader collections.

    Raises :class:`NotFoundError` for an unknown id and
    :class:`AlreadyPromotedError` if the lead is already flagged or a leader
    with the same id exists, before anything is changed. Both
    collections change together.
    """

    target = next((lead for lead in leads if lead.id == lead_id), None)
    if target is None:
        raise NotFoundError(f"Lead '{lead_id}' not found to promote.")
    if target.is_promoted or any(leader.id == lead_id for leader in leaders):
        raise AlreadyPromotedError(f"{target.name} has already been promoted.")

    updated, leader = promote(target, today=today)
    next_leads = [updated if lead.id == lead_id else lead for lead in leads]
    next_leaders = [*leaders, leader]
    LOGGER.info("Promoted %s (%s) to onboarded leaders", target.name, target.id)
    return next_leads, next_leaders, leader


__all__ = ["promote", "promote_lead"]

"""Normalisation of Ethiopian mobile numbers to the ``+2519XXXXXXXX`` form."""
from __future__ import annotations

import logging
import re
from typing import Optional

LOGGER = logging.getLogger(__name__)

COUNTRY_CODE = "251"
CANONICAL_PREFIX = f"+{COUNTRY_CODE}"

_NON_DIGITS = re.compile(r"\D")


def normalize_phone(value: Optional[str]) -> str:
    """Return ``value`` in ``+251`` form, or unchanged if it cannot be converted.

    Accepted shapes (ignoring any non-digit characters): ``2519XXXXXXXX``,
    ``09XXXXXXXX`` and ``9XXXXXXXX``. Numbers that already carry the ``251``
    prefix but have another length are prefixed with ``+`` as well. Anything
    else is logged and returned verbatim; use :func:`is_normalized` to detect it.
    """

    if not value:
        return ""

    digits = _NON_DIGITS.sub("", value)

    if digits.startswith(f"{COUNTRY_CODE}9") and len(digits) == 12:
        return f"+{digits}"
    if digits.startswith("09") and len(digits) == 10:
        return f"{CANONICAL_PREFIX}{digits[1:]}"
    if digits.startswith("9") and len(digits) == 9:
        return f"{CANONICAL_PREFIX}{digits}"
    if digits.startswith(COUNTRY_CODE) and len(digits) > 9:
        return f"+{digits}"

    LOGGER.warning(
        "Phone number %r could not be normalized to %s9XXXXXXXX; keeping the original value",
        value,
        CANONICAL_PREFIX,
    )
    return value


def is_normalized(phone: Optional[str]) -> bool:
    """Return ``True`` when ``phone`` carries the canonical country prefix."""

    return bool(phone) and phone.startswith(CANONICAL_PREFIX)


__all__ = ["COUNTRY_CODE", "CANONICAL_PREFIX", "normalize_phone", "is_normalized"]

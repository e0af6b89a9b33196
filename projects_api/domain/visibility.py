"""
Region-gated visibility rules for ``GET /br/{key}``.

Pure functions: the caller fetches the record and resolves the client's
country before asking for a decision.

A record is exposed only when its ``code`` is exactly ``"2"`` and its region
gate admits the resolved country:

- ``ip`` absent: legacy gate, only clients resolved to ``"BR"``
- ``ip == ""``: no gate
- ``ip == "C"``: only clients resolved to ``C``

An unknown country (``None``) never passes a gate, and neither does any
country when ``ip`` holds something other than a string.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from projects_api.domain.models import CODE_FIELD, IP_FIELD, VisibilityDecision

logger = logging.getLogger(__name__)

DEFAULT_REGION = "BR"
VISIBLE_CODE = "2"


def _has_malformed_gate(record: Mapping[str, Any]) -> bool:
    return IP_FIELD in record and not isinstance(record[IP_FIELD], str)


def region_gate(record: Mapping[str, Any]) -> Optional[str]:
    """Return the country code a record with a string ``ip`` is gated to, or None when ungated."""
    if IP_FIELD not in record:
        return DEFAULT_REGION
    return record[IP_FIELD] or None


def needs_country(record: Mapping[str, Any]) -> bool:
    """True when deciding on this record requires a geolocation lookup."""
    if _has_malformed_gate(record):
        return False
    return region_gate(record) is not None


def evaluate(record: Mapping[str, Any], resolved_country: Optional[str]) -> VisibilityDecision:
    if _has_malformed_gate(record):
        return VisibilityDecision.REGION_MISMATCH

    gate = region_gate(record)
    if gate is not None and (resolved_country is None or resolved_country != gate):
        return VisibilityDecision.REGION_MISMATCH

    if record.get(CODE_FIELD) != VISIBLE_CODE:
        return VisibilityDecision.HIDDEN_CODE

    return VisibilityDecision.EXPOSED


def is_exposed(record: Mapping[str, Any], resolved_country: Optional[str]) -> bool:
    decision = evaluate(record, resolved_country)
    logger.debug(f"Visibility decision for country {resolved_country!r}: {decision.value}")
    return decision is VisibilityDecision.EXPOSED

"""Relationship health: contact frequency, elapsed days, and status predicates.

All functions are pure. ``now`` defaults to the current local time so callers
in the UI can omit it, while tests pass a fixed instant.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from .models import Contact, ContactStyle, RelationshipType
from .utils import now_local


NEVER_CONTACTED = -1
ATTENTION_WINDOW_DAYS = 7

_DEFAULT_FREQUENCY = {
    RelationshipType.CLOSE.value: 30,
    RelationshipType.FAMILY.value: 30,
    RelationshipType.WORK.value: 60,
    RelationshipType.NETWORK.value: 90,
}


class Health(str, Enum):
    OVERDUE = "overdue"
    NEEDS_ATTENTION = "needs-attention"
    WITHIN_THRESHOLD = "within-threshold"
    OK = "ok"


def frequency_days(contact: Contact) -> int:
    """Target days between contacts. 0 means no target."""
    if contact.custom_frequency_days > 0:
        return contact.custom_frequency_days
    return _DEFAULT_FREQUENCY.get(contact.relationship_type, 0)


def days_since_contact(contact: Contact, now: datetime | None = None) -> int:
    """Whole days since ``last_contacted``, or -1 if never contacted.

    Future timestamps give negative values.
    """
    if contact.last_contacted is None:
        return NEVER_CONTACTED
    now = now or now_local()
    elapsed_hours = (now - contact.last_contacted).total_seconds() / 3600
    return int(elapsed_hours / 24)


def _tracks_frequency(contact: Contact) -> bool:
    return contact.contact_style in ("", ContactStyle.PERIODIC.value) and frequency_days(contact) > 0


def is_overdue(contact: Contact, now: datetime | None = None) -> bool:
    """True once more days than the frequency have passed, or never contacted."""
    if not _tracks_frequency(contact):
        return False
    if contact.last_contacted is None:
        return True
    return days_since_contact(contact, now) > frequency_days(contact)


def needs_attention(contact: Contact, now: datetime | None = None) -> bool:
    """True inside the 7-day window that ends on the frequency day itself."""
    if not _tracks_frequency(contact):
        return False
    if contact.last_contacted is None:
        return True
    freq = frequency_days(contact)
    days = days_since_contact(contact, now)
    return freq - ATTENTION_WINDOW_DAYS < days <= freq


def is_within_threshold(contact: Contact, now: datetime | None = None) -> bool:
    """True when contacted within half the frequency."""
    if not _tracks_frequency(contact):
        return False
    if contact.last_contacted is None:
        return False
    days = days_since_contact(contact, now)
    return 0 <= days <= frequency_days(contact) // 2


def health(contact: Contact, now: datetime | None = None) -> Health:
    """Pick the single display status: overdue > needs-attention > within-threshold > ok."""
    now = now or now_local()
    if is_overdue(contact, now):
        return Health.OVERDUE
    if needs_attention(contact, now):
        return Health.NEEDS_ATTENTION
    if is_within_threshold(contact, now):
        return Health.WITHIN_THRESHOLD
    return Health.OK

"""Search and single-dimension filtering over the contact collection."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from .models import Contact
from .status import Health, is_overdue, is_within_threshold, needs_attention


class FilterKind(str, Enum):
    NONE = "none"
    QUERY = "query"
    TYPE = "type"
    STATE = "state"
    STATUS = "status"


STATUS_LABELS = {
    Health.OVERDUE.value: "overdue",
    Health.NEEDS_ATTENTION.value: "due soon",
    Health.WITHIN_THRESHOLD.value: "good timing",
}

_STATUS_PREDICATES = {
    Health.OVERDUE.value: is_overdue,
    Health.NEEDS_ATTENTION.value: needs_attention,
    Health.WITHIN_THRESHOLD.value: is_within_threshold,
}


@dataclass(frozen=True)
class ActiveFilter:
    """The one active filter dimension. Setting a new one replaces the old."""
    kind: FilterKind = FilterKind.NONE
    value: str = ""

    @classmethod
    def query(cls, text: str) -> ActiveFilter:
        # An empty query is no filter at all
        if not text:
            return cls()
        return cls(FilterKind.QUERY, text)

    @property
    def is_active(self) -> bool:
        return self.kind is not FilterKind.NONE

    @property
    def query_text(self) -> str:
        return self.value if self.kind is FilterKind.QUERY else ""


def matches_query(contact: Contact, query: str) -> bool:
    """Case-insensitive substring match on title, company, email, label, role or any tag."""
    needle = query.lower()
    haystack = [
        contact.title,
        contact.company,
        contact.email,
        contact.label,
        contact.role,
        *contact.tags,
    ]
    return any(needle in field.lower() for field in haystack)


def matches(contact: Contact, active: ActiveFilter, now: datetime | None = None) -> bool:
    """True if the contact passes the active filter."""
    if active.kind is FilterKind.NONE:
        return True
    if active.kind is FilterKind.QUERY:
        return matches_query(contact, active.value)
    if active.kind is FilterKind.TYPE:
        return contact.relationship_type == active.value
    if active.kind is FilterKind.STATE:
        return contact.state == active.value
    predicate = _STATUS_PREDICATES.get(active.value)
    return predicate is not None and predicate(contact, now)


def apply_filter(
    contacts, active: ActiveFilter, now: datetime | None = None
) -> tuple[Contact, ...]:
    """Narrow the base collection by the active filter, keeping its order."""
    return tuple(c for c in contacts if matches(c, active, now))


def clamp_cursor(cursor: int, count: int) -> int:
    """Keep a selection index inside ``[0, count)``; 0 for an empty list."""
    if count <= 0:
        return 0
    return max(0, min(cursor, count - 1))


def describe_filter(active: ActiveFilter) -> str:
    """Short label for headers, e.g. ``search: acme`` or ``status: due soon``."""
    if active.kind is FilterKind.QUERY:
        return f"search: {active.value}"
    if active.kind is FilterKind.TYPE:
        return f"type: {active.value}"
    if active.kind is FilterKind.STATE:
        return f"state: {active.value}"
    if active.kind is FilterKind.STATUS:
        return f"status: {STATUS_LABELS.get(active.value, active.value)}"
    return ""

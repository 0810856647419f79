"""Dataclasses for contacts, tasks, and interactions."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


CONTACT_TAG = "contact"


class RelationshipType(str, Enum):
    CLOSE = "close"
    FAMILY = "family"
    NETWORK = "network"
    WORK = "work"
    SOCIAL = "social"
    PROVIDERS = "providers"
    RECRUITERS = "recruiters"


class ContactStyle(str, Enum):
    PERIODIC = "periodic"  # regular check-ins
    AMBIENT = "ambient"  # passive monitoring
    TRIGGERED = "triggered"  # event-based


class ContactState(str, Enum):
    """Well-known values of ``Contact.state``. The field itself is an open string."""
    OK = "ok"
    FOLLOWUP = "followup"
    PING = "ping"
    SCHEDULED = "scheduled"
    TIMEOUT = "timeout"
    ARCHIVED = "archived"
    ACTIVE = "active"


class InteractionType(str, Enum):
    CALL = "call"
    EMAIL = "email"
    TEXT = "text"
    MEETING = "meeting"
    VIDEO = "video"
    SOCIAL = "social"
    MAIL = "mail"
    OTHER = "other"
    NOTE = "note"  # quick state-only change, not a real interaction


@dataclass
class Contact:
    title: str
    date: datetime | None = None
    tags: list[str] = field(default_factory=lambda: [CONTACT_TAG])
    identifier: str = ""
    email: str = ""
    phone: str = ""
    relationship_type: str = ""
    state: str = ""
    label: str = ""
    contact_style: str = ""
    last_contacted: datetime | None = None
    last_bump_date: datetime | None = None
    bump_count: int = 0
    updated_at: datetime | None = None
    # Optional descriptive fields
    company: str = ""
    role: str = ""
    location: str = ""
    birthday: str = ""
    linkedin: str = ""
    twitter: str = ""
    website: str = ""
    notes: str = ""
    custom_frequency_days: int = 0
    last_interaction_type: str = ""
    related_contact_labels: list[str] = field(default_factory=list)
    # Runtime only, never written to the header
    file_path: str = ""
    content: str = ""

    def display_tags(self) -> list[str]:
        """Tags without the reserved contact marker."""
        return [t for t in self.tags if t != CONTACT_TAG]


@dataclass
class Interaction:
    date: datetime
    interaction_type: str
    summary: str = ""


@dataclass
class Task:
    title: str
    date: datetime
    identifier: str
    index_id: int
    contact_id: str
    tags: list[str] = field(default_factory=list)
    status: str = "open"
    label: str = ""
    content: str = ""

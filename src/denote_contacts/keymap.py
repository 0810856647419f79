"""Hotkey tables shared by the state machine and the views."""

from __future__ import annotations

from dataclasses import dataclass

from .filters import FilterKind
from .models import ContactState, ContactStyle, InteractionType, RelationshipType
from .status import Health


@dataclass(frozen=True)
class Choice:
    key: str
    value: str
    label: str
    description: str = ""


def _by_key(choices: tuple[Choice, ...]) -> dict[str, Choice]:
    return {c.key: c for c in choices}


RELATIONSHIP_CHOICES = (
    Choice("f", RelationshipType.FAMILY.value, "Family"),
    Choice("c", RelationshipType.CLOSE.value, "Close"),
    Choice("n", RelationshipType.NETWORK.value, "Network"),
    Choice("w", RelationshipType.WORK.value, "Work"),
    Choice("r", RelationshipType.RECRUITERS.value, "Recruiters"),
    Choice("p", RelationshipType.PROVIDERS.value, "Providers"),
    Choice("s", RelationshipType.SOCIAL.value, "Social"),
)

STYLE_CHOICES = (
    Choice("p", ContactStyle.PERIODIC.value, "Periodic"),
    Choice("a", ContactStyle.AMBIENT.value, "Ambient"),
    Choice("t", ContactStyle.TRIGGERED.value, "Triggered"),
)

STATE_CHOICES = (
    Choice("o", ContactState.OK.value, "OK", "Contact is up to date"),
    Choice("f", ContactState.FOLLOWUP.value, "Follow Up", "Need to follow up"),
    Choice("p", ContactState.PING.value, "Ping", "Send a quick check-in"),
    Choice("s", ContactState.SCHEDULED.value, "Scheduled", "Meeting/call is scheduled"),
    Choice("t", ContactState.TIMEOUT.value, "Timeout", "No response"),
)

INTERACTION_CHOICES = (
    Choice("p", InteractionType.CALL.value, "Phone Call"),
    Choice("e", InteractionType.EMAIL.value, "Email"),
    Choice("t", InteractionType.TEXT.value, "Text/SMS"),
    Choice("m", InteractionType.MEETING.value, "In-Person Meeting"),
    Choice("v", InteractionType.VIDEO.value, "Video Call"),
    Choice("s", InteractionType.SOCIAL.value, "Social Media"),
    Choice("l", InteractionType.MAIL.value, "Physical Mail"),
    Choice("o", InteractionType.OTHER.value, "Other"),
)

RELATIONSHIP_KEYS = _by_key(RELATIONSHIP_CHOICES)
STYLE_KEYS = _by_key(STYLE_CHOICES)
STATE_KEYS = _by_key(STATE_CHOICES)
INTERACTION_KEYS = _by_key(INTERACTION_CHOICES)


@dataclass(frozen=True)
class FieldSpec:
    """One editable form field: the Contact attribute it maps to and its hotkey."""
    attr: str
    hotkey: str
    label: str
    choices: tuple[Choice, ...] = ()

    @property
    def is_choice(self) -> bool:
        return bool(self.choices)


EDIT_FIELDS = (
    FieldSpec("title", "n", "Name"),
    FieldSpec("email", "e", "Email"),
    FieldSpec("phone", "p", "Phone"),
    FieldSpec("company", "c", "Company"),
    FieldSpec("role", "r", "Role"),
    FieldSpec("location", "l", "Location"),
    FieldSpec("relationship_type", "t", "Type", RELATIONSHIP_CHOICES),
    FieldSpec("contact_style", "s", "Style", STYLE_CHOICES),
    FieldSpec("state", "S", "State", STATE_CHOICES),
    FieldSpec("tags", "T", "Tags"),
)

FIELDS_BY_HOTKEY = {f.hotkey: f for f in EDIT_FIELDS}
FIELDS_BY_ATTR = {f.attr: f for f in EDIT_FIELDS}


@dataclass(frozen=True)
class FilterOption:
    key: str
    kind: FilterKind
    value: str
    label: str


FILTER_OPTIONS = (
    FilterOption("f", FilterKind.TYPE, RelationshipType.FAMILY.value, "Family"),
    FilterOption("c", FilterKind.TYPE, RelationshipType.CLOSE.value, "Close"),
    FilterOption("n", FilterKind.TYPE, RelationshipType.NETWORK.value, "Network"),
    FilterOption("w", FilterKind.TYPE, RelationshipType.WORK.value, "Work"),
    FilterOption("r", FilterKind.TYPE, RelationshipType.RECRUITERS.value, "Recruiters"),
    FilterOption("p", FilterKind.TYPE, RelationshipType.PROVIDERS.value, "Providers"),
    FilterOption("s", FilterKind.TYPE, RelationshipType.SOCIAL.value, "Social"),
    FilterOption("F", FilterKind.STATE, ContactState.FOLLOWUP.value, "Follow Up"),
    FilterOption("P", FilterKind.STATE, ContactState.PING.value, "Ping"),
    FilterOption("S", FilterKind.STATE, ContactState.SCHEDULED.value, "Scheduled"),
    FilterOption("T", FilterKind.STATE, ContactState.TIMEOUT.value, "Timeout"),
    FilterOption("o", FilterKind.STATUS, Health.OVERDUE.value, "Overdue"),
    FilterOption("d", FilterKind.STATUS, Health.NEEDS_ATTENTION.value, "Due Soon"),
    FilterOption("g", FilterKind.STATUS, Health.WITHIN_THRESHOLD.value, "Good Timing"),
)

FILTER_KEYS = {o.key: o for o in FILTER_OPTIONS}
CLEAR_FILTERS_KEY = "a"

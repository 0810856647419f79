"""Events consumed by the application state machine."""

from __future__ import annotations

from dataclasses import dataclass

from .models import Contact


@dataclass(frozen=True)
class KeyPressed:
    key: str


@dataclass(frozen=True)
class Resized:
    width: int
    height: int


@dataclass(frozen=True)
class ContactsLoaded:
    contacts: tuple[Contact, ...]


@dataclass(frozen=True)
class ContactsLoadFailed:
    error: str


@dataclass(frozen=True)
class ContactSaved:
    """A save finished. ``ends_workflow`` is False for side actions like bump."""
    contact: Contact
    message: str
    ends_workflow: bool = True


@dataclass(frozen=True)
class SaveFailed:
    error: str


@dataclass(frozen=True)
class MessageExpired:
    seq: int


Event = KeyPressed | Resized | ContactsLoaded | ContactsLoadFailed | ContactSaved | SaveFailed | MessageExpired

"""Background units of work: scan, log, bump, edit, create, and type change.

Each operation is a frozen value describing the work. ``run`` does the file
I/O and returns the event that reports the outcome, so the operation never
touches application state directly.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, replace
from datetime import datetime
from pathlib import Path

from .errors import ContactSaveError, ContactsDirectoryError, TaskCreationError
from .events import ContactSaved, ContactsLoaded, ContactsLoadFailed, Event, SaveFailed
from .models import Contact, ContactState, Interaction, InteractionType
from .store import ContactStore
from .tasks import create_task_for_transition
from .utils import format_identifier, normalize_tags, now_local


log = logging.getLogger(__name__)

QUICK_STATE_TYPE = InteractionType.NOTE.value
MAX_NOTE_LENGTH = 200

TEXT_FIELDS = ("title", "email", "phone", "company", "role", "location",
               "relationship_type", "contact_style", "state")


@dataclass(frozen=True)
class Workspace:
    """Where operations read and write."""
    store: ContactStore
    tasks_dir: Path
    clock: Callable[[], datetime] = now_local


def format_interaction(interaction: Interaction) -> str:
    """Markdown block prepended to a contact body for a logged interaction."""
    return (
        f"## {interaction.date:%Y-%m-%d} - {interaction.interaction_type}\n\n"
        f"{interaction.summary}\n\n"
    )


def _task_annotation(contact: Contact, old_state: str, new_state: str, ws: Workspace, now: datetime) -> str:
    try:
        path = create_task_for_transition(contact, old_state, new_state, ws.tasks_dir, now)
    except TaskCreationError as e:
        log.warning("Task creation failed for '%s': %s", contact.title, e)
        return f" [task error: {e}]"
    return " [task created]" if path else ""


@dataclass(frozen=True)
class LoadContacts:
    def run(self, ws: Workspace) -> Event:
        try:
            return ContactsLoaded(tuple(ws.store.scan()))
        except ContactsDirectoryError as e:
            log.error("Contact scan failed: %s", e)
            return ContactsLoadFailed(str(e))


@dataclass(frozen=True)
class LogInteraction:
    """Record an interaction. The quick state change logs one of type ``note``."""
    contact: Contact
    interaction_type: str
    next_state: str
    note: str = ""

    def run(self, ws: Workspace) -> Event:
        now = ws.clock()
        old_state = self.contact.state
        updated = replace(
            self.contact,
            state=self.next_state,
            last_contacted=now,
            last_interaction_type=self.interaction_type,
        )
        note = self.note.strip()[:MAX_NOTE_LENGTH]
        if note:
            entry = Interaction(now, self.interaction_type, note)
            updated.content = format_interaction(entry) + updated.content

        try:
            saved = ws.store.save(updated, now)
        except ContactSaveError as e:
            log.warning("Logging interaction failed: %s", e)
            return SaveFailed(f"failed to save interaction for '{self.contact.title}': {e}")

        message = f"Logged {self.interaction_type} interaction with {saved.title}"
        if self.next_state != ContactState.OK.value:
            message += f" (→ {self.next_state})"
        message += _task_annotation(saved, old_state, self.next_state, ws, now)
        return ContactSaved(saved, message)


@dataclass(frozen=True)
class BumpContact:
    contact: Contact

    def run(self, ws: Workspace) -> Event:
        now = ws.clock()
        updated = replace(
            self.contact,
            last_bump_date=now,
            bump_count=self.contact.bump_count + 1,
        )
        try:
            saved = ws.store.save(updated, now)
        except ContactSaveError as e:
            log.warning("Bump failed: %s", e)
            return SaveFailed(f"failed to save bump for '{self.contact.title}': {e}")
        return ContactSaved(
            saved,
            f"Bumped {saved.title} (review #{saved.bump_count})",
            ends_workflow=False,
        )


def apply_form_values(contact: Contact, values: dict[str, str]) -> Contact:
    """Copy trimmed form values onto a contact; tags keep the contact marker."""
    changes = {attr: values.get(attr, "").strip() for attr in TEXT_FIELDS}
    changes["tags"] = normalize_tags(values.get("tags", ""))
    return replace(contact, **changes)


@dataclass(frozen=True)
class SaveEdit:
    contact: Contact
    values: dict[str, str]

    def run(self, ws: Workspace) -> Event:
        now = ws.clock()
        updated = apply_form_values(self.contact, self.values)
        try:
            saved = ws.store.save(updated, now)
        except ContactSaveError as e:
            log.warning("Edit failed: %s", e)
            return SaveFailed(f"failed to save changes to '{updated.title}': {e}")
        message = f"Updated {saved.title}"
        message += _task_annotation(saved, self.contact.state, saved.state, ws, now)
        return ContactSaved(saved, message)


@dataclass(frozen=True)
class CreateContact:
    values: dict[str, str]

    def run(self, ws: Workspace) -> Event:
        now = ws.clock()
        draft = apply_form_values(
            Contact(title="", date=now, identifier=format_identifier(now)),
            self.values,
        )
        if not draft.title:
            return SaveFailed("name is required")
        try:
            saved = ws.store.create(draft, now)
        except ContactSaveError as e:
            log.warning("Create failed: %s", e)
            return SaveFailed(str(e))
        message = f"Created {saved.title}"
        message += _task_annotation(saved, "", saved.state, ws, now)
        return ContactSaved(saved, message)


@dataclass(frozen=True)
class ChangeType:
    contact: Contact
    relationship_type: str

    def run(self, ws: Workspace) -> Event:
        now = ws.clock()
        updated = replace(self.contact, relationship_type=self.relationship_type)
        try:
            saved = ws.store.save(updated, now)
        except ContactSaveError as e:
            log.warning("Type change failed: %s", e)
            return SaveFailed(f"failed to update type for '{self.contact.title}': {e}")
        return ContactSaved(saved, f"Changed {saved.title} to {saved.relationship_type}")


Operation = LoadContacts | LogInteraction | BumpContact | SaveEdit | CreateContact | ChangeType

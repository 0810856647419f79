"""File-backed contact repository: directory scan, reload, and save."""

from __future__ import annotations

import logging
import os
from datetime import datetime
from pathlib import Path

from .errors import ContactParseError, ContactSaveError, ContactsDirectoryError
from .markdown_parser import CONTACT_SUFFIX, parse_contact_file, save_contact_file
from .models import Contact


log = logging.getLogger(__name__)


def _sort_key(contact: Contact) -> str:
    return contact.title.lower()


def sort_contacts(contacts) -> list[Contact]:
    """Order contacts by title, case-insensitively."""
    return sorted(contacts, key=_sort_key)


def is_contact_filename(name: str) -> bool:
    return name.endswith(".md") and CONTACT_SUFFIX in name


class ContactStore:
    """Contacts stored as individual Denote files under one root directory."""

    def __init__(self, root: str | Path):
        self.root = Path(root)

    def check_root(self) -> None:
        """Raise ContactsDirectoryError unless the root is a readable directory."""
        try:
            if not self.root.is_dir():
                if self.root.exists():
                    raise ContactsDirectoryError(
                        f"contacts path '{self.root}' exists but is not a directory"
                    )
                raise ContactsDirectoryError(
                    f"contacts directory '{self.root}' does not exist. "
                    "Please create it or check your configuration"
                )
            with os.scandir(self.root):
                pass
        except OSError as e:
            raise ContactsDirectoryError(
                f"cannot access contacts directory '{self.root}': {e}"
            ) from e

    def scan(self) -> list[Contact]:
        """Load every contact file under the root, sorted by title.

        Files that fail to parse are skipped. Problems with the root itself
        or with walking a subdirectory raise ContactsDirectoryError.
        """
        self.check_root()

        def _walk_error(err: OSError) -> None:
            raise ContactsDirectoryError(f"error reading '{err.filename}': {err}") from err

        contacts: list[Contact] = []
        skipped = 0
        for dirpath, _dirnames, filenames in os.walk(self.root, onerror=_walk_error):
            for name in filenames:
                if not is_contact_filename(name):
                    continue
                path = os.path.join(dirpath, name)
                try:
                    contacts.append(parse_contact_file(path))
                except ContactParseError as e:
                    skipped += 1
                    log.debug("Skipping %s: %s", path, e)

        log.info("Loaded %d contacts from %s (%d skipped)", len(contacts), self.root, skipped)
        return sort_contacts(contacts)

    def reload(self, path: str | Path) -> Contact:
        """Re-read one contact file after a write."""
        try:
            return parse_contact_file(path)
        except ContactParseError as e:
            raise ContactSaveError(f"failed to reload contact '{path}': {e}") from e

    def save(self, contact: Contact, now: datetime | None = None) -> Contact:
        """Write an existing contact and return it as read back from disk."""
        try:
            saved = save_contact_file(contact, self.root, now)
        except OSError as e:
            raise ContactSaveError(f"failed to save '{contact.title}': {e}") from e
        return self.reload(saved.file_path)

    def create(self, contact: Contact, now: datetime | None = None) -> Contact:
        """Write a new contact under the root without overwriting anything."""
        self._check_writable_root()
        try:
            saved = save_contact_file(contact, self.root, now, exclusive=True)
        except OSError as e:
            raise ContactSaveError(f"failed to save contact '{contact.title}': {e}") from e
        return self.reload(saved.file_path)

    def _check_writable_root(self) -> None:
        try:
            self.check_root()
        except ContactsDirectoryError as e:
            raise ContactSaveError(f"cannot create contact: {e}") from e

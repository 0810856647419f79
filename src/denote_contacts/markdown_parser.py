"""Markdown ↔ Contact: parse and write Denote frontmatter records."""

from __future__ import annotations

import logging
import os
import re
import tempfile
from dataclasses import replace
from datetime import datetime
from pathlib import Path

import yaml

from .errors import MalformedRecordError, NotAContactError
from .models import CONTACT_TAG, Contact
from .utils import as_aware, kebab_slug, now_local


log = logging.getLogger(__name__)

HEADER_DELIMITER = "---\n"
CONTACT_SUFFIX = "__contact.md"

# Opening delimiter on the first line, closing delimiter on a line of its own
_FRONTMATTER_RE = re.compile(r"\A---\n(.*?)^---\n", re.DOTALL | re.MULTILINE)

# (header key, value kind, written even when empty)
_HEADER_FIELDS: list[tuple[str, str, bool]] = [
    ("title", "str", True),
    ("date", "datetime", True),
    ("tags", "list", True),
    ("identifier", "str", True),
    ("email", "str", False),
    ("phone", "str", False),
    ("relationship_type", "str", True),
    ("state", "str", False),
    ("label", "str", False),
    ("contact_style", "str", False),
    ("last_contacted", "datetime", False),
    ("last_bump_date", "datetime", False),
    ("bump_count", "int", False),
    ("updated_at", "datetime", True),
    ("company", "str", False),
    ("role", "str", False),
    ("location", "str", False),
    ("birthday", "str", False),
    ("linkedin", "str", False),
    ("twitter", "str", False),
    ("website", "str", False),
    ("notes", "str", False),
    ("custom_frequency_days", "int", False),
    ("last_interaction_type", "str", False),
    ("related_contact_labels", "list", False),
]


class _HeaderDumper(yaml.SafeDumper):
    pass


def _represent_datetime(dumper: yaml.SafeDumper, value: datetime) -> yaml.ScalarNode:
    # RFC 3339 with a "T" so other Denote tools read it back as a timestamp
    return dumper.represent_scalar("tag:yaml.org,2002:timestamp", value.isoformat())


_HeaderDumper.add_representer(datetime, _represent_datetime)


def dump_header(fields: dict) -> str:
    """Encode a header mapping as YAML, keys in insertion order."""
    return yaml.dump(
        fields,
        Dumper=_HeaderDumper,
        default_flow_style=False,
        sort_keys=False,
        allow_unicode=True,
    )


def _decode_value(key: str, kind: str, raw):
    try:
        if kind == "str":
            return "" if raw is None else str(raw)
        if kind == "int":
            return 0 if raw is None else int(raw)
        if kind == "datetime":
            return as_aware(raw)
        # list
        if raw is None:
            return []
        if isinstance(raw, str):
            return [t.strip() for t in raw.split(",") if t.strip()]
        return [str(item) for item in raw]
    except (TypeError, ValueError) as e:
        raise MalformedRecordError(f"invalid value for '{key}': {raw!r}") from e


def split_record(text: str) -> tuple[str, str]:
    """Split raw text into (header, body). Body is returned verbatim."""
    match = _FRONTMATTER_RE.match(text)
    if not match:
        raise MalformedRecordError("invalid file format: no frontmatter found")
    return match.group(1), text[match.end():]


def identifier_from_filename(path: str | Path) -> str:
    """Denote identifier: the part of the file name before the first ``--``."""
    stem = Path(path).name.removesuffix(".md")
    head, sep, _ = stem.partition("--")
    return head if sep else ""


def parse_contact_text(text: str, path: str | Path = "") -> Contact:
    """Parse a record's text into a Contact.

    Raises MalformedRecordError when the header is missing or unreadable and
    NotAContactError when the tags lack the contact marker.
    """
    header, body = split_record(text)
    try:
        frontmatter = yaml.safe_load(header) or {}
    except yaml.YAMLError as e:
        raise MalformedRecordError(f"error parsing frontmatter: {e}") from e
    if not isinstance(frontmatter, dict):
        raise MalformedRecordError("frontmatter is not a mapping")

    values = {
        key: _decode_value(key, kind, frontmatter.get(key))
        for key, kind, _always in _HEADER_FIELDS
    }
    if CONTACT_TAG not in values["tags"]:
        raise NotAContactError(f"not a contact file: missing '{CONTACT_TAG}' tag")

    contact = Contact(**values)
    contact.file_path = str(path) if path else ""
    contact.content = body
    if not contact.identifier and path:
        contact.identifier = identifier_from_filename(path)
    return contact


def parse_contact_file(path: str | Path) -> Contact:
    """Read and parse a contact file. Unreadable files count as malformed."""
    try:
        with open(path, encoding="utf-8", newline="") as f:
            text = f.read()
    except (OSError, UnicodeDecodeError) as e:
        raise MalformedRecordError(f"error reading file: {e}") from e
    return parse_contact_text(text, path)


def contact_to_markdown(contact: Contact) -> str:
    """Render a contact as header plus verbatim body."""
    fields: dict = {}
    for key, _kind, always in _HEADER_FIELDS:
        value = getattr(contact, key)
        if always or value:
            fields[key] = list(value) if isinstance(value, list) else value
    return HEADER_DELIMITER + dump_header(fields) + HEADER_DELIMITER + contact.content


def generate_filename(contact: Contact, now: datetime | None = None) -> str:
    """``YYYYMMDD--kebab-title__contact.md`` from the creation date."""
    created = contact.date or now or now_local()
    return f"{created:%Y%m%d}--{kebab_slug(contact.title)}{CONTACT_SUFFIX}"


def atomic_write_text(path: str | Path, text: str, *, exclusive: bool = False) -> None:
    """Write via a temp file in the same directory, then rename over the target."""
    path = Path(path)
    if exclusive and path.exists():
        raise FileExistsError(f"refusing to overwrite existing file '{path}'")
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
            f.write(text)
            f.flush()
            os.fsync(f.fileno())
        os.chmod(tmp_name, 0o644)
        os.replace(tmp_name, path)
    except BaseException:
        try:
            os.unlink(tmp_name)
        except FileNotFoundError:
            pass
        raise


def save_contact_file(
    contact: Contact,
    directory: str | Path | None = None,
    now: datetime | None = None,
    *,
    exclusive: bool = False,
) -> Contact:
    """Write a contact to disk and return the saved copy.

    A record without a file path gets a generated name inside ``directory``
    (the working directory if omitted). ``updated_at`` is always restamped.
    The input contact is not modified.
    """
    now = now or now_local()
    file_path = contact.file_path
    if not file_path:
        file_path = str(Path(directory or ".") / generate_filename(contact, now))
    saved = replace(
        contact,
        file_path=file_path,
        updated_at=now,
        tags=list(contact.tags),
        related_contact_labels=list(contact.related_contact_labels),
    )
    atomic_write_text(file_path, contact_to_markdown(saved), exclusive=exclusive)
    log.info("Saved contact '%s' to %s", saved.title, file_path)
    return saved

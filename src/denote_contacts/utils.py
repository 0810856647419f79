"""Utility functions: slugs, tags, and timestamp helpers."""

import re
from datetime import date, datetime, time

from .models import CONTACT_TAG


_NON_SLUG_RE = re.compile(r"[^a-z0-9-]")


def kebab_slug(text: str) -> str:
    """Lowercase, turn spaces into hyphens, drop anything outside [a-z0-9-]."""
    return _NON_SLUG_RE.sub("", text.lower().replace(" ", "-"))


def now_local() -> datetime:
    """Return the current time as an aware datetime in the local zone."""
    return datetime.now().astimezone()


def as_aware(value) -> datetime | None:
    """Coerce a YAML scalar (datetime, date or ISO string) to an aware datetime.

    Naive values are taken to be local time. Empty values map to None.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, date):
        dt = datetime.combine(value, time())
    else:
        dt = datetime.fromisoformat(str(value).strip())
    if dt.tzinfo is None:
        dt = dt.astimezone()
    return dt


def format_identifier(moment: datetime) -> str:
    """Denote identifier: ``YYYYMMDDTHHMMSS``."""
    return moment.strftime("%Y%m%dT%H%M%S")


def normalize_tags(raw: str | list[str]) -> list[str]:
    """Build a contact tag list: marker first, ``#`` stripped, no duplicates."""
    words = raw.split() if isinstance(raw, str) else raw
    tags = [CONTACT_TAG]
    for word in words:
        tag = word.strip().lstrip("#")
        if tag and tag not in tags:
            tags.append(tag)
    return tags

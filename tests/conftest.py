"""Shared fixtures: a fixed clock and a contacts directory on disk."""

import textwrap
from datetime import datetime, timezone

import pytest


NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


def contact_text(title, *, tags="[contact]", extra=""):
    header = textwrap.dedent(f"""\
        ---
        title: {title}
        date: 2024-03-05T09:30:00+00:00
        tags: {tags}
        identifier: ""
        relationship_type: work
        """)
    return header + extra + "---\n\nSome notes.\n"


@pytest.fixture
def contacts_dir(tmp_path):
    root = tmp_path / "contacts"
    root.mkdir()
    return root


@pytest.fixture
def write_contact(contacts_dir):
    def _write(filename, title, **kwargs):
        path = contacts_dir / filename
        path.write_text(contact_text(title, **kwargs), encoding="utf-8")
        return path
    return _write

"""Tests for background operations against a real contacts directory."""

import pytest

from denote_contacts.events import ContactSaved, ContactsLoaded, ContactsLoadFailed, SaveFailed
from denote_contacts.operations import (
    BumpContact,
    ChangeType,
    CreateContact,
    LoadContacts,
    LogInteraction,
    SaveEdit,
    Workspace,
)
from denote_contacts.status import is_overdue
from denote_contacts.store import ContactStore

from conftest import NOW


@pytest.fixture
def workspace(contacts_dir, tmp_path):
    return Workspace(ContactStore(contacts_dir), tmp_path / "tasks", clock=lambda: NOW)


@pytest.fixture
def jane(workspace, write_contact):
    write_contact("20240305T093000--jane-doe__contact.md", "Jane Doe", extra="state: ok\n")
    return workspace.store.scan()[0]


def _task_files(workspace):
    if not workspace.tasks_dir.exists():
        return []
    return sorted(p.name for p in workspace.tasks_dir.iterdir())


class TestLoad:
    def test_loaded(self, workspace, jane):
        event = LoadContacts().run(workspace)
        assert isinstance(event, ContactsLoaded)
        assert [c.title for c in event.contacts] == ["Jane Doe"]

    def test_missing_root(self, tmp_path):
        ws = Workspace(ContactStore(tmp_path / "nope"), tmp_path / "tasks")
        event = LoadContacts().run(ws)
        assert isinstance(event, ContactsLoadFailed)
        assert "does not exist" in event.error


class TestLogInteraction:
    def test_full_log_with_note(self, workspace, jane):
        event = LogInteraction(jane, "call", "ok", "Caught up about work").run(workspace)
        assert isinstance(event, ContactSaved)
        assert event.message == "Logged call interaction with Jane Doe"
        saved = event.contact
        assert saved.last_contacted == NOW
        assert saved.last_interaction_type == "call"
        assert saved.content.startswith("## 2024-06-01 - call\n\nCaught up about work\n\n")
        assert saved.content.endswith("Some notes.\n")
        assert _task_files(workspace) == []

    def test_full_log_into_action_state(self, workspace, jane):
        event = LogInteraction(jane, "email", "followup").run(workspace)
        assert event.message == "Logged email interaction with Jane Doe (→ followup) [task created]"
        assert _task_files(workspace) == ["20240601T120000--follow-up-with-jane-doe__task.md"]

    def test_quick_state_change(self, workspace, jane):
        event = LogInteraction(jane, "note", "ping").run(workspace)
        assert event.message == "Logged note interaction with Jane Doe (→ ping) [task created]"
        saved = event.contact
        assert saved.state == "ping"
        assert saved.last_contacted == NOW
        assert saved.last_interaction_type == "note"

    def test_quick_state_change_resets_overdue(self, workspace, jane):
        assert is_overdue(jane, NOW)
        saved = LogInteraction(jane, "note", "ok").run(workspace).contact
        assert not is_overdue(saved, NOW)

    def test_note_truncated(self, workspace, jane):
        event = LogInteraction(jane, "text", "ok", "x" * 250).run(workspace)
        assert "x" * 200 + "\n" in event.contact.content
        assert "x" * 201 not in event.contact.content

    def test_task_error_annotated(self, workspace, jane, tmp_path):
        workspace.tasks_dir.write_text("blocker", encoding="utf-8")
        event = LogInteraction(jane, "call", "timeout").run(workspace)
        assert isinstance(event, ContactSaved)
        assert "[task error:" in event.message
        assert event.contact.state == "timeout"

    def test_save_failure(self, workspace, jane):
        jane.file_path = str(workspace.store.root / "gone" / "x__contact.md")
        event = LogInteraction(jane, "call", "ok").run(workspace)
        assert isinstance(event, SaveFailed)


class TestBump:
    def test_bump(self, workspace, jane):
        event = BumpContact(jane).run(workspace)
        assert event.message == "Bumped Jane Doe (review #1)"
        assert event.ends_workflow is False
        assert event.contact.bump_count == 1
        assert event.contact.last_bump_date == NOW
        assert event.contact.last_contacted is None


class TestEditAndCreate:
    def test_edit(self, workspace, jane):
        values = {"title": " Jane D. ", "email": "jd@example.com", "state": "ok", "tags": "#friend climbing"}
        event = SaveEdit(jane, values).run(workspace)
        assert event.message == "Updated Jane D."
        assert event.contact.title == "Jane D."
        assert event.contact.email == "jd@example.com"
        assert event.contact.tags == ["contact", "friend", "climbing"]
        assert event.contact.file_path == jane.file_path

    def test_edit_state_change_creates_task(self, workspace, jane):
        event = SaveEdit(jane, {"title": "Jane Doe", "state": "scheduled"}).run(workspace)
        assert event.message == "Updated Jane Doe [task created]"

    def test_create(self, workspace):
        event = CreateContact({"title": "Max Power", "relationship_type": "work"}).run(workspace)
        assert event.message == "Created Max Power"
        saved = event.contact
        assert saved.identifier == "20240601T120000"
        assert saved.date == NOW
        assert saved.file_path.endswith("20240601--max-power__contact.md")
        assert saved.tags == ["contact"]

    def test_create_requires_name(self, workspace):
        event = CreateContact({"title": "  "}).run(workspace)
        assert isinstance(event, SaveFailed)

    def test_create_duplicate_fails(self, workspace):
        CreateContact({"title": "Twin"}).run(workspace)
        assert isinstance(CreateContact({"title": "Twin"}).run(workspace), SaveFailed)

    def test_create_in_action_state(self, workspace):
        event = CreateContact({"title": "Neo", "state": "ping"}).run(workspace)
        assert event.message == "Created Neo [task created]"


class TestChangeType:
    def test_change_type(self, workspace, jane):
        event = ChangeType(jane, "family").run(workspace)
        assert event.message == "Changed Jane Doe to family"
        assert event.contact.relationship_type == "family"
        assert workspace.store.scan()[0].relationship_type == "family"

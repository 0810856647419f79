"""Tests for the ContactStore."""

import pytest

from denote_contacts.errors import ContactSaveError, ContactsDirectoryError
from denote_contacts.models import Contact
from denote_contacts.store import ContactStore, is_contact_filename, sort_contacts

from conftest import NOW


@pytest.fixture
def store(contacts_dir):
    return ContactStore(contacts_dir)


class TestScan:
    def test_valid_contacts_sorted(self, store, write_contact):
        write_contact("20240101T000000--zoe__contact.md", "zoe")
        write_contact("20240101T000001--adam__contact.md", "Adam")
        write_contact("20240101T000002--mia__contact.md", "Mia")
        (store.root / "20240101T000003--broken__contact.md").write_text("no header\n", encoding="utf-8")

        contacts = store.scan()
        assert [c.title for c in contacts] == ["Adam", "Mia", "zoe"]

    def test_subdirectories_included(self, store, write_contact):
        sub = store.root / "work"
        sub.mkdir()
        (sub / "20240101T000000--deep__contact.md").write_text(
            "---\ntitle: Deep\ntags: [contact]\n---\n", encoding="utf-8"
        )
        write_contact("20240101T000001--top__contact.md", "Top")
        assert [c.title for c in store.scan()] == ["Deep", "Top"]

    def test_non_contact_files_ignored(self, store, write_contact):
        write_contact("20240101T000000--note.md", "Plain note")
        write_contact("20240101T000001--todo__task.md", "Task")
        (store.root / "readme.txt").write_text("hello", encoding="utf-8")
        assert store.scan() == []

    def test_contact_suffix_without_tag_skipped(self, store, write_contact):
        write_contact("20240101T000000--x__contact.md", "X", tags="[person]")
        assert store.scan() == []

    def test_missing_root(self, tmp_path):
        with pytest.raises(ContactsDirectoryError, match="does not exist"):
            ContactStore(tmp_path / "nope").scan()

    def test_root_is_file(self, tmp_path):
        path = tmp_path / "file"
        path.write_text("x", encoding="utf-8")
        with pytest.raises(ContactsDirectoryError, match="not a directory"):
            ContactStore(path).scan()


class TestSaveAndCreate:
    def test_save_reloads_from_disk(self, store, write_contact):
        path = write_contact("20240101T000000--kim__contact.md", "Kim")
        contact = store.scan()[0]
        contact.state = "ping"
        saved = store.save(contact, NOW)
        assert saved.file_path == str(path)
        assert saved.state == "ping"
        assert saved.updated_at == NOW
        assert saved.content == "\nSome notes.\n"

    def test_awkward_values_survive_save_and_scan(self, store, write_contact):
        write_contact("20240101T000000--kim__contact.md", "Kim")
        contact = store.scan()[0]
        contact.title = "Kim---"
        contact.notes = "first line\n---\nsecond line"
        saved = store.save(contact, NOW)
        assert saved.notes == "first line\n---\nsecond line"
        assert [c.title for c in store.scan()] == ["Kim---"]

    def test_save_into_missing_directory_fails(self, tmp_path):
        store = ContactStore(tmp_path / "gone")
        contact = Contact(title="Lost", date=NOW, file_path=str(tmp_path / "gone" / "x__contact.md"))
        with pytest.raises(ContactSaveError):
            store.save(contact, NOW)

    def test_create_uses_generated_name(self, store):
        saved = store.create(Contact(title="New Person", date=NOW, identifier="20240601T120000"), NOW)
        assert saved.file_path == str(store.root / "20240601--new-person__contact.md")
        assert [c.title for c in store.scan()] == ["New Person"]

    def test_create_never_overwrites(self, store):
        store.create(Contact(title="Twin", date=NOW), NOW)
        with pytest.raises(ContactSaveError):
            store.create(Contact(title="Twin", date=NOW), NOW)

    def test_create_without_root(self, tmp_path):
        with pytest.raises(ContactSaveError):
            ContactStore(tmp_path / "nope").create(Contact(title="A", date=NOW), NOW)


class TestHelpers:
    def test_is_contact_filename(self):
        assert is_contact_filename("20240101T000000--a__contact.md")
        assert is_contact_filename("20240101T000000--a__contact_work.md") is False
        assert not is_contact_filename("a__contact.txt")

    def test_sort_case_insensitive(self):
        contacts = [Contact(title="bob"), Contact(title="Alice"), Contact(title="carl")]
        assert [c.title for c in sort_contacts(contacts)] == ["Alice", "bob", "carl"]

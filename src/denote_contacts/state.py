"""Application state machine.

The whole UI state is one frozen ``AppState``. ``update`` takes the current
state and one event and returns the next state plus the effects the runtime
must perform (background operations, timers, quitting). It never does I/O.

Screens that start a sub-workflow record the screen to come back to in
``entry_view``; finishing or abandoning the workflow returns there, so
List→Edit→List and Detail→Edit→Detail share one mechanism.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum

from .events import (
    ContactSaved,
    ContactsLoaded,
    ContactsLoadFailed,
    Event,
    KeyPressed,
    MessageExpired,
    Resized,
    SaveFailed,
)
from .filters import ActiveFilter, apply_filter, clamp_cursor
from .keymap import (
    CLEAR_FILTERS_KEY,
    EDIT_FIELDS,
    FIELDS_BY_HOTKEY,
    FILTER_KEYS,
    INTERACTION_KEYS,
    RELATIONSHIP_KEYS,
    STATE_KEYS,
    FieldSpec,
)
from .models import Contact
from .operations import (
    MAX_NOTE_LENGTH,
    QUICK_STATE_TYPE,
    BumpContact,
    ChangeType,
    CreateContact,
    LoadContacts,
    LogInteraction,
    Operation,
    SaveEdit,
)
from .store import sort_contacts
from .tasks import requires_action


MESSAGE_TIMEOUT = 3.0
PAGE_SIZE = 10
QUIT_KEYS = ("q", "ctrl+c")


class View(str, Enum):
    LIST = "list"
    DETAIL = "detail"
    EDIT = "edit"
    CREATE = "create"
    LOGGING = "logging"
    QUICK_TYPE = "quick-type"


# --- workflow variants ------------------------------------------------------

@dataclass(frozen=True)
class EditForm:
    """Edit or create form.

    ``active`` is None in field-selection mode. While a text field is being
    edited its pending text lives in ``draft`` and only reaches ``values``
    when committed with Enter.
    """
    values: dict[str, str]
    contact_path: str = ""
    active: FieldSpec | None = None
    draft: str = ""

    @property
    def is_create(self) -> bool:
        return not self.contact_path


@dataclass(frozen=True)
class PickType:
    contact_path: str


@dataclass(frozen=True)
class PickNextState:
    contact_path: str
    interaction_type: str

    @property
    def is_quick(self) -> bool:
        return self.interaction_type == QUICK_STATE_TYPE


@dataclass(frozen=True)
class EnterNote:
    contact_path: str
    interaction_type: str
    next_state: str
    note: str = ""

    @property
    def is_quick(self) -> bool:
        return self.interaction_type == QUICK_STATE_TYPE


@dataclass(frozen=True)
class QuickTypeChange:
    contact_path: str


Workflow = EditForm | PickType | PickNextState | EnterNote | QuickTypeChange


# --- effects ----------------------------------------------------------------

@dataclass(frozen=True)
class RunOperation:
    operation: Operation


@dataclass(frozen=True)
class ScheduleMessageClear:
    seq: int
    delay: float = MESSAGE_TIMEOUT


@dataclass(frozen=True)
class Quit:
    pass


Effect = RunOperation | ScheduleMessageClear | Quit
Transition = tuple["AppState", tuple[Effect, ...]]


# --- state ------------------------------------------------------------------

@dataclass(frozen=True)
class AppState:
    contacts: tuple[Contact, ...] = ()
    filtered: tuple[Contact, ...] = ()
    active_filter: ActiveFilter = field(default_factory=ActiveFilter)
    cursor: int = 0
    view: View = View.LIST
    entry_view: View = View.LIST
    selected_path: str | None = None
    workflow: Workflow | None = None
    saving: bool = False
    search_mode: bool = False
    search_text: str = ""
    show_filter_popup: bool = False
    message: str = ""
    message_seq: int = 0
    error: str | None = None
    loaded: bool = False
    width: int = 80
    height: int = 24

    def contact_by_path(self, path: str | None) -> Contact | None:
        if not path:
            return None
        for contact in self.contacts:
            if contact.file_path == path:
                return contact
        return None

    @property
    def selected_contact(self) -> Contact | None:
        return self.contact_by_path(self.selected_path)

    @property
    def current_contact(self) -> Contact | None:
        """The contact under the list cursor."""
        if 0 <= self.cursor < len(self.filtered):
            return self.filtered[self.cursor]
        return None

    @property
    def workflow_contact(self) -> Contact | None:
        return self.contact_by_path(getattr(self.workflow, "contact_path", None))


def initial_effects() -> tuple[Effect, ...]:
    return (RunOperation(LoadContacts()),)


# --- helpers ----------------------------------------------------------------

def _refilter(state: AppState, now: datetime | None = None, *, reset_cursor: bool = False) -> AppState:
    filtered = apply_filter(state.contacts, state.active_filter, now)
    cursor = 0 if reset_cursor else clamp_cursor(state.cursor, len(filtered))
    return replace(state, filtered=filtered, cursor=cursor)


def _with_message(state: AppState, text: str) -> Transition:
    seq = state.message_seq + 1
    return replace(state, message=text, message_seq=seq), (ScheduleMessageClear(seq),)


def _enter(state: AppState, view: View, workflow: Workflow | None) -> Transition:
    """Start a sub-workflow, remembering where it was started from."""
    return replace(state, entry_view=state.view, view=view, workflow=workflow), ()


def _leave(state: AppState) -> AppState:
    """Return to the entry view and drop all workflow-scoped data."""
    return replace(state, view=state.entry_view, workflow=None, saving=False)


def _dispatch_save(state: AppState, operation: Operation) -> Transition:
    return replace(state, saving=True), (RunOperation(operation),)


def merge_contact(contacts: tuple[Contact, ...], contact: Contact) -> tuple[Contact, ...]:
    """Replace the record with the same file path, or add it in title order."""
    for i, existing in enumerate(contacts):
        if existing.file_path == contact.file_path:
            return contacts[:i] + (contact,) + contacts[i + 1:]
    return tuple(sort_contacts(contacts + (contact,)))


def _form_values(contact: Contact | None) -> dict[str, str]:
    values = {}
    for spec in EDIT_FIELDS:
        if contact is None:
            values[spec.attr] = ""
        elif spec.attr == "tags":
            values[spec.attr] = " ".join(contact.display_tags())
        else:
            values[spec.attr] = getattr(contact, spec.attr)
    return values


def _start_logging(state: AppState, contact: Contact | None, *, quick: bool) -> Transition:
    if contact is None:
        return state, ()
    if quick:
        return _enter(state, View.LOGGING, PickNextState(contact.file_path, QUICK_STATE_TYPE))
    return _enter(state, View.LOGGING, PickType(contact.file_path))


def _start_edit(state: AppState, contact: Contact | None) -> Transition:
    if contact is None:
        return state, ()
    form = EditForm(values=_form_values(contact), contact_path=contact.file_path)
    return _enter(state, View.EDIT, form)


def _bump(state: AppState, contact: Contact | None) -> Transition:
    if contact is None:
        return state, ()
    return state, (RunOperation(BumpContact(contact)),)


# --- key handlers -----------------------------------------------------------

def _on_list_key(state: AppState, key: str, now: datetime | None) -> Transition:
    if state.search_mode:
        return _on_search_key(state, key, now)
    if state.show_filter_popup:
        return _on_filter_key(state, key, now)

    last = max(len(state.filtered) - 1, 0)
    contact = state.current_contact
    if key in QUIT_KEYS:
        return state, (Quit(),)
    if key in ("j", "down"):
        return replace(state, cursor=min(state.cursor + 1, last)), ()
    if key in ("k", "up"):
        return replace(state, cursor=max(state.cursor - 1, 0)), ()
    if key in ("g", "home"):
        return replace(state, cursor=0), ()
    if key in ("G", "end"):
        return replace(state, cursor=last), ()
    if key == "ctrl+d":
        return replace(state, cursor=min(state.cursor + PAGE_SIZE, last)), ()
    if key == "ctrl+u":
        return replace(state, cursor=max(state.cursor - PAGE_SIZE, 0)), ()
    if key == "enter" and contact is not None:
        return replace(state, view=View.DETAIL, selected_path=contact.file_path), ()
    if key == "/":
        return replace(state, search_mode=True, search_text=""), ()
    if key in ("f", "F"):
        return replace(state, show_filter_popup=True), ()
    if key == "d":
        return _start_logging(state, contact, quick=False)
    if key == "s":
        return _start_logging(state, contact, quick=True)
    if key == "b":
        return _bump(state, contact)
    if key == "e":
        return _start_edit(state, contact)
    if key == "c":
        return _enter(state, View.CREATE, EditForm(values=_form_values(None)))
    if key == "T" and contact is not None:
        return _enter(state, View.QUICK_TYPE, QuickTypeChange(contact.file_path))
    return state, ()


def _on_search_key(state: AppState, key: str, now: datetime | None) -> Transition:
    if key == "esc":
        state = replace(state, search_mode=False, search_text="", active_filter=ActiveFilter())
        return _refilter(state, now, reset_cursor=True), ()
    if key == "enter":
        return replace(state, search_mode=False), ()
    if key == "backspace":
        text = state.search_text[:-1]
    elif len(key) == 1:
        text = state.search_text + key
    else:
        return state, ()
    state = replace(state, search_text=text, active_filter=ActiveFilter.query(text))
    return _refilter(state, now, reset_cursor=True), ()


def _on_filter_key(state: AppState, key: str, now: datetime | None) -> Transition:
    if key in ("esc", "q"):
        return replace(state, show_filter_popup=False), ()
    if key == CLEAR_FILTERS_KEY:
        state = replace(state, active_filter=ActiveFilter(), search_text="", show_filter_popup=False)
        return _with_message(_refilter(state, now), "Cleared all filters")
    option = FILTER_KEYS.get(key)
    if option is None:
        return state, ()
    state = replace(
        state,
        active_filter=ActiveFilter(option.kind, option.value),
        search_text="",
        show_filter_popup=False,
    )
    return _with_message(_refilter(state, now), f"Filtered to {option.label.lower()}")


def _on_detail_key(state: AppState, key: str) -> Transition:
    contact = state.selected_contact
    if key in ("esc", "q") or contact is None:
        return replace(state, view=View.LIST, selected_path=None), ()
    if key == "d":
        return _start_logging(state, contact, quick=False)
    if key == "b":
        return _bump(state, contact)
    if key == "e":
        return _start_edit(state, contact)
    return state, ()


def _on_form_key(state: AppState, form: EditForm, key: str) -> Transition:
    if form.active is None:
        return _on_field_selection_key(state, form, key)
    spec = form.active
    if key == "esc":
        return replace(state, workflow=replace(form, active=None, draft="")), ()
    if spec.is_choice:
        choice = {c.key: c for c in spec.choices}.get(key)
        if key == "enter":
            return replace(state, workflow=replace(form, active=None)), ()
        if choice is None:
            return state, ()
        old = form.values[spec.attr]
        values = {**form.values, spec.attr: choice.value}
        state = replace(state, workflow=replace(form, values=values, active=None))
        if spec.attr == "state" and choice.value != old and requires_action(choice.value):
            return _with_message(state, f"Task will be created when saved (state → {choice.value})")
        return state, ()
    if key == "enter":
        values = {**form.values, spec.attr: form.draft}
        return replace(state, workflow=replace(form, values=values, active=None, draft="")), ()
    if key == "backspace":
        return replace(state, workflow=replace(form, draft=form.draft[:-1])), ()
    if len(key) == 1:
        return replace(state, workflow=replace(form, draft=form.draft + key)), ()
    return state, ()


def _on_field_selection_key(state: AppState, form: EditForm, key: str) -> Transition:
    if key == "esc":
        return _leave(state), ()
    if key == "q":
        if form.is_create:
            if not form.values.get("title", "").strip():
                return _with_message(state, "Name is required")
            return _dispatch_save(state, CreateContact(dict(form.values)))
        contact = state.contact_by_path(form.contact_path)
        if contact is None:
            return _with_message(_leave(state), "Contact is no longer available")
        return _dispatch_save(state, SaveEdit(contact, dict(form.values)))
    spec = FIELDS_BY_HOTKEY.get(key)
    if spec is None:
        return state, ()
    draft = "" if spec.is_choice else form.values[spec.attr]
    return replace(state, workflow=replace(form, active=spec, draft=draft)), ()


def _on_logging_key(state: AppState, step: Workflow, key: str) -> Transition:
    contact = state.workflow_contact
    if contact is None or key == "ctrl+c":
        return _leave(state), ()

    if isinstance(step, PickType):
        if key in ("esc", "q"):
            return _leave(state), ()
        choice = INTERACTION_KEYS.get(key)
        if choice is not None:
            return replace(state, workflow=PickNextState(step.contact_path, choice.value)), ()
        return state, ()

    if isinstance(step, PickNextState):
        if key == "q" or (key == "esc" and step.is_quick):
            return _leave(state), ()
        if key == "esc":
            return replace(state, workflow=PickType(step.contact_path)), ()
        choice = STATE_KEYS.get(key)
        if choice is not None:
            return replace(
                state,
                workflow=EnterNote(step.contact_path, step.interaction_type, choice.value),
            ), ()
        return state, ()

    # EnterNote
    if key == "esc":
        return replace(state, workflow=PickNextState(step.contact_path, step.interaction_type)), ()
    if key == "ctrl+q":
        return _leave(state), ()
    if key == "enter" or (key == "ctrl+s" and step.note):
        return _dispatch_save(
            state,
            LogInteraction(contact, step.interaction_type, step.next_state, step.note),
        )
    if key == "backspace":
        return replace(state, workflow=replace(step, note=step.note[:-1])), ()
    if len(key) == 1 and len(step.note) < MAX_NOTE_LENGTH:
        return replace(state, workflow=replace(step, note=step.note + key)), ()
    return state, ()


def _on_quick_type_key(state: AppState, key: str) -> Transition:
    contact = state.workflow_contact
    if contact is None or key in ("esc", "ctrl+c"):
        return _leave(state), ()
    choice = RELATIONSHIP_KEYS.get(key)
    if choice is None:
        return state, ()
    return _dispatch_save(state, ChangeType(contact, choice.value))


def _on_key(state: AppState, key: str, now: datetime | None) -> Transition:
    if state.error is not None:
        # Collection errors block everything but quitting
        return (state, (Quit(),)) if key in QUIT_KEYS else (state, ())
    if state.saving:
        return state, ()
    if state.view is View.LIST:
        return _on_list_key(state, key, now)
    if state.view is View.DETAIL:
        return _on_detail_key(state, key)
    workflow = state.workflow
    if isinstance(workflow, EditForm):
        return _on_form_key(state, workflow, key)
    if isinstance(workflow, (PickType, PickNextState, EnterNote)):
        return _on_logging_key(state, workflow, key)
    if isinstance(workflow, QuickTypeChange):
        return _on_quick_type_key(state, key)
    # A workflow view without workflow data cannot make progress
    return _leave(state), ()


# --- entry point ------------------------------------------------------------

def update(state: AppState, event: Event, now: datetime | None = None) -> Transition:
    """Apply one event. ``now`` pins the clock for status-based filters."""
    if isinstance(event, KeyPressed):
        return _on_key(state, event.key, now)

    if isinstance(event, Resized):
        return replace(state, width=event.width or 80, height=event.height or 24), ()

    if isinstance(event, ContactsLoaded):
        state = replace(state, contacts=tuple(event.contacts), loaded=True, error=None)
        return _refilter(state, now), ()

    if isinstance(event, ContactsLoadFailed):
        return replace(state, error=event.error, loaded=True), ()

    if isinstance(event, ContactSaved):
        state = replace(state, contacts=merge_contact(state.contacts, event.contact))
        state = _refilter(state, now)
        if event.ends_workflow and state.workflow is not None:
            state = _leave(state)
        return _with_message(state, event.message)

    if isinstance(event, SaveFailed):
        return _with_message(replace(state, saving=False), f"Error: {event.error}")

    if isinstance(event, MessageExpired):
        if event.seq == state.message_seq:
            return replace(state, message=""), ()
        return state, ()

    return state, ()

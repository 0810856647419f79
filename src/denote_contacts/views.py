"""Render an AppState as rich renderables."""

from __future__ import annotations

from datetime import datetime

from rich import box
from rich.console import Group, RenderableType
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .filters import STATUS_LABELS, FilterKind, describe_filter
from .keymap import (
    EDIT_FIELDS,
    FILTER_OPTIONS,
    INTERACTION_CHOICES,
    RELATIONSHIP_CHOICES,
    STATE_CHOICES,
    Choice,
)
from .models import Contact, ContactStyle
from .state import AppState, EditForm, EnterNote, PickNextState, PickType, QuickTypeChange, View
from .status import Health, days_since_contact, frequency_days, health
from .utils import now_local


ACCENT = "bold color(214)"
DIM = "color(245)"
LABEL = "color(250)"
VALUE = "color(252)"

_HEALTH_MARKS = {
    Health.OVERDUE: ("●", "color(196)"),
    Health.NEEDS_ATTENTION: ("!", "color(226)"),
    Health.WITHIN_THRESHOLD: ("●", "color(82)"),
    Health.OK: ("○", VALUE),
}

_STYLE_ICONS = {
    ContactStyle.PERIODIC.value: "↻",
    ContactStyle.AMBIENT.value: "◦",
    ContactStyle.TRIGGERED.value: "!",
}

_LIST_KEYS = (
    "j/k:navigate", "enter:view", "d:contacted", "s:state", "T:type", "b:bump",
    "e:edit", "c:create", "/:search", "f:filter", "q:quit",
)


def _truncate(text: str, width: int) -> str:
    return text if len(text) <= width else text[: width - 3] + "..."


def _message_line(state: AppState) -> Text | None:
    if not state.message:
        return None
    return Text("→ " + state.message, style="bold color(82)")


def _choices(choices: tuple[Choice, ...], with_description: bool = False) -> Text:
    text = Text()
    for choice in choices:
        text.append(f"  ({choice.key})  ", style=DIM)
        text.append(f"{choice.label:<12}" if with_description else choice.label)
        if with_description and choice.description:
            text.append(f"  {choice.description}", style="italic " + DIM)
        text.append("\n")
    return text


def render_header(state: AppState) -> Text:
    header = Text("Denote Contacts", style=ACCENT)
    if not state.loaded:
        status = "Loading contacts..."
    else:
        position = f"[{state.cursor + 1}/{len(state.filtered)}] " if state.filtered else ""
        description = describe_filter(state.active_filter)
        if description:
            status = f"{position}{len(state.filtered)} of {len(state.contacts)} ({description})"
        else:
            status = f"{position}{len(state.filtered)} contacts"
    padding = max(state.width - len("Denote Contacts") - len(status) - 2, 1)
    header.append(" " * padding)
    header.append(status, style=LABEL)
    return header


def _company_role(contact: Contact) -> str:
    if contact.company and contact.role:
        return f"{contact.company} - {contact.role}"
    return contact.company or contact.role


def render_list(state: AppState, now: datetime) -> RenderableType:
    table = Table(box=box.SIMPLE_HEAD, expand=True, show_edge=False, pad_edge=False)
    table.add_column("", width=4, no_wrap=True)
    table.add_column("NAME", max_width=30, no_wrap=True)
    table.add_column("DAYS", justify="right", width=4)
    table.add_column("TYPE", width=10)
    table.add_column("STATE", width=9)
    table.add_column("COMPANY/ROLE", max_width=35, no_wrap=True)
    table.add_column("TAGS", no_wrap=True)

    visible = max(state.height - 8, 1)
    start = max(state.cursor - visible + 1, 0)
    for index in range(start, min(start + visible, len(state.filtered))):
        contact = state.filtered[index]
        mark, mark_style = _HEALTH_MARKS[health(contact, now)]
        days = days_since_contact(contact, now)
        state_text = contact.state if contact.state not in ("", "ok") else ""
        tags = " ".join(f"#{t}" for t in contact.display_tags())
        cursor = "> " if index == state.cursor else "  "
        table.add_row(
            Text(cursor) + Text(mark, style=mark_style) + Text(_STYLE_ICONS.get(contact.contact_style, " ")),
            _truncate(contact.title, 30),
            str(days) if days >= 0 else "-",
            contact.relationship_type,
            state_text,
            _truncate(_company_role(contact), 35),
            _truncate(tags, 30),
            style="color(214)" if index == state.cursor else VALUE,
        )

    parts: list[RenderableType] = [render_header(state)]
    message = _message_line(state)
    if message:
        parts.append(message)
    parts.append(table if state.filtered else Text("No contacts", style=DIM))
    if state.search_mode:
        search = Text("Search: ", style="color(214)")
        search.append(state.search_text + "█")
        search.append("  (Esc to clear, Enter to keep)", style=LABEL)
        parts.append(search)
    else:
        parts.append(Text(" • ".join(_LIST_KEYS), style=LABEL))
        legend = Text("↻:periodic • ◦:ambient • !:triggered • ", style=LABEL)
        for status, label in ((Health.OVERDUE, "overdue"), (Health.NEEDS_ATTENTION, "soon"),
                              (Health.WITHIN_THRESHOLD, "good"), (Health.OK, "ok")):
            mark, style = _HEALTH_MARKS[status]
            legend.append(f"{mark}:{label} ", style=style)
        parts.append(legend)
    return Group(*parts)


def render_filter_popup(state: AppState) -> RenderableType:
    body = Text()
    active = state.active_filter
    if active.is_active and active.kind is not FilterKind.QUERY:
        body.append("Active: ", style=LABEL)
        body.append(describe_filter(active) + "\n\n", style="bold color(226)")
    body.append("  (a)  Clear all filters\n", style=VALUE)
    sections = (
        ("By Type:", FilterKind.TYPE),
        ("By State:", FilterKind.STATE),
        ("By Status:", FilterKind.STATUS),
    )
    for title, kind in sections:
        body.append(f"\n{title}\n", style=LABEL)
        for option in FILTER_OPTIONS:
            if option.kind is not kind:
                continue
            selected = active.kind is kind and active.value == option.value
            body.append(f"  ({option.key}) ", style=DIM)
            body.append(("● " if selected else "  ") + option.label + "\n",
                        style="bold color(226)" if selected else VALUE)
    body.append("\nEsc to cancel", style=DIM)
    return Panel(body, title="Filter Contacts", title_align="left", border_style="color(214)")


def _field(table: Table, label: str, value) -> None:
    if value in (None, "", 0, []):
        table.add_row(label, Text("(not set)", style="italic " + DIM))
    else:
        table.add_row(label, str(value))


def _when(moment: datetime | None) -> str:
    return f"{moment:%Y-%m-%d}" if moment else ""


def render_detail(state: AppState, now: datetime) -> RenderableType:
    contact = state.selected_contact
    if contact is None:
        return Text("No contact selected")

    title = Text(contact.title, style=ACCENT)
    status = health(contact, now)
    if status is not Health.OK:
        mark, style = _HEALTH_MARKS[status]
        title.append(f"  {mark} {STATUS_LABELS[status.value]}", style=style)

    info = Table.grid(padding=(0, 2))
    info.add_column(style=LABEL, width=16)
    info.add_column(style=VALUE)
    for label, value in (
        ("Email", contact.email), ("Phone", contact.phone), ("Company", contact.company),
        ("Role", contact.role), ("Location", contact.location), ("Birthday", contact.birthday),
        ("LinkedIn", contact.linkedin), ("Twitter", contact.twitter), ("Website", contact.website),
        ("Tags", " ".join(f"#{t}" for t in contact.display_tags())),
    ):
        _field(info, label, value)

    relationship = Table.grid(padding=(0, 2))
    relationship.add_column(style=LABEL, width=16)
    relationship.add_column(style=VALUE)
    freq = frequency_days(contact)
    _field(relationship, "Type", contact.relationship_type)
    _field(relationship, "Style", contact.contact_style or ContactStyle.PERIODIC.value)
    _field(relationship, "Frequency", f"every {freq} days" if freq else "")
    _field(relationship, "State", contact.state)

    history = Table.grid(padding=(0, 2))
    history.add_column(style=LABEL, width=16)
    history.add_column(style=VALUE)
    days = days_since_contact(contact, now)
    last = f"{_when(contact.last_contacted)} ({days} days ago)" if contact.last_contacted else ""
    _field(history, "Last contacted", last)
    _field(history, "Last interaction", contact.last_interaction_type)
    bumps = f"{contact.bump_count} (last {_when(contact.last_bump_date)})" if contact.bump_count else ""
    _field(history, "Bumps", bumps)

    parts: list[RenderableType] = [title]
    message = _message_line(state)
    if message:
        parts.append(message)
    parts += [
        Text("\nContact Information", style="color(214)"), info,
        Text("\nRelationship", style="color(214)"), relationship,
        Text("\nContact History", style="color(214)"), history,
    ]
    if contact.content.strip():
        parts += [Text("\nRecent Interactions", style="color(214)"), Text(contact.content.strip())]
    parts.append(Text("\nd:contacted • b:bump • e:edit • esc:back", style=LABEL))
    return Group(*parts)


def render_form(state: AppState, form: EditForm) -> RenderableType:
    heading = "New Contact" if form.is_create else "Edit Contact"
    parts: list[RenderableType] = [Text(heading, style=ACCENT)]
    contact = state.workflow_contact
    if contact is not None:
        parts.append(Text(f"Editing: {contact.title}", style="bold"))
    message = _message_line(state)
    if message:
        parts.append(message)

    if form.active is None:
        fields = Text()
        for spec in EDIT_FIELDS:
            value = form.values.get(spec.attr, "")
            fields.append(f"  ({spec.hotkey}) ", style="color(214)")
            fields.append(f"{spec.label:<15}", style=LABEL)
            fields.append(value + "\n" if value else "(empty)\n", style=VALUE if value else "italic " + DIM)
        parts.append(fields)
        parts.append(Text("Select field to edit • q: save & exit • Esc: cancel", style=LABEL))
    elif form.active.is_choice:
        parts.append(Text(f"Editing {form.active.label}:"))
        parts.append(_choices(form.active.choices))
        parts.append(Text("Press a key to choose • Esc: cancel field", style=LABEL))
    else:
        parts.append(Text(f"Editing {form.active.label}:"))
        parts.append(Text(form.draft + "█", style=VALUE))
        parts.append(Text("Type to edit • Enter: save field • Esc: cancel field", style=LABEL))
    return Group(*parts)


def render_logging(state: AppState) -> RenderableType:
    step = state.workflow
    contact = state.workflow_contact
    if contact is None:
        return Text("No contact selected")
    quick = getattr(step, "is_quick", False)
    parts: list[RenderableType] = [
        Text("Change State" if quick else "Log Contact", style=ACCENT),
        Text(f"Contact: {contact.title}" if quick else f"Recording interaction with {contact.title}"),
    ]
    message = _message_line(state)
    if message:
        parts.append(message)

    if isinstance(step, PickType):
        parts.append(Text("Step 1 of 3: Interaction Type", style=LABEL))
        parts.append(Text("How did you contact them?"))
        parts.append(_choices(INTERACTION_CHOICES))
        parts.append(Text("Esc to cancel", style=DIM))
    elif isinstance(step, PickNextState):
        if quick:
            parts.append(Text("Select new state", style=LABEL))
        else:
            parts.append(Text(f"Step 2 of 3: Next State • Type: {step.interaction_type}", style=LABEL))
        parts.append(Text("What's the next state for this contact?"))
        parts.append(_choices(STATE_CHOICES, with_description=True))
        parts.append(Text("Esc to cancel" if quick else "Esc to go back • q to cancel", style=DIM))
    elif isinstance(step, EnterNote):
        label = "Add Note (Optional)" if quick else "Step 3 of 3: Add Note (Optional)"
        parts.append(Text(f"{label} • State: {step.next_state}", style=LABEL))
        note = Text(step.note or "(optional)", style=VALUE if step.note else "italic " + DIM)
        note.append("█")
        parts.append(Panel(note, box=box.ROUNDED, width=64, border_style="color(238)"))
        parts.append(Text("Enter to save • Ctrl+S to save with note • Esc to go back", style=DIM))
    return Group(*parts)


def render_quick_type(state: AppState) -> RenderableType:
    contact = state.workflow_contact
    if contact is None:
        return Text("No contact selected")
    return Group(
        Text("Change Type", style=ACCENT),
        Text(f"Contact: {contact.title}"),
        Text(f"Current type: {contact.relationship_type or '(none)'}", style=DIM),
        Text("\nSelect new type:"),
        _choices(RELATIONSHIP_CHOICES),
        Text("Esc to cancel", style=DIM),
    )


def render(state: AppState, now: datetime | None = None) -> RenderableType:
    """Top-level renderable for the current screen."""
    now = now or now_local()
    if state.error is not None:
        return Panel(
            Text(state.error + "\n\nPress q to quit.", style="color(196)"),
            title="Error",
            border_style="color(196)",
        )
    if state.view is View.LIST:
        if state.show_filter_popup:
            return render_filter_popup(state)
        return render_list(state, now)
    if state.view is View.DETAIL:
        return render_detail(state, now)
    if isinstance(state.workflow, EditForm):
        return render_form(state, state.workflow)
    if isinstance(state.workflow, QuickTypeChange):
        return render_quick_type(state)
    if state.view is View.LOGGING:
        return render_logging(state)
    return render_list(state, now)

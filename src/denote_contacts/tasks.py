"""Follow-up task records created when a contact enters an action-requiring state."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from .errors import TaskCreationError
from .markdown_parser import HEADER_DELIMITER, atomic_write_text, dump_header
from .models import Contact, ContactState, Task
from .utils import format_identifier, kebab_slug, now_local


log = logging.getLogger(__name__)

TASK_TAG = "task"
TASK_SUFFIX = "__task.md"


@dataclass(frozen=True)
class ActionTemplate:
    title: str
    body: str


# The only states that spawn a task. Everything else, "ok" and custom
# strings included, never does.
ACTION_STATES: dict[str, ActionTemplate] = {
    ContactState.FOLLOWUP.value: ActionTemplate(
        "Follow up with {name}",
        "Follow up with {name} regarding previous conversation.",
    ),
    ContactState.PING.value: ActionTemplate(
        "Ping {name}",
        "Send a quick check-in message to {name}.",
    ),
    ContactState.SCHEDULED.value: ActionTemplate(
        "Meeting with {name}",
        "Scheduled meeting or call with {name}.",
    ),
    ContactState.TIMEOUT.value: ActionTemplate(
        "Follow up with {name} (no response)",
        "{name} has not responded. Consider following up or closing the loop.",
    ),
}


def requires_action(state: str) -> bool:
    """True for states that spawn a follow-up task."""
    return state in ACTION_STATES


def should_create_task(old_state: str, new_state: str) -> bool:
    """A task is due only on a change into an action-requiring state."""
    return old_state != new_state and requires_action(new_state)


def build_task(contact: Contact, state: str, now: datetime | None = None) -> Task | None:
    """Build the task for ``state``, or None if the state needs no action."""
    template = ACTION_STATES.get(state)
    if template is None:
        return None
    now = now or now_local()
    return Task(
        title=template.title.format(name=contact.title),
        date=now,
        identifier=format_identifier(now),
        index_id=int(now.timestamp()) % 100000,
        contact_id=contact.identifier,
        tags=[TASK_TAG, f"contact-{state}"],
        label=contact.label,
        content="\n" + template.body.format(name=contact.title) + "\n",
    )


def task_filename(task: Task) -> str:
    """``IDENTIFIER--kebab-title__task.md``."""
    return f"{task.identifier}--{kebab_slug(task.title)}{TASK_SUFFIX}"


def task_to_markdown(task: Task) -> str:
    """Render a task as header plus body."""
    fields: dict = {
        "title": task.title,
        "date": task.date.date(),
        "tags": list(task.tags),
        "identifier": task.identifier,
        "index_id": task.index_id,
        "type": TASK_TAG,
        "status": task.status,
    }
    if task.label:
        fields["label"] = task.label
    fields["contact_id"] = task.contact_id
    return HEADER_DELIMITER + dump_header(fields) + HEADER_DELIMITER + task.content


def write_task(task: Task, directory: str | Path) -> Path:
    """Write a task into ``directory``, creating the directory if needed."""
    directory = Path(directory)
    try:
        os.makedirs(directory, exist_ok=True)
    except OSError as e:
        raise TaskCreationError(f"failed to create tasks directory: {e}") from e
    path = directory / task_filename(task)
    try:
        atomic_write_text(path, task_to_markdown(task))
    except OSError as e:
        raise TaskCreationError(f"failed to create task file '{path.name}': {e}") from e
    log.info("Created task '%s' at %s", task.title, path)
    return path


def create_task_for_transition(
    contact: Contact,
    old_state: str,
    new_state: str,
    directory: str | Path,
    now: datetime | None = None,
) -> Path | None:
    """Write a task if ``old_state -> new_state`` calls for one.

    Returns the task path, or None when no task was needed. Raises
    TaskCreationError if writing failed.
    """
    if not should_create_task(old_state, new_state):
        return None
    task = build_task(contact, new_state, now)
    return write_task(task, directory)

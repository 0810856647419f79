"""Single-consumer event loop driving the state machine.

Keys, timers, resizes and finished background work all arrive as events on
one queue. Only the loop thread calls ``update`` and mutates ``self.state``;
background operations run in an executor and report back through the queue.
"""

from __future__ import annotations

import logging
import queue
import threading
from concurrent.futures import Future, ThreadPoolExecutor

from rich.console import Console
from rich.live import Live

from .events import ContactsLoadFailed, Event, KeyPressed, MessageExpired, Resized, SaveFailed
from .operations import LoadContacts, Operation, Workspace
from .state import (
    AppState,
    Effect,
    Quit,
    RunOperation,
    ScheduleMessageClear,
    initial_effects,
    update,
)
from .terminal import KeyReader
from .views import render


log = logging.getLogger(__name__)

POLL_INTERVAL = 0.05


class Application:
    def __init__(self, workspace: Workspace, console: Console | None = None):
        self.workspace = workspace
        self.console = console or Console()
        width, height = self.console.size
        self.state = AppState(width=width, height=height)
        self.events: queue.Queue[Event] = queue.Queue()
        self._executor = ThreadPoolExecutor(max_workers=2, thread_name_prefix="denote-io")
        self._timers: list[threading.Timer] = []
        self._running = False

    # --- effects ---

    def submit(self, operation: Operation) -> Future:
        future = self._executor.submit(operation.run, self.workspace)
        future.add_done_callback(lambda f: self._deliver(operation, f))
        return future

    def _deliver(self, operation: Operation, future: Future) -> None:
        try:
            event = future.result()
        except Exception as e:
            log.exception("Background operation %s failed", type(operation).__name__)
            if isinstance(operation, LoadContacts):
                event = ContactsLoadFailed(str(e))
            else:
                event = SaveFailed(str(e))
        self.events.put(event)

    def _schedule_clear(self, effect: ScheduleMessageClear) -> None:
        timer = threading.Timer(effect.delay, self.events.put, args=(MessageExpired(effect.seq),))
        timer.daemon = True
        timer.start()
        self._timers = [t for t in self._timers if t.is_alive()] + [timer]

    def apply(self, effects: tuple[Effect, ...]) -> None:
        for effect in effects:
            if isinstance(effect, RunOperation):
                self.submit(effect.operation)
            elif isinstance(effect, ScheduleMessageClear):
                self._schedule_clear(effect)
            elif isinstance(effect, Quit):
                self._running = False

    # --- loop ---

    def handle(self, event: Event) -> None:
        self.state, effects = update(self.state, event)
        self.apply(effects)

    def drain(self) -> bool:
        """Handle every queued event. Returns True if anything was handled."""
        handled = False
        while True:
            try:
                event = self.events.get_nowait()
            except queue.Empty:
                return handled
            self.handle(event)
            handled = True

    def run(self) -> None:
        self._running = True
        self.apply(initial_effects())
        try:
            with KeyReader() as keys, Live(
                render(self.state),
                console=self.console,
                screen=True,
                auto_refresh=False,
            ) as live:
                size = self.console.size
                while self._running:
                    for key in keys.read_keys(POLL_INTERVAL):
                        self.events.put(KeyPressed(key))
                    if self.console.size != size:
                        size = self.console.size
                        self.events.put(Resized(size.width, size.height))
                    if self.drain():
                        live.update(render(self.state), refresh=True)
        finally:
            for timer in self._timers:
                timer.cancel()
            # Dispatched saves always run to completion
            self._executor.shutdown(wait=True)

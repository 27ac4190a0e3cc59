"""Transaction journal giving every operation all-or-nothing semantics.

Components never mutate state outside `Journal.atomic()`. Inside a scope each
mutation records an undo action, and every notification is buffered. When the
outermost scope exits normally the undo log is discarded and the buffered
events are published to the event log. When any scope exits with an
exception, the mutations made inside that scope are undone in reverse order
and its buffered events are dropped before the exception propagates.

Nested scopes join the outer transaction through savepoints, so a router swap
that drives a pool swap, which in turn drives ledger transfers, commits or
aborts as one unit.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from contextlib import contextmanager

import structlog

from settlement.events import EventLog
from settlement.models.events import Event

logger = structlog.get_logger()

UndoAction = Callable[[], None]


class Journal:
    """Undo log and event buffer shared by all components of one deployment."""

    def __init__(self, event_log: EventLog | None = None) -> None:
        self.event_log = event_log if event_log is not None else EventLog()
        self._depth = 0
        self._undo: list[UndoAction] = []
        self._pending: list[Event] = []

    @property
    def in_transaction(self) -> bool:
        return self._depth > 0

    @contextmanager
    def atomic(self) -> Iterator[None]:
        """Run the enclosed block as one transaction (or join the current one)."""
        savepoint = (len(self._undo), len(self._pending))
        self._depth += 1
        try:
            yield
        except BaseException as exc:
            self._rollback_to(savepoint, exc)
            raise
        finally:
            self._depth -= 1
        if self._depth == 0:
            self._commit()

    def record(self, undo: UndoAction) -> None:
        """Register the inverse of a mutation that was just applied."""
        if self._depth == 0:
            raise RuntimeError("State mutation outside of a transaction")
        self._undo.append(undo)

    def emit(self, event: Event) -> None:
        """Buffer a notification until the transaction commits."""
        if self._depth == 0:
            raise RuntimeError("Event emitted outside of a transaction")
        self._pending.append(event)

    def _rollback_to(self, savepoint: tuple[int, int], exc: BaseException) -> None:
        undo_mark, event_mark = savepoint
        undone = len(self._undo) - undo_mark
        while len(self._undo) > undo_mark:
            self._undo.pop()()
        del self._pending[event_mark:]
        if undone:
            logger.debug(
                "transaction_rolled_back",
                error=getattr(exc, "code", type(exc).__name__),
                undone=undone,
                depth=self._depth,
            )

    def _commit(self) -> None:
        events, self._pending = self._pending, []
        self._undo.clear()
        if events:
            self.event_log.extend(events)

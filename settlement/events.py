"""Committed event store and read-only projections.

The projections mirror what the external indexing layer serves (pool list,
swap history, distinct swappers, distinct liquidity providers). They only
read committed notifications and never recompute pool accounting.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TypeVar

import structlog

from settlement.models.events import (
    Event,
    LiquidityAdded,
    LiquidityRemoved,
    PoolCreated,
    Swap,
)
from settlement.models.types import normalize_address

logger = structlog.get_logger()

E = TypeVar("E", bound=Event)

Subscriber = Callable[[Event], None]


class EventLog:
    """Append-only log of committed notifications."""

    def __init__(self) -> None:
        self._events: list[Event] = []
        self._subscribers: list[Subscriber] = []

    def __len__(self) -> int:
        return len(self._events)

    def append(self, event: Event) -> Event:
        """Store one event and notify subscribers."""
        return self.extend([event])[0]

    def extend(self, events: list[Event]) -> list[Event]:
        """Stamp and store a committed batch, then notify subscribers.

        The whole batch is in the log before any subscriber runs. A failing
        subscriber is logged and skipped; it never loses or blocks events.
        """
        stamped = [
            event.model_copy(update={"sequence": len(self._events) + offset})
            for offset, event in enumerate(events)
        ]
        self._events.extend(stamped)
        for event in stamped:
            logger.debug("event_committed", kind=type(event).__name__, sequence=event.sequence)
        for event in stamped:
            self._notify(event)
        return stamped

    def _notify(self, event: Event) -> None:
        for subscriber in self._subscribers:
            try:
                subscriber(event)
            except Exception as exc:
                logger.error(
                    "event_subscriber_failed",
                    kind=type(event).__name__,
                    sequence=event.sequence,
                    error=str(exc),
                    exc_info=True,
                )

    def subscribe(self, subscriber: Subscriber) -> None:
        self._subscribers.append(subscriber)

    @property
    def events(self) -> list[Event]:
        return list(self._events)

    def of_type(self, event_type: type[E], contract: str | None = None) -> list[E]:
        """Events of one type, optionally restricted to one emitting contract."""
        contract_norm = normalize_address(contract) if contract is not None else None
        return [
            event
            for event in self._events
            if isinstance(event, event_type)
            and (contract_norm is None or event.contract == contract_norm)
        ]

    # --- Indexer projections ---

    def pools(self) -> list[PoolCreated]:
        """Created pools in creation order."""
        return self.of_type(PoolCreated)

    def swaps(self, pool: str | None = None) -> list[Swap]:
        """Swap history, optionally for a single pool."""
        return self.of_type(Swap, contract=pool)

    def users(self) -> list[str]:
        """Distinct swap callers in order of first appearance."""
        return list(dict.fromkeys(swap.caller for swap in self.swaps()))

    def providers(self) -> list[str]:
        """Distinct liquidity providers in order of first deposit."""
        return list(dict.fromkeys(event.provider for event in self.of_type(LiquidityAdded)))

    def liquidity_history(self, pool: str | None = None) -> list[LiquidityAdded | LiquidityRemoved]:
        """Deposits and withdrawals in commit order."""
        contract_norm = normalize_address(pool) if pool is not None else None
        return [
            event
            for event in self._events
            if isinstance(event, LiquidityAdded | LiquidityRemoved)
            and (contract_norm is None or event.contract == contract_norm)
        ]

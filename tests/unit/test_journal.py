"""Tests for the transaction journal."""

import pytest

from settlement.events import EventLog
from settlement.journal import Journal
from settlement.models.events import FeeUpdated, ProtocolFeeCollected, Swap
from tests.helpers import BOB, CONTROLLER, DEADLINE, TOKEN_HIGH, TOKEN_LOW, fund


def fee_event(new: int) -> FeeUpdated:
    return FeeUpdated(contract=CONTROLLER, old=0, new=new)


class Box:
    """Mutable cell whose writes are journaled."""

    def __init__(self, journal: Journal) -> None:
        self.journal = journal
        self.value = 0

    def set(self, value: int) -> None:
        previous = self.value
        self.value = value
        self.journal.record(lambda: setattr(self, "value", previous))


class TestJournal:
    def test_commit_publishes_events(self, journal):
        box = Box(journal)
        with journal.atomic():
            box.set(1)
            journal.emit(fee_event(1))
            assert len(journal.event_log) == 0

        assert box.value == 1
        assert [e.new for e in journal.event_log.events] == [1]
        assert not journal.in_transaction

    def test_failure_undoes_mutations_and_drops_events(self, journal):
        box = Box(journal)
        with pytest.raises(ValueError):
            with journal.atomic():
                box.set(1)
                box.set(2)
                journal.emit(fee_event(2))
                raise ValueError("abort")

        assert box.value == 0
        assert len(journal.event_log) == 0

    def test_nested_scopes_commit_once(self, journal):
        box = Box(journal)
        with journal.atomic():
            with journal.atomic():
                box.set(1)
                journal.emit(fee_event(1))
            assert len(journal.event_log) == 0
            assert journal.in_transaction
        assert len(journal.event_log) == 1

    def test_caught_inner_failure_keeps_outer_work(self, journal):
        box = Box(journal)
        with journal.atomic():
            box.set(1)
            journal.emit(fee_event(1))
            try:
                with journal.atomic():
                    box.set(2)
                    journal.emit(fee_event(2))
                    raise ValueError("inner")
            except ValueError:
                pass
            assert box.value == 1

        assert box.value == 1
        assert [e.new for e in journal.event_log.events] == [1]

    def test_outer_failure_undoes_committed_inner_scope(self, journal):
        box = Box(journal)
        with pytest.raises(ValueError):
            with journal.atomic():
                with journal.atomic():
                    box.set(5)
                raise ValueError("outer")
        assert box.value == 0

    def test_mutation_outside_transaction_raises(self, journal):
        with pytest.raises(RuntimeError):
            journal.record(lambda: None)
        with pytest.raises(RuntimeError):
            journal.emit(fee_event(1))

    def test_uses_given_event_log(self):
        log = EventLog()
        journal = Journal(log)
        with journal.atomic():
            journal.emit(fee_event(3))
        assert log.events[0].new == 3

    def test_failing_subscriber_does_not_lose_events(self, journal):
        seen = []

        def flaky(event):
            seen.append(event.new)
            if event.new == 1:
                raise RuntimeError("subscriber down")

        journal.event_log.subscribe(flaky)
        with journal.atomic():
            journal.emit(fee_event(1))
            journal.emit(fee_event(2))

        assert [e.new for e in journal.event_log.events] == [1, 2]
        assert [e.sequence for e in journal.event_log.events] == [0, 1]
        assert seen == [1, 2]

    def test_failing_subscriber_keeps_swap_record(self, deployment, pool):
        def down(event):
            raise RuntimeError("subscriber down")

        deployment.registry.set_protocol_fee_portion(CONTROLLER, 10_000)
        deployment.events.subscribe(down)
        fund(deployment.ledger, BOB, low=10_000)

        amount_out = deployment.router.swap(
            BOB, TOKEN_LOW, TOKEN_HIGH, 10_000, 0, BOB, DEADLINE
        )

        assert amount_out == 19_743
        kinds = [type(e) for e in deployment.events.events[-2:]]
        assert kinds == [ProtocolFeeCollected, Swap]

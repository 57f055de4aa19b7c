"""Fixtures for ledger service tests."""

import threading
from contextlib import contextmanager

import pytest

from wealth.services.ledger.memory_store import InMemoryLedgerStore


class RecordingLedgerStore(InMemoryLedgerStore):
    """In-memory store that logs lock scope, reads and appends in call order."""

    def __init__(self, process_lock: threading.Lock) -> None:
        super().__init__()
        self.process_lock = process_lock
        self.events: list[str] = []
        self.process_lock_held_on_read: list[bool] = []

    @contextmanager
    def locked(self):
        self.events.append("lock")
        try:
            yield
        finally:
            self.events.append("unlock")

    def read_all(self, as_of=None):
        self.events.append("read")
        self.process_lock_held_on_read.append(self.process_lock.locked())
        return super().read_all(as_of)

    def append(self, entries, *, batch_source=None):
        self.events.append("append")
        return super().append(entries, batch_source=batch_source)


@pytest.fixture
def recording_store():
    """Ledger store that records when it is read and written relative to its lock."""
    return RecordingLedgerStore(threading.Lock())

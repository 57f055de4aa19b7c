"""Ledger write lock.

Import, direct entry and reversal hold it from the moment they read the
ledger until their commit finished, so no two writers simulate against the
same snapshot. ``ledger_write_scope`` pairs the process-wide lock with the
store's own cross-process lock (an advisory lock on PostgreSQL).
"""

import threading
from collections.abc import Iterator
from contextlib import AbstractContextManager, contextmanager

from wealth.services.ledger.ledger_store import LedgerStore

ledger_write_lock = threading.Lock()


@contextmanager
def ledger_write_scope(
    store: LedgerStore, lock: AbstractContextManager | None = None
) -> Iterator[None]:
    """Serialize read, simulate and commit against every other ledger writer."""
    with lock or ledger_write_lock:
        with store.locked():
            yield

"""
Transaction-scoped write locks.

Two locks guard writes:

- The round lock serializes edits to one round's games.
- The ledger lock serializes every rating recompute. Recompute folds the
  whole game log and rewrites players.current_rating, so two transactions
  folding at once would each miss the other's uncommitted edits.

Both are held until the session's transaction commits or rolls back.
On PostgreSQL they are advisory xact locks. Other dialects get a
process-local lock that is released by a session event when the
transaction ends.

Lock order is round, then ledger.
"""

from __future__ import annotations

import hashlib
import threading

from sqlalchemy import event, text
from sqlalchemy.orm import Session, SessionTransaction

LEDGER_LOCK_NAME = "goladder:ratings"

# session.info key holding the local lock keys taken by that session
_HELD_KEYS = "goladder_held_locks"

# Plain Locks, not RLocks: the transaction may end on another thread
# than the one that took the lock (FastAPI runs dependency teardown in
# a worker thread). Re-entry is tracked per session instead.
_local_locks: dict[int, threading.Lock] = {}
_local_locks_guard = threading.Lock()


def advisory_lock_key(name: str) -> int:
    """Return a deterministic signed 64-bit lock key from a lock name."""
    digest = hashlib.sha256(name.encode("utf-8")).digest()
    return int.from_bytes(digest[:8], byteorder="big", signed=True)


def round_lock_key(round_id: int) -> int:
    return advisory_lock_key(f"goladder:round:{round_id}")


def ledger_lock_key() -> int:
    return advisory_lock_key(LEDGER_LOCK_NAME)


def _local_lock(key: int) -> threading.Lock:
    with _local_locks_guard:
        lock = _local_locks.get(key)
        if lock is None:
            lock = threading.Lock()
            _local_locks[key] = lock
        return lock


def _lock_for_transaction(session: Session, key: int) -> int:
    if session.get_bind().dialect.name == "postgresql":
        session.execute(text("SELECT pg_advisory_xact_lock(:key)"), {"key": key})
        return key

    # Begin the transaction now so its end releases the lock
    session.connection()
    held: set[int] = session.info.setdefault(_HELD_KEYS, set())
    if key not in held:
        _local_lock(key).acquire()
        held.add(key)
    return key


@event.listens_for(Session, "after_transaction_end")
def _release_local_locks(session: Session, transaction: SessionTransaction) -> None:
    if transaction.parent is not None:
        return
    for key in session.info.pop(_HELD_KEYS, ()):
        _local_lock(key).release()


def lock_round(session: Session, round_id: int) -> int:
    """
    Take the write lock of one round until the transaction ends.

    Re-entrant within one session.

    Returns:
        The lock key.
    """
    return _lock_for_transaction(session, round_lock_key(round_id))


def lock_ledger(session: Session) -> int:
    """Take the rating ledger lock until the transaction ends."""
    return _lock_for_transaction(session, ledger_lock_key())

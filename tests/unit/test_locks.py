"""Tests for the transaction-scoped write locks."""

import threading

import pytest

from goladder.db.locks import (
    _local_lock,
    advisory_lock_key,
    ledger_lock_key,
    lock_ledger,
    lock_round,
    round_lock_key,
)
from goladder.db.models import Game
from goladder.errors import OddCountError
from goladder.rating.updater import RatingUpdater
from goladder.results import GameResult
from goladder.services.schedule import GameAction, ScheduleRequest, apply_schedule


def _free_in_other_thread(key: int) -> bool:
    """Whether another thread can take the local lock right now."""
    acquired = []

    def worker():
        lock = _local_lock(key)
        got = lock.acquire(timeout=0.2)
        if got:
            lock.release()
        acquired.append(got)

    thread = threading.Thread(target=worker)
    thread.start()
    thread.join()
    return acquired[0]


def test_lock_key_is_deterministic_signed_64_bit():
    key = advisory_lock_key("goladder:round:1")
    assert key == advisory_lock_key("goladder:round:1")
    assert -(2 ** 63) <= key < 2 ** 63


def test_round_keys_differ():
    assert round_lock_key(1) != round_lock_key(2)
    assert ledger_lock_key() not in (round_lock_key(1), round_lock_key(2))


def test_round_lock_is_reentrant_within_session(db_session):
    key = lock_round(db_session, 7)
    assert key == round_lock_key(7)
    assert lock_round(db_session, 7) == key


def test_round_lock_held_until_transaction_ends(db_session):
    key = lock_round(db_session, 7)
    assert not _free_in_other_thread(key)

    db_session.close()
    assert _free_in_other_thread(key)


def test_ledger_lock_held_until_transaction_ends(db_session):
    key = lock_ledger(db_session)
    assert not _free_in_other_thread(key)

    db_session.close()
    assert _free_in_other_thread(key)


class TestWritersAreSerializedUntilCommit:
    def test_schedule_holds_round_and_ledger_locks_after_return(
        self, db_session, ladder_players, ladder_round, config
    ):
        p = ladder_players
        game = Game(round_id=ladder_round.id, white_id=p["B"].id, black_id=p["A"].id,
                    handicap="2b0")
        db_session.add(game)
        db_session.flush()

        outcome = apply_schedule(
            db_session,
            ladder_round.id,
            ScheduleRequest(game_actions={game.id: GameAction.set(GameResult.BLACK_WINS)}),
            config,
        )
        assert outcome.ratings_recomputed
        assert db_session.in_transaction()

        # A second writer must wait until this transaction is over
        assert not _free_in_other_thread(round_lock_key(ladder_round.id))
        assert not _free_in_other_thread(ledger_lock_key())

        db_session.close()
        assert _free_in_other_thread(round_lock_key(ladder_round.id))
        assert _free_in_other_thread(ledger_lock_key())

    def test_standalone_recompute_takes_ledger_lock(self, db_session, ladder_players, config):
        RatingUpdater(config).recompute(db_session)
        assert not _free_in_other_thread(ledger_lock_key())

        db_session.close()
        assert _free_in_other_thread(ledger_lock_key())

    def test_failed_submission_holds_until_session_closes(
        self, db_session, ladder_players, ladder_round, config
    ):
        p = ladder_players
        with pytest.raises(OddCountError):
            apply_schedule(
                db_session,
                ladder_round.id,
                ScheduleRequest(pair_player_ids=[p["A"].id]),
                config,
            )
        assert not _free_in_other_thread(round_lock_key(ladder_round.id))

        db_session.close()
        assert _free_in_other_thread(round_lock_key(ladder_round.id))

"""Tests for season standings."""

from datetime import date

import pytest

from goladder.db.models import Game, Round
from goladder.results import SideResult
from goladder.services.standings import OneSidedGame, compute_standings


@pytest.fixture
def played_round(db_session, ladder_players, ladder_round):
    p = ladder_players
    db_session.add_all([
        Game(round_id=ladder_round.id, white_id=p["B"].id, black_id=p["A"].id,
             handicap="2b0", result="WhiteWins"),
        Game(round_id=ladder_round.id, white_id=p["D"].id, black_id=p["C"].id,
             handicap="0b0", result="Jigo"),
        Game(round_id=ladder_round.id, white_id=p["F"].id, black_id=p["E"].id,
             handicap="0w6½", result="BlackWinsByDefault"),
        # Pending games do not count
        Game(round_id=ladder_round.id, white_id=p["F"].id, black_id=p["A"].id,
             handicap="4b0"),
    ])
    db_session.flush()
    return ladder_round


class TestStandings:
    def test_order_and_places(self, db_session, played_round, config):
        standings = compute_standings(db_session, config)
        assert [r.name for r in standings.rows] == ["F", "E", "D", "C", "B", "A"]
        assert [r.place for r in standings.rows] == [1, 2, 3, 4, 5, 6]

    def test_records(self, db_session, played_round, config):
        rows = {r.name: r for r in compute_standings(db_session, config).rows}
        assert (rows["B"].games, rows["B"].wins, rows["B"].losses) == (1, 1, 0)
        assert (rows["A"].games, rows["A"].wins, rows["A"].losses) == (1, 0, 1)
        assert rows["C"].jigo == 1
        assert rows["C"].score == 0.5
        assert rows["E"].wins == 1
        assert rows["F"].games == 1

    def test_rank_labels(self, db_session, played_round, config):
        rows = {r.name: r for r in compute_standings(db_session, config).rows}
        # 1000 is 11k, 1425 is 7k on the default scale
        assert rows["A"].rank == "11k"
        assert rows["F"].rank == "7k"

    def test_original_place_follows_initial_rating(self, db_session, ladder_players, played_round, config):
        ladder_players["A"].current_rating = 2000.0
        db_session.flush()
        rows = compute_standings(db_session, config).rows
        assert rows[0].name == "A"
        assert rows[0].original_place == 6

    def test_totals(self, db_session, played_round, config):
        totals = compute_standings(db_session, config).totals
        assert totals.games == 3
        assert totals.white_wins == 1
        # The win by default counts only as a forfeit
        assert totals.black_wins == 0
        assert totals.jigo == 1
        assert totals.forfeits == 1
        assert totals.white_wins + totals.black_wins + totals.jigo + totals.forfeits == totals.games

    def test_empty(self, db_session, config):
        standings = compute_standings(db_session, config)
        assert standings.rows == []
        assert standings.rounds == []
        assert standings.totals.games == 0

    @pytest.mark.parametrize("result", ["WhiteWinsByDefault", "BlackWinsByDefault", "BothLose"])
    def test_forfeit_buckets_are_disjoint(self, db_session, ladder_players, ladder_round, config, result):
        p = ladder_players
        db_session.add(Game(round_id=ladder_round.id, white_id=p["B"].id, black_id=p["A"].id,
                            handicap="2b0", result=result))
        db_session.flush()
        totals = compute_standings(db_session, config).totals
        assert (totals.games, totals.white_wins, totals.black_wins, totals.jigo, totals.forfeits) == (1, 0, 0, 0, 1)


class TestCrosstable:
    def test_rows_aligned_with_rounds(self, db_session, ladder_players, played_round, config):
        p = ladder_players
        later = Round(date=date(2026, 3, 11))
        # Rounds with only pending games get no column
        empty = Round(date=date(2026, 3, 18))
        db_session.add_all([later, empty])
        db_session.flush()
        db_session.add_all([
            Game(round_id=later.id, white_id=p["C"].id, black_id=p["A"].id,
                 handicap="3b0", result="BlackWins"),
            Game(round_id=empty.id, white_id=p["C"].id, black_id=p["B"].id,
                 handicap="1b0"),
        ])
        db_session.flush()

        standings = compute_standings(db_session, config)
        assert [r.round_id for r in standings.rounds] == [played_round.id, later.id]
        assert [r.date for r in standings.rounds] == [date(2026, 3, 4), date(2026, 3, 11)]
        assert all(len(row.results) == 2 for row in standings.rows)

        rows = {r.name: r for r in standings.rows}
        assert len(rows["A"].results[0]) == 1
        assert len(rows["A"].results[1]) == 1
        assert rows["B"].results[1] == []

    def test_one_sided_entries(self, db_session, played_round, config):
        rows = {r.name: r for r in compute_standings(db_session, config).rows}
        [b_game] = rows["B"].results[0]
        [a_game] = rows["A"].results[0]
        assert b_game == OneSidedGame(
            game_id=a_game.game_id,
            colour="white",
            opponent_place=rows["A"].place,
            handicap="2b0",
            result=SideResult.WIN,
        )
        assert a_game.colour == "black"
        assert a_game.opponent_place == rows["B"].place
        assert a_game.result is SideResult.LOSS

    def test_forfeit_and_jigo_entries(self, db_session, played_round, config):
        rows = {r.name: r for r in compute_standings(db_session, config).rows}
        assert rows["E"].results[0][0].result is SideResult.WIN_BY_DEFAULT
        assert rows["F"].results[0][0].result is SideResult.LOSS_BY_DEFAULT
        assert rows["C"].results[0][0].result is SideResult.JIGO
        assert rows["D"].results[0][0].result is SideResult.JIGO

"""Tests for season export and import."""

import json

import pytest
from sqlalchemy import select

from goladder import __version__
from goladder.db.models import Player
from goladder.errors import DataExchangeError
from goladder.services.data_exchange import export_players, import_players


class TestExport:
    def test_document(self, db_session, ladder_players):
        ladder_players["B"].current_rating = 1500.0
        db_session.flush()

        data = json.loads(export_players(db_session))
        assert data["program_version"] == __version__
        assert [p["name"] for p in data["players"]] == ["B", "F", "E", "D", "C", "A"]
        assert data["players"][0] == {
            "name": "B",
            "rating": 1500.0,
            "default_schedule": True,
        }

    def test_empty(self, db_session):
        assert json.loads(export_players(db_session))["players"] == []


class TestImport:
    def test_new_players(self, db_session):
        text = json.dumps({
            "program_version": "0.9.0",
            "players": [
                {"name": "Yuki", "rating": 1850.5, "default_schedule": True},
                {"name": "Ivo", "rating": 900.0, "default_schedule": False},
            ],
        })
        result = import_players(db_session, text)
        assert (result.imported, result.skipped) == (2, 0)

        yuki = db_session.scalars(select(Player).where(Player.name == "Yuki")).one()
        assert yuki.initial_rating == 1850.5
        assert yuki.current_rating == 1850.5
        assert yuki.default_schedule is True

    def test_existing_names_skipped(self, db_session, ladder_players):
        text = json.dumps({
            "players": [
                {"name": "A", "rating": 3000.0, "default_schedule": False},
                {"name": "G", "rating": 1100.0, "default_schedule": False},
                {"name": "G", "rating": 1200.0, "default_schedule": False},
            ],
        })
        result = import_players(db_session, text)
        assert (result.imported, result.skipped) == (1, 2)
        assert ladder_players["A"].initial_rating == 1000.0

    def test_export_then_import_elsewhere_skips_all(self, db_session, ladder_players):
        result = import_players(db_session, export_players(db_session))
        assert (result.imported, result.skipped) == (0, 6)

    @pytest.mark.parametrize("text", [
        "not json",
        "{}",
        '{"players": [{"name": "X"}]}',
        '{"players": [{"name": "X", "rating": "high"}]}',
    ])
    def test_malformed(self, db_session, text):
        with pytest.raises(DataExchangeError):
            import_players(db_session, text)
        assert db_session.scalars(select(Player)).all() == []

    @pytest.mark.parametrize("rating", ["NaN", "Infinity", "-Infinity", "1e999"])
    def test_non_finite_rating(self, db_session, rating):
        text = '{"players": [{"name": "X", "rating": %s}]}' % rating
        with pytest.raises(DataExchangeError):
            import_players(db_session, text)
        assert db_session.scalars(select(Player)).all() == []

    def test_bytes_document(self, db_session):
        result = import_players(db_session, '{"players": [{"name": "Zoë", "rating": 900}]}'.encode("utf-8"))
        assert result.imported == 1
        assert db_session.scalars(select(Player.name)).all() == ["Zoë"]

    def test_invalid_utf8(self, db_session):
        with pytest.raises(DataExchangeError):
            import_players(db_session, b'{"players":[{"name":"\xff","rating":1}]}')
        assert db_session.scalars(select(Player)).all() == []

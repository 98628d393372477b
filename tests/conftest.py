"""
Test configuration.
Shared fixtures: an in-memory pick store, fake upstream sources and
TeamStats / Game factories.
"""

import sqlite3
from datetime import datetime, timedelta, timezone

import pytest

from betting.store import PickStore
from database.models import Game, Pick, PickType
from database.schema import create_tables
from errors import UpstreamUnavailable
from modeling.types import TeamStats

NOW = datetime(2025, 1, 10, 12, 0, tzinfo=timezone.utc)


class FakeGameSource:
    """Stands in for ApiSportsClient: season history, per-date results, injuries."""

    def __init__(self, games=None, by_date=None, injuries=None, fail=False, fail_dates=()):
        self.games = games or []
        self.by_date = by_date or {}
        self.injuries = injuries or {}
        self.fail = fail
        self.fail_dates = set(fail_dates)
        self.date_calls = []
        self.injury_calls = []

    def get_games(self, season):
        if self.fail:
            raise UpstreamUnavailable("games feed down")
        return list(self.games)

    def get_games_by_date(self, date, season=None):
        self.date_calls.append(date)
        if self.fail or date in self.fail_dates:
            raise UpstreamUnavailable("games feed down")
        return list(self.by_date.get(date, []))

    def get_injuries(self, date):
        self.injury_calls.append(date)
        return list(self.injuries.get(date, []))


class FakeOddsSource:
    def __init__(self, events=None, fail=False):
        self.events = events or []
        self.fail = fail

    def get_odds(self, sport="basketball_nba", region="us"):
        if self.fail:
            raise UpstreamUnavailable("odds feed down")
        return list(self.events)


class FixedAggregator:
    """Returns prepared TeamStats regardless of the games passed in."""

    def __init__(self, stats):
        self.stats = {s.team_name: s for s in stats}

    def aggregate(self, games, now=None):
        return dict(self.stats)


def make_stats(team_name, **overrides) -> TeamStats:
    values = dict(
        team_name=team_name,
        gp=30,
        points_per_game=112.0,
        points_allowed=112.0,
        pace=98.5,
        efficiency=0.0,
        recent_trend=0.0,
        injury_impact=0.0,
        days_rest=2,
        avg_margin=0.0,
    )
    values.update(overrides)
    return TeamStats(**values)


def make_game(game_id, when, home, away, home_score=None, away_score=None) -> Game:
    return Game(
        id=game_id,
        date=when,
        home_team=home,
        away_team=away,
        home_score=home_score,
        away_score=away_score,
        status="FINAL" if home_score is not None else "SCHEDULED",
    )


def make_pick(**overrides) -> Pick:
    values = dict(
        profile="ZEUS",
        sport="NBA",
        match_date=NOW + timedelta(hours=12),
        home_team="Boston Celtics",
        away_team="Miami Heat",
        pick_type=PickType.SPREAD,
        side="home",
        line=-4.0,
        odds=-110,
        edge=5.0,
    )
    values.update(overrides)
    return Pick(**values)


def odds_event(home, away, commence="2025-01-11T00:30:00Z", spread=None,
               total=None, home_ml=None, away_ml=None, book="DraftKings"):
    """Odds API shaped event with only the markets given."""
    markets = []
    if spread is not None:
        markets.append({"key": "spreads", "outcomes": [
            {"name": home, "price": -110, "point": spread},
            {"name": away, "price": -110, "point": -spread},
        ]})
    if total is not None:
        markets.append({"key": "totals", "outcomes": [
            {"name": "Over", "price": -110, "point": total},
            {"name": "Under", "price": -110, "point": total},
        ]})
    if home_ml is not None and away_ml is not None:
        markets.append({"key": "h2h", "outcomes": [
            {"name": home, "price": home_ml},
            {"name": away, "price": away_ml},
        ]})
    return {
        "home_team": home,
        "away_team": away,
        "commence_time": commence,
        "bookmakers": [{"key": book.lower(), "title": book, "markets": markets}],
    }


@pytest.fixture
def conn():
    """In-memory SQLite database with the full schema."""
    conn = sqlite3.connect(":memory:")
    conn.row_factory = sqlite3.Row
    create_tables(conn)
    yield conn
    conn.close()


@pytest.fixture
def store(conn):
    return PickStore(conn)


@pytest.fixture
def now():
    return NOW

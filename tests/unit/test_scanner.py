"""
Unit Tests for the Matchup Scanner
==================================
Profile decisions, penalties, skip rules and the idempotent pick upsert.
"""

from datetime import timedelta

import pytest

from conftest import (NOW, FakeGameSource, FakeOddsSource, FixedAggregator, make_game,
                      make_pick, make_stats, odds_event)
from database.models import PickStatus, PickType
from edge.scanner import MatchupScanner, upsert_pick
from errors import PersistenceFailure

HOME = "Boston Celtics"
AWAY = "Miami Heat"

# ZEUS: 0.25 * (5 - -5) + 3.5 home court = 6.0 point home margin
SPREAD_HOME = make_stats(HOME, efficiency=5.0)
SPREAD_AWAY = make_stats(AWAY, efficiency=-5.0)

# SHIVA: (229 + 228) / 2 = 228.5
TOTAL_HOME = make_stats(HOME, points_per_game=115.0, points_allowed=112.0)
TOTAL_AWAY = make_stats(AWAY, points_per_game=114.0, points_allowed=116.0)

# LOKI: 0.10 * (-12.5 - 12.5) + 2.5 home court = 0.0 margin -> 50% win probability
ML_HOME = make_stats(HOME, efficiency=-12.5)
ML_AWAY = make_stats(AWAY, efficiency=12.5)


def build_scanner(store, stats, events, injuries=None, odds_fail=False):
    history = [make_game(1, NOW - timedelta(days=2), HOME, AWAY, 100, 99)]
    games = FakeGameSource(games=history, injuries=injuries)
    return MatchupScanner(
        game_source=games,
        odds_source=FakeOddsSource(events, fail=odds_fail),
        injury_source=games,
        store=store,
        aggregator=FixedAggregator(stats),
    )


class TestSpreadProfile:
    """ZEUS spread decisions."""

    def test_six_point_margin_against_two_and_a_half(self, store, now):
        """Model -6 vs market -2.5: 3.5 point gap, home pick with edge 7.0."""
        scanner = build_scanner(store, [SPREAD_HOME, SPREAD_AWAY],
                                [odds_event(HOME, AWAY, spread=-2.5)])
        summary = scanner.run(now=now)

        assert summary.created == 1
        pick = summary.picks[0]
        assert pick.profile == "ZEUS"
        assert pick.pick_type is PickType.SPREAD
        assert pick.side == "home"
        assert pick.line == -2.5
        assert pick.odds == -110
        assert pick.edge == 7.0
        assert pick.details == "Boston Celtics -2.5"

    def test_away_side_gets_the_opposite_line(self, store, now):
        """Market has home favored by 10 but model only by 6 -> away +10."""
        scanner = build_scanner(store, [SPREAD_HOME, SPREAD_AWAY],
                                [odds_event(HOME, AWAY, spread=-10.0)])
        pick = scanner.run(now=now).picks[0]

        assert pick.side == "away"
        assert pick.line == 10.0
        assert pick.edge == 8.0

    def test_small_gap_is_a_pass(self, store, now):
        scanner = build_scanner(store, [SPREAD_HOME, SPREAD_AWAY],
                                [odds_event(HOME, AWAY, spread=-5.0)])
        summary = scanner.run(now=now)

        assert summary.picks == []
        assert store.find_all() == []

    def test_missing_star_removes_the_edge(self, store, now):
        """A home star out costs 3 points: model -3 vs -2.5 is no bet."""
        injuries = {"2025-01-11": [{"team": HOME, "player": "Jayson Tatum", "type": "Out"}]}
        scanner = build_scanner(store, [SPREAD_HOME, SPREAD_AWAY],
                                [odds_event(HOME, AWAY, spread=-2.5)], injuries=injuries)

        assert scanner.run(now=now).picks == []

    def test_back_to_back_penalizes_the_tired_team(self, store, now):
        """Away on one day of rest: 3 points toward home, 9 vs 2.5 market."""
        away = make_stats(AWAY, efficiency=-5.0, days_rest=1)
        scanner = build_scanner(store, [SPREAD_HOME, away],
                                [odds_event(HOME, AWAY, spread=-2.5)])
        pick = scanner.run(now=now).picks[0]

        assert pick.side == "home"
        assert pick.edge == 13.0


class TestTotalProfile:
    """SHIVA totals decisions."""

    def test_over_when_model_is_above_market(self, store, now):
        """228.5 model vs 221 market: 7.5 point gap, OVER with edge 15.0."""
        scanner = build_scanner(store, [TOTAL_HOME, TOTAL_AWAY],
                                [odds_event(HOME, AWAY, total=221.0)])
        pick = scanner.run(now=now).picks[0]

        assert pick.profile == "SHIVA"
        assert pick.pick_type is PickType.TOTAL
        assert pick.side == "over"
        assert pick.line == 221.0
        assert pick.edge == 15.0
        assert pick.details == "OVER 221"

    def test_under_when_model_is_below_market(self, store, now):
        scanner = build_scanner(store, [TOTAL_HOME, TOTAL_AWAY],
                                [odds_event(HOME, AWAY, total=235.0)])
        pick = scanner.run(now=now).picks[0]

        assert pick.side == "under"
        assert pick.edge == 13.0


class TestMoneylineProfile:
    """LOKI underdog decisions."""

    def test_plus_150_dog_with_even_model(self, store, now):
        """Implied 0.40 vs model 0.50: 10 point probability edge."""
        scanner = build_scanner(store, [ML_HOME, ML_AWAY],
                                [odds_event(HOME, AWAY, home_ml=150, away_ml=-170)])
        pick = scanner.run(now=now).picks[0]

        assert pick.profile == "LOKI"
        assert pick.pick_type is PickType.MONEYLINE
        assert pick.side == "home"
        assert pick.odds == 150
        assert pick.line == 0.0
        assert pick.edge == pytest.approx(10.0)
        assert pick.details == "Boston Celtics ML"

    def test_no_pick_without_an_underdog(self, store, now):
        scanner = build_scanner(store, [ML_HOME, ML_AWAY],
                                [odds_event(HOME, AWAY, home_ml=-110, away_ml=-110)])
        assert scanner.run(now=now).picks == []

    def test_long_shot_below_forty_percent_is_skipped(self, store, now):
        """+400 implies 0.20; model 0.335 clears the edge but not the 0.40 floor."""
        home = make_stats(HOME, efficiency=-79.0)  # -5.5 margin
        away = make_stats(AWAY, efficiency=0.0)
        scanner = build_scanner(store, [home, away],
                                [odds_event(HOME, AWAY, home_ml=400, away_ml=-500)])
        assert scanner.run(now=now).picks == []


class TestIdempotence:
    """Rerunning a scan refreshes picks instead of duplicating them."""

    def test_second_run_updates_the_pending_pick(self, store, now):
        scanner = build_scanner(store, [SPREAD_HOME, SPREAD_AWAY],
                                [odds_event(HOME, AWAY, spread=-2.5)])
        first = scanner.run(now=now)
        second = scanner.run(now=now)

        assert first.created == 1 and first.updated == 0
        assert second.created == 0 and second.updated == 1
        assert len(store.find_all(status=PickStatus.PENDING)) == 1

    def test_line_movement_is_written_in_place(self, store, now):
        build_scanner(store, [SPREAD_HOME, SPREAD_AWAY],
                      [odds_event(HOME, AWAY, spread=-2.5)]).run(now=now)
        build_scanner(store, [SPREAD_HOME, SPREAD_AWAY],
                      [odds_event(HOME, AWAY, spread=-1.5)]).run(now=now)

        picks = store.find_all()
        assert len(picks) == 1
        assert picks[0].line == -1.5
        assert picks[0].edge == 9.0

    def test_graded_pick_is_not_reused(self, store, now):
        scanner = build_scanner(store, [SPREAD_HOME, SPREAD_AWAY],
                                [odds_event(HOME, AWAY, spread=-2.5)])
        scanner.run(now=now)
        graded = store.find_all()[0]
        store.update(graded.id, status=PickStatus.WIN, profit=0.91)

        summary = scanner.run(now=now)

        assert summary.created == 1
        assert len(store.find_all()) == 2

    def test_upsert_pick_reports_outcome(self, store, now):
        assert upsert_pick(store, make_pick()) == "created"
        assert upsert_pick(store, make_pick(line=-5.0)) == "updated"
        assert store.find_all()[0].line == -5.0


class TestSkipsAndFailures:
    """Matchups the scanner must not model, and upstream/persistence errors."""

    def test_started_game_is_skipped(self, store, now):
        scanner = build_scanner(store, [SPREAD_HOME, SPREAD_AWAY],
                                [odds_event(HOME, AWAY, commence="2025-01-10T01:00:00Z", spread=-2.5)])
        summary = scanner.run(now=now)

        assert summary.picks == []
        assert summary.skipped == 1

    def test_team_without_stats_is_skipped_not_defaulted(self, store, now):
        scanner = build_scanner(store, [SPREAD_HOME],
                                [odds_event(HOME, AWAY, spread=-2.5)])
        summary = scanner.run(now=now)

        assert summary.picks == []
        assert summary.skipped == 1

    def test_odds_outage_returns_empty_summary(self, store, now):
        scanner = build_scanner(store, [SPREAD_HOME, SPREAD_AWAY], [], odds_fail=True)
        summary = scanner.run(now=now)

        assert summary.created == 0
        assert store.find_all() == []

    def test_history_outage_returns_empty_summary(self, store, now):
        scanner = build_scanner(store, [SPREAD_HOME, SPREAD_AWAY],
                                [odds_event(HOME, AWAY, spread=-2.5)])
        scanner.game_source = FakeGameSource(fail=True)

        assert scanner.run(now=now).picks == []

    def test_injuries_fetched_once_per_date(self, store, now):
        events = [
            odds_event(HOME, AWAY, commence="2025-01-11T00:30:00Z", spread=-2.5),
            odds_event(AWAY, HOME, commence="2025-01-11T03:00:00Z", spread=-2.5),
            odds_event(HOME, AWAY, commence="2025-01-12T00:30:00Z", spread=-2.5),
        ]
        scanner = build_scanner(store, [SPREAD_HOME, SPREAD_AWAY], events)
        scanner.run(now=now)

        assert scanner.injury_source.injury_calls == ["2025-01-11", "2025-01-12"]

    def test_dry_run_writes_nothing(self, store, now):
        scanner = build_scanner(store, [SPREAD_HOME, SPREAD_AWAY],
                                [odds_event(HOME, AWAY, spread=-2.5)])
        summary = scanner.run(now=now, dry_run=True)

        assert len(summary.picks) == 1
        assert len(summary.analyses) == 1
        assert summary.created == 0
        assert store.find_all() == []

    def test_persistence_failure_raised_after_all_matchups(self, now):
        class BrokenStore:
            def __init__(self):
                self.attempts = 0

            def find_pending(self, profile, matchup, match_date):
                return None

            def create(self, pick):
                self.attempts += 1
                raise PersistenceFailure("disk full")

        broken = BrokenStore()
        events = [
            odds_event(HOME, AWAY, commence="2025-01-11T00:30:00Z", spread=-2.5),
            odds_event(HOME, AWAY, commence="2025-01-12T00:30:00Z", spread=-2.5),
        ]
        scanner = build_scanner(broken, [SPREAD_HOME, SPREAD_AWAY], events)

        with pytest.raises(PersistenceFailure):
            scanner.run(now=now)
        assert broken.attempts == 2

"""
Unit Tests for the Prediction Model
===================================
"""

import pytest

from conftest import make_stats
from modeling.predictor import (analyze_matchup, predict_spread, predict_total,
                                round_half, win_probability)
from modeling.strategies import LOKI, ZEUS, get_profile
from modeling.types import BettingLine

HOME = "Denver Nuggets"
AWAY = "Utah Jazz"


class TestRoundHalf:
    @pytest.mark.parametrize("value,expected", [
        (6.0, 6.0), (6.2, 6.0), (6.25, 6.5), (6.74, 6.5), (6.75, 7.0), (-2.3, -2.5), (-2.2, -2.0),
    ])
    def test_nearest_half_point(self, value, expected):
        assert round_half(value) == expected


class TestPredictSpread:
    def test_even_teams_get_home_court(self):
        assert predict_spread(make_stats(HOME), make_stats(AWAY), ZEUS) == 3.5

    def test_weighted_differentials(self):
        home = make_stats(HOME, efficiency=8.0, avg_margin=6.0, recent_trend=4.0)
        away = make_stats(AWAY, efficiency=-2.0, avg_margin=-4.0, recent_trend=-6.0)
        # 0.25*10 + 0.15*10 + 0.15*10 + 3.5 = 9.0
        assert predict_spread(home, away, ZEUS) == 9.0

    def test_missing_away_players_favor_home(self):
        away = make_stats(AWAY, injury_impact=1.5)
        assert predict_spread(make_stats(HOME), away, ZEUS) == 3.5 + 3.0

    def test_rest_only_applies_when_one_side_is_on_zero_days(self):
        tired_home = make_stats(HOME, days_rest=0)
        tired_away = make_stats(AWAY, days_rest=0)

        assert predict_spread(tired_home, make_stats(AWAY), ZEUS) == 3.5 - 4.5
        assert predict_spread(make_stats(HOME), tired_away, ZEUS) == 3.5 + 4.5
        assert predict_spread(tired_home, tired_away, ZEUS) == 3.5

    def test_profiles_are_independent(self):
        home = make_stats(HOME, recent_trend=10.0)
        away = make_stats(AWAY)
        zeus = predict_spread(home, away, ZEUS)
        loki = predict_spread(home, away, LOKI)
        again = predict_spread(home, away, ZEUS)

        assert zeus == 5.0   # 0.15*10 + 3.5
        assert loki == 8.5   # 0.60*10 + 2.5
        assert again == zeus

    @pytest.mark.parametrize("eff", [-7.3, -1.1, 0.0, 2.27, 9.9])
    def test_always_a_half_point_multiple(self, eff):
        home = make_stats(HOME, efficiency=eff, recent_trend=eff / 3)
        result = predict_spread(home, make_stats(AWAY), ZEUS)
        assert (result * 2) == int(result * 2)


class TestPredictTotal:
    def test_equal_weights_average_offense_and_defense(self):
        home = make_stats(HOME, points_per_game=115.0, points_allowed=112.0)
        away = make_stats(AWAY, points_per_game=114.0, points_allowed=116.0)
        assert predict_total(home, away, ZEUS) == 228.5

    def test_pace_above_league_average_adds_points(self):
        home = make_stats(HOME, pace=101.5)
        away = make_stats(AWAY, pace=101.5)
        # 224 + (101.5 - 98.5) * 0.40
        assert predict_total(home, away, ZEUS) == 225.0

    def test_fatigue_applies_per_tired_team(self):
        home = make_stats(HOME, days_rest=0)
        away = make_stats(AWAY, days_rest=0)
        assert predict_total(home, away, ZEUS) == 224.0 - 5.0

    def test_weights_shift_toward_offense(self):
        profile = ZEUS.with_weights(ppg_weight=0.6, def_weight=0.2)
        home = make_stats(HOME, points_per_game=120.0, points_allowed=110.0)
        away = make_stats(AWAY, points_per_game=120.0, points_allowed=110.0)
        # (240*0.6 + 220*0.2) / 0.8 = 235
        assert predict_total(home, away, profile) == 235.0


class TestWinProbability:
    def test_linear_in_margin(self):
        assert win_probability(0) == 0.5
        assert win_probability(10) == pytest.approx(0.8)
        assert win_probability(-10) == pytest.approx(0.2)

    def test_clamped(self):
        assert win_probability(100) == 0.99
        assert win_probability(-100) == 0.01

    def test_monotonic(self):
        values = [win_probability(x / 2) for x in range(-80, 81)]
        assert values == sorted(values)


class TestAnalyzeMatchup:
    def test_bet_when_gap_exceeds_four(self):
        lines = [
            BettingLine("DraftKings", -10.0, -110, "spread"),
            BettingLine("DraftKings", 224.0, -110, "total"),
        ]
        analysis = analyze_matchup(make_stats(HOME), make_stats(AWAY), lines, ZEUS)

        assert analysis.spread == -3.5
        assert analysis.total == 224.0
        assert analysis.edge == 13.0
        assert analysis.confidence == 99
        assert analysis.recommendation == "BET"
        assert analysis.matchup == "Utah Jazz @ Denver Nuggets"

    def test_pass_when_close(self):
        lines = [BettingLine("FanDuel", -4.5, -110, "spread")]
        analysis = analyze_matchup(make_stats(HOME), make_stats(AWAY), lines, ZEUS)

        assert analysis.edge == 2.0
        assert analysis.confidence == 60
        assert analysis.recommendation == "PASS"
        assert analysis.win_probability == pytest.approx(0.5 + 0.03 * 3.5)


class TestProfiles:
    def test_lookup_is_case_insensitive(self):
        assert get_profile("loki") is LOKI

    def test_unknown_profile(self):
        with pytest.raises(ValueError):
            get_profile("THOR")

    def test_profiles_are_frozen(self):
        with pytest.raises(AttributeError):
            ZEUS.efficiency = 1.0

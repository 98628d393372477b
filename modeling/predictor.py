"""Weighted linear model producing spreads, totals and win probabilities."""
import math
from typing import Iterable

from config import (ANALYSIS_BET_GAP, EDGE_SCALE, LEAGUE_AVG_PACE,
                    WIN_PROB_MAX, WIN_PROB_MIN, WIN_PROB_SLOPE)
from modeling.strategies import StrategyProfile
from modeling.types import BettingLine, MatchupAnalysis, TeamStats


def round_half(value: float) -> float:
    """Round to the nearest half point, halves rounding up."""
    return math.floor(value * 2 + 0.5) / 2


def predict_spread(home: TeamStats, away: TeamStats, profile: StrategyProfile) -> float:
    """
    Predicted home margin (positive = home favored by that many points).

    Negate the result to get the conventional home spread.
    """
    eff_diff = (home.efficiency - away.efficiency) * profile.efficiency
    margin_diff = (home.avg_margin - away.avg_margin) * profile.margin
    form_diff = (home.recent_trend - away.recent_trend) * profile.recent_form

    # Missing away players favor home
    injury_diff = (away.injury_impact - home.injury_impact) * profile.injury_scalar

    # Only a one-sided back-to-back moves the line
    rest_factor = 0.0
    if home.days_rest == 0 and away.days_rest > 0:
        rest_factor -= profile.rest
    if away.days_rest == 0 and home.days_rest > 0:
        rest_factor += profile.rest

    predicted = (eff_diff + margin_diff + form_diff + injury_diff
                 + rest_factor + profile.home_court_advantage)
    return round_half(predicted)


def predict_total(home: TeamStats, away: TeamStats, profile: StrategyProfile) -> float:
    """Predicted combined score."""
    offense = home.points_per_game + away.points_per_game
    defense = home.points_allowed + away.points_allowed

    weight_sum = profile.ppg_weight + profile.def_weight
    if weight_sum > 0:
        # Equal weights reduce to (offense + defense) / 2
        base_total = (offense * profile.ppg_weight + defense * profile.def_weight) / weight_sum
    else:
        base_total = (offense + defense) / 2

    avg_pace = (home.pace + away.pace) / 2
    pace_factor = (avg_pace - LEAGUE_AVG_PACE) * profile.pace_weight

    fatigue_factor = 0.0
    if home.days_rest == 0:
        fatigue_factor += profile.fatigue_impact
    if away.days_rest == 0:
        fatigue_factor += profile.fatigue_impact

    return round_half(base_total + pace_factor + fatigue_factor)


def win_probability(margin_diff: float) -> float:
    """Linear margin-to-probability heuristic, clamped to [0.01, 0.99]."""
    prob = 0.5 + WIN_PROB_SLOPE * margin_diff
    return max(WIN_PROB_MIN, min(WIN_PROB_MAX, prob))


def analyze_matchup(home: TeamStats, away: TeamStats,
                    lines: Iterable[BettingLine],
                    profile: StrategyProfile) -> MatchupAnalysis:
    """
    Compare the model's lines with every market line offered.

    The edge is the largest absolute gap (spread or total), scaled by
    EDGE_SCALE. Confidence grows 10 per point of gap from a base of 50.
    """
    lines = list(lines)
    margin = predict_spread(home, away, profile)
    model_spread = -margin
    model_total = predict_total(home, away, profile)

    spread_gap = 0.0
    total_gap = 0.0
    for line in lines:
        if line.type == "spread":
            spread_gap = max(spread_gap, abs(model_spread - line.line))
        elif line.type == "total":
            total_gap = max(total_gap, abs(model_total - line.line))

    primary = max(spread_gap, total_gap)
    confidence = min(max(primary * 10 + 50, 0), 99)

    return MatchupAnalysis(
        home=home,
        away=away,
        lines=lines,
        win_probability=win_probability(margin),
        spread=model_spread,
        total=model_total,
        edge=round(primary * EDGE_SCALE, 2),
        confidence=int(round(confidence)),
        recommendation="BET" if primary > ANALYSIS_BET_GAP else "PASS",
    )

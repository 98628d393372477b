"""Threshold rules shared by the live scanner and the backtester."""
from dataclasses import dataclass
from typing import Dict, Iterable, Optional, Tuple

from betting.odds import american_to_probability
from config import (BACK_TO_BACK_MAX_REST, BACK_TO_BACK_PENALTY, EDGE_SCALE,
                    INJURY_OUT_TYPES, ML_MIN_MODEL_PROB, ML_PROB_EDGE_THRESHOLD,
                    SPREAD_EDGE_THRESHOLD, STAR_INJURY_PENALTY, STAR_PLAYERS,
                    TOTAL_EDGE_THRESHOLD, TOTAL_FATIGUE_PENALTY, TOTAL_STAR_PENALTY,
                    UNDERDOG_MIN_ODDS)
from modeling.predictor import predict_spread, predict_total, win_probability
from modeling.strategies import StrategyProfile
from modeling.types import TeamStats


@dataclass
class Call:
    """A decision to bet: which side, at what line/odds, with what edge."""
    side: str      # 'home', 'away', 'over', 'under'
    line: float
    edge: float
    odds: Optional[int] = None


def missing_stars(reports: Iterable[Dict[str, str]], team: str) -> int:
    return sum(
        1 for r in reports
        if r.get("team") == team
        and r.get("type") in INJURY_OUT_TYPES
        and r.get("player") in STAR_PLAYERS
    )


def is_back_to_back(stats: TeamStats) -> bool:
    return stats.days_rest <= BACK_TO_BACK_MAX_REST


def spread_penalties(home: TeamStats, away: TeamStats,
                     home_stars_out: int = 0, away_stars_out: int = 0) -> Tuple[float, float]:
    """Points taken off each side for missing stars and back-to-backs."""
    home_penalty = home_stars_out * STAR_INJURY_PENALTY
    away_penalty = away_stars_out * STAR_INJURY_PENALTY
    if is_back_to_back(home):
        home_penalty += BACK_TO_BACK_PENALTY
    if is_back_to_back(away):
        away_penalty += BACK_TO_BACK_PENALTY
    return home_penalty, away_penalty


def total_penalty(home: TeamStats, away: TeamStats,
                  home_stars_out: int = 0, away_stars_out: int = 0) -> float:
    penalty = (home_stars_out + away_stars_out) * TOTAL_STAR_PENALTY
    if is_back_to_back(home):
        penalty += TOTAL_FATIGUE_PENALTY
    if is_back_to_back(away):
        penalty += TOTAL_FATIGUE_PENALTY
    return penalty


def adjusted_margin(home: TeamStats, away: TeamStats, profile: StrategyProfile,
                    home_stars_out: int = 0, away_stars_out: int = 0) -> float:
    """Model home margin after injury and fatigue penalties."""
    home_penalty, away_penalty = spread_penalties(home, away, home_stars_out, away_stars_out)
    return predict_spread(home, away, profile) - home_penalty + away_penalty


def adjusted_total(home: TeamStats, away: TeamStats, profile: StrategyProfile,
                   home_stars_out: int = 0, away_stars_out: int = 0) -> float:
    return predict_total(home, away, profile) - total_penalty(home, away, home_stars_out, away_stars_out)


def decide_spread(model_margin: float, market_spread: float,
                  threshold: float = SPREAD_EDGE_THRESHOLD) -> Optional[Call]:
    """
    Compare the model with the market's home spread.

    The model margin is negated into a spread first; a model spread below the
    market's means the home side is underpriced.
    """
    model_spread = -model_margin
    gap = abs(model_spread - market_spread)
    if gap <= threshold:
        return None

    if model_spread < market_spread:
        return Call(side="home", line=market_spread, edge=round(gap * EDGE_SCALE, 1))
    return Call(side="away", line=-market_spread, edge=round(gap * EDGE_SCALE, 1))


def decide_total(model_total: float, market_total: float,
                 threshold: float = TOTAL_EDGE_THRESHOLD) -> Optional[Call]:
    gap = abs(model_total - market_total)
    if gap <= threshold:
        return None
    side = "over" if model_total > market_total else "under"
    return Call(side=side, line=market_total, edge=round(gap * EDGE_SCALE, 1))


def underdog(home_odds: int, away_odds: int) -> Optional[Tuple[str, int]]:
    if home_odds > UNDERDOG_MIN_ODDS:
        return "home", home_odds
    if away_odds > UNDERDOG_MIN_ODDS:
        return "away", away_odds
    return None


def decide_moneyline(model_margin: float, home_odds: int, away_odds: int) -> Optional[Call]:
    """Back the underdog when the model gives it a real chance the price ignores."""
    dog = underdog(home_odds, away_odds)
    if dog is None:
        return None
    side, dog_odds = dog

    model_prob = win_probability(model_margin if side == "home" else -model_margin)
    implied_prob = american_to_probability(dog_odds)
    prob_edge = model_prob - implied_prob

    if prob_edge > ML_PROB_EDGE_THRESHOLD and model_prob >= ML_MIN_MODEL_PROB:
        return Call(side=side, line=0.0, edge=round(prob_edge * 100, 1), odds=dog_odds)
    return None

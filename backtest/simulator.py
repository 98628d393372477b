"""Walk-forward backtesting against synthetic market lines."""
import csv
import logging
import math
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta, timezone
from typing import List, Optional, Tuple

import numpy as np

from betting.settlement import grade_moneyline, grade_spread, grade_total, pick_profit
from config import (DEFAULT_SPREAD_ODDS, DOG_ODDS_PER_POINT, DOG_SPREAD_CUTOFF,
                    MIN_DOG_ODDS, MIN_HISTORY_GAMES, MONEYLINE_MARKET_SHRINK,
                    MONEYLINE_NOISE, SPREAD_MARKET_SHRINK, SPREAD_NOISE, TOTAL_NOISE)
from database.models import Game, PickStatus
from edge.rules import (adjusted_margin, adjusted_total, decide_moneyline,
                        decide_spread, decide_total)
from modeling.predictor import round_half
from modeling.stats import StatsAggregator
from modeling.strategies import PROFILE_MODES, PROFILES, StrategyProfile

logger = logging.getLogger(__name__)

MODES = ("SPREAD", "TOTAL", "MONEYLINE")


@dataclass
class BacktestBet:
    """A single simulated bet."""
    date: str
    matchup: str
    side: str
    pick: str
    result: str
    pnl: float
    edge: float


@dataclass
class BacktestResult:
    """Results from a backtest run."""
    start_date: str
    end_date: str
    mode: str
    profile: str
    total_games: int = 0
    bets_placed: int = 0
    wins: int = 0
    losses: int = 0
    pushes: int = 0
    profit: float = 0.0
    history: List[BacktestBet] = field(default_factory=list)

    @property
    def win_rate(self) -> float:
        decided = self.wins + self.losses
        return self.wins / decided if decided else 0.0

    @property
    def roi(self) -> float:
        return self.profit / self.bets_placed if self.bets_placed else 0.0


def _game_day(game: Game) -> date:
    game_date = game.date
    if game_date.tzinfo is None:
        game_date = game_date.replace(tzinfo=timezone.utc)
    return game_date.astimezone(timezone.utc).date()


def _round_points(value: float) -> int:
    """Round half away from zero for non-negative point values."""
    return int(math.floor(value + 0.5))


def dog_odds_for(market_margin: float) -> Optional[Tuple[int, int]]:
    """
    American (home, away) odds implied by a synthetic home margin.

    Returns None for near pick'em games, where neither side is a clear underdog.
    """
    if abs(market_margin) <= DOG_SPREAD_CUTOFF:
        return None
    dog = max(MIN_DOG_ODDS, 100 + DOG_ODDS_PER_POINT * _round_points(abs(market_margin)))
    if market_margin > 0:
        return -dog, dog
    return dog, -dog


class BacktestEngine:
    """
    Replay a date range day by day.

    Team stats for each day come only from games played before it, so the
    model never sees the result it is betting on. Market lines are the real
    outcome blurred with uniform noise.
    """

    def __init__(self, rng: Optional[np.random.Generator] = None, seed: Optional[int] = None,
                 aggregator: Optional[StatsAggregator] = None,
                 min_history: int = MIN_HISTORY_GAMES):
        self.rng = rng if rng is not None else np.random.default_rng(seed)
        self.aggregator = aggregator or StatsAggregator()
        self.min_history = min_history

    def _noise(self, half_width: float) -> float:
        return float(self.rng.uniform(-half_width, half_width))

    def run(self, games: List[Game], start: date, days: int,
            mode: str = "SPREAD", profile: Optional[StrategyProfile] = None) -> BacktestResult:
        """
        Args:
            games: Season history (played and unplayed)
            start: First day simulated
            days: Number of consecutive days
            mode: SPREAD, TOTAL or MONEYLINE
            profile: Weights to test (defaults to the profile that trades ``mode``)
        """
        mode = mode.upper()
        if mode not in MODES:
            raise ValueError(f"Unknown mode {mode!r}; expected one of {MODES}")
        if profile is None:
            profile = next(PROFILES[name] for name, m in PROFILE_MODES.items() if m == mode)

        end = start + timedelta(days=days - 1)
        result = BacktestResult(start_date=start.isoformat(), end_date=end.isoformat(),
                                mode=mode, profile=profile.name)

        played = sorted((g for g in games if g.has_scores), key=_game_day)

        for offset in range(days):
            day = start + timedelta(days=offset)
            day_start = datetime.combine(day, time.min, tzinfo=timezone.utc)

            history = [g for g in played if _game_day(g) < day]
            todays = [g for g in played if _game_day(g) == day]
            if not todays:
                continue
            if len(history) < self.min_history:
                logger.debug("Skipping %s: only %d prior games", day, len(history))
                continue

            stats = self.aggregator.aggregate(history, now=day_start)

            for game in todays:
                home = stats.get(game.home_team)
                away = stats.get(game.away_team)
                if home is None or away is None:
                    continue

                result.total_games += 1
                bet = self._simulate(game, home, away, mode, profile)
                if bet is None:
                    continue

                result.bets_placed += 1
                result.profit += bet.pnl
                if bet.result == PickStatus.WIN.value:
                    result.wins += 1
                elif bet.result == PickStatus.LOSS.value:
                    result.losses += 1
                else:
                    result.pushes += 1
                result.history.append(bet)

        result.profit = round(result.profit, 2)
        logger.info("Backtest %s/%s %s..%s: %d bets, %d-%d, ROI %.2f%%",
                    profile.name, mode, result.start_date, result.end_date,
                    result.bets_placed, result.wins, result.losses, result.roi * 100)
        return result

    def _simulate(self, game: Game, home, away, mode: str,
                  profile: StrategyProfile) -> Optional[BacktestBet]:
        actual_diff = game.home_score - game.away_score
        actual_total = game.home_score + game.away_score
        matchup = f"{game.away_team} @ {game.home_team}"
        day = _game_day(game).isoformat()

        if mode == "SPREAD":
            market_margin = SPREAD_MARKET_SHRINK * actual_diff + self._noise(SPREAD_NOISE)
            market_spread = round_half(-market_margin)
            call = decide_spread(adjusted_margin(home, away, profile), market_spread)
            if call is None:
                return None
            status = grade_spread(game.home_score, game.away_score, call.side, call.line)
            team = game.home_team if call.side == "home" else game.away_team
            label = f"{team} {call.line:+g}"
            odds = DEFAULT_SPREAD_ODDS

        elif mode == "TOTAL":
            market_total = round_half(actual_total + self._noise(TOTAL_NOISE))
            call = decide_total(adjusted_total(home, away, profile), market_total)
            if call is None:
                return None
            status = grade_total(game.home_score, game.away_score, call.side, call.line)
            label = f"{call.side.upper()} {call.line:g}"
            odds = DEFAULT_SPREAD_ODDS

        else:
            market_margin = MONEYLINE_MARKET_SHRINK * actual_diff + self._noise(MONEYLINE_NOISE)
            prices = dog_odds_for(market_margin)
            if prices is None:
                return None
            call = decide_moneyline(adjusted_margin(home, away, profile), *prices)
            if call is None:
                return None
            status = grade_moneyline(game.home_score, game.away_score, call.side)
            team = game.home_team if call.side == "home" else game.away_team
            label = f"{team} ML ({call.odds:+d})"
            odds = call.odds

        return BacktestBet(
            date=day,
            matchup=matchup,
            side=call.side,
            pick=label,
            result=status.value,
            pnl=pick_profit(status, odds),
            edge=call.edge,
        )

    def export_to_csv(self, result: BacktestResult,
                      filename: str = "backtest_results.csv") -> Tuple[str, str]:
        """Write the bet history and a summary file. Returns both paths."""
        with open(filename, 'w', newline='') as f:
            writer = csv.writer(f)
            writer.writerow(['Date', 'Matchup', 'Side', 'Pick', 'Result', 'PnL', 'Edge'])
            for bet in result.history:
                writer.writerow([
                    bet.date, bet.matchup, bet.side, bet.pick,
                    bet.result, f"{bet.pnl:.2f}", f"{bet.edge:.1f}",
                ])

        summary_file = filename.replace('.csv', '_summary.csv')
        with open(summary_file, 'w', newline='') as f:
            writer = csv.writer(f)
            writer.writerow(['Metric', 'Value'])
            writer.writerow(['Period', f"{result.start_date} to {result.end_date}"])
            writer.writerow(['Mode', result.mode])
            writer.writerow(['Profile', result.profile])
            writer.writerow(['Games', result.total_games])
            writer.writerow(['Bets', result.bets_placed])
            writer.writerow(['Wins', result.wins])
            writer.writerow(['Losses', result.losses])
            writer.writerow(['Pushes', result.pushes])
            writer.writerow(['Win Rate', f"{result.win_rate:.2%}"])
            writer.writerow(['Profit', f"{result.profit:+.2f}u"])
            writer.writerow(['ROI', f"{result.roi:.2%}"])

        logger.info("Backtest exported to %s and %s", filename, summary_file)
        return filename, summary_file

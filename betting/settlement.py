"""Grade PENDING picks against final scores."""
import logging
from collections import defaultdict
from datetime import date, timedelta
from typing import Dict, List, Optional, Tuple

from betting.odds import profit_per_unit
from database.models import Pick, PickStatus, PickType
from errors import InvalidTransition, UpstreamUnavailable

logger = logging.getLogger(__name__)


def grade_spread(home_score: int, away_score: int, side: str, line: float) -> PickStatus:
    """
    Apply the picked side's handicap to the final margin.

    ``line`` is the picked team's own spread (e.g. -4 for "Home -4").
    """
    diff = home_score - away_score
    cover_margin = (diff if side == "home" else -diff) + line
    if cover_margin > 0:
        return PickStatus.WIN
    if cover_margin == 0:
        return PickStatus.PUSH
    return PickStatus.LOSS


def grade_total(home_score: int, away_score: int, side: str, line: float) -> PickStatus:
    total = home_score + away_score
    if total == line:
        return PickStatus.PUSH
    if side == "over":
        return PickStatus.WIN if total > line else PickStatus.LOSS
    return PickStatus.WIN if total < line else PickStatus.LOSS


def grade_moneyline(home_score: int, away_score: int, side: str) -> PickStatus:
    if side == "home":
        won = home_score > away_score
    else:
        won = away_score > home_score
    return PickStatus.WIN if won else PickStatus.LOSS


def grade_pick(pick_type: PickType, side: str, line: float,
               home_score: int, away_score: int) -> PickStatus:
    if pick_type is PickType.SPREAD:
        return grade_spread(home_score, away_score, side, line)
    if pick_type is PickType.TOTAL:
        return grade_total(home_score, away_score, side, line)
    return grade_moneyline(home_score, away_score, side)


def pick_profit(status: PickStatus, odds: int) -> float:
    """Units won or lost on a one-unit stake."""
    if status is PickStatus.WIN:
        return round(profit_per_unit(odds), 2)
    if status is PickStatus.PUSH:
        return 0.0
    return -1.0


class SettlementEngine:
    """
    Settle every PENDING pick whose game has finished.

    Picks without a final score stay PENDING and are picked up on the next run.
    """

    def __init__(self, game_source, store):
        self.game_source = game_source
        self.store = store

    def _final_scores(self, day: date) -> Optional[Dict[Tuple[str, str], Tuple[int, int]]]:
        """
        Final scores keyed by (home team, away team) for ``day`` and the day after.

        The provider buckets late tip-offs under the next UTC date, so both
        days are checked. A pairing found on ``day`` itself wins over the next day.
        """
        games = []
        for d in (day, day + timedelta(days=1)):
            try:
                games.extend(self.game_source.get_games_by_date(d.isoformat()))
            except UpstreamUnavailable as e:
                logger.warning("Could not fetch results for %s: %s", d, e)

        if not games:
            logger.warning("No games returned for %s.", day)
            return None

        scores: Dict[Tuple[str, str], Tuple[int, int]] = {}
        for g in games:
            if g.is_final:
                scores.setdefault((g.home_team, g.away_team), (g.home_score, g.away_score))
        return scores

    def run(self) -> Dict:
        """
        Returns settlement summary.
        """
        summary = {"settled": 0, "wins": 0, "losses": 0, "pushes": 0, "pnl": 0.0, "pending": 0}

        pending = self.store.find_all(status=PickStatus.PENDING)
        if not pending:
            logger.info("No pending picks to settle.")
            return summary

        by_date: Dict[date, List[Pick]] = defaultdict(list)
        for pick in pending:
            by_date[pick.match_date.date()].append(pick)
        logger.info("Found %d pending picks across %d dates.", len(pending), len(by_date))

        for day in sorted(by_date):
            picks = by_date[day]
            scores = self._final_scores(day)
            if not scores:
                summary["pending"] += len(picks)
                continue

            for pick in picks:
                result = scores.get((pick.home_team, pick.away_team))
                if result is None:
                    logger.debug("Game not finished: %s", pick.matchup)
                    summary["pending"] += 1
                    continue

                home_score, away_score = result
                status = grade_pick(pick.pick_type, pick.side, pick.line, home_score, away_score)
                profit = pick_profit(status, pick.odds)

                try:
                    self.store.update(
                        pick.id,
                        status=status,
                        profit=profit,
                        result_score=f"{away_score}-{home_score}",
                    )
                except InvalidTransition as e:
                    logger.warning("Skipping %s: %s", pick.matchup, e)
                    continue

                logger.info("Graded %s %s (%s): %s %+.2fu",
                            pick.profile, pick.details, pick.matchup, status.value, profit)
                summary["settled"] += 1
                summary["pnl"] += profit
                if status is PickStatus.WIN:
                    summary["wins"] += 1
                elif status is PickStatus.LOSS:
                    summary["losses"] += 1
                else:
                    summary["pushes"] += 1

        summary["pnl"] = round(summary["pnl"], 2)
        return summary

"""Daily matchup scan: stats + market lines -> persisted picks."""
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Optional

from config import DEFAULT_SPREAD_ODDS, NBA_SEASON, SPORT
from database.models import Pick, PickType
from edge.lines import extract_lines, first_line
from edge.rules import (Call, adjusted_margin, adjusted_total, decide_moneyline,
                        decide_spread, decide_total, missing_stars)
from errors import (InvalidTransition, MissingTeamStats, PersistenceFailure,
                    UpstreamUnavailable)
from modeling.predictor import analyze_matchup
from modeling.stats import StatsAggregator
from modeling.strategies import LOKI, SHIVA, ZEUS, StrategyProfile
from modeling.types import BettingLine, MatchupAnalysis, TeamStats

logger = logging.getLogger(__name__)


@dataclass
class ScanSummary:
    created: int = 0
    updated: int = 0
    skipped: int = 0
    picks: List[Pick] = field(default_factory=list)
    analyses: List[MatchupAnalysis] = field(default_factory=list)


def _parse_commence(value: str) -> datetime:
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def upsert_pick(store, pick: Pick) -> str:
    """
    Create the pick, or refresh the PENDING one already held for the same
    profile, matchup and start time.

    Returns 'created' or 'updated'.
    """
    existing = store.find_pending(pick.profile, pick.matchup, pick.match_date)
    if existing is None:
        store.create(pick)
        return "created"

    store.update(
        existing.id,
        side=pick.side,
        line=pick.line,
        odds=pick.odds,
        edge=pick.edge,
        pick_type=pick.pick_type,
    )
    pick.id = existing.id
    return "updated"


class MatchupScanner:
    """
    Run every profile over today's upcoming games.

    ZEUS trades spreads, SHIVA totals and LOKI underdog moneylines. Each
    profile writes at most one PENDING pick per matchup; rerunning the scan
    refreshes those picks instead of adding new ones.
    """

    def __init__(self, game_source, odds_source, injury_source, store,
                 aggregator: Optional[StatsAggregator] = None,
                 spread_profile: StrategyProfile = ZEUS,
                 total_profile: StrategyProfile = SHIVA,
                 moneyline_profile: StrategyProfile = LOKI,
                 sport: str = SPORT):
        self.game_source = game_source
        self.odds_source = odds_source
        self.injury_source = injury_source
        self.store = store
        self.aggregator = aggregator or StatsAggregator()
        self.spread_profile = spread_profile
        self.total_profile = total_profile
        self.moneyline_profile = moneyline_profile
        self.sport = sport

    def _load_stats(self, season: str, now: datetime) -> Dict[str, TeamStats]:
        try:
            games = self.game_source.get_games(season)
        except UpstreamUnavailable as e:
            logger.warning("Could not load game history: %s", e)
            return {}
        if not games:
            logger.warning("No game history for season %s.", season)
            return {}
        return self.aggregator.aggregate(games, now=now)

    def _load_injuries(self, events: List[Dict]) -> Dict[str, List[Dict[str, str]]]:
        """Injury reports keyed by YYYY-MM-DD, fetched once per distinct game date."""
        reports: Dict[str, List[Dict[str, str]]] = {}
        for event in events:
            commence = event.get("commence_time")
            if not commence:
                continue
            day = commence[:10]
            if day in reports:
                continue
            try:
                reports[day] = self.injury_source.get_injuries(day)
            except UpstreamUnavailable as e:
                logger.warning("No injury report for %s: %s", day, e)
                reports[day] = []
        return reports

    @staticmethod
    def _stats_for(stats: Dict[str, TeamStats], team: str) -> TeamStats:
        try:
            return stats[team]
        except KeyError:
            raise MissingTeamStats(team)

    def evaluate(self, home: TeamStats, away: TeamStats, lines: List[BettingLine],
                 match_date: datetime, reports: List[Dict[str, str]]) -> List[Pick]:
        """Picks every profile would make for one matchup."""
        home_out = missing_stars(reports, home.team_name)
        away_out = missing_stars(reports, away.team_name)
        if home_out or away_out:
            logger.info("Stars out: %s %d, %s %d", home.team_name, home_out, away.team_name, away_out)

        picks: List[Pick] = []

        def make(profile: StrategyProfile, pick_type: PickType, call: Call, odds: int):
            picks.append(Pick(
                profile=profile.name,
                sport=self.sport,
                match_date=match_date,
                home_team=home.team_name,
                away_team=away.team_name,
                pick_type=pick_type,
                side=call.side,
                line=call.line,
                odds=odds,
                edge=call.edge,
            ))

        spread_line = first_line(lines, "spread")
        if spread_line is not None:
            margin = adjusted_margin(home, away, self.spread_profile, home_out, away_out)
            call = decide_spread(margin, spread_line.line)
            if call:
                make(self.spread_profile, PickType.SPREAD, call, DEFAULT_SPREAD_ODDS)

        total_line = first_line(lines, "total")
        if total_line is not None:
            total = adjusted_total(home, away, self.total_profile, home_out, away_out)
            call = decide_total(total, total_line.line)
            if call:
                make(self.total_profile, PickType.TOTAL, call, DEFAULT_SPREAD_ODDS)

        home_ml = first_line(lines, "moneyline_home")
        away_ml = first_line(lines, "moneyline_away")
        if home_ml is not None and away_ml is not None:
            margin = adjusted_margin(home, away, self.moneyline_profile, home_out, away_out)
            call = decide_moneyline(margin, home_ml.odds, away_ml.odds)
            if call:
                make(self.moneyline_profile, PickType.MONEYLINE, call, call.odds)

        return picks

    def run(self, season: str = NBA_SEASON, now: Optional[datetime] = None,
            dry_run: bool = False) -> ScanSummary:
        """
        Scan upcoming events and persist picks (unless dry_run).

        Raises:
            PersistenceFailure: after every matchup has been processed, if any
                pick write failed
        """
        now = now or datetime.now(timezone.utc)
        summary = ScanSummary()

        stats = self._load_stats(season, now)
        if not stats:
            return summary
        logger.info("Loaded stats for %d teams.", len(stats))

        try:
            events = self.odds_source.get_odds()
        except UpstreamUnavailable as e:
            logger.warning("Could not load odds: %s", e)
            return summary
        if not events:
            logger.info("No upcoming events with odds.")
            return summary

        injuries = self._load_injuries(events)
        failures: List[PersistenceFailure] = []

        for event in events:
            home_name = event.get("home_team")
            away_name = event.get("away_team")
            commence = event.get("commence_time")
            if not (home_name and away_name and commence):
                summary.skipped += 1
                continue

            try:
                match_date = _parse_commence(commence)
            except ValueError:
                logger.warning("Bad commence time %r for %s @ %s", commence, away_name, home_name)
                summary.skipped += 1
                continue
            if match_date < now:
                summary.skipped += 1
                continue

            try:
                home = self._stats_for(stats, home_name)
                away = self._stats_for(stats, away_name)
            except MissingTeamStats as e:
                logger.info("Skipping %s @ %s: %s", away_name, home_name, e)
                summary.skipped += 1
                continue

            lines = extract_lines(event, home_name, away_name)
            if not lines:
                summary.skipped += 1
                continue

            summary.analyses.append(analyze_matchup(home, away, lines, self.spread_profile))

            for pick in self.evaluate(home, away, lines, match_date, injuries.get(commence[:10], [])):
                summary.picks.append(pick)
                logger.info("%s pick: %s (%s) edge %.1f", pick.profile, pick.details, pick.matchup, pick.edge)
                if dry_run:
                    continue
                try:
                    outcome = upsert_pick(self.store, pick)
                except PersistenceFailure as e:
                    logger.error("Could not save %s pick for %s: %s", pick.profile, pick.matchup, e)
                    failures.append(e)
                    continue
                except InvalidTransition as e:
                    logger.warning("Pick for %s was graded mid-scan: %s", pick.matchup, e)
                    continue
                if outcome == "created":
                    summary.created += 1
                else:
                    summary.updated += 1

        logger.info("Scan complete: %d created, %d updated, %d skipped.",
                    summary.created, summary.updated, summary.skipped)

        if failures:
            raise PersistenceFailure(f"{len(failures)} pick write(s) failed") from failures[0]
        return summary

"""Game history, per-date results and injury reports from API-Sports (API-NBA v2)."""
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

import requests

from config import API_SPORTS_BASE, API_SPORTS_KEY, NBA_SEASON, REQUEST_TIMEOUT, TEAM_MAPPINGS
from database.models import Game
from errors import UpstreamUnavailable

logger = logging.getLogger(__name__)

FINISHED_SHORT = {"FT", "AOT", 3}
FINISHED_LONG = {"Finished"}


def _parse_date(value: str) -> datetime:
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def _normalize_team(name: str) -> str:
    """Use the odds provider's spelling so both feeds key on the same name."""
    return TEAM_MAPPINGS.get(name, name)


def _is_finished(status: Dict[str, Any]) -> bool:
    return status.get("short") in FINISHED_SHORT or status.get("long") in FINISHED_LONG


class ApiSportsClient:
    """Historical games, results and injuries."""

    def __init__(self, api_key: str = API_SPORTS_KEY, base_url: str = API_SPORTS_BASE,
                 session: Optional[requests.Session] = None):
        self.api_key = api_key
        self.base_url = base_url
        self.session = session or requests.Session()
        if not self.api_key:
            logger.warning("API_SPORTS_KEY not set. Please set it in .env file.")

    def _fetch(self, endpoint: str, params: Dict[str, Any]) -> List[Dict]:
        try:
            response = self.session.get(
                f"{self.base_url}{endpoint}",
                params=params,
                headers={"x-apisports-key": self.api_key},
                timeout=REQUEST_TIMEOUT,
            )
            response.raise_for_status()
            data = response.json()
        except (requests.RequestException, ValueError) as e:
            raise UpstreamUnavailable(f"API-Sports {endpoint} failed: {e}") from e

        if not isinstance(data, dict):
            raise UpstreamUnavailable(f"API-Sports {endpoint} returned unexpected payload")

        errors = data.get("errors")
        if errors:
            raise UpstreamUnavailable(f"API-Sports {endpoint} error: {errors}")

        payload = data.get("response")
        if not isinstance(payload, list):
            raise UpstreamUnavailable(f"API-Sports {endpoint} returned no response list")
        return payload

    def _to_game(self, raw: Dict) -> Optional[Game]:
        try:
            teams = raw["teams"]
            scores = raw.get("scores") or {}
            status = raw.get("status") or {}
            finished = _is_finished(status)
            return Game(
                id=raw["id"],
                date=_parse_date(raw["date"]["start"]),
                home_team=_normalize_team(teams["home"]["name"]),
                away_team=_normalize_team(teams["visitors"]["name"]),
                home_team_id=teams["home"].get("id"),
                away_team_id=teams["visitors"].get("id"),
                home_score=(scores.get("home") or {}).get("points"),
                away_score=(scores.get("visitors") or {}).get("points"),
                status="FINAL" if finished else "SCHEDULED",
            )
        except (KeyError, TypeError, ValueError) as e:
            game_id = raw.get("id") if isinstance(raw, dict) else None
            logger.warning("Skipping malformed game payload %s: %s", game_id, e)
            return None

    def get_games(self, season: str = NBA_SEASON) -> List[Game]:
        """Every game of a season, played or not."""
        logger.info("Fetching season %s games...", season)
        games = [self._to_game(g) for g in self._fetch("/games", {"season": season})]
        return [g for g in games if g is not None]

    def get_games_by_date(self, date: str, season: str = NBA_SEASON) -> List[Game]:
        """Games scheduled on a YYYY-MM-DD date."""
        games = [self._to_game(g) for g in self._fetch("/games", {"season": season, "date": date})]
        return [g for g in games if g is not None]

    def get_injuries(self, date: str) -> List[Dict[str, str]]:
        """Injury reports as {team, player, type} dicts."""
        reports = []
        for raw in self._fetch("/injuries", {"date": date}):
            try:
                reports.append({
                    "team": _normalize_team(raw["team"]["name"]),
                    "player": raw["player"]["name"],
                    "type": raw.get("type", ""),
                })
            except (KeyError, TypeError):
                logger.debug("Skipping malformed injury row: %s", raw)
        return reports

"""Live market quotes from The Odds API."""
import logging
from typing import Dict, List, Optional

import requests

from config import ODDS_API_BASE, ODDS_API_KEY, ODDS_REGION, ODDS_SPORT_KEY, REQUEST_TIMEOUT
from errors import UpstreamUnavailable

logger = logging.getLogger(__name__)


class OddsApiClient:
    """Fetch events with spread, totals and head-to-head markets in American odds."""

    def __init__(self, api_key: str = ODDS_API_KEY, base_url: str = ODDS_API_BASE,
                 session: Optional[requests.Session] = None):
        self.api_key = api_key
        self.base_url = base_url
        self.session = session or requests.Session()

    def get_odds(self, sport: str = ODDS_SPORT_KEY, region: str = ODDS_REGION) -> List[Dict]:
        """
        Returns:
            Raw events: {home_team, away_team, commence_time, bookmakers: [...]}
        """
        if not self.api_key:
            raise UpstreamUnavailable("ODDS_API_KEY not set. Please set it in .env file.")

        params = {
            "apiKey": self.api_key,
            "regions": region,
            "markets": "h2h,spreads,totals",
            "oddsFormat": "american",
            "dateFormat": "iso",
        }

        try:
            response = self.session.get(
                f"{self.base_url}/sports/{sport}/odds",
                params=params,
                timeout=REQUEST_TIMEOUT,
            )
            response.raise_for_status()
            data = response.json()
        except (requests.RequestException, ValueError) as e:
            raise UpstreamUnavailable(f"Error fetching odds: {e}") from e

        remaining = response.headers.get("x-requests-remaining", "unknown")
        logger.info("Odds API requests remaining: %s", remaining)

        if not isinstance(data, list):
            raise UpstreamUnavailable(f"Odds API response is not a list: {data}")
        return data

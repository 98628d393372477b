"""Extract BettingLines from a raw odds event."""
import logging
from typing import Dict, List

from errors import MalformedLine
from modeling.types import BettingLine

logger = logging.getLogger(__name__)


def _line_from_outcome(source: str, market_key: str, outcome: Dict,
                       home_team: str, away_team: str):
    name = outcome.get("name")
    price = outcome.get("price")
    if not isinstance(price, (int, float)) or isinstance(price, bool):
        raise MalformedLine(f"{source} {market_key}: price {price!r} is not numeric")

    if market_key == "spreads":
        if name != home_team:
            return None
        point = outcome.get("point")
        if not isinstance(point, (int, float)):
            raise MalformedLine(f"{source} spread for {name}: point {point!r} is not numeric")
        return BettingLine(source=source, line=float(point), odds=int(price), type="spread")

    if market_key == "totals":
        if name != "Over":
            return None
        point = outcome.get("point")
        if not isinstance(point, (int, float)):
            raise MalformedLine(f"{source} total: point {point!r} is not numeric")
        return BettingLine(source=source, line=float(point), odds=int(price), type="total")

    if market_key == "h2h":
        if name == home_team:
            return BettingLine(source=source, line=0.0, odds=int(price), type="moneyline_home")
        if name == away_team:
            return BettingLine(source=source, line=0.0, odds=int(price), type="moneyline_away")
    return None


def extract_lines(event: Dict, home_team: str, away_team: str) -> List[BettingLine]:
    """
    Flatten every bookmaker's spread, total and moneyline quotes.

    Spreads are the home side's points and totals the Over's points, so a
    single number describes each market. Malformed outcomes are skipped.
    """
    lines: List[BettingLine] = []

    for book in event.get("bookmakers") or []:
        if not isinstance(book, dict):
            logger.warning("Skipping bookmaker: %r is not an object", book)
            continue
        source = book.get("title") or book.get("key") or "?"
        for market in book.get("markets") or []:
            if not isinstance(market, dict):
                logger.warning("Skipping %s market: %r is not an object", source, market)
                continue
            key = market.get("key")
            for outcome in market.get("outcomes") or []:
                try:
                    if not isinstance(outcome, dict):
                        raise MalformedLine(f"{source} {key}: outcome is not an object")
                    line = _line_from_outcome(source, key, outcome, home_team, away_team)
                except MalformedLine as e:
                    logger.warning("Skipping line: %s", e)
                    continue
                if line is not None:
                    lines.append(line)

    return lines


def first_line(lines: List[BettingLine], line_type: str):
    return next((line for line in lines if line.type == line_type), None)

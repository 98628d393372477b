"""Cross-venue mispricing between a sportsbook quote and a prediction-market price."""
from dataclasses import dataclass

from betting.odds import american_to_probability
from config import ARB_MIN_EDGE
from modeling.types import BettingLine


@dataclass
class ArbitrageOpportunity:
    id: str
    matchup: str
    market_prob: float        # Sportsbook implied probability (vig included)
    venue_price: float        # Second venue's price, 0-1
    edge_raw: float           # market_prob - venue_price
    edge_percent: float       # ROI on the venue price, in percent
    recommendation: str       # 'BUY', 'SELL' or 'HOLD'
    confidence: float
    potential_profit: float   # Expected profit on a 100 unit stake


class ArbitrageScanner:
    """
    Compare a sportsbook line with a price quoted as a probability.

    Positive edge means the second venue sells the outcome cheaper than the
    book thinks it is worth (BUY); negative means it is overpriced (SELL).
    """

    def __init__(self, min_edge: float = ARB_MIN_EDGE):
        self.min_edge = min_edge

    def scan(self, matchup_id: str, team: str, line: BettingLine,
             venue_price: float) -> ArbitrageOpportunity:
        if not 0.0 <= venue_price <= 1.0:
            raise ValueError(f"venue price must be between 0 and 1, got {venue_price}")

        market_prob = american_to_probability(line.odds)
        edge_raw = market_prob - venue_price

        if edge_raw > self.min_edge:
            recommendation = "BUY"
        elif edge_raw < -self.min_edge:
            recommendation = "SELL"
        else:
            recommendation = "HOLD"

        roi = edge_raw / venue_price if venue_price > 0 else 0.0
        edge_percent = round(roi * 100, 2)

        return ArbitrageOpportunity(
            id=f"arb_{matchup_id}",
            matchup=team,
            market_prob=market_prob,
            venue_price=venue_price,
            edge_raw=edge_raw,
            edge_percent=edge_percent,
            recommendation=recommendation,
            confidence=min(abs(edge_raw) * 200, 99),
            potential_profit=edge_percent,
        )

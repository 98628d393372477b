"""
American odds helpers.

- implied probability ignores the bookmaker margin.
- profit is quoted per unit staked.
"""
from __future__ import annotations


def american_to_probability(odds: float) -> float:
    """Implied probability of an American price (-110 -> 0.524, +150 -> 0.400)."""
    if odds > 0:
        return 100 / (odds + 100)
    return abs(odds) / (abs(odds) + 100)


def profit_per_unit(odds: float) -> float:
    """Profit on a winning one-unit stake."""
    if odds > 0:
        return odds / 100
    return 100 / abs(odds)

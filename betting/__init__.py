"""Betting module for pick persistence, settlement and reporting."""
from betting.store import PickStore
from betting.settlement import SettlementEngine

__all__ = ['PickStore', 'SettlementEngine']

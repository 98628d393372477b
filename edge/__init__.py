"""Edge detection: market line extraction, threshold rules and the daily scan."""
from edge.scanner import MatchupScanner, ScanSummary
from edge.arbitrage import ArbitrageScanner

__all__ = ['MatchupScanner', 'ScanSummary', 'ArbitrageScanner']

#!/usr/bin/env python3
"""
NBA Pick Engine

Scans upcoming NBA games with three strategy profiles (ZEUS spreads,
SHIVA totals, LOKI underdog moneylines), records picks and grades them
once the games finish.

Usage:
    python main.py init                        # Initialize database
    python main.py stats update                # Rebuild team stats cache
    python main.py scan                        # Find and save today's picks
    python main.py scan --dry-run              # Show picks without saving
    python main.py settle                      # Grade finished games
    python main.py picks report                # Per-profile performance
    python main.py backtest --from 2024-12-01 --days 14 --mode TOTAL
    python main.py optimize --from 2024-12-01 --mode SPREAD --seed 7
"""

from cli import cli

if __name__ == '__main__':
    cli()

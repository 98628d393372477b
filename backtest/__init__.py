"""Backtesting module."""
from backtest.simulator import BacktestEngine, BacktestResult, BacktestBet
from backtest.optimizer import ModelOptimizer

__all__ = ['BacktestEngine', 'BacktestResult', 'BacktestBet', 'ModelOptimizer']

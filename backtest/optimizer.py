"""Random local search over StrategyProfile weights, plus the named tournament."""
import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Optional, Tuple

import numpy as np

from backtest.simulator import BacktestEngine, BacktestResult
from config import OPTIMIZER_ITERATIONS, OPTIMIZER_VARIABILITY
from database.models import Game
from modeling.strategies import FRACTIONAL_WEIGHTS, SCALAR_WEIGHTS, StrategyProfile

logger = logging.getLogger(__name__)


@dataclass
class OptimizationResult:
    name: str
    profile: StrategyProfile
    win_rate: float
    roi: float
    bets_placed: int
    wins: int
    losses: int

    @classmethod
    def from_backtest(cls, name: str, profile: StrategyProfile,
                      result: BacktestResult) -> "OptimizationResult":
        return cls(
            name=name,
            profile=profile,
            win_rate=result.win_rate,
            roi=result.roi,
            bets_placed=result.bets_placed,
            wins=result.wins,
            losses=result.losses,
        )


@dataclass
class OptimizationRun:
    best: OptimizationResult
    baseline: OptimizationResult
    trials: List[OptimizationResult] = field(default_factory=list)


class ModelOptimizer:
    """
    Hill-climb profile weights by backtest ROI.

    Every candidate is scored on freshly sampled market noise, so the same
    weights can score differently across iterations. Seed the engine for a
    repeatable search.
    """

    def __init__(self, engine: Optional[BacktestEngine] = None,
                 rng: Optional[np.random.Generator] = None):
        self.engine = engine or BacktestEngine()
        self.rng = rng if rng is not None else self.engine.rng

    def perturb(self, profile: StrategyProfile, variability: float) -> StrategyProfile:
        """Jitter every weight; fractional weights stay non-negative."""
        weights: Dict[str, float] = {}
        for name in FRACTIONAL_WEIGHTS:
            jitter = self.rng.uniform(-1, 1) * variability * 0.2
            weights[name] = max(0.0, round(getattr(profile, name) + jitter, 3))
        for name in SCALAR_WEIGHTS:
            jitter = self.rng.uniform(-1, 1) * variability * 2
            weights[name] = round(getattr(profile, name) + jitter, 2)
        return profile.with_weights(**weights)

    def optimize(self, base: StrategyProfile, games: List[Game], start: date, days: int,
                 mode: str = "SPREAD", iterations: int = OPTIMIZER_ITERATIONS,
                 variability: float = OPTIMIZER_VARIABILITY) -> OptimizationRun:
        """
        Iteration 0 scores ``base`` unchanged; later iterations perturb the
        best profile found so far.
        """
        baseline = OptimizationResult.from_backtest(
            "baseline", base, self.engine.run(games, start, days, mode, base))
        best = baseline
        run = OptimizationRun(best=best, baseline=baseline, trials=[baseline])

        for i in range(1, iterations):
            candidate = self.perturb(best.profile, variability)
            scored = OptimizationResult.from_backtest(
                f"iteration {i}", candidate, self.engine.run(games, start, days, mode, candidate))
            run.trials.append(scored)

            if scored.roi > best.roi:
                logger.info("Iteration %d: new best ROI %.2f%% (%d bets)",
                            i, scored.roi * 100, scored.bets_placed)
                best = scored

        run.best = best
        return run

    def run_tournament(self, candidates: List[Tuple[str, StrategyProfile]], games: List[Game],
                       start: date, days: int, mode: str = "SPREAD") -> List[OptimizationResult]:
        """Score each named profile once and rank by ROI, best first."""
        results = []
        for name, profile in candidates:
            logger.info("Running simulation for: %s", name)
            result = self.engine.run(games, start, days, mode, profile)
            results.append(OptimizationResult.from_backtest(name, profile, result))
        return sorted(results, key=lambda r: r.roi, reverse=True)

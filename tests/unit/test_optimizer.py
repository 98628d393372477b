"""
Unit Tests for the Model Optimizer
==================================
"""

from datetime import timedelta

import numpy as np

from backtest.optimizer import ModelOptimizer
from backtest.simulator import BacktestEngine
from modeling.strategies import (FRACTIONAL_WEIGHTS, TOURNAMENT_CANDIDATES, ZEUS,
                                 StrategyProfile)
from test_backtest import SEASON_START, synthetic_season

START = SEASON_START + timedelta(days=4)


def optimizer(seed=11):
    return ModelOptimizer(BacktestEngine(seed=seed, min_history=9))


class TestPerturb:
    def test_fractional_weights_never_negative(self):
        zeroed = StrategyProfile(name="FLAT", **{name: 0.0 for name in FRACTIONAL_WEIGHTS})
        opt = ModelOptimizer(BacktestEngine(), rng=np.random.default_rng(0))

        for _ in range(50):
            candidate = opt.perturb(zeroed, variability=1.0)
            assert all(getattr(candidate, name) >= 0 for name in FRACTIONAL_WEIGHTS)

    def test_zero_variability_keeps_weights(self):
        assert optimizer().perturb(ZEUS, variability=0.0) == ZEUS

    def test_base_profile_is_not_mutated(self):
        before = ZEUS.weights()
        optimizer().perturb(ZEUS, variability=1.0)
        assert ZEUS.weights() == before


class TestOptimize:
    def test_first_trial_is_the_baseline(self):
        run = optimizer().optimize(ZEUS, synthetic_season(), START, 20, "SPREAD", iterations=4)

        assert len(run.trials) == 4
        assert run.trials[0].profile == ZEUS
        assert run.baseline is run.trials[0]

    def test_keeps_the_best_roi(self):
        run = optimizer().optimize(ZEUS, synthetic_season(), START, 20, "SPREAD", iterations=6)

        assert run.best.roi == max(t.roi for t in run.trials)
        assert run.best.roi >= run.baseline.roi

    def test_seeded_search_is_repeatable(self):
        games = synthetic_season()
        first = optimizer(seed=5).optimize(ZEUS, games, START, 20, "TOTAL", iterations=4)
        second = optimizer(seed=5).optimize(ZEUS, games, START, 20, "TOTAL", iterations=4)

        assert first.best.profile == second.best.profile
        assert [t.roi for t in first.trials] == [t.roi for t in second.trials]


class TestTournament:
    def test_ranked_by_roi(self):
        results = optimizer().run_tournament(TOURNAMENT_CANDIDATES, synthetic_season(), START, 20)

        assert len(results) == len(TOURNAMENT_CANDIDATES)
        assert [r.roi for r in results] == sorted((r.roi for r in results), reverse=True)
        assert {r.name for r in results} == {name for name, _ in TOURNAMENT_CANDIDATES}

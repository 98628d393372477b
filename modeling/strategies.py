"""Weighting profiles consumed by the prediction model."""
from dataclasses import asdict, dataclass, fields, replace
from typing import Dict, List, Tuple


@dataclass(frozen=True)
class StrategyProfile:
    """Immutable set of model coefficients. Pass it explicitly to every prediction."""
    name: str

    # Spread
    efficiency: float = 0.25
    margin: float = 0.15
    recent_form: float = 0.15
    rest: float = 4.5                   # Points toward the rested side
    injury_scalar: float = 2.0
    home_court_advantage: float = 3.5

    # Totals
    pace_weight: float = 0.40
    ppg_weight: float = 0.35
    def_weight: float = 0.35
    fatigue_impact: float = -2.5        # Added once per team on zero rest

    def with_weights(self, **weights) -> "StrategyProfile":
        return replace(self, **weights)

    def weights(self) -> Dict[str, float]:
        data = asdict(self)
        data.pop("name")
        return data


# Coefficients that live on a 0-1 scale get small relative jitter when tuned;
# the remaining point-valued constants get larger absolute jitter.
SCALAR_WEIGHTS = ("rest", "injury_scalar", "home_court_advantage", "fatigue_impact")
FRACTIONAL_WEIGHTS = tuple(
    f.name for f in fields(StrategyProfile)
    if f.name != "name" and f.name not in SCALAR_WEIGHTS
)


# Spread-oriented: the balanced realist
ZEUS = StrategyProfile(name="ZEUS")

# Totals-oriented
SHIVA = StrategyProfile(name="SHIVA")

# Underdog moneyline: leans on momentum
LOKI = StrategyProfile(
    name="LOKI",
    efficiency=0.10,
    recent_form=0.60,
    rest=2.0,
    home_court_advantage=2.5,
)

PROFILES = {p.name: p for p in (ZEUS, SHIVA, LOKI)}

# Which bet type each profile trades
PROFILE_MODES = {
    "ZEUS": "SPREAD",
    "SHIVA": "TOTAL",
    "LOKI": "MONEYLINE",
}


def get_profile(name: str) -> StrategyProfile:
    try:
        return PROFILES[name.upper()]
    except KeyError:
        raise ValueError(f"Unknown profile {name!r}; expected one of {sorted(PROFILES)}")


# Named candidates for the strategy tournament
TOURNAMENT_CANDIDATES: List[Tuple[str, StrategyProfile]] = [
    ("1. The Balanced Sharp (Baseline)", StrategyProfile(
        name="BALANCED_SHARP", efficiency=0.35, margin=0.20, recent_form=0.25,
        rest=2.5, injury_scalar=1.0, home_court_advantage=3.2)),
    ("2. The Momentum (Form Heavy)", StrategyProfile(
        name="MOMENTUM", efficiency=0.20, margin=0.10, recent_form=0.60,
        rest=1.5, injury_scalar=0.8, home_court_advantage=3.0)),
    ("3. The Situational (Rest/Injury Focus)", StrategyProfile(
        name="SITUATIONAL", efficiency=0.25, margin=0.15, recent_form=0.15,
        rest=4.5, injury_scalar=2.0, home_court_advantage=3.5)),
    ("4. The Fundamentalist (Raw Efficiency)", StrategyProfile(
        name="FUNDAMENTALIST", efficiency=0.60, margin=0.30, recent_form=0.05,
        rest=1.0, injury_scalar=0.5, home_court_advantage=2.5)),
    ("5. Home Court Hero (Venue Bias)", StrategyProfile(
        name="HOME_COURT_HERO", efficiency=0.30, margin=0.15, recent_form=0.15,
        rest=2.0, injury_scalar=1.0, home_court_advantage=5.5)),
]

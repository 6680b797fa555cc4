"""Nash equilibrium value types.

An equilibrium is either pure (one strategy index per player) or mixed (one
probability distribution per player). Both carry the payoff vector, a
stability score in [0, 1] and a strictness flag. Values are produced fresh
by each solve call and never mutated.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Iterable, Union


class EquilibriumType(Enum):
    """Kind of strategy profile."""

    PURE = "pure"
    MIXED = "mixed"


@dataclass(frozen=True)
class PureEquilibrium:
    """Pure-strategy equilibrium.

    Attributes:
        profile: Strategy index chosen by each player
        payoffs: Payoff received by each player
        stability: Heuristic robustness score in [0, 1]
        is_strict: True if every unilateral deviation is strictly worse
    """

    profile: tuple[int, ...]
    payoffs: tuple[float, ...]
    stability: float
    is_strict: bool = False

    equilibrium_type: ClassVar[EquilibriumType] = EquilibriumType.PURE

    def __post_init__(self) -> None:
        object.__setattr__(self, "profile", tuple(self.profile))
        object.__setattr__(self, "payoffs", tuple(float(p) for p in self.payoffs))

    @property
    def num_players(self) -> int:
        return len(self.profile)

    def as_distributions(self, num_strategies: int) -> tuple[tuple[float, ...], ...]:
        """Express the profile as degenerate probability distributions."""
        return tuple(
            tuple(1.0 if s == chosen else 0.0 for s in range(num_strategies)) for chosen in self.profile
        )

    def describe(self, strategy_names: list[str] | None = None) -> str:
        """Human-readable profile, e.g. "Defect,Defect"."""
        if strategy_names is None:
            return ",".join(str(s) for s in self.profile)
        return ",".join(strategy_names[s] for s in self.profile)

    def to_dict(self) -> dict:
        return {
            "type": self.equilibrium_type.value,
            "strategies": list(self.profile),
            "payoffs": list(self.payoffs),
            "stability": self.stability,
            "is_strict": self.is_strict,
        }


@dataclass(frozen=True)
class MixedEquilibrium:
    """Mixed-strategy equilibrium.

    Attributes:
        distributions: Probability distribution over strategies for each player
        payoffs: Expected payoff for each player
        stability: Heuristic robustness score in [0, 1]
        is_strict: Always False; a mixed equilibrium leaves players indifferent
    """

    distributions: tuple[tuple[float, ...], ...]
    payoffs: tuple[float, ...]
    stability: float
    is_strict: bool = False

    equilibrium_type: ClassVar[EquilibriumType] = EquilibriumType.MIXED

    def __post_init__(self) -> None:
        object.__setattr__(
            self,
            "distributions",
            tuple(tuple(float(p) for p in dist) for dist in self.distributions),
        )
        object.__setattr__(self, "payoffs", tuple(float(p) for p in self.payoffs))

    @property
    def num_players(self) -> int:
        return len(self.distributions)

    def support(self, player: int, tolerance: float = 1e-8) -> tuple[int, ...]:
        """Strategies the player assigns probability above tolerance."""
        return tuple(s for s, prob in enumerate(self.distributions[player]) if prob > tolerance)

    def support_sizes(self, tolerance: float = 1e-8) -> list[int]:
        return [len(self.support(p, tolerance)) for p in range(self.num_players)]

    def describe(self, strategy_names: list[str] | None = None) -> str:
        parts = []
        for dist in self.distributions:
            if strategy_names is None:
                parts.append("(" + ", ".join(f"{p:.3f}" for p in dist) + ")")
            else:
                parts.append(
                    "(" + ", ".join(f"{name}={p:.3f}" for name, p in zip(strategy_names, dist)) + ")"
                )
        return " ".join(parts)

    def to_dict(self) -> dict:
        return {
            "type": self.equilibrium_type.value,
            "strategies": [list(dist) for dist in self.distributions],
            "payoffs": list(self.payoffs),
            "stability": self.stability,
            "is_strict": self.is_strict,
        }


NashEquilibrium = Union[PureEquilibrium, MixedEquilibrium]


def same_equilibrium(a: NashEquilibrium, b: NashEquilibrium, tolerance: float = 1e-6) -> bool:
    """Compare two equilibria by strategy profile.

    Pure equilibria match on exact indices; mixed equilibria match when every
    probability agrees within tolerance. A pure and a mixed equilibrium never
    match.
    """
    if a.equilibrium_type is not b.equilibrium_type:
        return False
    if isinstance(a, PureEquilibrium):
        return a.profile == b.profile
    if len(a.distributions) != len(b.distributions):
        return False
    for dist_a, dist_b in zip(a.distributions, b.distributions):
        if len(dist_a) != len(dist_b):
            return False
        if any(abs(pa - pb) >= tolerance for pa, pb in zip(dist_a, dist_b)):
            return False
    return True


def deduplicate(equilibria: Iterable[NashEquilibrium], tolerance: float = 1e-6) -> list[NashEquilibrium]:
    """Drop equilibria whose profile matches an earlier one, keeping order."""
    unique: list[NashEquilibrium] = []
    for eq in equilibria:
        if not any(same_equilibrium(eq, existing, tolerance) for existing in unique):
            unique.append(eq)
    return unique


def profile_key(equilibrium: NashEquilibrium, digits: int = 6) -> tuple:
    """Hashable key for order-independent comparison of equilibrium sets."""
    if isinstance(equilibrium, PureEquilibrium):
        return (EquilibriumType.PURE.value, equilibrium.profile)
    return (
        EquilibriumType.MIXED.value,
        tuple(tuple(round(p, digits) + 0.0 for p in dist) for dist in equilibrium.distributions),
    )

"""Best-response analysis for two-player games."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

from nashlab.config import SolverConfig
from nashlab.engine.payoffs import iter_profiles, pure_payoff, strategy_payoffs
from nashlab.errors import UnsupportedGameError
from nashlab.models.matrices import PayoffMatrix

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StrategyResponse:
    """Expected payoff of one own strategy against a fixed opponent mix."""

    strategy: int
    payoff: float
    is_optimal: bool
    margin_from_best: float


@dataclass(frozen=True)
class BestResponse:
    """A player's best response to an opponent distribution."""

    player: int
    opponent_distribution: tuple[float, ...]
    responses: tuple[StrategyResponse, ...]
    best_strategies: tuple[int, ...]
    max_payoff: float

    @property
    def is_unique(self) -> bool:
        return len(self.best_strategies) == 1

    def to_dict(self) -> dict:
        return {
            "player": self.player,
            "opponent_distribution": list(self.opponent_distribution),
            "responses": [
                {
                    "strategy": r.strategy,
                    "payoff": r.payoff,
                    "is_optimal": r.is_optimal,
                    "margin_from_best": r.margin_from_best,
                }
                for r in self.responses
            ],
            "best_strategies": list(self.best_strategies),
            "max_payoff": self.max_payoff,
        }


@dataclass(frozen=True)
class BestResponsePoint:
    """One grid point of a best-response curve."""

    opponent_probability: float
    best_strategies: tuple[int, ...]
    max_payoff: float


class BestResponseAnalyzer:
    """Best responses of either player in a two-player game.

    Raises:
        UnsupportedGameError: If the game does not have exactly 2 players
    """

    def __init__(self, matrix: PayoffMatrix, config: SolverConfig | None = None):
        if matrix.players != 2:
            raise UnsupportedGameError(
                f"Best-response analysis handles 2-player games, got {matrix.players} players"
            )
        self.matrix = matrix
        self.config = config or SolverConfig()

    def best_response(self, player: int, opponent_distribution: Sequence[float]) -> BestResponse:
        """Compute ``player``'s best response to an opponent mix.

        Strategies within relaxed tolerance of the maximum are all optimal.
        """
        n = self.matrix.num_strategies
        if len(opponent_distribution) != n:
            raise ValueError(
                f"Opponent distribution has {len(opponent_distribution)} entries, expected {n}"
            )

        distributions: list[Sequence[float]] = [[0.0] * n, [0.0] * n]
        distributions[1 - player] = opponent_distribution
        payoffs = strategy_payoffs(self.matrix, distributions, player)
        best = max(payoffs)
        tol = self.config.relaxed_tolerance

        responses = tuple(
            StrategyResponse(
                strategy=s,
                payoff=value,
                is_optimal=value >= best - tol,
                margin_from_best=best - value,
            )
            for s, value in enumerate(payoffs)
        )
        return BestResponse(
            player=player,
            opponent_distribution=tuple(float(p) for p in opponent_distribution),
            responses=responses,
            best_strategies=tuple(r.strategy for r in responses if r.is_optimal),
            max_payoff=best,
        )

    def best_response_curve(self, player: int, resolution: int = 20) -> list[BestResponsePoint]:
        """Sweep the opponent's probability on their first strategy from 0 to 1.

        Only defined when the opponent has exactly two strategies.

        Args:
            player: Player whose best response is traced
            resolution: Number of grid intervals; the curve has resolution + 1 points
        """
        if self.matrix.num_strategies != 2:
            raise ValueError("Best-response curves need exactly 2 strategies")
        if resolution < 1:
            raise ValueError(f"resolution must be at least 1, got {resolution}")

        points = []
        for i in range(resolution + 1):
            q = i / resolution
            response = self.best_response(player, (q, 1.0 - q))
            points.append(
                BestResponsePoint(
                    opponent_probability=q,
                    best_strategies=response.best_strategies,
                    max_payoff=response.max_payoff,
                )
            )
        return points

    def pure_best_response_profiles(self) -> list[tuple[int, int]]:
        """Pure profiles where each strategy is a best response to the other."""
        n = self.matrix.num_strategies
        tol = self.config.tolerance
        profiles = []
        for profile in iter_profiles(n, 2):
            mutual = True
            for player in (0, 1):
                current = pure_payoff(self.matrix, profile, player)
                for alternative in range(n):
                    deviation = list(profile)
                    deviation[player] = alternative
                    if pure_payoff(self.matrix, deviation, player) > current + tol:
                        mutual = False
                        break
                if not mutual:
                    break
            if mutual:
                profiles.append(tuple(profile))
        logger.debug(f"{len(profiles)} mutual best-response profiles")
        return profiles

"""Mixed-strategy Nash equilibria for two-player games.

2x2 games are solved in closed form from the two indifference equations.
Larger games use support enumeration: for every pair of equal-size supports
(sizes ``min_support_size`` through ``max_support_size``), solve the linear
system that makes each player indifferent across their support, then verify
the resulting profile. The support cap bounds the search, so completeness
is not guaranteed for games with more than ``max_support_size`` strategies.
"""

from __future__ import annotations

import itertools
import logging
from typing import Sequence

from nashlab.config import SolverConfig
from nashlab.engine.linalg import solve_linear_system
from nashlab.engine.payoffs import expected_payoffs, strategy_payoffs
from nashlab.errors import SingularSystemError, UnsupportedGameError
from nashlab.models.equilibrium import MixedEquilibrium, deduplicate
from nashlab.models.matrices import PayoffMatrix

logger = logging.getLogger(__name__)


class MixedStrategySolver:
    """Two-player mixed equilibrium solver."""

    def __init__(self, config: SolverConfig | None = None):
        self.config = config or SolverConfig()

    def find(self, matrix: PayoffMatrix) -> list[MixedEquilibrium]:
        """Find mixed equilibria of a two-player game.

        Args:
            matrix: Well-formed two-player payoff matrix

        Returns:
            Mixed equilibria where at least one player randomizes (possibly empty)

        Raises:
            UnsupportedGameError: If the game does not have exactly 2 players
        """
        if matrix.players != 2:
            raise UnsupportedGameError(
                f"Mixed-strategy solver handles 2-player games, got {matrix.players} players"
            )

        if matrix.num_strategies == 2:
            equilibrium = self.solve_two_by_two(matrix)
            equilibria = [equilibrium] if equilibrium is not None else []
        elif matrix.num_strategies > 2:
            equilibria = self.support_enumeration(matrix)
        else:
            equilibria = []

        logger.info(f"Mixed search found {len(equilibria)} equilibria")
        return equilibria

    # =========================================================================
    # 2x2 closed form
    # =========================================================================

    def solve_two_by_two(self, matrix: PayoffMatrix) -> MixedEquilibrium | None:
        """Solve the indifference equations of a 2x2 game.

        Player 1's mixing probability q makes player 0 indifferent between
        rows; player 0's probability p makes player 1 indifferent between
        columns. Returns None when either equation is degenerate or a
        probability falls outside [0, 1].
        """
        u = matrix.payoffs
        a00, a01, a10, a11 = u[0][0][0], u[0][1][0], u[1][0][0], u[1][1][0]
        b00, b01, b10, b11 = u[0][0][1], u[0][1][1], u[1][0][1], u[1][1][1]

        denominator_q = (a00 - a01) - (a10 - a11)
        denominator_p = (b00 - b10) - (b01 - b11)
        eps = self.config.degeneracy_tolerance
        if abs(denominator_q) < eps or abs(denominator_p) < eps:
            logger.debug("2x2 indifference equations are degenerate, no interior equilibrium")
            return None

        q = (a11 - a01) / denominator_q
        p = (b11 - b10) / denominator_p

        tol = self.config.tolerance
        if not (-tol <= p <= 1 + tol and -tol <= q <= 1 + tol):
            logger.debug(f"2x2 solution outside the simplex: p={p:.6f}, q={q:.6f}")
            return None

        p = min(1.0, max(0.0, p))
        q = min(1.0, max(0.0, q))
        distributions = ((p, 1.0 - p), (q, 1.0 - q))
        if self._is_pure(distributions):
            return None

        return MixedEquilibrium(
            distributions=distributions,
            payoffs=expected_payoffs(matrix, distributions),
            stability=self.stability(distributions),
        )

    # =========================================================================
    # Support enumeration
    # =========================================================================

    def support_enumeration(self, matrix: PayoffMatrix) -> list[MixedEquilibrium]:
        """Search equal-size support pairs for mixed equilibria."""
        n = matrix.num_strategies
        largest = min(n, self.config.max_support_size)
        found: list[MixedEquilibrium] = []

        for size in range(self.config.min_support_size, largest + 1):
            for support_0 in itertools.combinations(range(n), size):
                for support_1 in itertools.combinations(range(n), size):
                    equilibrium = self.solve_support_pair(matrix, support_0, support_1)
                    if equilibrium is not None:
                        found.append(equilibrium)

        return deduplicate(found, self.config.relaxed_tolerance)

    def solve_support_pair(
        self,
        matrix: PayoffMatrix,
        support_0: Sequence[int],
        support_1: Sequence[int],
    ) -> MixedEquilibrium | None:
        """Solve and verify one support pair.

        Player 1's probabilities over ``support_1`` must equalize player 0's
        payoffs across ``support_0``, and vice versa.
        """
        u = matrix.payoffs
        try:
            # Opponent mix that makes player 0 indifferent across support_0
            y = self._indifference_mix(
                support_0,
                support_1,
                lambda own, other: u[own][other][0],
            )
            # Opponent mix that makes player 1 indifferent across support_1
            x = self._indifference_mix(
                support_1,
                support_0,
                lambda own, other: u[other][own][1],
            )
        except SingularSystemError as e:
            logger.debug(f"Supports {support_0}/{support_1} rejected: {e}")
            return None

        tol = self.config.tolerance
        if any(prob < -tol for prob in x) or any(prob < -tol for prob in y):
            logger.debug(f"Supports {support_0}/{support_1} rejected: negative probability")
            return None

        distributions = (
            self._embed(x, support_0, matrix.num_strategies),
            self._embed(y, support_1, matrix.num_strategies),
        )
        if distributions[0] is None or distributions[1] is None or self._is_pure(distributions):
            return None

        if not self.verify(matrix, distributions):
            logger.debug(f"Supports {support_0}/{support_1} rejected: profile is not an equilibrium")
            return None

        return MixedEquilibrium(
            distributions=distributions,
            payoffs=expected_payoffs(matrix, distributions),
            stability=self.stability(distributions),
        )

    def _indifference_mix(self, own_support, opponent_support, payoff) -> list[float]:
        """Solve for opponent probabilities that equalize own payoffs.

        One equation per own-support strategy beyond the first, stating its
        expected payoff equals the first's, plus the sum-to-one row.
        """
        first = own_support[0]
        rows = [
            [payoff(first, t) - payoff(s, t) for t in opponent_support]
            for s in own_support[1:]
        ]
        rows.append([1.0] * len(opponent_support))
        rhs = [0.0] * (len(own_support) - 1) + [1.0]
        return solve_linear_system(rows, rhs, self.config.degeneracy_tolerance)

    @staticmethod
    def _embed(probabilities: Sequence[float], support: Sequence[int], num_strategies: int):
        """Clip, normalize and place support probabilities in a full vector."""
        clipped = [max(0.0, p) for p in probabilities]
        total = sum(clipped)
        if total <= 0:
            return None
        full = [0.0] * num_strategies
        for s, p in zip(support, clipped):
            full[s] = p / total
        return tuple(full)

    def verify(self, matrix: PayoffMatrix, distributions) -> bool:
        """Check indifference on the support and no profitable outside strategy."""
        tol = self.config.relaxed_tolerance
        for player in range(matrix.players):
            values = strategy_payoffs(matrix, distributions, player)
            support = [s for s, p in enumerate(distributions[player]) if p > self.config.tolerance]
            support_values = [values[s] for s in support]
            target = max(support_values)
            if target - min(support_values) > tol:
                return False
            if any(values[s] > target + tol for s in range(matrix.num_strategies) if s not in support):
                return False
        return True

    def _is_pure(self, distributions) -> bool:
        tol = self.config.tolerance
        return all(sum(1 for p in dist if p > tol) == 1 for dist in distributions)

    def stability(self, distributions) -> float:
        """Score in [0, 1] that falls as average support size grows."""
        tol = self.config.tolerance
        sizes = [sum(1 for p in dist if p > tol) for dist in distributions]
        average = sum(sizes) / len(sizes)
        largest = len(distributions[0])
        if largest <= 1:
            return 1.0
        return max(0.0, min(1.0, 1 - (average - 1) / (largest - 1)))

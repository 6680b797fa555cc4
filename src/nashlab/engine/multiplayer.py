"""Equilibrium search for games with three or more players.

Three searches run in turn and their results are deduplicated by profile:

1. Pure equilibria, through the same best-response check as two-player games.
2. Symmetric mixed equilibria (symmetric games only): uniform mixing over
   every strategy, then a fixed-point search over each pair of strategies
   with all players sharing one mixing probability.
3. Bounded asymmetric equilibria: up to ``max_mixed_players`` players mix
   50/50 over a strategy pair while the rest play pure strategies.

Payoffs use the aggregate-opponent approximation from
``nashlab.engine.payoffs``. The searches are heuristic and bounded, so an
empty result does not prove the game has no equilibrium.
"""

from __future__ import annotations

import itertools
import logging
from typing import Iterator, Sequence

from nashlab.config import SolverConfig
from nashlab.engine.payoffs import expected_payoffs, strategy_payoff, strategy_payoffs
from nashlab.engine.pure import PureStrategyFinder
from nashlab.errors import UnsupportedGameError
from nashlab.models.equilibrium import MixedEquilibrium, NashEquilibrium, deduplicate
from nashlab.models.matrices import PayoffMatrix

logger = logging.getLogger(__name__)

Profile = tuple[tuple[float, ...], ...]


class MultiPlayerSolver:
    """Approximate equilibrium search for n >= 3 players."""

    def __init__(
        self,
        config: SolverConfig | None = None,
        pure_finder: PureStrategyFinder | None = None,
    ):
        self.config = config or SolverConfig()
        self.pure_finder = pure_finder or PureStrategyFinder(self.config)

    def find(self, matrix: PayoffMatrix) -> list[NashEquilibrium]:
        """Run all three searches and deduplicate.

        Raises:
            UnsupportedGameError: If the game has fewer than 3 players
        """
        if matrix.players < 3:
            raise UnsupportedGameError(
                f"Multi-player solver handles games with 3 or more players, got {matrix.players}"
            )

        pure = self.pure_finder.find(matrix)
        symmetric = self.find_symmetric_mixed(matrix) if matrix.is_symmetric else []
        asymmetric = self.find_asymmetric(matrix)

        equilibria = deduplicate([*pure, *symmetric, *asymmetric], self.config.relaxed_tolerance)
        logger.info(
            f"Multi-player search ({matrix.players} players): {len(pure)} pure, "
            f"{len(symmetric)} symmetric mixed, {len(asymmetric)} asymmetric, "
            f"{len(equilibria)} unique"
        )
        return equilibria

    # =========================================================================
    # Symmetric mixed search
    # =========================================================================

    def find_symmetric_mixed(self, matrix: PayoffMatrix) -> list[MixedEquilibrium]:
        """Search mixing profiles shared by every player."""
        n = matrix.num_strategies
        found: list[MixedEquilibrium] = []

        uniform = tuple([1.0 / n] * n)
        profile = tuple([uniform] * matrix.players)
        if n > 1 and self.is_equilibrium(matrix, profile):
            found.append(self._build(matrix, profile))

        for first, second in itertools.combinations(range(n), 2):
            p = self.pairwise_fixed_point(matrix, first, second)
            if p is None:
                continue
            mix = [0.0] * n
            mix[first] = p
            mix[second] = 1.0 - p
            profile = tuple([tuple(mix)] * matrix.players)
            if self.is_equilibrium(matrix, profile):
                found.append(self._build(matrix, profile))
            else:
                logger.debug(f"Pair ({first}, {second}) at p={p:.6f} has a profitable outside strategy")

        return found

    def pairwise_fixed_point(self, matrix: PayoffMatrix, first: int, second: int) -> float | None:
        """Find the shared probability on ``first`` that equalizes the pair.

        Starts at ``fixed_point_start`` and moves the probability against the
        payoff difference until the difference is within relaxed tolerance.
        Returns None when the search does not converge to an interior point.
        """
        tol = self.config.tolerance

        def difference(p: float) -> float:
            mix = [0.0] * matrix.num_strategies
            mix[first] = p
            mix[second] = 1.0 - p
            profile = [mix] * matrix.players
            return strategy_payoff(matrix, profile, 0, first) - strategy_payoff(matrix, profile, 0, second)

        # difference(p) is linear in p; each diff / slope step shrinks the distance
        # to the root by (1 - step size) whatever the payoff scale
        slope = difference(1.0) - difference(0.0)
        flat = abs(slope) < self.config.degeneracy_tolerance

        p = self.config.fixed_point_start
        for _ in range(self.config.max_iterations):
            diff = difference(p)
            if abs(diff) < self.config.relaxed_tolerance:
                if tol < p < 1.0 - tol:
                    return p
                return None
            if flat:
                break
            p = min(1.0, max(0.0, p - self.config.fixed_point_step_size * diff / slope))

        logger.debug(f"Fixed point for pair ({first}, {second}) did not converge")
        return None

    # =========================================================================
    # Bounded asymmetric search
    # =========================================================================

    def find_asymmetric(self, matrix: PayoffMatrix) -> list[MixedEquilibrium]:
        """Check profiles where a few players mix 50/50 and the rest play pure."""
        found: list[MixedEquilibrium] = []
        for mixed_players in self.mixed_player_patterns(matrix.players):
            for profile in self.candidate_profiles(matrix, mixed_players):
                if self.is_equilibrium(matrix, profile):
                    found.append(self._build(matrix, profile))
        return found

    def mixed_player_patterns(self, num_players: int) -> Iterator[tuple[int, ...]]:
        """Every set of 1 to ``max_mixed_players`` players that will mix."""
        for count in range(1, min(self.config.max_mixed_players, num_players) + 1):
            yield from itertools.combinations(range(num_players), count)

    def candidate_profiles(self, matrix: PayoffMatrix, mixed_players: Sequence[int]) -> Iterator[Profile]:
        """Pure choices for pure players crossed with 50/50 pairs for mixed players."""
        n = matrix.num_strategies
        pure_players = [p for p in range(matrix.players) if p not in mixed_players]

        pure_options = [self._pure_vector(s, n) for s in range(n)]
        mixed_options = []
        for first, second in itertools.combinations(range(n), 2):
            mix = [0.0] * n
            mix[first] = 0.5
            mix[second] = 0.5
            mixed_options.append(tuple(mix))

        for pure_choice in itertools.product(pure_options, repeat=len(pure_players)):
            for mixed_choice in itertools.product(mixed_options, repeat=len(mixed_players)):
                profile: list[tuple[float, ...]] = [()] * matrix.players
                for player, vector in zip(pure_players, pure_choice):
                    profile[player] = vector
                for player, vector in zip(mixed_players, mixed_choice):
                    profile[player] = vector
                yield tuple(profile)

    # =========================================================================
    # Shared checks
    # =========================================================================

    def is_equilibrium(self, matrix: PayoffMatrix, profile: Profile) -> bool:
        """Support strategies tie and no outside strategy does better, for every player."""
        tol = self.config.relaxed_tolerance
        for player in range(matrix.players):
            values = strategy_payoffs(matrix, profile, player)
            support = [s for s, p in enumerate(profile[player]) if p > self.config.tolerance]
            support_values = [values[s] for s in support]
            target = max(support_values)
            if target - min(support_values) > tol:
                return False
            if any(values[s] > target + tol for s in range(matrix.num_strategies) if s not in support):
                return False
        return True

    def stability(self, profile: Profile) -> float:
        """Support-size score damped by player count and capped below pure stability."""
        tol = self.config.tolerance
        sizes = [sum(1 for p in dist if p > tol) for dist in profile]
        average = sum(sizes) / len(sizes)
        largest = len(profile[0])
        player_penalty = max(0.0, 1 - (len(profile) - 2) * self.config.player_count_penalty)
        support_penalty = 1.0 if largest <= 1 else max(0.0, 1 - (average - 1) / (largest - 1))
        return player_penalty * support_penalty * self.config.mixed_stability_ceiling

    def _build(self, matrix: PayoffMatrix, profile: Profile) -> MixedEquilibrium:
        return MixedEquilibrium(
            distributions=profile,
            payoffs=expected_payoffs(matrix, profile),
            stability=self.stability(profile),
        )

    @staticmethod
    def _pure_vector(strategy: int, num_strategies: int) -> tuple[float, ...]:
        return tuple(1.0 if s == strategy else 0.0 for s in range(num_strategies))

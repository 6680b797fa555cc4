"""Pure-strategy Nash equilibrium search.

Enumerates every pure profile (|S|^P of them) and keeps the ones where no
player gains by a unilateral deviation. Works for any player count; games
with three or more players evaluate payoffs through the aggregate-opponent
approximation in ``nashlab.engine.payoffs``.
"""

from __future__ import annotations

import logging
from typing import Sequence

from nashlab.config import SolverConfig
from nashlab.engine.payoffs import deviation_payoffs, iter_profiles, pure_payoff, pure_payoffs
from nashlab.models.equilibrium import PureEquilibrium
from nashlab.models.matrices import PayoffMatrix

logger = logging.getLogger(__name__)


class PureStrategyFinder:
    """Brute-force best-response search over pure profiles."""

    def __init__(self, config: SolverConfig | None = None):
        self.config = config or SolverConfig()

    def find(self, matrix: PayoffMatrix) -> list[PureEquilibrium]:
        """Find all pure-strategy Nash equilibria of a game.

        Args:
            matrix: Well-formed payoff matrix

        Returns:
            Equilibria in lexicographic profile order (possibly empty)
        """
        equilibria = []
        for profile in iter_profiles(matrix.num_strategies, matrix.players):
            equilibrium = self.check_profile(matrix, profile)
            if equilibrium is not None:
                equilibria.append(equilibrium)

        logger.info(
            f"Pure search over {matrix.num_strategies ** matrix.players} profiles "
            f"found {len(equilibria)} equilibria"
        )
        return equilibria

    def check_profile(self, matrix: PayoffMatrix, profile: Sequence[int]) -> PureEquilibrium | None:
        """Return the equilibrium at ``profile`` or None if some player can improve."""
        tol = self.config.tolerance
        min_loss: float | None = None
        is_strict = True

        for player in range(matrix.players):
            current = pure_payoff(matrix, profile, player)
            for _, alternative_payoff in deviation_payoffs(matrix, profile, player):
                if alternative_payoff > current + tol:
                    return None
                loss = current - alternative_payoff
                if loss <= tol:
                    is_strict = False
                min_loss = loss if min_loss is None else min(min_loss, loss)

        return PureEquilibrium(
            profile=tuple(profile),
            payoffs=pure_payoffs(matrix, profile),
            stability=self.stability(min_loss),
            is_strict=is_strict,
        )

    def stability(self, min_loss: float | None) -> float:
        """Normalize the smallest deviation loss into [0, 1].

        A game with a single strategy has no deviations and is fully stable.
        """
        if min_loss is None:
            return 1.0
        return max(0.0, min(1.0, min_loss / self.config.stability_payoff_scale))

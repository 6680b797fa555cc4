"""Equilibrium orchestration.

``NashEquilibriumCalculator`` composes the solvers, the dominance analyzer
and the validator. Every collaborator is passed in (or built from the shared
``SolverConfig``), so calculators are cheap, independent and reentrant.

The module-level functions build a fresh calculator per call:

    from nashlab.engine import find_all_equilibria, recommended_equilibria
    from nashlab.models import build_matrix, GameType

    matrix = build_matrix(GameType.BATTLE_OF_SEXES)
    for eq in find_all_equilibria(matrix):
        print(eq.describe(matrix.strategy_names))

    for ranked in recommended_equilibria(matrix):
        print(ranked.recommendation)
"""

from __future__ import annotations

import functools
import logging
from typing import NamedTuple, Union

from nashlab.config import SolverConfig
from nashlab.engine.dominance import DominanceAnalysisResult, DominanceAnalyzer
from nashlab.engine.mixed import MixedStrategySolver
from nashlab.engine.multiplayer import MultiPlayerSolver
from nashlab.engine.pure import PureStrategyFinder
from nashlab.engine.validator import EquilibriumValidator, ValidationReport
from nashlab.errors import StructuralError
from nashlab.models.equilibrium import (
    MixedEquilibrium,
    NashEquilibrium,
    PureEquilibrium,
    deduplicate,
)
from nashlab.models.matrices import PayoffMatrix, ShapeError
from nashlab.models.matrices import validate_matrix_shape as _shape_errors
from nashlab.models.scenario import GameScenario

logger = logging.getLogger(__name__)

GameSource = Union[GameScenario, PayoffMatrix]


class RecommendedEquilibrium(NamedTuple):
    """A valid equilibrium with its report and a one-line recommendation."""

    equilibrium: NashEquilibrium
    validation: ValidationReport
    recommendation: str

    def to_dict(self) -> dict:
        return {
            "equilibrium": self.equilibrium.to_dict(),
            "validation": self.validation.to_dict(),
            "recommendation": self.recommendation,
        }


def to_matrix(source: GameSource) -> PayoffMatrix:
    """Accept either a scenario or a bare payoff matrix."""
    if isinstance(source, GameScenario):
        return source.to_payoff_matrix()
    return source


class NashEquilibriumCalculator:
    """Dispatches equilibrium searches by player count and ranks results."""

    def __init__(
        self,
        config: SolverConfig | None = None,
        pure_finder: PureStrategyFinder | None = None,
        mixed_solver: MixedStrategySolver | None = None,
        multi_player_solver: MultiPlayerSolver | None = None,
        dominance_analyzer: DominanceAnalyzer | None = None,
        validator: EquilibriumValidator | None = None,
    ):
        self.config = config or SolverConfig()
        self.pure_finder = pure_finder or PureStrategyFinder(self.config)
        self.mixed_solver = mixed_solver or MixedStrategySolver(self.config)
        self.multi_player_solver = multi_player_solver or MultiPlayerSolver(
            self.config, pure_finder=self.pure_finder
        )
        self.dominance_analyzer = dominance_analyzer or DominanceAnalyzer(self.config)
        self.validator = validator or EquilibriumValidator(self.config)

    # =========================================================================
    # Input checks
    # =========================================================================

    @staticmethod
    def validate_matrix_shape(matrix: PayoffMatrix) -> list[ShapeError]:
        """Report every structural problem without raising."""
        return _shape_errors(matrix)

    def ensure_valid(self, source: GameSource) -> PayoffMatrix:
        """Convert ``source`` to a matrix and raise if it is malformed.

        Raises:
            StructuralError: If the matrix has any shape problem
        """
        matrix = to_matrix(source)
        errors = _shape_errors(matrix)
        if errors:
            logger.debug(f"Rejected payoff matrix with {len(errors)} shape errors")
            raise StructuralError(errors)
        return matrix

    # =========================================================================
    # Searches
    # =========================================================================

    def find_pure_equilibria(self, source: GameSource) -> list[PureEquilibrium]:
        return self.pure_finder.find(self.ensure_valid(source))

    def find_mixed_equilibria(self, source: GameSource) -> list[MixedEquilibrium]:
        """Mixed equilibria of a two-player game.

        Raises:
            StructuralError: If the matrix is malformed
            UnsupportedGameError: If the game does not have 2 players
        """
        return self.mixed_solver.find(self.ensure_valid(source))

    def find_multi_player_equilibria(self, source: GameSource) -> list[NashEquilibrium]:
        """Equilibria of a game with three or more players.

        Raises:
            StructuralError: If the matrix is malformed
            UnsupportedGameError: If the game has fewer than 3 players
        """
        return self.multi_player_solver.find(self.ensure_valid(source))

    def find_all_equilibria(self, source: GameSource) -> list[NashEquilibrium]:
        """All equilibria the bounded searches can find, pure first.

        An empty list is a normal result.

        Raises:
            StructuralError: If the matrix is malformed
        """
        matrix = self.ensure_valid(source)
        if matrix.players == 2:
            pure = self.pure_finder.find(matrix)
            mixed = self.mixed_solver.find(matrix)
            equilibria = deduplicate([*pure, *mixed], self.config.relaxed_tolerance)
        else:
            equilibria = self.multi_player_solver.find(matrix)

        logger.info(f"Found {len(equilibria)} equilibria for {matrix.players}-player game")
        return equilibria

    def analyze_dominance(self, source: GameSource) -> DominanceAnalysisResult:
        return self.dominance_analyzer.analyze(self.ensure_valid(source))

    def validate_equilibrium(self, equilibrium: NashEquilibrium, source: GameSource) -> ValidationReport:
        return self.validator.validate(equilibrium, self.ensure_valid(source))

    # =========================================================================
    # Ranking
    # =========================================================================

    def find_validated_equilibria(
        self, source: GameSource
    ) -> list[tuple[NashEquilibrium, ValidationReport]]:
        """Every found equilibrium paired with its validation report."""
        matrix = self.ensure_valid(source)
        return [(eq, self.validator.validate(eq, matrix)) for eq in self.find_all_equilibria(matrix)]

    def recommended_equilibria(self, source: GameSource) -> list[RecommendedEquilibrium]:
        """Valid equilibria ranked by stability, then efficiency, then welfare.

        Stability and efficiency differences within ``ranking_band`` count
        as ties and fall through to the next key.
        """
        validated = self.find_validated_equilibria(source)
        valid = []
        for eq, report in validated:
            if report.is_valid:
                valid.append((eq, report))
            else:
                logger.warning(
                    f"Discarding {eq.equilibrium_type.value} equilibrium that failed validation: "
                    f"{[e.message for e in report.errors]}"
                )

        band = self.config.ranking_band

        def compare(a, b) -> float:
            ra, rb = a[1], b[1]
            if abs(ra.stability.overall - rb.stability.overall) > band:
                return rb.stability.overall - ra.stability.overall
            if abs(ra.quality.efficiency - rb.quality.efficiency) > band:
                return rb.quality.efficiency - ra.quality.efficiency
            return rb.quality.social_welfare - ra.quality.social_welfare

        ranked = sorted(valid, key=functools.cmp_to_key(compare))

        results = []
        for index, (eq, report) in enumerate(ranked):
            results.append(
                RecommendedEquilibrium(
                    equilibrium=eq,
                    validation=report,
                    recommendation=self._recommendation(index, len(ranked), report),
                )
            )
        return results

    @staticmethod
    def _recommendation(index: int, total: int, report: ValidationReport) -> str:
        if index == 0:
            if total > 1:
                return "Most recommended equilibrium based on stability and efficiency"
            return "Only valid equilibrium found"
        if report.stability.overall > 0.8:
            return "Highly stable alternative equilibrium"
        if report.quality.efficiency > 0.8:
            return "Efficient alternative, but potentially less stable"
        return "Valid but suboptimal alternative"


# =============================================================================
# Module-level entry points
# =============================================================================


def find_pure_equilibria(source: GameSource, config: SolverConfig | None = None) -> list[PureEquilibrium]:
    return NashEquilibriumCalculator(config).find_pure_equilibria(source)


def find_mixed_equilibria(source: GameSource, config: SolverConfig | None = None) -> list[MixedEquilibrium]:
    return NashEquilibriumCalculator(config).find_mixed_equilibria(source)


def find_multi_player_equilibria(
    source: GameSource, config: SolverConfig | None = None
) -> list[NashEquilibrium]:
    return NashEquilibriumCalculator(config).find_multi_player_equilibria(source)


def find_all_equilibria(source: GameSource, config: SolverConfig | None = None) -> list[NashEquilibrium]:
    return NashEquilibriumCalculator(config).find_all_equilibria(source)


def analyze_dominance(source: GameSource, config: SolverConfig | None = None) -> DominanceAnalysisResult:
    return NashEquilibriumCalculator(config).analyze_dominance(source)


def validate_equilibrium(
    equilibrium: NashEquilibrium, source: GameSource, config: SolverConfig | None = None
) -> ValidationReport:
    return NashEquilibriumCalculator(config).validate_equilibrium(equilibrium, source)


def recommended_equilibria(
    source: GameSource, config: SolverConfig | None = None
) -> list[RecommendedEquilibrium]:
    return NashEquilibriumCalculator(config).recommended_equilibria(source)


def validate_matrix_shape(source: GameSource) -> list[ShapeError]:
    """Standalone shape pre-check; never raises for malformed input."""
    return _shape_errors(to_matrix(source))

"""Equilibrium engine for nashlab.

This module contains the computational core:
- pure: brute-force pure-strategy equilibrium search
- mixed: 2x2 closed form and support enumeration for two-player games
- multiplayer: bounded approximate search for three or more players
- dominance: strict/weak dominance and iterated elimination
- validator: Nash-condition checks, stability and quality scoring
- best_response: best responses and best-response curves
- calculator: orchestration and ranking

Usage:
    from nashlab.engine import NashEquilibriumCalculator
    from nashlab.models import GameType, build_matrix

    calculator = NashEquilibriumCalculator()
    matrix = build_matrix(GameType.PRISONERS_DILEMMA)

    equilibria = calculator.find_all_equilibria(matrix)
    dominance = calculator.analyze_dominance(matrix)
    for ranked in calculator.recommended_equilibria(matrix):
        print(ranked.equilibrium.describe(matrix.strategy_names), ranked.recommendation)
"""

from nashlab.engine.best_response import BestResponse, BestResponseAnalyzer, BestResponsePoint
from nashlab.engine.calculator import (
    NashEquilibriumCalculator,
    RecommendedEquilibrium,
    analyze_dominance,
    find_all_equilibria,
    find_mixed_equilibria,
    find_multi_player_equilibria,
    find_pure_equilibria,
    recommended_equilibria,
    validate_equilibrium,
    validate_matrix_shape,
)
from nashlab.engine.dominance import (
    DominanceAnalysisResult,
    DominanceAnalyzer,
    DominanceType,
    DominantStrategy,
    DominatedStrategy,
    EliminationStep,
    ReducedGame,
)
from nashlab.engine.linalg import solve_linear_system
from nashlab.engine.mixed import MixedStrategySolver
from nashlab.engine.multiplayer import MultiPlayerSolver
from nashlab.engine.pure import PureStrategyFinder
from nashlab.engine.validator import (
    EquilibriumValidator,
    QualityMetrics,
    RiskProfile,
    Severity,
    StabilityAnalysis,
    ValidationIssue,
    ValidationReport,
    ValidationWarning,
    ViolationType,
    WarningType,
)

__all__ = [
    # Orchestration
    "NashEquilibriumCalculator",
    "RecommendedEquilibrium",
    "find_pure_equilibria",
    "find_mixed_equilibria",
    "find_multi_player_equilibria",
    "find_all_equilibria",
    "analyze_dominance",
    "validate_equilibrium",
    "recommended_equilibria",
    "validate_matrix_shape",
    # Solvers
    "PureStrategyFinder",
    "MixedStrategySolver",
    "MultiPlayerSolver",
    "solve_linear_system",
    # Dominance
    "DominanceAnalyzer",
    "DominanceAnalysisResult",
    "DominanceType",
    "DominantStrategy",
    "DominatedStrategy",
    "EliminationStep",
    "ReducedGame",
    # Validation
    "EquilibriumValidator",
    "ValidationReport",
    "ValidationIssue",
    "ValidationWarning",
    "StabilityAnalysis",
    "QualityMetrics",
    "ViolationType",
    "Severity",
    "WarningType",
    "RiskProfile",
    # Best responses
    "BestResponseAnalyzer",
    "BestResponse",
    "BestResponsePoint",
]

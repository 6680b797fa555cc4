"""Equilibrium validation and quality scoring.

Checks a candidate equilibrium independently of the solver that produced it:

1. Structure: profile and distribution shapes, probability bounds and sums
2. Nash conditions: best responses for pure profiles, indifference on the
   support and no better outside strategy for mixed profiles
3. Reported payoffs match recomputed payoffs
4. Stability heuristics (robustness, convergence, basin, trembling hand)
5. Quality metrics (efficiency, fairness, welfare, complexity)

Findings are returned in a ``ValidationReport``; nothing here raises for an
invalid equilibrium.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum

from nashlab.config import SolverConfig
from nashlab.engine.payoffs import (
    expected_payoffs,
    max_social_welfare,
    pure_payoff,
    pure_payoffs,
    strategy_payoffs,
)
from nashlab.models.equilibrium import MixedEquilibrium, NashEquilibrium, PureEquilibrium
from nashlab.models.matrices import PayoffMatrix

logger = logging.getLogger(__name__)


# =============================================================================
# Scoring Constants
# =============================================================================

COMPONENT_SCORES = {
    "convergence_pure": 0.8,  # Adaptive play tends to settle on pure profiles
    "convergence_mixed": 0.4,
    "basin_pure": 0.7,  # Multiplied by the equilibrium's own stability
    "basin_mixed": 0.3,
    "trembling_strict": 0.9,
    "trembling_weak": 0.6,  # Non-strict pure profile
    "trembling_mixed": 0.4,
}

CONFIDENCE_PENALTIES = {
    "critical": 0.3,
    "high": 0.2,
    "medium": 0.1,
    "low": 0.05,
}

WARNING_PENALTIES = {
    "high": 0.1,
    "medium": 0.05,
    "low": 0.02,
}

UNSTABLE_MIXING_THRESHOLD = 0.3


# =============================================================================
# Report Data Classes
# =============================================================================


class ViolationType(Enum):
    """Category of a validation error."""

    BEST_RESPONSE_VIOLATION = "best_response_violation"
    INDIFFERENCE_VIOLATION = "indifference_violation"
    PROBABILITY_CONSTRAINT = "probability_constraint"
    PAYOFF_CALCULATION = "payoff_calculation"


class Severity(Enum):
    """Severity level for validation errors."""

    CRITICAL = "critical"  # Not an equilibrium
    HIGH = "high"  # Not an equilibrium within tolerance
    MEDIUM = "medium"  # Equilibrium holds, reported data is off
    LOW = "low"


class WarningType(Enum):
    """Category of a validation warning."""

    NUMERICAL_PRECISION = "numerical_precision"
    BOUNDARY_EQUILIBRIUM = "boundary_equilibrium"
    WEAK_DOMINANCE = "weak_dominance"
    UNSTABLE_MIXING = "unstable_mixing"


class Impact(Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class RiskProfile(Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass
class ValidationIssue:
    """A single validation error found."""

    violation_type: ViolationType
    severity: Severity
    message: str
    player: int | None = None
    strategy: int | None = None
    details: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "type": self.violation_type.value,
            "severity": self.severity.value,
            "message": self.message,
            "player": self.player,
            "strategy": self.strategy,
            "details": self.details,
        }


@dataclass
class ValidationWarning:
    """A non-blocking observation about an equilibrium."""

    warning_type: WarningType
    message: str
    suggestion: str
    impact: Impact

    def to_dict(self) -> dict:
        return {
            "type": self.warning_type.value,
            "message": self.message,
            "suggestion": self.suggestion,
            "impact": self.impact.value,
        }


@dataclass
class StabilityAnalysis:
    """Heuristic stability components, each in [0, 1]."""

    robustness: float
    convergence: float
    basin: float
    trembling: float
    overall: float
    description: str
    risk_factors: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "overall": self.overall,
            "components": {
                "robustness": self.robustness,
                "convergence": self.convergence,
                "basin": self.basin,
                "trembling": self.trembling,
            },
            "description": self.description,
            "risk_factors": list(self.risk_factors),
        }


@dataclass
class QualityMetrics:
    """Welfare and complexity measures of an equilibrium."""

    efficiency: float
    fairness: float
    social_welfare: float
    risk_profile: RiskProfile
    complexity: float
    interpretability: float

    def to_dict(self) -> dict:
        return {
            "efficiency": self.efficiency,
            "fairness": self.fairness,
            "social_welfare": self.social_welfare,
            "risk_profile": self.risk_profile.value,
            "complexity": self.complexity,
            "interpretability": self.interpretability,
        }


@dataclass
class ValidationReport:
    """Complete validation result for one equilibrium."""

    is_valid: bool
    confidence: float
    errors: list[ValidationIssue]
    warnings: list[ValidationWarning]
    stability: StabilityAnalysis
    quality: QualityMetrics
    recommendations: list[str] = field(default_factory=list)

    def get_critical_errors(self) -> list[ValidationIssue]:
        return [e for e in self.errors if e.severity == Severity.CRITICAL]

    def errors_of_type(self, violation_type: ViolationType) -> list[ValidationIssue]:
        return [e for e in self.errors if e.violation_type == violation_type]

    def warnings_of_type(self, warning_type: WarningType) -> list[ValidationWarning]:
        return [w for w in self.warnings if w.warning_type == warning_type]

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "is_valid": self.is_valid,
            "confidence": self.confidence,
            "errors": [e.to_dict() for e in self.errors],
            "warnings": [w.to_dict() for w in self.warnings],
            "stability": self.stability.to_dict(),
            "quality": self.quality.to_dict(),
            "recommendations": list(self.recommendations),
        }


# =============================================================================
# Validator
# =============================================================================


class EquilibriumValidator:
    """Verifies and scores candidate equilibria."""

    def __init__(self, config: SolverConfig | None = None):
        self.config = config or SolverConfig()

    def validate(self, equilibrium: NashEquilibrium, matrix: PayoffMatrix) -> ValidationReport:
        """Validate and analyze an equilibrium against its game.

        Args:
            equilibrium: Candidate pure or mixed equilibrium
            matrix: Well-formed payoff matrix the candidate belongs to

        Returns:
            ValidationReport; ``is_valid`` is False when any critical or
            high-severity error was found
        """
        errors: list[ValidationIssue] = []
        warnings: list[ValidationWarning] = []

        if isinstance(equilibrium, PureEquilibrium):
            self._check_pure_structure(equilibrium, matrix, errors)
        else:
            self._check_mixed_structure(equilibrium, matrix, errors)

        # Nash conditions are meaningless on a malformed profile
        structurally_sound = not any(e.severity == Severity.CRITICAL for e in errors)
        if structurally_sound:
            if isinstance(equilibrium, PureEquilibrium):
                self._check_pure_conditions(equilibrium, matrix, errors, warnings)
            else:
                self._check_mixed_conditions(equilibrium, matrix, errors, warnings)
            self._check_reported_payoffs(equilibrium, matrix, errors)

        stability = self.analyze_stability(equilibrium, matrix)
        quality = self.quality_metrics(equilibrium, matrix)
        recommendations = self._recommendations(equilibrium, stability, quality)

        is_valid = not any(e.severity in (Severity.CRITICAL, Severity.HIGH) for e in errors)
        confidence = self.confidence(errors, warnings)

        logger.debug(
            f"Validated {equilibrium.equilibrium_type.value} equilibrium: valid={is_valid}, "
            f"{len(errors)} errors, {len(warnings)} warnings"
        )

        return ValidationReport(
            is_valid=is_valid,
            confidence=confidence,
            errors=errors,
            warnings=warnings,
            stability=stability,
            quality=quality,
            recommendations=recommendations,
        )

    # =========================================================================
    # Structure
    # =========================================================================

    def _check_pure_structure(
        self, equilibrium: PureEquilibrium, matrix: PayoffMatrix, errors: list[ValidationIssue]
    ) -> None:
        if len(equilibrium.profile) != matrix.players:
            errors.append(
                ValidationIssue(
                    violation_type=ViolationType.PROBABILITY_CONSTRAINT,
                    severity=Severity.CRITICAL,
                    message=(
                        f"Pure strategy profile has {len(equilibrium.profile)} entries, "
                        f"expected {matrix.players}"
                    ),
                )
            )
            return
        for player, strategy in enumerate(equilibrium.profile):
            if not isinstance(strategy, int) or not 0 <= strategy < matrix.num_strategies:
                errors.append(
                    ValidationIssue(
                        violation_type=ViolationType.PROBABILITY_CONSTRAINT,
                        severity=Severity.CRITICAL,
                        message=f"Invalid strategy index {strategy} for player {player}",
                        player=player,
                    )
                )

    def _check_mixed_structure(
        self, equilibrium: MixedEquilibrium, matrix: PayoffMatrix, errors: list[ValidationIssue]
    ) -> None:
        tol = self.config.tolerance
        if len(equilibrium.distributions) != matrix.players:
            errors.append(
                ValidationIssue(
                    violation_type=ViolationType.PROBABILITY_CONSTRAINT,
                    severity=Severity.CRITICAL,
                    message=(
                        f"Mixed strategy profile has {len(equilibrium.distributions)} players, "
                        f"expected {matrix.players}"
                    ),
                )
            )
            return
        for player, dist in enumerate(equilibrium.distributions):
            if len(dist) != matrix.num_strategies:
                errors.append(
                    ValidationIssue(
                        violation_type=ViolationType.PROBABILITY_CONSTRAINT,
                        severity=Severity.CRITICAL,
                        message=(
                            f"Player {player} strategy has {len(dist)} probabilities, "
                            f"expected {matrix.num_strategies}"
                        ),
                        player=player,
                    )
                )
                continue
            total = sum(dist)
            if abs(total - 1.0) > tol:
                errors.append(
                    ValidationIssue(
                        violation_type=ViolationType.PROBABILITY_CONSTRAINT,
                        severity=Severity.HIGH,
                        message=f"Player {player} probabilities sum to {total:.6f}, expected 1.0",
                        player=player,
                        details={"sum": total},
                    )
                )
            for strategy, prob in enumerate(dist):
                if prob < -tol or prob > 1 + tol:
                    errors.append(
                        ValidationIssue(
                            violation_type=ViolationType.PROBABILITY_CONSTRAINT,
                            severity=Severity.HIGH,
                            message=f"Invalid probability {prob:.6f} for player {player}, strategy {strategy}",
                            player=player,
                            strategy=strategy,
                            details={"probability": prob},
                        )
                    )

    # =========================================================================
    # Nash conditions
    # =========================================================================

    def _check_pure_conditions(
        self,
        equilibrium: PureEquilibrium,
        matrix: PayoffMatrix,
        errors: list[ValidationIssue],
        warnings: list[ValidationWarning],
    ) -> None:
        tol = self.config.relaxed_tolerance
        profile = list(equilibrium.profile)
        for player in range(matrix.players):
            current_strategy = profile[player]
            current = pure_payoff(matrix, profile, player)
            best_alternative = None
            improved = False
            for alternative in range(matrix.num_strategies):
                if alternative == current_strategy:
                    continue
                deviation = list(profile)
                deviation[player] = alternative
                payoff = pure_payoff(matrix, deviation, player)
                best_alternative = payoff if best_alternative is None else max(best_alternative, payoff)
                if payoff > current + tol:
                    improved = True
                    errors.append(
                        ValidationIssue(
                            violation_type=ViolationType.BEST_RESPONSE_VIOLATION,
                            severity=Severity.CRITICAL,
                            message=(
                                f"Player {player} can improve payoff from {current:.3f} to "
                                f"{payoff:.3f} by switching to strategy {alternative}"
                            ),
                            player=player,
                            strategy=alternative,
                            details={
                                "current_payoff": current,
                                "alternative_payoff": payoff,
                                "improvement": payoff - current,
                            },
                        )
                    )
            if not improved and best_alternative is not None and best_alternative > current - tol:
                warnings.append(
                    ValidationWarning(
                        warning_type=WarningType.WEAK_DOMINANCE,
                        message=f"Player {player} strategy {current_strategy} ties with an alternative",
                        suggestion="Consider the stability of this equilibrium under small perturbations",
                        impact=Impact.MEDIUM,
                    )
                )

    def _check_mixed_conditions(
        self,
        equilibrium: MixedEquilibrium,
        matrix: PayoffMatrix,
        errors: list[ValidationIssue],
        warnings: list[ValidationWarning],
    ) -> None:
        tol = self.config.relaxed_tolerance
        distributions = equilibrium.distributions
        for player in range(matrix.players):
            dist = distributions[player]
            values = strategy_payoffs(matrix, distributions, player)
            support = [s for s, p in enumerate(dist) if p > self.config.tolerance]

            if len(support) > 1:
                average = sum(values[s] for s in support) / len(support)
                for s in support:
                    diff = abs(values[s] - average)
                    if diff > tol:
                        errors.append(
                            ValidationIssue(
                                violation_type=ViolationType.INDIFFERENCE_VIOLATION,
                                severity=Severity.HIGH,
                                message=(
                                    f"Indifference condition violated for player {player}: strategy "
                                    f"{s} payoff {values[s]:.6f} differs from average by {diff:.6f}"
                                ),
                                player=player,
                                strategy=s,
                                details={"payoff": values[s], "average": average},
                            )
                        )

            if support:
                best_support = max(values[s] for s in support)
                for s in range(matrix.num_strategies):
                    if s in support:
                        continue
                    if values[s] > best_support + tol:
                        errors.append(
                            ValidationIssue(
                                violation_type=ViolationType.BEST_RESPONSE_VIOLATION,
                                severity=Severity.CRITICAL,
                                message=(
                                    f"Strategy {s} outside support pays {values[s]:.6f}, more than "
                                    f"the support's {best_support:.6f}"
                                ),
                                player=player,
                                strategy=s,
                                details={
                                    "payoff": values[s],
                                    "support_payoff": best_support,
                                    "improvement": values[s] - best_support,
                                },
                            )
                        )

            for s, prob in enumerate(dist):
                if 0 < prob < tol:
                    warnings.append(
                        ValidationWarning(
                            warning_type=WarningType.NUMERICAL_PRECISION,
                            message=f"Very small probability {prob:.8f} for player {player}, strategy {s}",
                            suggestion="Check whether this is a numerical precision artifact",
                            impact=Impact.LOW,
                        )
                    )

            if len(support) == 1:
                warnings.append(
                    ValidationWarning(
                        warning_type=WarningType.BOUNDARY_EQUILIBRIUM,
                        message=f"Player {player} plays strategy {support[0]} with certainty",
                        suggestion="This player's part of the profile is pure",
                        impact=Impact.LOW,
                    )
                )

        if equilibrium.stability < UNSTABLE_MIXING_THRESHOLD:
            warnings.append(
                ValidationWarning(
                    warning_type=WarningType.UNSTABLE_MIXING,
                    message=f"Mixed equilibrium has low stability {equilibrium.stability:.3f}",
                    suggestion="Small payoff changes may move or remove this equilibrium",
                    impact=Impact.MEDIUM,
                )
            )

    def _check_reported_payoffs(
        self, equilibrium: NashEquilibrium, matrix: PayoffMatrix, errors: list[ValidationIssue]
    ) -> None:
        if isinstance(equilibrium, PureEquilibrium):
            actual = pure_payoffs(matrix, equilibrium.profile)
        else:
            actual = expected_payoffs(matrix, equilibrium.distributions)
        if len(equilibrium.payoffs) != len(actual):
            errors.append(
                ValidationIssue(
                    violation_type=ViolationType.PAYOFF_CALCULATION,
                    severity=Severity.MEDIUM,
                    message=f"Reported {len(equilibrium.payoffs)} payoffs, expected {len(actual)}",
                )
            )
            return
        for player, (reported, computed) in enumerate(zip(equilibrium.payoffs, actual)):
            if abs(reported - computed) > self.config.relaxed_tolerance:
                errors.append(
                    ValidationIssue(
                        violation_type=ViolationType.PAYOFF_CALCULATION,
                        severity=Severity.MEDIUM,
                        message=f"Player {player} payoff reported as {reported:.6f}, computed {computed:.6f}",
                        player=player,
                        details={"reported": reported, "computed": computed},
                    )
                )

    # =========================================================================
    # Stability
    # =========================================================================

    def analyze_stability(self, equilibrium: NashEquilibrium, matrix: PayoffMatrix) -> StabilityAnalysis:
        """Combine four heuristic components into an overall stability score."""
        is_pure = isinstance(equilibrium, PureEquilibrium)

        robustness = equilibrium.stability if is_pure else self._support_robustness(equilibrium, matrix)
        convergence = COMPONENT_SCORES["convergence_pure" if is_pure else "convergence_mixed"]
        basin = COMPONENT_SCORES["basin_pure" if is_pure else "basin_mixed"] * equilibrium.stability
        if not is_pure:
            trembling = COMPONENT_SCORES["trembling_mixed"]
        elif equilibrium.is_strict:
            trembling = COMPONENT_SCORES["trembling_strict"]
        else:
            trembling = COMPONENT_SCORES["trembling_weak"]

        overall = (robustness + convergence + basin + trembling) / 4
        risk_factors = []
        if overall >= 0.8:
            description = "Highly stable equilibrium with strong robustness properties"
        elif overall >= 0.6:
            description = "Moderately stable equilibrium with some vulnerability to perturbations"
        elif overall >= 0.4:
            description = "Weakly stable equilibrium that may be sensitive to changes"
        else:
            description = "Unstable equilibrium with high sensitivity to perturbations"
            risk_factors.append("High sensitivity to strategy perturbations")

        weak = self.config.weak_component_threshold
        if robustness < weak:
            risk_factors.append("Low robustness to payoff changes")
        if convergence < weak:
            risk_factors.append("Unlikely to be reached through adaptive learning")
        if basin < weak:
            risk_factors.append("Small basin of attraction")
        if trembling < weak:
            risk_factors.append("Vulnerable to trembling hand perturbations")

        return StabilityAnalysis(
            robustness=robustness,
            convergence=convergence,
            basin=basin,
            trembling=trembling,
            overall=overall,
            description=description,
            risk_factors=risk_factors,
        )

    def _support_robustness(self, equilibrium: MixedEquilibrium, matrix: PayoffMatrix) -> float:
        if matrix.num_strategies <= 1:
            return 1.0
        sizes = equilibrium.support_sizes(self.config.tolerance)
        average = sum(sizes) / len(sizes)
        return max(0.0, min(1.0, 1 - (average - 1) / (matrix.num_strategies - 1)))

    # =========================================================================
    # Quality
    # =========================================================================

    def quality_metrics(self, equilibrium: NashEquilibrium, matrix: PayoffMatrix) -> QualityMetrics:
        """Efficiency, fairness, welfare, risk and complexity of an equilibrium."""
        payoffs = list(equilibrium.payoffs)
        welfare = sum(payoffs)

        best_welfare = max_social_welfare(matrix)
        if best_welfare > 0:
            efficiency = max(0.0, min(1.0, welfare / best_welfare))
        else:
            efficiency = 0.5

        mean = welfare / len(payoffs) if payoffs else 0.0
        variance = sum((p - mean) ** 2 for p in payoffs) / len(payoffs) if payoffs else 0.0
        fairness = 1 - min(1.0, variance / (mean**2 + 1))

        if isinstance(equilibrium, PureEquilibrium):
            complexity = 0.0
            interpretability = 1.0
        else:
            total_support = sum(equilibrium.support_sizes(self.config.tolerance))
            complexity = total_support / (matrix.players * matrix.num_strategies)
            interpretability = 1 - complexity

        if isinstance(equilibrium, PureEquilibrium) and equilibrium.stability > 0.7:
            risk_profile = RiskProfile.LOW
        elif equilibrium.stability > 0.5:
            risk_profile = RiskProfile.MEDIUM
        else:
            risk_profile = RiskProfile.HIGH

        return QualityMetrics(
            efficiency=efficiency,
            fairness=fairness,
            social_welfare=welfare,
            risk_profile=risk_profile,
            complexity=complexity,
            interpretability=interpretability,
        )

    @staticmethod
    def _recommendations(
        equilibrium: NashEquilibrium, stability: StabilityAnalysis, quality: QualityMetrics
    ) -> list[str]:
        recommendations = []
        if stability.overall < 0.5:
            recommendations.append(
                "Consider mechanisms to stabilize this equilibrium or look for alternative solutions"
            )
        if quality.efficiency < 0.6:
            recommendations.append("This equilibrium may be inefficient; consider coordination mechanisms")
        if quality.fairness < 0.5:
            recommendations.append("Large payoff differences suggest room for redistribution mechanisms")
        if isinstance(equilibrium, MixedEquilibrium) and quality.complexity > 0.7:
            recommendations.append(
                "High strategy complexity may make this equilibrium difficult to implement in practice"
            )
        if quality.risk_profile == RiskProfile.HIGH:
            recommendations.append(
                "High risk profile suggests careful consideration of uncertainty and robustness"
            )
        return recommendations

    @staticmethod
    def confidence(errors: list[ValidationIssue], warnings: list[ValidationWarning]) -> float:
        """Start at 1.0 and subtract a penalty per error and warning by severity."""
        score = 1.0
        for error in errors:
            score -= CONFIDENCE_PENALTIES[error.severity.value]
        for warning in warnings:
            score -= WARNING_PENALTIES[warning.impact.value]
        return max(0.0, min(1.0, score))

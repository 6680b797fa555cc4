"""Strategy dominance analysis and iterated elimination.

Strategy A strictly dominates B for a player when A pays strictly more than
B against every combination of opponent strategies; weak dominance allows
ties but needs at least one strict improvement. Iterated elimination
removes one dominated strategy per step (strict before weak) and recomputes
dominance on the reduced game until nothing more can be removed.
"""

from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, Sequence

from nashlab.config import SolverConfig
from nashlab.engine.payoffs import pure_payoff
from nashlab.models.matrices import PayoffMatrix

logger = logging.getLogger(__name__)


class DominanceType(Enum):
    """Strength of a dominance relation."""

    STRICT = "strict"
    WEAK = "weak"


@dataclass(frozen=True)
class PayoffComparison:
    """Payoffs of two strategies for one player across opponent combinations."""

    strategy: int
    against_strategy: int
    dominant_payoffs: tuple[float, ...]
    dominated_payoffs: tuple[float, ...]

    @property
    def differences(self) -> tuple[float, ...]:
        return tuple(a - b for a, b in zip(self.dominant_payoffs, self.dominated_payoffs))

    @property
    def is_strictly_better(self) -> bool:
        return bool(self.differences) and all(d > 0 for d in self.differences)

    @property
    def is_weakly_better(self) -> bool:
        """At least as good everywhere and better somewhere (includes strict)."""
        diffs = self.differences
        return bool(diffs) and all(d >= 0 for d in diffs) and any(d > 0 for d in diffs)


@dataclass(frozen=True)
class DominantStrategy:
    """A strategy that dominates one or more of the same player's strategies."""

    player: int
    strategy: int
    strategy_name: str
    dominance_type: DominanceType
    dominated_strategies: tuple[int, ...]
    dominated_strategy_names: tuple[str, ...]
    explanation: str
    is_globally_dominant: bool = False

    def to_dict(self) -> dict:
        return {
            "player": self.player,
            "strategy": self.strategy,
            "strategy_name": self.strategy_name,
            "dominance_type": self.dominance_type.value,
            "dominated_strategies": list(self.dominated_strategies),
            "dominated_strategy_names": list(self.dominated_strategy_names),
            "is_globally_dominant": self.is_globally_dominant,
            "explanation": self.explanation,
        }


@dataclass(frozen=True)
class DominatedStrategy:
    """A strategy dominated by one or more of the same player's strategies."""

    player: int
    strategy: int
    strategy_name: str
    dominance_type: DominanceType
    dominated_by: tuple[int, ...]
    dominated_by_names: tuple[str, ...]
    explanation: str
    should_eliminate: bool

    def to_dict(self) -> dict:
        return {
            "player": self.player,
            "strategy": self.strategy,
            "strategy_name": self.strategy_name,
            "dominance_type": self.dominance_type.value,
            "dominated_by": list(self.dominated_by),
            "dominated_by_names": list(self.dominated_by_names),
            "should_eliminate": self.should_eliminate,
            "explanation": self.explanation,
        }


@dataclass(frozen=True)
class EliminatedStrategy:
    """One strategy removed during iterated elimination."""

    player: int
    strategy: int
    strategy_name: str
    reason: str
    dominated_by: int
    dominated_by_name: str
    dominance_type: DominanceType


@dataclass(frozen=True)
class EliminationStep:
    """A single round of iterated elimination.

    Attributes:
        step: 1-based step number
        eliminated: Strategies removed in this step
        remaining: Active strategy indices per player after the step
        explanation: One-line summary
    """

    step: int
    eliminated: tuple[EliminatedStrategy, ...]
    remaining: tuple[tuple[int, ...], ...]
    explanation: str

    def to_dict(self) -> dict:
        return {
            "step": self.step,
            "eliminated": [
                {
                    "player": e.player,
                    "strategy": e.strategy,
                    "strategy_name": e.strategy_name,
                    "reason": e.reason,
                    "dominated_by": e.dominated_by,
                    "dominated_by_name": e.dominated_by_name,
                    "dominance_type": e.dominance_type.value,
                }
                for e in self.eliminated
            ],
            "remaining": [list(r) for r in self.remaining],
            "explanation": self.explanation,
        }


@dataclass(frozen=True)
class ReducedGame:
    """Snapshot of the game after iterated elimination.

    Players may keep different strategy sets. The game converts back to a
    ``PayoffMatrix`` only when every player keeps the same set.
    """

    remaining: tuple[tuple[int, ...], ...]
    source: PayoffMatrix = field(repr=False, compare=False)

    @property
    def is_shared(self) -> bool:
        return all(r == self.remaining[0] for r in self.remaining)

    @property
    def num_strategies(self) -> tuple[int, ...]:
        return tuple(len(r) for r in self.remaining)

    def strategy_names(self, player: int) -> list[str]:
        return [self.source.strategies[s].name for s in self.remaining[player]]

    def as_payoff_matrix(self) -> PayoffMatrix | None:
        """Restrict the source matrix to the shared remaining strategies.

        For games with three or more players the aggregate opponent index is
        recomputed over the new indices, so payoffs can differ from the
        source game's.
        """
        if not self.is_shared:
            return None
        keep = self.remaining[0]
        payoffs = tuple(tuple(self.source.payoffs[i][j] for j in keep) for i in keep)
        return PayoffMatrix(
            players=self.source.players,
            strategies=tuple(self.source.strategies[s] for s in keep),
            payoffs=payoffs,
            is_symmetric=self.source.is_symmetric,
        )

    def to_dict(self) -> dict:
        return {
            "remaining": [list(r) for r in self.remaining],
            "strategy_names": [self.strategy_names(p) for p in range(len(self.remaining))],
        }


@dataclass(frozen=True)
class DominanceAnalysisResult:
    """Complete dominance analysis of a game."""

    strictly_dominant: tuple[DominantStrategy, ...]
    weakly_dominant: tuple[DominantStrategy, ...]
    strictly_dominated: tuple[DominatedStrategy, ...]
    weakly_dominated: tuple[DominatedStrategy, ...]
    elimination: tuple[EliminationStep, ...]
    reduced_game: ReducedGame | None
    explanation: str
    recommendations: tuple[str, ...]

    @property
    def has_strict_dominance(self) -> bool:
        return bool(self.strictly_dominant)

    @property
    def has_weak_dominance(self) -> bool:
        return bool(self.weakly_dominant)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "has_strict_dominance": self.has_strict_dominance,
            "has_weak_dominance": self.has_weak_dominance,
            "strictly_dominant": [d.to_dict() for d in self.strictly_dominant],
            "weakly_dominant": [d.to_dict() for d in self.weakly_dominant],
            "strictly_dominated": [d.to_dict() for d in self.strictly_dominated],
            "weakly_dominated": [d.to_dict() for d in self.weakly_dominated],
            "elimination": [step.to_dict() for step in self.elimination],
            "reduced_game": self.reduced_game.to_dict() if self.reduced_game else None,
            "explanation": self.explanation,
            "recommendations": list(self.recommendations),
        }


class DominanceAnalyzer:
    """Finds dominant and dominated strategies and runs iterated elimination."""

    def __init__(self, config: SolverConfig | None = None):
        self.config = config or SolverConfig()

    def analyze(self, matrix: PayoffMatrix) -> DominanceAnalysisResult:
        """Analyze dominance for every player of a well-formed game."""
        full = tuple(tuple(range(matrix.num_strategies)) for _ in range(matrix.players))

        strictly_dominant = self.find_dominant(matrix, full, DominanceType.STRICT)
        strict_players = {d.player for d in strictly_dominant}
        weakly_dominant = [
            d
            for d in self.find_dominant(matrix, full, DominanceType.WEAK)
            if d.player not in strict_players
        ]
        strictly_dominated = self.find_dominated(matrix, full, DominanceType.STRICT)
        weakly_dominated = self.find_dominated(matrix, full, DominanceType.WEAK)

        steps, remaining = self.eliminate(matrix)
        reduced = ReducedGame(remaining=remaining, source=matrix) if steps else None

        logger.info(
            f"Dominance: {len(strictly_dominant)} strictly dominant, "
            f"{len(strictly_dominated)} strictly dominated, {len(steps)} elimination steps"
        )

        return DominanceAnalysisResult(
            strictly_dominant=tuple(strictly_dominant),
            weakly_dominant=tuple(weakly_dominant),
            strictly_dominated=tuple(strictly_dominated),
            weakly_dominated=tuple(weakly_dominated),
            elimination=tuple(steps),
            reduced_game=reduced,
            explanation=self._explanation(strictly_dominant, weakly_dominant, steps),
            recommendations=tuple(
                self._recommendations(strictly_dominant, weakly_dominant, steps, remaining)
            ),
        )

    # =========================================================================
    # Comparisons
    # =========================================================================

    def opponent_profiles(
        self, active: Sequence[Sequence[int]], player: int
    ) -> Iterator[tuple[int, ...]]:
        """Every combination of active opponent strategies, as full profiles.

        The player's own slot holds -1 and is filled in by ``compare``.
        """
        choices = [active[p] if p != player else (-1,) for p in range(len(active))]
        return itertools.product(*choices)

    def compare(
        self,
        matrix: PayoffMatrix,
        active: Sequence[Sequence[int]],
        player: int,
        strategy: int,
        other: int,
    ) -> PayoffComparison:
        """Compare ``strategy`` to ``other`` for ``player`` against every active opponent profile."""
        mine = []
        theirs = []
        for profile in self.opponent_profiles(active, player):
            with_strategy = list(profile)
            with_strategy[player] = strategy
            with_other = list(profile)
            with_other[player] = other
            mine.append(pure_payoff(matrix, with_strategy, player))
            theirs.append(pure_payoff(matrix, with_other, player))
        return PayoffComparison(
            strategy=strategy,
            against_strategy=other,
            dominant_payoffs=tuple(mine),
            dominated_payoffs=tuple(theirs),
        )

    @staticmethod
    def _holds(comparison: PayoffComparison, kind: DominanceType) -> bool:
        if kind is DominanceType.STRICT:
            return comparison.is_strictly_better
        return comparison.is_weakly_better and not comparison.is_strictly_better

    def find_dominant(
        self,
        matrix: PayoffMatrix,
        active: Sequence[Sequence[int]],
        kind: DominanceType,
    ) -> list[DominantStrategy]:
        """Strategies that dominate at least one other strategy of the same player."""
        names = matrix.strategy_names
        word = kind.value + "ly"
        found = []
        for player in range(matrix.players):
            for strategy in active[player]:
                dominated = tuple(
                    other
                    for other in active[player]
                    if other != strategy
                    and self._holds(self.compare(matrix, active, player, strategy, other), kind)
                )
                if not dominated:
                    continue
                is_global = len(dominated) == len(active[player]) - 1
                if is_global:
                    explanation = (
                        f'Strategy "{names[strategy]}" {word} dominates all other strategies '
                        f"for Player {player + 1}."
                    )
                else:
                    explanation = (
                        f'Strategy "{names[strategy]}" {word} dominates {len(dominated)} other '
                        f"strategies for Player {player + 1}."
                    )
                found.append(
                    DominantStrategy(
                        player=player,
                        strategy=strategy,
                        strategy_name=names[strategy],
                        dominance_type=kind,
                        dominated_strategies=dominated,
                        dominated_strategy_names=tuple(names[s] for s in dominated),
                        explanation=explanation,
                        is_globally_dominant=is_global,
                    )
                )
        return found

    def find_dominated(
        self,
        matrix: PayoffMatrix,
        active: Sequence[Sequence[int]],
        kind: DominanceType,
    ) -> list[DominatedStrategy]:
        """Strategies dominated by at least one other strategy of the same player."""
        names = matrix.strategy_names
        word = kind.value + "ly"
        found = []
        for player in range(matrix.players):
            for strategy in active[player]:
                dominated_by = tuple(
                    other
                    for other in active[player]
                    if other != strategy
                    and self._holds(self.compare(matrix, active, player, other, strategy), kind)
                )
                if not dominated_by:
                    continue
                found.append(
                    DominatedStrategy(
                        player=player,
                        strategy=strategy,
                        strategy_name=names[strategy],
                        dominance_type=kind,
                        dominated_by=dominated_by,
                        dominated_by_names=tuple(names[s] for s in dominated_by),
                        explanation=(
                            f'Strategy "{names[strategy]}" is {word} dominated by '
                            f"{len(dominated_by)} other strategies for Player {player + 1}."
                        ),
                        should_eliminate=kind is DominanceType.STRICT,
                    )
                )
        return found

    # =========================================================================
    # Iterated elimination
    # =========================================================================

    def eliminate(
        self, matrix: PayoffMatrix
    ) -> tuple[list[EliminationStep], tuple[tuple[int, ...], ...]]:
        """Remove dominated strategies one at a time until none remain.

        Each step removes exactly one strategy from one player, so the total
        active count shrinks by one per step and the loop ends after at most
        P * (|S| - 1) steps.

        Returns:
            (steps, remaining strategy indices per player)
        """
        names = matrix.strategy_names
        active = [list(range(matrix.num_strategies)) for _ in range(matrix.players)]
        steps: list[EliminationStep] = []

        while any(len(a) > 1 for a in active):
            target = self._next_elimination(matrix, active)
            if target is None:
                break
            player, strategy, dominator, kind = target
            active[player].remove(strategy)

            reason = f'{kind.value}ly dominated by "{names[dominator]}"'
            eliminated = EliminatedStrategy(
                player=player,
                strategy=strategy,
                strategy_name=names[strategy],
                reason=reason,
                dominated_by=dominator,
                dominated_by_name=names[dominator],
                dominance_type=kind,
            )
            step_number = len(steps) + 1
            steps.append(
                EliminationStep(
                    step=step_number,
                    eliminated=(eliminated,),
                    remaining=tuple(tuple(a) for a in active),
                    explanation=(
                        f'Eliminated "{names[strategy]}" for Player {player + 1}, {reason}.'
                    ),
                )
            )
            logger.debug(f"Elimination step {step_number}: player {player} drops strategy {strategy}")

        return steps, tuple(tuple(a) for a in active)

    def _next_elimination(self, matrix: PayoffMatrix, active: Sequence[Sequence[int]]):
        """First dominated active strategy, strict dominance before weak."""
        for kind in (DominanceType.STRICT, DominanceType.WEAK):
            for player in range(matrix.players):
                if len(active[player]) < 2:
                    continue
                for strategy in active[player]:
                    for other in active[player]:
                        if other == strategy:
                            continue
                        comparison = self.compare(matrix, active, player, other, strategy)
                        if self._holds(comparison, kind):
                            return player, strategy, other, kind
        return None

    # =========================================================================
    # Text
    # =========================================================================

    @staticmethod
    def _explanation(strictly_dominant, weakly_dominant, steps) -> str:
        lines = ["Strategic Dominance Analysis Results:", ""]
        if strictly_dominant:
            lines.append(f"Found {len(strictly_dominant)} strictly dominant strategies:")
            lines.extend(f"- {d.explanation}" for d in strictly_dominant)
            lines.append("")
        if weakly_dominant:
            lines.append(f"Found {len(weakly_dominant)} weakly dominant strategies:")
            lines.extend(f"- {d.explanation}" for d in weakly_dominant)
            lines.append("")
        if steps:
            lines.append(f"Iterative elimination completed in {len(steps)} steps:")
            lines.extend(f"- Step {s.step}: {s.explanation}" for s in steps)
            lines.append("")
        if not strictly_dominant and not weakly_dominant and not steps:
            lines.append("No dominant strategies found. All strategies remain viable.")
        return "\n".join(lines).rstrip() + "\n"

    @staticmethod
    def _recommendations(strictly_dominant, weakly_dominant, steps, remaining) -> list[str]:
        recommendations = []
        if strictly_dominant:
            recommendations.append(
                "Players should strongly consider their strictly dominant strategies, which give "
                "the best outcome regardless of opponents' choices."
            )
            for d in strictly_dominant:
                recommendations.append(
                    f'Player {d.player + 1} should choose "{d.strategy_name}" as it strictly '
                    "dominates other available strategies."
                )
        if weakly_dominant and not strictly_dominant:
            recommendations.append(
                "Consider weakly dominant strategies, but outcomes may depend on opponents' "
                "specific choices."
            )
        if steps:
            described = "/".join(str(len(r)) for r in remaining)
            recommendations.append(
                f"After iterative elimination, focus analysis on the remaining {described} "
                "strategies per player."
            )
            recommendations.append(
                "Eliminated strategies are not rational choices and should not be considered "
                "in strategic planning."
            )
        if not recommendations:
            recommendations.append(
                "No clear dominant strategies found. Use Nash equilibrium analysis to select a strategy."
            )
            recommendations.append(
                "All strategies remain viable depending on the game context and opponent behavior."
            )
        return recommendations

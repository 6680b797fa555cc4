"""Payoff evaluation shared by every solver, the dominance analyzer and the validator.

Two-player games read the tensor exactly: ``payoffs[s0][s1][player]``.

Games with three or more players reuse the same 2-index tensor through a
lossy approximation; a true n-dimensional payoff tensor is not modeled:

- Pure profiles: opponents' joint choice is collapsed to the mean of their
  strategy indices, rounded half up. The payoff is
  ``payoffs[own][aggregate][player]``.
- Mixed profiles: opponents' distributions are averaged into one aggregate
  distribution, and the payoff is the expectation of
  ``payoffs[own][j][player]`` over that distribution.

The two rules disagree for pure profiles written as degenerate mixtures
(index averaging is not distribution averaging). Every component evaluates
payoffs through this module, so the solvers and the validator always agree.
"""

from __future__ import annotations

import itertools
import math
from typing import Iterator, Sequence

from nashlab.models.matrices import PayoffMatrix

Distribution = Sequence[float]


def aggregate_opponent_index(opponent_strategies: Sequence[int], num_strategies: int) -> int:
    """Collapse opponents' pure choices to one index (mean, rounded half up)."""
    mean = sum(opponent_strategies) / len(opponent_strategies)
    index = int(math.floor(mean + 0.5))
    return max(0, min(num_strategies - 1, index))


def pure_payoff(matrix: PayoffMatrix, profile: Sequence[int], player: int) -> float:
    """Payoff to ``player`` under a pure strategy profile."""
    if matrix.players == 2:
        return matrix.payoffs[profile[0]][profile[1]][player]
    opponents = [s for i, s in enumerate(profile) if i != player]
    aggregate = aggregate_opponent_index(opponents, matrix.num_strategies)
    return matrix.payoffs[profile[player]][aggregate][player]


def pure_payoffs(matrix: PayoffMatrix, profile: Sequence[int]) -> tuple[float, ...]:
    """Payoff vector under a pure strategy profile."""
    return tuple(pure_payoff(matrix, profile, p) for p in range(matrix.players))


def aggregate_opponent_distribution(
    distributions: Sequence[Distribution], player: int, num_strategies: int
) -> list[float]:
    """Average every opponent's distribution into one."""
    opponents = [d for i, d in enumerate(distributions) if i != player]
    aggregate = [0.0] * num_strategies
    for dist in opponents:
        for s in range(num_strategies):
            aggregate[s] += dist[s] / len(opponents)
    return aggregate


def strategy_payoff(
    matrix: PayoffMatrix,
    distributions: Sequence[Distribution],
    player: int,
    strategy: int,
) -> float:
    """Expected payoff to ``player`` for playing ``strategy`` against the others' mixtures."""
    n = matrix.num_strategies
    if matrix.players == 2:
        opponent = distributions[1 - player]
        if player == 0:
            return sum(opponent[j] * matrix.payoffs[strategy][j][0] for j in range(n))
        return sum(opponent[j] * matrix.payoffs[j][strategy][1] for j in range(n))

    aggregate = aggregate_opponent_distribution(distributions, player, n)
    return sum(aggregate[j] * matrix.payoffs[strategy][j][player] for j in range(n))


def strategy_payoffs(
    matrix: PayoffMatrix, distributions: Sequence[Distribution], player: int
) -> list[float]:
    """Expected payoff of every pure strategy for ``player``."""
    return [strategy_payoff(matrix, distributions, player, s) for s in range(matrix.num_strategies)]


def expected_payoffs(matrix: PayoffMatrix, distributions: Sequence[Distribution]) -> tuple[float, ...]:
    """Expected payoff vector when every player follows their distribution."""
    result = []
    for player in range(matrix.players):
        per_strategy = strategy_payoffs(matrix, distributions, player)
        result.append(sum(p * v for p, v in zip(distributions[player], per_strategy)))
    return tuple(result)


def iter_profiles(num_strategies: int, num_players: int) -> Iterator[tuple[int, ...]]:
    """Every pure strategy profile, in lexicographic order (|S|^P profiles)."""
    return itertools.product(range(num_strategies), repeat=num_players)


def deviation_payoffs(
    matrix: PayoffMatrix, profile: Sequence[int], player: int
) -> Iterator[tuple[int, float]]:
    """Payoff to ``player`` for each unilateral deviation from ``profile``."""
    for alternative in range(matrix.num_strategies):
        if alternative == profile[player]:
            continue
        deviation = list(profile)
        deviation[player] = alternative
        yield alternative, pure_payoff(matrix, deviation, player)


def max_social_welfare(matrix: PayoffMatrix) -> float:
    """Largest total payoff over every pure profile."""
    return max(
        sum(pure_payoffs(matrix, profile)) for profile in iter_profiles(matrix.num_strategies, matrix.players)
    )

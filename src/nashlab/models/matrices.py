"""Payoff model for finite strategic-form games.

A ``PayoffMatrix`` is produced by a scenario layer (templates, JSON files,
callers) and treated as read-only by every solver. Its payoff tensor is
indexed ``payoffs[strategy_a][strategy_b][player]``:

- 2 players: strategy_a is player 0's choice, strategy_b is player 1's.
- n players: strategy_a is the evaluated player's own choice, strategy_b is
  the aggregate opponent choice (see ``nashlab.engine.payoffs``).

Construction never validates shape. ``validate_matrix_shape`` reports every
problem so callers can surface them before any search runs.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from numbers import Real
from typing import Any, Sequence

from pydantic import BaseModel, ConfigDict, field_validator

PayoffTensor = tuple[tuple[tuple[float, ...], ...], ...]


class Strategy(BaseModel):
    """A single strategy shared by all players of a game."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    short_name: str = ""
    description: str = ""

    @field_validator("id", "name")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("strategy id and name must not be blank")
        return v


def _freeze(value: Any) -> Any:
    """Recursively convert lists to tuples so nested payoffs are immutable."""
    if isinstance(value, (list, tuple)):
        return tuple(_freeze(v) for v in value)
    return value


@dataclass(frozen=True)
class PayoffMatrix:
    """Complete payoff structure of a finite game.

    Attributes:
        players: Number of players P
        strategies: Strategy set shared by every player
        payoffs: Tensor indexed [strategy_a][strategy_b][player]
        is_symmetric: Whether the game is symmetric across players
    """

    players: int
    strategies: tuple[Strategy, ...]
    payoffs: PayoffTensor
    is_symmetric: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "strategies", tuple(self.strategies))
        object.__setattr__(self, "payoffs", _freeze(self.payoffs))

    @property
    def num_strategies(self) -> int:
        return len(self.strategies)

    @property
    def strategy_names(self) -> list[str]:
        return [s.name for s in self.strategies]

    def cell(self, strategy_a: int, strategy_b: int) -> tuple[float, ...]:
        """Get the payoff vector stored at (strategy_a, strategy_b)."""
        return self.payoffs[strategy_a][strategy_b]

    @classmethod
    def from_payoffs(
        cls,
        payoffs: Sequence[Sequence[Sequence[float]]],
        strategy_names: Sequence[str] | None = None,
        players: int | None = None,
        is_symmetric: bool | None = None,
    ) -> PayoffMatrix:
        """Build a matrix from a raw nested payoff list.

        Args:
            payoffs: Nested list [a][b][player]
            strategy_names: Display names; defaults to "Strategy 1", "Strategy 2", ...
            players: Player count; defaults to the length of the first cell
            is_symmetric: Symmetry flag; inferred when omitted

        Returns:
            PayoffMatrix (shape is not validated)
        """
        if players is None:
            try:
                players = len(payoffs[0][0])
            except (IndexError, TypeError):
                players = 0
        if strategy_names is None:
            strategy_names = [f"Strategy {i + 1}" for i in range(len(payoffs))]
        strategies = tuple(
            Strategy(
                id=name.lower().replace(" ", "_"),
                name=name,
                short_name=name[:1].upper(),
            )
            for name in strategy_names
        )
        frozen = _freeze(payoffs)
        if is_symmetric is None:
            is_symmetric = is_symmetric_payoffs(frozen, players)
        return cls(players=players, strategies=strategies, payoffs=frozen, is_symmetric=is_symmetric)


def is_symmetric_payoffs(payoffs: PayoffTensor, players: int, tolerance: float = 1e-9) -> bool:
    """Check whether a payoff tensor describes a symmetric game.

    For 2 players the game is symmetric when u0(a, b) == u1(b, a).
    For n players (own, aggregate) cells must give every player the same value.
    Malformed tensors are never symmetric.
    """
    if shape_errors(payoffs, players, len(payoffs)):
        return False
    n = len(payoffs)
    if players == 2:
        return all(
            abs(payoffs[i][j][0] - payoffs[j][i][1]) <= tolerance for i in range(n) for j in range(n)
        )
    return all(
        abs(payoffs[i][j][p] - payoffs[i][j][0]) <= tolerance
        for i in range(n)
        for j in range(n)
        for p in range(players)
    )


# =============================================================================
# Shape Validation
# =============================================================================


@dataclass(frozen=True)
class ShapeError:
    """A single structural problem in a payoff matrix."""

    field: str
    message: str
    code: str
    details: dict = field(default_factory=dict)


def _is_number(value: Any) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool) and math.isfinite(value)


def shape_errors(payoffs: Any, players: Any, num_strategies: int) -> list[ShapeError]:
    """Check a raw payoff tensor against a player and strategy count."""
    errors: list[ShapeError] = []

    if not isinstance(players, int) or isinstance(players, bool) or players < 2:
        errors.append(
            ShapeError(
                field="players",
                message=f"Game needs at least 2 players, got {players!r}",
                code="invalid_player_count",
                details={"players": players},
            )
        )
    if num_strategies == 0:
        errors.append(
            ShapeError(
                field="strategies",
                message="Game has no strategies",
                code="empty_strategies",
            )
        )
    if not isinstance(payoffs, tuple) or len(payoffs) == 0:
        errors.append(
            ShapeError(
                field="payoffs",
                message="Payoff matrix has no strategies",
                code="empty_payoffs",
            )
        )
        return errors

    if len(payoffs) != num_strategies:
        errors.append(
            ShapeError(
                field="payoffs",
                message=(
                    f"Payoff matrix has {len(payoffs)} rows but the game defines "
                    f"{num_strategies} strategies"
                ),
                code="row_count_mismatch",
                details={"expected": num_strategies, "actual": len(payoffs)},
            )
        )

    for i, row in enumerate(payoffs):
        if not isinstance(row, tuple) or len(row) != num_strategies:
            actual = len(row) if isinstance(row, tuple) else None
            errors.append(
                ShapeError(
                    field=f"payoffs[{i}]",
                    message=f"Row {i} of payoff matrix has incorrect length {actual}, expected {num_strategies}",
                    code="column_count_mismatch",
                    details={"row": i, "expected": num_strategies, "actual": actual},
                )
            )
            if not isinstance(row, tuple):
                continue
        for j, cell in enumerate(row):
            if not isinstance(cell, tuple) or len(cell) != players:
                actual = len(cell) if isinstance(cell, tuple) else None
                errors.append(
                    ShapeError(
                        field=f"payoffs[{i}][{j}]",
                        message=(
                            f"Payoff entry [{i}][{j}] has {actual} player payoffs, expected {players}"
                        ),
                        code="payoff_length_mismatch",
                        details={"row": i, "column": j, "expected": players, "actual": actual},
                    )
                )
                continue
            for p, value in enumerate(cell):
                if not _is_number(value):
                    errors.append(
                        ShapeError(
                            field=f"payoffs[{i}][{j}][{p}]",
                            message=f"Payoff entry [{i}][{j}][{p}] is not a finite number: {value!r}",
                            code="non_numeric_payoff",
                            details={"row": i, "column": j, "player": p},
                        )
                    )
    return errors


def validate_matrix_shape(matrix: PayoffMatrix) -> list[ShapeError]:
    """Report every structural problem in a payoff matrix.

    Checks player count, non-empty strategy and payoff sets, row count equal
    to strategy count, column count per row, payoff-vector length per cell,
    and that every payoff is a finite number.

    Returns:
        Empty list when the matrix is well-formed
    """
    return shape_errors(matrix.payoffs, matrix.players, len(matrix.strategies))

"""Exception taxonomy for the nashlab engine.

Only invalid input raises. Numeric degeneracy is caught inside the solvers
and turns into an empty branch; an empty equilibrium list is a normal
result. Validator findings are reported as values, never raised.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from nashlab.models.matrices import ShapeError


class EngineError(Exception):
    """Base class for all engine errors."""


class StructuralError(EngineError, ValueError):
    """A payoff matrix is malformed and cannot be searched.

    Attributes:
        errors: Every shape problem found, in detection order
    """

    def __init__(self, errors: list[ShapeError]) -> None:
        self.errors = list(errors)
        summary = "; ".join(e.message for e in self.errors) or "malformed payoff matrix"
        super().__init__(f"Invalid payoff matrix: {summary}")


class NumericDegeneracy(EngineError):
    """A computation hit a zero or near-zero denominator."""


class SingularSystemError(NumericDegeneracy):
    """A linear system has no unique solution."""


class UnsupportedGameError(EngineError, ValueError):
    """A solver was called on a game with the wrong number of players."""

"""Dense linear-system solving for support enumeration."""

from __future__ import annotations

from typing import Sequence

import numpy as np

from nashlab.errors import SingularSystemError


def solve_linear_system(
    a: Sequence[Sequence[float]] | np.ndarray,
    b: Sequence[float] | np.ndarray,
    tolerance: float = 1e-8,
) -> list[float]:
    """Solve the square system ``a @ x = b``.

    ``np.linalg.solve`` factors ``a`` by LU decomposition with partial
    pivoting. Systems whose condition number exceeds ``1 / tolerance`` are
    treated as singular.

    Args:
        a: Square coefficient matrix (n x n)
        b: Right-hand side (length n)
        tolerance: Reciprocal of the largest accepted condition number

    Returns:
        Solution vector x

    Raises:
        SingularSystemError: If the system is not square or is (near-)singular

    Examples:
        >>> solve_linear_system([[2.0, 0.0], [0.0, 4.0]], [2.0, 2.0])
        [1.0, 0.5]
    """
    n = len(a)
    if n == 0 or len(b) != n or any(len(row) != n for row in a):
        raise SingularSystemError(f"Expected a square system, got {n} rows and {len(b)} constants")

    coefficients = np.array(a, dtype=float)
    constants = np.array(b, dtype=float)

    condition = np.linalg.cond(coefficients)
    if not np.isfinite(condition) or condition > 1.0 / tolerance:
        raise SingularSystemError(f"Singular system: condition number {condition:.3e}")

    try:
        solution = np.linalg.solve(coefficients, constants)
    except np.linalg.LinAlgError as e:
        raise SingularSystemError(f"Singular system: {e}") from e
    return solution.tolist()

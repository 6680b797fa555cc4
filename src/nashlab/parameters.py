"""Solver parameters for the nashlab equilibrium engine.

This module is the SINGLE SOURCE OF TRUTH for all tunable numeric constants.
Every tolerance and search cap used by the solvers lives here and is bundled
into ``nashlab.config.SolverConfig``.

Parameter Categories:
- Tolerances: Numerical comparison thresholds
- Search Caps: Bounds that keep a single solve call tractable
- Fixed-Point Search: Symmetric n-player mixing iteration
- Stability Heuristics: Scoring constants for stability and ranking

Usage:
    from nashlab.parameters import TOLERANCE, MAX_SUPPORT_SIZE

Note: The search caps are deliberate tractability trade-offs. Raising them
makes the searches more complete at exponential cost; completeness is not
guaranteed for games larger than the caps.
"""

# =============================================================================
# TOLERANCES
# =============================================================================

TOLERANCE = 1e-8
"""Strict numerical tolerance.

Current: 1e-8

Used for:
    - Probability vectors summing to 1
    - Support membership (probability > TOLERANCE)
    - Ties in the pure best-response check
    - Simplex bounds of the 2x2 closed form
    - Rejecting negative probabilities in support enumeration

Related: RELAXED_TOLERANCE
"""

RELAXED_TOLERANCE = 1e-6
"""Relaxed tolerance for secondary checks.

Current: 1e-6

Used for:
    - Nash-condition checks in the validator
    - Indifference verification inside the 2-player support enumeration
    - Best-response and indifference checks in the n-player solver
    - Convergence of the symmetric fixed-point iteration
    - Near-zero probability warnings

Analysis:
    The n-player fixed-point search only converges to within this bound,
    so any check applied to its output must be at least this loose.
"""

DEGENERACY_TOLERANCE = 1e-10
"""Degeneracy threshold for the 2x2 closed form and support enumeration.

Current: 1e-10

Used for:
    - 2x2 solve: if either indifference equation's coefficient is smaller
      than this in absolute value, no interior mixed equilibrium exists
    - Support enumeration: linear systems with a condition number above
      1 / DEGENERACY_TOLERANCE are singular and the support pair is skipped
    - Fixed-point search: a pair whose payoff difference has a smaller
      slope than this is not iterated
"""


# =============================================================================
# SEARCH CAPS
# =============================================================================

MAX_SUPPORT_SIZE = 4
"""Largest support size tried by 2-player support enumeration.

Current: 4

Analysis:
    Support pairs grow as C(n, k)^2. With 10 strategies and k <= 4 that is
    at most 210^2 = 44,100 linear systems per size, which keeps one call
    bounded. Equilibria with larger supports are not found.
"""

MIN_SUPPORT_SIZE = 2
"""Smallest support size tried by support enumeration.

Size-1 supports are pure profiles, handled by the pure-strategy finder.
"""

MAX_MIXED_PLAYERS = 2
"""Most players allowed to mix simultaneously in the asymmetric n-player search.

Current: 2

Analysis:
    Each extra mixed player multiplies the search by C(|S|, 2). Keeping this
    at 2 bounds the search at roughly P^2 * |S|^(P-1) * C(|S|, 2)^2 profiles.
"""


# =============================================================================
# FIXED-POINT SEARCH
# =============================================================================

MAX_FIXED_POINT_ITERATIONS = 1000
"""Iteration cap for the symmetric two-strategy fixed-point search."""

FIXED_POINT_START = 0.5
"""Initial mixing probability for the fixed-point search."""

FIXED_POINT_STEP_SIZE = 0.1
"""Proportional step applied to the payoff difference each iteration.

Current: 0.1

The step is divided by the slope of the payoff difference in the mixing
probability, so each iteration contracts the distance to the fixed point
by (1 - FIXED_POINT_STEP_SIZE) regardless of payoff scale.
"""


# =============================================================================
# STABILITY HEURISTICS
# =============================================================================

STABILITY_PAYOFF_SCALE = 10.0
"""Payoff loss that maps to a pure stability score of 1.0.

Pure stability = clamp(min deviation loss / STABILITY_PAYOFF_SCALE, 0, 1).
"""

MIXED_STABILITY_CEILING = 0.7
"""Upper bound on n-player mixed stability.

Mixed equilibria are scored below pure ones.
"""

PLAYER_COUNT_PENALTY = 0.1
"""Stability lost per player beyond two in n-player mixed equilibria."""

RANKING_BAND = 0.1
"""Tie-break band used when ranking recommended equilibria.

Two scores closer than this are treated as equal and the next criterion
(stability, then efficiency, then social welfare) decides.
"""

WEAK_COMPONENT_THRESHOLD = 0.4
"""Stability component below which a named risk factor is reported."""

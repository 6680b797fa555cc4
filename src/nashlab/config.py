"""Solver configuration for nashlab.

This module bundles the constants from ``nashlab.parameters`` into a frozen
pydantic model and provides a factory that applies environment overrides.
Solvers receive a ``SolverConfig`` through their constructors.
"""

import os

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from nashlab import parameters

# Environment variable names for overrides
ENV_TOLERANCE = "NASHLAB_TOLERANCE"
ENV_RELAXED_TOLERANCE = "NASHLAB_RELAXED_TOLERANCE"
ENV_MAX_SUPPORT_SIZE = "NASHLAB_MAX_SUPPORT_SIZE"
ENV_MAX_MIXED_PLAYERS = "NASHLAB_MAX_MIXED_PLAYERS"
ENV_MAX_ITERATIONS = "NASHLAB_MAX_ITERATIONS"


class SolverConfig(BaseModel):
    """Numeric configuration shared by every solver.

    Defaults come from ``nashlab.parameters``.
    """

    model_config = ConfigDict(frozen=True)

    tolerance: float = parameters.TOLERANCE
    relaxed_tolerance: float = parameters.RELAXED_TOLERANCE
    degeneracy_tolerance: float = parameters.DEGENERACY_TOLERANCE

    # Search caps
    min_support_size: int = parameters.MIN_SUPPORT_SIZE
    max_support_size: int = parameters.MAX_SUPPORT_SIZE
    max_mixed_players: int = parameters.MAX_MIXED_PLAYERS

    # Fixed-point search
    max_iterations: int = parameters.MAX_FIXED_POINT_ITERATIONS
    fixed_point_start: float = parameters.FIXED_POINT_START
    fixed_point_step_size: float = parameters.FIXED_POINT_STEP_SIZE

    # Stability heuristics
    stability_payoff_scale: float = parameters.STABILITY_PAYOFF_SCALE
    mixed_stability_ceiling: float = parameters.MIXED_STABILITY_CEILING
    player_count_penalty: float = parameters.PLAYER_COUNT_PENALTY
    ranking_band: float = parameters.RANKING_BAND
    weak_component_threshold: float = parameters.WEAK_COMPONENT_THRESHOLD

    @field_validator(
        "tolerance",
        "relaxed_tolerance",
        "degeneracy_tolerance",
        "stability_payoff_scale",
    )
    @classmethod
    def validate_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("tolerances and scales must be positive")
        return v

    @field_validator("max_iterations")
    @classmethod
    def validate_iterations(cls, v: int) -> int:
        if v < 1:
            raise ValueError("max_iterations must be at least 1")
        return v

    @field_validator("max_mixed_players")
    @classmethod
    def validate_mixed_players(cls, v: int) -> int:
        if v < 1:
            raise ValueError("max_mixed_players must be at least 1")
        return v

    @field_validator("fixed_point_step_size")
    @classmethod
    def validate_step_size(cls, v: float) -> float:
        if not 0.0 < v <= 1.0:
            raise ValueError("fixed_point_step_size must be in (0, 1]")
        return v

    @field_validator("fixed_point_start", "mixed_stability_ceiling", "player_count_penalty")
    @classmethod
    def validate_unit_interval(cls, v: float) -> float:
        if not 0.0 <= v <= 1.0:
            raise ValueError("value must be in [0, 1]")
        return v

    @model_validator(mode="after")
    def validate_support_bounds(self) -> "SolverConfig":
        if self.min_support_size < 2:
            raise ValueError(f"min_support_size must be at least 2, got {self.min_support_size}")
        if self.max_support_size < self.min_support_size:
            raise ValueError(
                f"max_support_size ({self.max_support_size}) must be >= "
                f"min_support_size ({self.min_support_size})"
            )
        if self.relaxed_tolerance < self.tolerance:
            raise ValueError(
                f"relaxed_tolerance ({self.relaxed_tolerance}) must be >= tolerance ({self.tolerance})"
            )
        return self


def load_solver_config(**overrides) -> SolverConfig:
    """Build a SolverConfig from defaults, environment, then explicit overrides.

    Args:
        **overrides: Field values that take precedence over the environment

    Returns:
        Validated SolverConfig

    Raises:
        pydantic.ValidationError: If any value violates its constraint
    """
    values: dict[str, object] = {}

    env_fields = {
        ENV_TOLERANCE: "tolerance",
        ENV_RELAXED_TOLERANCE: "relaxed_tolerance",
        ENV_MAX_SUPPORT_SIZE: "max_support_size",
        ENV_MAX_MIXED_PLAYERS: "max_mixed_players",
        ENV_MAX_ITERATIONS: "max_iterations",
    }
    for env_name, field_name in env_fields.items():
        raw = os.environ.get(env_name)
        if raw is not None and raw.strip():
            values[field_name] = raw.strip()

    values.update(overrides)
    return SolverConfig(**values)

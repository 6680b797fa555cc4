"""nashlab game models.

This module exports the value types the engine consumes and produces.
"""

from .equilibrium import (
    EquilibriumType,
    MixedEquilibrium,
    NashEquilibrium,
    PureEquilibrium,
    deduplicate,
    profile_key,
    same_equilibrium,
)
from .matrices import (
    PayoffMatrix,
    ShapeError,
    Strategy,
    is_symmetric_payoffs,
    validate_matrix_shape,
)
from .scenario import (
    GameScenario,
    load_scenario,
    save_scenario,
    scenario_from_template,
)
from .templates import (
    CONSTRUCTORS,
    GameType,
    TemplateParameters,
    build_matrix,
    get_default_params_for_type,
)

__all__ = [
    # Payoff model
    "Strategy",
    "PayoffMatrix",
    "ShapeError",
    "is_symmetric_payoffs",
    "validate_matrix_shape",
    # Equilibria
    "EquilibriumType",
    "PureEquilibrium",
    "MixedEquilibrium",
    "NashEquilibrium",
    "deduplicate",
    "profile_key",
    "same_equilibrium",
    # Templates
    "GameType",
    "TemplateParameters",
    "CONSTRUCTORS",
    "build_matrix",
    "get_default_params_for_type",
    # Scenarios
    "GameScenario",
    "load_scenario",
    "save_scenario",
    "scenario_from_template",
]

"""Game scenario schema.

A scenario is the external description of a game handed to the engine. It
either lists strategies and raw payoffs directly, or names a template
(``game_type`` + optional ``template_parameters``) whose matrix is built at
load time. Payoff shape is not checked here; the engine validates shape
before any search.
"""

import json
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from nashlab.models.matrices import PayoffMatrix, Strategy
from nashlab.models.templates import (
    CONSTRUCTORS,
    GameType,
    TemplateParameters,
    build_matrix,
)

Difficulty = Literal["beginner", "intermediate", "advanced"]


class GameScenario(BaseModel):
    """A finite game in strategic form."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    description: str = ""
    game_type: GameType | None = None
    template_parameters: TemplateParameters | None = None

    players: int | None = None
    strategies: list[Strategy] = Field(default_factory=list)
    payoffs: list[list[list[float]]] = Field(default_factory=list)
    is_symmetric: bool | None = None

    difficulty: Difficulty = "beginner"
    tags: list[str] = Field(default_factory=list)

    @field_validator("strategies", mode="before")
    @classmethod
    def coerce_strategy_names(cls, v: Any) -> Any:
        """Allow plain strategy names in place of full strategy objects."""
        if not isinstance(v, list):
            return v
        return [
            {"id": s.lower().replace(" ", "_"), "name": s, "short_name": s[:1].upper()}
            if isinstance(s, str)
            else s
            for s in v
        ]

    @model_validator(mode="before")
    @classmethod
    def fill_from_template(cls, data: Any) -> Any:
        """Build strategies and payoffs from the template when none are given."""
        if not isinstance(data, dict) or data.get("payoffs"):
            return data
        game_type = data.get("game_type")
        if game_type is None:
            raise ValueError("Scenario needs either payoffs or a game_type")
        game_type = GameType(game_type)
        params = data.get("template_parameters")
        if isinstance(params, dict):
            params = TemplateParameters(**params)
        matrix = build_matrix(game_type, params)
        filled = dict(data)
        filled["players"] = matrix.players
        filled["strategies"] = [s.model_dump() for s in matrix.strategies]
        filled["payoffs"] = [[list(cell) for cell in row] for row in matrix.payoffs]
        filled.setdefault("is_symmetric", matrix.is_symmetric)
        return filled

    def to_payoff_matrix(self) -> PayoffMatrix:
        """Convert to a PayoffMatrix without validating shape.

        Missing player counts are taken from the first payoff cell; missing
        strategies get default names.
        """
        names = [s.name for s in self.strategies] or None
        matrix = PayoffMatrix.from_payoffs(
            self.payoffs,
            strategy_names=names,
            players=self.players,
            is_symmetric=self.is_symmetric,
        )
        if self.strategies:
            # Keep ids and descriptions from the scenario
            matrix = PayoffMatrix(
                players=matrix.players,
                strategies=tuple(self.strategies),
                payoffs=matrix.payoffs,
                is_symmetric=matrix.is_symmetric,
            )
        return matrix


def scenario_from_template(
    game_type: GameType,
    params: TemplateParameters | None = None,
) -> GameScenario:
    """Create a scenario for a built-in template."""
    constructor = CONSTRUCTORS[game_type]
    data: dict[str, Any] = {
        "id": game_type.value,
        "name": constructor.name,
        "description": constructor.description,
        "game_type": game_type,
        "tags": ["template"],
    }
    if params is not None:
        data["template_parameters"] = params
    # Template parameters may arrive as a model; build the payoffs here
    matrix = build_matrix(game_type, params)
    data["players"] = matrix.players
    data["strategies"] = list(matrix.strategies)
    data["payoffs"] = [[list(cell) for cell in row] for row in matrix.payoffs]
    data["is_symmetric"] = matrix.is_symmetric
    return GameScenario.model_validate(data)


def load_scenario(scenario_path: str | Path) -> GameScenario:
    """Load and validate a scenario from a JSON file.

    Args:
        scenario_path: Path to the scenario JSON file

    Returns:
        Validated GameScenario (payoff shape is not checked)

    Raises:
        FileNotFoundError: If the file doesn't exist
        json.JSONDecodeError: If the file is not valid JSON
        pydantic.ValidationError: If schema validation fails
    """
    path = Path(scenario_path)
    with path.open() as f:
        data = json.load(f)
    return GameScenario.model_validate(data)


def save_scenario(scenario: GameScenario, scenario_path: str | Path) -> None:
    """Save a scenario to a JSON file."""
    path = Path(scenario_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w") as f:
        json.dump(scenario.model_dump(mode="json", exclude_none=True), f, indent=2)

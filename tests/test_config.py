"""Tests for solver configuration and environment overrides."""

import pytest
from pydantic import ValidationError

from nashlab import parameters
from nashlab.config import (
    ENV_MAX_ITERATIONS,
    ENV_MAX_MIXED_PLAYERS,
    ENV_MAX_SUPPORT_SIZE,
    ENV_RELAXED_TOLERANCE,
    ENV_TOLERANCE,
    SolverConfig,
    load_solver_config,
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in (
        ENV_TOLERANCE,
        ENV_RELAXED_TOLERANCE,
        ENV_MAX_SUPPORT_SIZE,
        ENV_MAX_MIXED_PLAYERS,
        ENV_MAX_ITERATIONS,
    ):
        monkeypatch.delenv(name, raising=False)


class TestSolverConfig:
    """Tests for SolverConfig defaults and validation."""

    def test_defaults_match_parameters(self) -> None:
        config = SolverConfig()
        assert config.tolerance == parameters.TOLERANCE
        assert config.relaxed_tolerance == parameters.RELAXED_TOLERANCE
        assert config.max_support_size == parameters.MAX_SUPPORT_SIZE
        assert config.max_mixed_players == parameters.MAX_MIXED_PLAYERS
        assert config.max_iterations == parameters.MAX_FIXED_POINT_ITERATIONS

    def test_config_is_frozen(self) -> None:
        config = SolverConfig()
        with pytest.raises(ValidationError):
            config.tolerance = 1e-3

    @pytest.mark.parametrize(
        "field_name,value",
        [
            ("tolerance", 0.0),
            ("stability_payoff_scale", -1.0),
            ("max_iterations", 0),
            ("max_mixed_players", 0),
            ("fixed_point_step_size", 1.5),
            ("mixed_stability_ceiling", 1.1),
        ],
    )
    def test_invalid_values_rejected(self, field_name: str, value) -> None:
        with pytest.raises(ValidationError):
            SolverConfig(**{field_name: value})

    def test_support_bounds(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            SolverConfig(min_support_size=3, max_support_size=2)
        assert "max_support_size" in str(exc_info.value)

        with pytest.raises(ValidationError) as exc_info:
            SolverConfig(min_support_size=1)
        assert "min_support_size must be at least 2" in str(exc_info.value)

    def test_relaxed_tolerance_not_tighter_than_strict(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            SolverConfig(tolerance=1e-4, relaxed_tolerance=1e-6)
        assert "relaxed_tolerance" in str(exc_info.value)


class TestLoadSolverConfig:
    """Tests for environment and override precedence."""

    def test_defaults_without_environment(self) -> None:
        assert load_solver_config() == SolverConfig()

    def test_environment_overrides(self, monkeypatch) -> None:
        monkeypatch.setenv(ENV_TOLERANCE, "1e-9")
        monkeypatch.setenv(ENV_MAX_SUPPORT_SIZE, "3")
        config = load_solver_config()
        assert config.tolerance == 1e-9
        assert config.max_support_size == 3

    def test_blank_environment_ignored(self, monkeypatch) -> None:
        monkeypatch.setenv(ENV_MAX_ITERATIONS, "  ")
        assert load_solver_config().max_iterations == parameters.MAX_FIXED_POINT_ITERATIONS

    def test_explicit_overrides_beat_environment(self, monkeypatch) -> None:
        monkeypatch.setenv(ENV_MAX_ITERATIONS, "50")
        assert load_solver_config(max_iterations=20).max_iterations == 20

    def test_invalid_environment_value_raises(self, monkeypatch) -> None:
        monkeypatch.setenv(ENV_MAX_ITERATIONS, "many")
        with pytest.raises(ValidationError):
            load_solver_config()

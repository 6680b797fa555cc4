"""Unit tests for templates.py.

Tests cover:
1. GameType enum - all 9 game types defined
2. TemplateParameters - default values and validation
3. Constructors - ordinal constraints and random parameter validation
4. CONSTRUCTORS registry - completeness and build_matrix function
"""

import random

import pytest
from pydantic import ValidationError

from nashlab.engine.pure import PureStrategyFinder
from nashlab.models.matrices import PayoffMatrix, validate_matrix_shape
from nashlab.models.templates import (
    CONSTRUCTORS,
    BattleOfSexesConstructor,
    ChickenConstructor,
    GameType,
    PrisonersDilemmaConstructor,
    PublicGoodsConstructor,
    StagHuntConstructor,
    TemplateConstructor,
    TemplateParameters,
    build_matrix,
    get_default_params_for_type,
)


def generate_random_pd_params() -> TemplateParameters:
    """Random parameters satisfying T > R > P > S."""
    values = sorted(random.sample(range(-20, 20), 4), reverse=True)
    t, r, p, s = values
    return TemplateParameters(temptation=t, reward=r, punishment=p, sucker=s)


def generate_random_stag_params() -> TemplateParameters:
    """Random parameters satisfying R > T > P > S."""
    r, t, p, s = sorted(random.sample(range(-20, 20), 4), reverse=True)
    return TemplateParameters(stag_payoff=r, hare_temptation=t, hare_safe=p, stag_fail=s)


# =============================================================================
# GameType Enum Tests
# =============================================================================


class TestGameType:
    """Tests for GameType enum."""

    def test_all_9_game_types_defined(self) -> None:
        expected_types = {
            "PRISONERS_DILEMMA",
            "PUBLIC_GOODS",
            "CHICKEN",
            "HAWK_DOVE",
            "COORDINATION",
            "STAG_HUNT",
            "BATTLE_OF_SEXES",
            "MATCHING_PENNIES",
            "ROCK_PAPER_SCISSORS",
        }
        assert {member.name for member in GameType} == expected_types

    def test_enum_values_are_lowercase_names(self) -> None:
        for member in GameType:
            assert member.value == member.name.lower()


# =============================================================================
# TemplateParameters Tests
# =============================================================================


class TestTemplateParameters:
    def test_defaults(self) -> None:
        params = TemplateParameters()
        assert params.scale == 1.0
        assert params.players == 2
        assert (params.temptation, params.reward, params.punishment, params.sucker) == (5, 3, 1, 0)

    @pytest.mark.parametrize("field_name", ["scale", "stake"])
    def test_positive_fields(self, field_name: str) -> None:
        with pytest.raises(ValidationError) as exc_info:
            TemplateParameters(**{field_name: 0})
        assert "must be positive" in str(exc_info.value)

    def test_players_at_least_two(self) -> None:
        with pytest.raises(ValidationError):
            TemplateParameters(players=1)

    def test_frozen(self) -> None:
        with pytest.raises(ValidationError):
            TemplateParameters().scale = 2.0


# =============================================================================
# Constructor Tests
# =============================================================================


class TestPrisonersDilemmaConstructor:
    """Tests for Prisoner's Dilemma constructor."""

    def test_ordinal_constraint_t_greater_than_r_greater_than_p_greater_than_s(self) -> None:
        PrisonersDilemmaConstructor.validate_params(TemplateParameters())  # Should not raise

        with pytest.raises(ValueError) as exc_info:
            PrisonersDilemmaConstructor.validate_params(TemplateParameters(temptation=3.0, reward=3.0))
        assert "T > R > P > S" in str(exc_info.value)

        with pytest.raises(ValueError) as exc_info:
            PrisonersDilemmaConstructor.validate_params(TemplateParameters(reward=1.0, punishment=1.0))
        assert "T > R > P > S" in str(exc_info.value)

    def test_build_returns_classic_matrix(self) -> None:
        matrix = PrisonersDilemmaConstructor.build(TemplateParameters())

        assert isinstance(matrix, PayoffMatrix)
        assert matrix.strategy_names == ["Cooperate", "Defect"]
        assert matrix.payoffs == (((3, 3), (0, 5)), ((5, 0), (1, 1)))
        assert matrix.is_symmetric

    def test_rejects_extra_players(self) -> None:
        with pytest.raises(ValueError) as exc_info:
            PrisonersDilemmaConstructor.build(TemplateParameters(players=3))
        assert "2-player game" in str(exc_info.value)

    @pytest.mark.parametrize("seed", range(10))
    def test_random_valid_params_keep_unique_equilibrium(self, seed: int) -> None:
        """Random valid parameters always give the unique (Defect, Defect) equilibrium."""
        random.seed(seed)
        matrix = PrisonersDilemmaConstructor.build(generate_random_pd_params())

        equilibria = PureStrategyFinder().find(matrix)
        assert [eq.profile for eq in equilibria] == [(1, 1)]


class TestChickenConstructor:
    def test_ordinal_constraint(self) -> None:
        with pytest.raises(ValueError) as exc_info:
            ChickenConstructor.validate_params(TemplateParameters(temptation=1, reward=0, sucker=-20))
        assert "T > R > S > P" in str(exc_info.value)

    def test_default_matrix(self) -> None:
        matrix = build_matrix(GameType.CHICKEN)
        assert matrix.payoffs == (((0, 0), (-1, 1)), ((1, -1), (-10, -10)))
        assert [eq.profile for eq in PureStrategyFinder().find(matrix)] == [(0, 1), (1, 0)]


class TestStagHuntConstructor:
    def test_ordinal_constraint(self) -> None:
        with pytest.raises(ValueError) as exc_info:
            StagHuntConstructor.validate_params(TemplateParameters(stag_payoff=1.5))
        assert "R > T > P > S" in str(exc_info.value)

    @pytest.mark.parametrize("seed", range(10))
    def test_random_valid_params_keep_two_equilibria(self, seed: int) -> None:
        random.seed(seed)
        matrix = StagHuntConstructor.build(generate_random_stag_params())
        assert [eq.profile for eq in PureStrategyFinder().find(matrix)] == [(0, 0), (1, 1)]


class TestBattleOfSexesConstructor:
    def test_not_symmetric(self) -> None:
        matrix = BattleOfSexesConstructor.build(TemplateParameters())
        assert not matrix.is_symmetric
        assert matrix.payoffs == (((2, 1), (0, 0)), ((0, 0), (1, 2)))

    def test_ordinal_constraint(self) -> None:
        with pytest.raises(ValueError) as exc_info:
            BattleOfSexesConstructor.validate_params(TemplateParameters(compromise_payoff=3))
        assert "preferred > compromise" in str(exc_info.value)


class TestPublicGoodsConstructor:
    def test_two_player_version(self) -> None:
        matrix = PublicGoodsConstructor.build(TemplateParameters())
        assert matrix.players == 2
        assert matrix.payoffs == (((1, 1), (-1, 2)), ((2, -1), (0, 0)))

    def test_n_player_cells_repeat_own_payoff(self) -> None:
        matrix = PublicGoodsConstructor.build(TemplateParameters(players=5))

        assert matrix.players == 5
        assert matrix.is_symmetric
        assert matrix.cell(1, 0) == (2.0,) * 5
        assert validate_matrix_shape(matrix) == []


# =============================================================================
# Registry Tests
# =============================================================================


class TestRegistry:
    """Tests for CONSTRUCTORS registry and build_matrix."""

    def test_every_type_registered(self) -> None:
        assert set(CONSTRUCTORS) == set(GameType)

    def test_constructors_follow_protocol(self) -> None:
        for constructor in CONSTRUCTORS.values():
            assert isinstance(constructor, TemplateConstructor)
            assert constructor.name
            assert constructor.description

    @pytest.mark.parametrize("game_type", list(GameType))
    def test_defaults_build_well_formed_matrices(self, game_type: GameType) -> None:
        params = get_default_params_for_type(game_type)
        matrix = build_matrix(game_type, params)
        assert validate_matrix_shape(matrix) == []

    def test_scale_multiplies_payoffs(self) -> None:
        base = build_matrix(GameType.ROCK_PAPER_SCISSORS)
        scaled = build_matrix(GameType.ROCK_PAPER_SCISSORS, TemplateParameters(scale=2.0))
        assert scaled.cell(1, 0) == tuple(2 * v for v in base.cell(1, 0))

    def test_unknown_type_raises(self) -> None:
        with pytest.raises(ValueError) as exc_info:
            build_matrix("not_a_game")
        assert "Unknown game type" in str(exc_info.value)

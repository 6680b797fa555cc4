"""Shared pytest fixtures and markers for all tests."""

import pytest

from nashlab.models.matrices import PayoffMatrix


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )


def three_player_matrix(own_payoffs, names=None) -> PayoffMatrix:
    """Build a symmetric 3-player matrix from an own-payoff table.

    ``own_payoffs[own][aggregate]`` is stored in every player slot.
    """
    n = len(own_payoffs)
    payoffs = [[[own_payoffs[i][j]] * 3 for j in range(n)] for i in range(n)]
    return PayoffMatrix.from_payoffs(payoffs, strategy_names=names, players=3)


@pytest.fixture
def prisoners_dilemma() -> PayoffMatrix:
    return PayoffMatrix.from_payoffs(
        [[[3, 3], [0, 5]], [[5, 0], [1, 1]]],
        strategy_names=["Cooperate", "Defect"],
    )


@pytest.fixture
def battle_of_sexes() -> PayoffMatrix:
    return PayoffMatrix.from_payoffs(
        [[[2, 1], [0, 0]], [[0, 0], [1, 2]]],
        strategy_names=["Football", "Opera"],
    )


@pytest.fixture
def matching_pennies() -> PayoffMatrix:
    return PayoffMatrix.from_payoffs(
        [[[1, -1], [-1, 1]], [[-1, 1], [1, -1]]],
        strategy_names=["Heads", "Tails"],
    )


@pytest.fixture
def zero_game() -> PayoffMatrix:
    return PayoffMatrix.from_payoffs([[[0, 0], [0, 0]], [[0, 0], [0, 0]]])


@pytest.fixture
def rock_paper_scissors() -> PayoffMatrix:
    u = [[0, -1, 1], [1, 0, -1], [-1, 1, 0]]
    payoffs = [[[u[i][j], u[j][i]] for j in range(3)] for i in range(3)]
    return PayoffMatrix.from_payoffs(payoffs, strategy_names=["Rock", "Paper", "Scissors"])


@pytest.fixture
def dominated_third_strategy() -> PayoffMatrix:
    """Symmetric 3x3 game where strategy 2 is strictly dominated by strategy 0."""
    u = [[2, 0, 3], [0, 1, 3], [-1, -1, -1]]
    payoffs = [[[u[i][j], u[j][i]] for j in range(3)] for i in range(3)]
    return PayoffMatrix.from_payoffs(payoffs, strategy_names=["High", "Low", "Bad"])


@pytest.fixture
def three_player_pd() -> PayoffMatrix:
    return three_player_matrix([[3, 0], [5, 1]], names=["Cooperate", "Defect"])


@pytest.fixture
def three_player_anticoordination() -> PayoffMatrix:
    """Symmetric 3-player game whose shared mix (2/3, 1/3) equalizes both strategies."""
    return three_player_matrix([[0, 3], [1, 1]], names=["Enter", "Stay Out"])


@pytest.fixture
def make_three_player():
    """Factory for symmetric 3-player matrices from an own-payoff table."""
    return three_player_matrix

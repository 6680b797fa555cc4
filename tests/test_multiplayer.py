"""Tests for the n-player (n >= 3) equilibrium search."""

import pytest

from nashlab.config import SolverConfig
from nashlab.engine.multiplayer import MultiPlayerSolver
from nashlab.errors import UnsupportedGameError
from nashlab.models.equilibrium import MixedEquilibrium, PureEquilibrium, same_equilibrium
from nashlab.models.matrices import PayoffMatrix
from nashlab.models.templates import GameType, TemplateParameters, build_matrix


class TestMultiPlayerSolver:
    """Tests for MultiPlayerSolver.find."""

    def test_three_player_prisoners_dilemma(self, three_player_pd: PayoffMatrix) -> None:
        equilibria = MultiPlayerSolver().find(three_player_pd)

        assert len(equilibria) == 1
        eq = equilibria[0]
        assert isinstance(eq, PureEquilibrium)
        assert eq.profile == (1, 1, 1)
        assert eq.is_strict is True

    def test_symmetric_mixed_found(self, three_player_anticoordination: PayoffMatrix) -> None:
        equilibria = MultiPlayerSolver().find(three_player_anticoordination)

        pure = [eq for eq in equilibria if isinstance(eq, PureEquilibrium)]
        mixed = [eq for eq in equilibria if isinstance(eq, MixedEquilibrium)]
        assert [eq.profile for eq in pure] == [(0, 0, 1), (0, 1, 0), (1, 0, 0)]
        assert len(mixed) == 1
        for dist in mixed[0].distributions:
            assert dist == pytest.approx((2 / 3, 1 / 3), abs=1e-5)
        assert mixed[0].payoffs == pytest.approx((1.0, 1.0, 1.0), abs=1e-5)

    def test_public_goods_everyone_free_rides(self) -> None:
        matrix = build_matrix(GameType.PUBLIC_GOODS, TemplateParameters(players=4))
        equilibria = MultiPlayerSolver().find(matrix)

        assert [eq.profile for eq in equilibria] == [(1, 1, 1, 1)]

    def test_requires_three_players(self, prisoners_dilemma: PayoffMatrix) -> None:
        with pytest.raises(UnsupportedGameError) as exc_info:
            MultiPlayerSolver().find(prisoners_dilemma)
        assert "3 or more players" in str(exc_info.value)

    def test_results_are_unique(self, three_player_anticoordination: PayoffMatrix) -> None:
        equilibria = MultiPlayerSolver().find(three_player_anticoordination)
        for i, a in enumerate(equilibria):
            for b in equilibria[i + 1 :]:
                assert not same_equilibrium(a, b)


class TestSymmetricSearch:
    """Tests for the uniform check and the pairwise fixed point."""

    def test_fixed_point_converges(self, three_player_anticoordination: PayoffMatrix) -> None:
        p = MultiPlayerSolver().pairwise_fixed_point(three_player_anticoordination, 0, 1)
        assert p == pytest.approx(2 / 3, abs=1e-5)

    @pytest.mark.parametrize("factor", [0.01, 100.0])
    def test_fixed_point_independent_of_payoff_scale(self, make_three_player, factor: float) -> None:
        """Scaling every payoff leaves the shared mix unchanged."""
        matrix = make_three_player([[0, 3 * factor], [factor, factor]])
        p = MultiPlayerSolver().pairwise_fixed_point(matrix, 0, 1)

        assert p is not None
        assert p == pytest.approx(2 / 3, abs=1e-4)

    def test_small_payoffs_keep_symmetric_equilibrium(self, make_three_player) -> None:
        matrix = make_three_player([[0, 0.03], [0.01, 0.01]])
        found = MultiPlayerSolver().find_symmetric_mixed(matrix)

        assert len(found) == 1
        assert found[0].distributions[0] == pytest.approx((2 / 3, 1 / 3), abs=1e-4)

    def test_fixed_point_rejects_boundary(self, three_player_pd: PayoffMatrix) -> None:
        """Defect always pays more, so the iteration is pushed to p = 0 and never converges."""
        assert MultiPlayerSolver().pairwise_fixed_point(three_player_pd, 0, 1) is None

    def test_fixed_point_respects_iteration_cap(self, three_player_anticoordination) -> None:
        solver = MultiPlayerSolver(SolverConfig(max_iterations=1))
        assert solver.pairwise_fixed_point(three_player_anticoordination, 0, 1) is None

    def test_uniform_profile_accepted(self, make_three_player) -> None:
        """Every strategy pays the same against the uniform mix of a cyclic game."""
        matrix = make_three_player([[0, -1, 1], [1, 0, -1], [-1, 1, 0]])
        found = MultiPlayerSolver().find_symmetric_mixed(matrix)

        assert found
        assert found[0].distributions[0] == pytest.approx((1 / 3, 1 / 3, 1 / 3))

    def test_skipped_for_asymmetric_games(self, monkeypatch) -> None:
        payoffs = [[[0, 0, 1], [3, 3, 2]], [[1, 1, 1], [1, 1, 0]]]
        matrix = PayoffMatrix.from_payoffs(payoffs)
        assert matrix.is_symmetric is False

        solver = MultiPlayerSolver()
        monkeypatch.setattr(
            solver, "find_symmetric_mixed", lambda m: pytest.fail("symmetric search ran")
        )
        solver.find(matrix)


class TestAsymmetricSearch:
    """Tests for the bounded asymmetric candidate generation."""

    def test_mixed_player_patterns(self) -> None:
        solver = MultiPlayerSolver()
        patterns = list(solver.mixed_player_patterns(3))
        assert patterns == [(0,), (1,), (2,), (0, 1), (0, 2), (1, 2)]

    def test_mixed_player_cap(self) -> None:
        solver = MultiPlayerSolver(SolverConfig(max_mixed_players=1))
        assert list(solver.mixed_player_patterns(4)) == [(0,), (1,), (2,), (3,)]

    def test_candidate_profiles(self, three_player_pd: PayoffMatrix) -> None:
        candidates = list(MultiPlayerSolver().candidate_profiles(three_player_pd, (0,)))

        # 2 pure choices for each of 2 pure players, 1 strategy pair for the mixer
        assert len(candidates) == 4
        for profile in candidates:
            assert profile[0] == (0.5, 0.5)
            assert profile[1] in ((1.0, 0.0), (0.0, 1.0))

    def test_half_mix_equilibrium_found(self, make_three_player) -> None:
        """A lone 50/50 mixer is indifferent when both others play strategy 0."""
        # Strategy 0 always pays 1; strategy 1 pays 1 only against an aggregate 0
        matrix = make_three_player([[1, 1], [1, 0]])
        found = MultiPlayerSolver().find_asymmetric(matrix)

        assert len(found) == 3
        assert ((0.5, 0.5), (1.0, 0.0), (1.0, 0.0)) in [eq.distributions for eq in found]
        for eq in found:
            assert eq.stability == pytest.approx(0.9 * (2 / 3) * 0.7)


class TestMultiPlayerStability:
    def test_mixed_stability_is_capped(self) -> None:
        solver = MultiPlayerSolver()
        profile = ((2 / 3, 1 / 3),) * 3
        # Full support, so the support penalty removes everything
        assert solver.stability(profile) == 0.0

        partial = ((1.0, 0.0), (1.0, 0.0), (0.5, 0.5))
        expected = (1 - 0.1) * (1 - (4 / 3 - 1)) * 0.7
        assert solver.stability(partial) == pytest.approx(expected)

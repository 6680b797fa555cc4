"""Tests for two-player best-response analysis."""

import pytest

from nashlab.engine.best_response import BestResponseAnalyzer
from nashlab.errors import UnsupportedGameError


class TestBestResponse:
    def test_pure_opponent(self, battle_of_sexes) -> None:
        analyzer = BestResponseAnalyzer(battle_of_sexes)
        response = analyzer.best_response(0, (1.0, 0.0))

        assert response.best_strategies == (0,)
        assert response.is_unique
        assert response.max_payoff == 2
        assert response.responses[1].margin_from_best == 2

    def test_column_player(self, battle_of_sexes) -> None:
        response = BestResponseAnalyzer(battle_of_sexes).best_response(1, (0.0, 1.0))
        assert response.best_strategies == (1,)
        assert response.max_payoff == 2

    def test_indifference_gives_every_strategy(self, battle_of_sexes) -> None:
        response = BestResponseAnalyzer(battle_of_sexes).best_response(0, (1 / 3, 2 / 3))

        assert response.best_strategies == (0, 1)
        assert not response.is_unique
        assert all(r.is_optimal for r in response.responses)

    def test_length_mismatch(self, battle_of_sexes) -> None:
        with pytest.raises(ValueError) as exc_info:
            BestResponseAnalyzer(battle_of_sexes).best_response(0, (1.0,))
        assert "expected 2" in str(exc_info.value)

    def test_requires_two_players(self, three_player_pd) -> None:
        with pytest.raises(UnsupportedGameError):
            BestResponseAnalyzer(three_player_pd)

    def test_to_dict(self, prisoners_dilemma) -> None:
        data = BestResponseAnalyzer(prisoners_dilemma).best_response(0, (0.5, 0.5)).to_dict()
        assert data["best_strategies"] == [1]
        assert data["responses"][0]["payoff"] == pytest.approx(1.5)


class TestBestResponseCurve:
    def test_matching_pennies_switches_at_half(self, matching_pennies) -> None:
        curve = BestResponseAnalyzer(matching_pennies).best_response_curve(0, resolution=4)

        assert [point.opponent_probability for point in curve] == [0.0, 0.25, 0.5, 0.75, 1.0]
        assert curve[0].best_strategies == (1,)
        assert curve[2].best_strategies == (0, 1)
        assert curve[4].best_strategies == (0,)

    def test_dominant_strategy_is_flat(self, prisoners_dilemma) -> None:
        curve = BestResponseAnalyzer(prisoners_dilemma).best_response_curve(1)

        assert len(curve) == 21
        assert all(point.best_strategies == (1,) for point in curve)

    def test_invalid_resolution(self, prisoners_dilemma) -> None:
        with pytest.raises(ValueError):
            BestResponseAnalyzer(prisoners_dilemma).best_response_curve(0, resolution=0)

    def test_needs_two_strategies(self, rock_paper_scissors) -> None:
        with pytest.raises(ValueError):
            BestResponseAnalyzer(rock_paper_scissors).best_response_curve(0)


class TestMutualBestResponses:
    def test_matches_pure_equilibria(self, battle_of_sexes, matching_pennies, zero_game) -> None:
        assert BestResponseAnalyzer(battle_of_sexes).pure_best_response_profiles() == [(0, 0), (1, 1)]
        assert BestResponseAnalyzer(matching_pennies).pure_best_response_profiles() == []
        assert len(BestResponseAnalyzer(zero_game).pure_best_response_profiles()) == 4

"""Tests for the CLI application."""

import json

import pytest

from nashlab.cli.app import build_parser, format_equilibrium, main
from nashlab.models.equilibrium import MixedEquilibrium, PureEquilibrium
from nashlab.models.scenario import save_scenario, scenario_from_template
from nashlab.models.templates import GameType


@pytest.fixture
def scenario_file(tmp_path):
    path = tmp_path / "bos.json"
    save_scenario(scenario_from_template(GameType.BATTLE_OF_SEXES), path)
    return path


@pytest.fixture
def malformed_file(tmp_path):
    path = tmp_path / "bad.json"
    path.write_text(
        json.dumps(
            {
                "id": "bad",
                "name": "Broken Game",
                "strategies": ["A", "B"],
                "payoffs": [[[1, 1], [0, 0]], [[0, 0]]],
            }
        )
    )
    return path


class TestParser:
    def test_analyze_requires_a_source(self) -> None:
        with pytest.raises(SystemExit):
            build_parser().parse_args(["analyze"])

    def test_scenario_and_template_are_exclusive(self) -> None:
        with pytest.raises(SystemExit):
            build_parser().parse_args(["analyze", "--template", "chicken", "--scenario", "x.json"])

    def test_unknown_template_rejected(self) -> None:
        with pytest.raises(SystemExit):
            build_parser().parse_args(["analyze", "--template", "tic_tac_toe"])


class TestFormatting:
    def test_pure(self) -> None:
        eq = PureEquilibrium(profile=(1, 1), payoffs=(1, 1), stability=0.1, is_strict=True)
        text = format_equilibrium(eq, ["Cooperate", "Defect"])
        assert text.startswith("Pure (strict): Defect,Defect")
        assert "stability=0.10" in text

    def test_mixed(self) -> None:
        eq = MixedEquilibrium(distributions=((0.5, 0.5), (0.5, 0.5)), payoffs=(0, 0), stability=0.0)
        text = format_equilibrium(eq, ["Heads", "Tails"])
        assert text.startswith("Mixed: (Heads=0.500, Tails=0.500)")


class TestAnalyzeCommand:
    def test_template_report(self, capsys) -> None:
        assert main(["analyze", "--template", "prisoners_dilemma"]) == 0

        out = capsys.readouterr().out
        assert "GAME ANALYSIS: Prisoner's Dilemma" in out
        assert "EQUILIBRIA (1)" in out
        assert "Pure (strict): Defect,Defect" in out
        assert "Only valid equilibrium found" in out
        assert "Strategic Dominance Analysis Results:" in out

    def test_scenario_json(self, scenario_file, capsys) -> None:
        assert main(["analyze", "--scenario", str(scenario_file), "--json"]) == 0

        data = json.loads(capsys.readouterr().out)
        assert data["scenario"]["id"] == "battle_of_sexes"
        assert data["strategies"] == ["Football", "Opera"]
        assert [eq["type"] for eq in data["equilibria"]] == ["pure", "pure", "mixed"]
        assert len(data["recommended"]) == 3
        assert data["dominance"]["has_strict_dominance"] is False

    def test_public_goods_template(self, capsys) -> None:
        assert main(["analyze", "--template", "public_goods", "--json"]) == 0
        data = json.loads(capsys.readouterr().out)
        assert data["equilibria"][0]["strategies"] == [1, 1]

    def test_missing_file(self, tmp_path, capsys) -> None:
        assert main(["analyze", "--scenario", str(tmp_path / "nope.json")]) == 1
        assert "Scenario file not found" in capsys.readouterr().err

    def test_malformed_matrix_exit_code(self, malformed_file, capsys) -> None:
        assert main(["analyze", "--scenario", str(malformed_file)]) == 2
        err = capsys.readouterr().err
        assert "Invalid payoff matrix" in err
        assert "[column_count_mismatch] payoffs[1]" in err

    def test_invalid_environment_config(self, monkeypatch, capsys) -> None:
        monkeypatch.setenv("NASHLAB_MAX_ITERATIONS", "0")
        assert main(["analyze", "--template", "chicken"]) == 1
        assert "Invalid solver configuration" in capsys.readouterr().err


class TestOtherCommands:
    def test_templates_lists_every_type(self, capsys) -> None:
        assert main(["templates"]) == 0
        out = capsys.readouterr().out
        for game_type in GameType:
            assert game_type.value in out
        assert "Rock-Paper-Scissors:" in out

    def test_validate_shape_ok(self, scenario_file, capsys) -> None:
        assert main(["validate-shape", str(scenario_file)]) == 0
        assert "Battle of the Sexes: payoff matrix is well-formed" in capsys.readouterr().out

    def test_validate_shape_reports_errors(self, malformed_file, capsys) -> None:
        assert main(["validate-shape", str(malformed_file)]) == 1
        out = capsys.readouterr().out
        assert "Broken Game: 1 shape errors" in out
        assert "[column_count_mismatch]" in out

    def test_validate_shape_bad_json(self, tmp_path, capsys) -> None:
        path = tmp_path / "broken.json"
        path.write_text("{")
        assert main(["validate-shape", str(path)]) == 1
        assert "Could not load scenario" in capsys.readouterr().err

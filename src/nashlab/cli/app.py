"""Command-line interface for nashlab.

Usage:
    # Analyze a built-in template
    nashlab analyze --template prisoners_dilemma

    # Analyze a scenario file, JSON output
    nashlab analyze --scenario games/my_game.json --json

    # List templates
    nashlab templates

    # Check a scenario's payoff shape only
    nashlab validate-shape games/my_game.json

Exit codes: 0 success, 1 unreadable input or shape errors found by
validate-shape, 2 malformed payoff matrix during analysis.
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from pydantic import ValidationError

from nashlab.config import load_solver_config
from nashlab.engine.calculator import NashEquilibriumCalculator, validate_matrix_shape
from nashlab.errors import StructuralError
from nashlab.models.equilibrium import NashEquilibrium, PureEquilibrium
from nashlab.models.scenario import GameScenario, load_scenario, scenario_from_template
from nashlab.models.templates import CONSTRUCTORS, GameType

logger = logging.getLogger(__name__)


def format_equilibrium(eq: NashEquilibrium, names: list[str]) -> str:
    """One-line summary of an equilibrium."""
    payoffs = ", ".join(f"{p:.3f}" for p in eq.payoffs)
    if isinstance(eq, PureEquilibrium):
        strict = "strict" if eq.is_strict else "weak"
        return f"Pure ({strict}): {eq.describe(names)}  payoffs=({payoffs})  stability={eq.stability:.2f}"
    return f"Mixed: {eq.describe(names)}  payoffs=({payoffs})  stability={eq.stability:.2f}"


def print_analysis(scenario: GameScenario, calculator: NashEquilibriumCalculator) -> None:
    """Print a human-readable analysis report."""
    matrix = scenario.to_payoff_matrix()
    names = matrix.strategy_names

    print("\n" + "=" * 70)
    print(f"GAME ANALYSIS: {scenario.name}")
    print("=" * 70)
    if scenario.description:
        print(scenario.description)
    print(f"Players: {matrix.players}  Strategies: {', '.join(names)}  Symmetric: {matrix.is_symmetric}")

    equilibria = calculator.find_all_equilibria(matrix)
    print("\n" + "-" * 70)
    print(f"EQUILIBRIA ({len(equilibria)})")
    print("-" * 70)
    if not equilibria:
        print("  None found by the bounded search")
    for eq in equilibria:
        print(f"  {format_equilibrium(eq, names)}")

    ranked = calculator.recommended_equilibria(matrix)
    print("\n" + "-" * 70)
    print("RECOMMENDATIONS")
    print("-" * 70)
    for index, item in enumerate(ranked, start=1):
        report = item.validation
        print(f"  {index}. {format_equilibrium(item.equilibrium, names)}")
        print(f"     {item.recommendation}")
        print(
            f"     stability={report.stability.overall:.2f} ({report.stability.description}), "
            f"efficiency={report.quality.efficiency:.2f}, confidence={report.confidence:.2f}"
        )
        for warning in report.warnings:
            print(f"     [{warning.impact.value.upper()}] {warning.message}")

    dominance = calculator.analyze_dominance(matrix)
    print("\n" + "-" * 70)
    print("DOMINANCE")
    print("-" * 70)
    for line in dominance.explanation.strip().splitlines():
        print(f"  {line}")
    for recommendation in dominance.recommendations:
        print(f"  * {recommendation}")

    print("\n" + "=" * 70)


def analysis_to_dict(scenario: GameScenario, calculator: NashEquilibriumCalculator) -> dict:
    matrix = scenario.to_payoff_matrix()
    return {
        "scenario": {"id": scenario.id, "name": scenario.name, "players": matrix.players},
        "strategies": matrix.strategy_names,
        "equilibria": [eq.to_dict() for eq in calculator.find_all_equilibria(matrix)],
        "recommended": [item.to_dict() for item in calculator.recommended_equilibria(matrix)],
        "dominance": calculator.analyze_dominance(matrix).to_dict(),
    }


def _load(path: str) -> GameScenario | None:
    scenario_path = Path(path)
    if not scenario_path.exists():
        print(f"Error: Scenario file not found: {scenario_path}", file=sys.stderr)
        return None
    try:
        return load_scenario(scenario_path)
    except (json.JSONDecodeError, ValidationError) as e:
        print(f"Error: Could not load scenario {scenario_path}: {e}", file=sys.stderr)
        return None


def cmd_analyze(args: argparse.Namespace) -> int:
    try:
        config = load_solver_config()
    except ValidationError as e:
        print(f"Error: Invalid solver configuration: {e}", file=sys.stderr)
        return 1

    if args.template:
        scenario = scenario_from_template(GameType(args.template))
    else:
        scenario = _load(args.scenario)
        if scenario is None:
            return 1

    calculator = NashEquilibriumCalculator(config)
    try:
        if args.json:
            print(json.dumps(analysis_to_dict(scenario, calculator), indent=2))
        else:
            print_analysis(scenario, calculator)
    except StructuralError as e:
        print(f"Error: {e}", file=sys.stderr)
        for error in e.errors:
            print(f"  [{error.code}] {error.field}: {error.message}", file=sys.stderr)
        return 2
    return 0


def cmd_templates(args: argparse.Namespace) -> int:
    for game_type, constructor in CONSTRUCTORS.items():
        print(f"{game_type.value:<22} {constructor.name}: {constructor.description}")
    return 0


def cmd_validate_shape(args: argparse.Namespace) -> int:
    scenario = _load(args.scenario_path)
    if scenario is None:
        return 1
    errors = validate_matrix_shape(scenario)
    if not errors:
        print(f"{scenario.name}: payoff matrix is well-formed")
        return 0
    print(f"{scenario.name}: {len(errors)} shape errors")
    for error in errors:
        print(f"  [{error.code}] {error.field}: {error.message}")
    return 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="nashlab",
        description="Nash equilibrium analysis for finite strategic-form games",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    analyze = subparsers.add_parser("analyze", help="Find, validate and rank equilibria")
    source = analyze.add_mutually_exclusive_group(required=True)
    source.add_argument("--scenario", help="Path to scenario JSON file")
    source.add_argument(
        "--template",
        choices=[t.value for t in GameType],
        help="Built-in game template",
    )
    analyze.add_argument("--json", action="store_true", help="Print JSON instead of a report")
    analyze.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    analyze.set_defaults(handler=cmd_analyze)

    templates = subparsers.add_parser("templates", help="List built-in game templates")
    templates.set_defaults(handler=cmd_templates)

    validate = subparsers.add_parser("validate-shape", help="Check a scenario's payoff matrix shape")
    validate.add_argument("scenario_path", help="Path to scenario JSON file")
    validate.set_defaults(handler=cmd_validate_shape)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if getattr(args, "verbose", False) else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    logger.debug(f"Running command {args.command}")
    return args.handler(args)


if __name__ == "__main__":
    sys.exit(main())

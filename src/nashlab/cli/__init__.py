"""nashlab CLI module.

Provides an argparse command-line front end for the equilibrium engine.

Usage:
    nashlab analyze --template battle_of_sexes

Or directly:
    python -m nashlab.cli.app
"""

from nashlab.cli.app import main

__all__ = ["main"]

"""nashlab: equilibrium analysis for finite strategic-form games.

Subpackages:
- models: payoff matrices, equilibrium values, templates and scenarios
- engine: equilibrium search, dominance analysis and validation
- cli: command-line front end
"""

__version__ = "0.1.0"

"""CardVault: filter-driven hydration of a local Pokemon TCG card store from TCGdex."""

__version__ = "0.1.0"

"""NutriGuard: condition-aware food safety decisions."""

__version__ = "0.1.0"

"""Rule-compliance checker for agent project trees."""

__version__ = "0.1.0"

"""Chat-driven to-do list manager (console + Matrix)."""

__version__ = "0.1.0"

"""Alignment Gate — pre-execution policy gate for autonomous agent operations."""

__version__ = "1.0.0"

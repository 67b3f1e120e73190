"""Zeno backend: financial snapshots, rule-based insights and recommended actions."""

__version__ = "1.0.0"

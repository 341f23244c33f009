"""Workboard task lifecycle audit & notification engine."""

__version__ = "0.1.0"

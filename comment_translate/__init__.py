"""Translate editor hover text into Japanese and chat about it with Claude."""

__version__ = "0.1.0"

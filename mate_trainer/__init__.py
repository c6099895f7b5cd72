"""Mate Trainer: a browser-based mate-in-N chess puzzle trainer."""

__version__ = "0.1.0"

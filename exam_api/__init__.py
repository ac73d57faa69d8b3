"""Attempt lifecycle and scoring service for timed exam papers."""

__version__ = "0.1.0"

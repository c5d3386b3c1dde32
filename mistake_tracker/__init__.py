"""Mistake tracker: spaced-repetition retests and mastery tracking for logged mistakes."""

__version__ = "1.0.0"

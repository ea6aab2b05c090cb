"""Personalized 7-day learning plans for neurodiverse students."""

__version__ = "0.1.0"

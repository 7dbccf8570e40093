"""Polingo: a vocabulary trainer bot."""

__version__ = "0.1.0"

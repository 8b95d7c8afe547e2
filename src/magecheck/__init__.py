"""Diagnostic checks for shop installations."""

__version__ = "0.3.0"

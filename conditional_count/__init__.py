"""Conditional message count alert condition for stream alerting."""

__version__ = "1.0.0"

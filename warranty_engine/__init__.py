"""Warranty claim and repair lifecycle engine."""

__version__ = "1.0.0"

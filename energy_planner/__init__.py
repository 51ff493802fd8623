"""Household energy usage planning."""

__version__ = "0.1.0"

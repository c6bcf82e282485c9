"""Rental portfolio retirement projection."""

__version__ = "0.1.0"

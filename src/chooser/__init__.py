"""Searchable select widget engine."""

__version__ = "0.1.0"

"""Compound - daily deposit journal with a compound-interest view of progress."""

__version__ = "0.1.0"

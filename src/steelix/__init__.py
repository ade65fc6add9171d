"""Steelix — multi-level commission distribution engine for real-estate agencies."""

__version__ = "0.1.0"

"""Pricing & availability reconciliation engine for vacation rentals."""

__version__ = "1.0.0"

"""Merchant analytics normalisation and temporal aggregation pipeline."""

__version__ = "1.0.0"

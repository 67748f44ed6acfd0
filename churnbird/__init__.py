"""Synthetic Prometheus series population with cardinality churn."""

__version__ = "0.1.0"

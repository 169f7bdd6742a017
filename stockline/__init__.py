"""Stockline: batch-constrained inventory allocation and build-readiness engine."""

__version__ = "0.1.0"

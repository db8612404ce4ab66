"""Ridebook: zone time accumulation and cached ride metrics."""

__version__ = "0.1.0"

"""Orienta: conversational backend for vocational guidance."""

__version__ = "0.1.0"

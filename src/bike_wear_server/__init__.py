"""Bike component wear tracking and service planning server."""

__version__ = "0.1.0"

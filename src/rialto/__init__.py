"""Rialto: reservations, closures and availability for Al Gobbo di Rialto."""

__version__ = "0.1.0"

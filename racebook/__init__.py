"""Racebook: wagering ledger and settlement engine for multi-racer events."""

__version__ = "0.1.0"

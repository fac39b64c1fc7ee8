"""Weighted gacha draws with daily limits and login-streak bonus tables."""

__version__ = "0.1.0"

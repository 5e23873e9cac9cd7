"""Game-logic helpers for a city-building simulation: tables, hero work, buildings, friends and gifts."""

__version__ = "0.1.0"
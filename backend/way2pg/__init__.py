"""Way2PG - student accommodation marketplace API."""

__version__ = "1.0.0"

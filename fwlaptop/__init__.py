"""Parsers for Framework Laptop capsules, PD controller binaries and input deck state."""

__version__ = "0.1.0"
"""Relay GitHub issues into Discord."""

__version__ = "0.1.0"

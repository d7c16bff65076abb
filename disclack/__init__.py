"""Disclack: Slack ⇄ Discord message bridge core."""

__version__ = "0.3.0"

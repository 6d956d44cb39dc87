"""Prepare a forked test node's funding wallet for end-to-end tests."""

__version__ = "0.1.0"

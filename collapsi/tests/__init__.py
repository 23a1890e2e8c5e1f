"""Collapsi test suite."""

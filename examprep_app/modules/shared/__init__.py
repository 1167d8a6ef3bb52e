"""Helpers shared by every feature module."""

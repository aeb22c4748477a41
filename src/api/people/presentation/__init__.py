"""Presentation layer for People bounded context."""

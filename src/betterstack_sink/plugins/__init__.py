"""Sink and filter plugins."""

"""Core types, configuration and translation for the Better Stack sink."""

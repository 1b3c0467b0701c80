"""Adapters for configuration, files and logging."""

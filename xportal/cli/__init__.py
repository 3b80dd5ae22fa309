"""Command-line interface for xportal."""

"""Command-line interface for RRLabel."""

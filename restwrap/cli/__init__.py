"""Command-line interface for restwrap."""

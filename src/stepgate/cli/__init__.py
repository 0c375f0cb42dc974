"""Command-line interface for stepgate."""

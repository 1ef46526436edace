"""Command-line interface for gitplumb."""

"""Command-line interface for cnabit."""

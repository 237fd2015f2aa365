"""Command-line interface for xkcdvault."""

"""Command-line interface for the MTP music sync application."""

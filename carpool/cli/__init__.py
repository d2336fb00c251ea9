"""Command-line interface for Carpool Core."""

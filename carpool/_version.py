"""Version information for the carpool removal core."""

__version__ = "0.4.0"

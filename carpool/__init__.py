"""
Carpool Core - Driver Removal Authority and Consequence Engine

Carpool Core decides who may remove a driver from an event carpool and
computes the resulting carpool state and notifications.
"""

from carpool._version import __version__

__all__ = ["__version__"]

"""WAN connectivity monitor with adaptive polling and outage tracking."""

from .__about__ import __version__

__all__ = ["__version__"]

"""HTTP management API for the media server pool."""

__version__ = "1.0.0"

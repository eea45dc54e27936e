"""Version information for fnstack."""

__version__ = "0.3.0"

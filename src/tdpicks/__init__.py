"""Weekly NFL touchdown-scorer recommendations."""

__version__ = "0.1.0"

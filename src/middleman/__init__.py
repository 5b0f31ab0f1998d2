"""Encrypted request relay between website callers and the storage management service."""

__version__ = "0.1.0"

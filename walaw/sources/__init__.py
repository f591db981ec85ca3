"""Outbound HTTP access to the remote legal sources."""

from .client import SourceClient, FetchError

__all__ = ["SourceClient", "FetchError"]

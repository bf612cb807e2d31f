"""
Config Fetcher - Remote Configuration with Local Cache

Responsibilities:
- Fetch the JSON config document over HTTP (single attempt)
- Serve it from the local store for the freshness window
- Fall back to the stale copy when the fetch fails
"""

from .result import FetchResult
from .service import (
    CACHE_KEY,
    CACHE_TIMESTAMP_KEY,
    CacheStatus,
    ConfigCacheFetcher,
)
from .sync import ConfigSync

__all__ = [
    "CACHE_KEY",
    "CACHE_TIMESTAMP_KEY",
    "CacheStatus",
    "ConfigCacheFetcher",
    "ConfigSync",
    "FetchResult",
]

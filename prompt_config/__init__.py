"""
prompt-config

Fetches a remote JSON configuration and caches it locally with a
time-based expiry and stale fallback.
"""

from .fetcher import ConfigCacheFetcher, ConfigSync, FetchResult

__version__ = "0.1.0"

__all__ = ["ConfigCacheFetcher", "ConfigSync", "FetchResult", "__version__"]

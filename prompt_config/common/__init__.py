"""
Common Utilities

Shared modules used by the fetcher and CLI:
- state.py - Persistent key-value stores
- settings.py - YAML/environment settings
- exceptions.py - Custom exception classes
- logging_setup.py - Structured logging setup
- clock.py - Epoch-millisecond clock
"""

from .clock import Clock, now_ms
from .exceptions import (
    PromptConfigError,
    ConfigError,
    StoreError,
    FetchError,
)
from .logging_setup import (
    setup_logging,
    get_service_logger,
    log_fetch_failure,
    log_cache_event,
)
from .settings import Settings, load_settings
from .state import KeyValueStore, MemoryStore, JsonFileStore

__all__ = [
    # Clock
    "Clock",
    "now_ms",
    # Exceptions
    "PromptConfigError",
    "ConfigError",
    "StoreError",
    "FetchError",
    # Logging
    "setup_logging",
    "get_service_logger",
    "log_fetch_failure",
    "log_cache_event",
    # Settings
    "Settings",
    "load_settings",
    # State
    "KeyValueStore",
    "MemoryStore",
    "JsonFileStore",
]

"""
Config Cache Fetcher

Returns the remote config, serving from the local store while it is fresh
and falling back to a stale copy when the network is unavailable.

Flow of get():
1. Read payload + timestamp from the store
2. Fresh (age < freshness window) -> return cached payload, no network
3. Otherwise fetch once; on success store payload + timestamp and return it
4. On any failure return whatever the store holds (stale or None)
"""

from dataclasses import dataclass
from typing import Any, Protocol

from prompt_config.common.clock import Clock, now_ms
from prompt_config.common.exceptions import StoreError
from prompt_config.common.logging_setup import get_service_logger, log_cache_event
from prompt_config.common.settings import DEFAULT_FRESHNESS_MS, Settings
from prompt_config.common.state import JsonFileStore, KeyValueStore

from .result import FetchResult, REASON_TRANSPORT
from .sync import ConfigSync

logger = get_service_logger("fetcher")

CACHE_KEY = "config_cache"
CACHE_TIMESTAMP_KEY = "config_cache_time"


class ConfigSource(Protocol):
    """Anything that can fetch the remote config once"""

    async def fetch(self) -> FetchResult:
        ...


@dataclass(frozen=True)
class CacheStatus:
    """Snapshot of the cached entry at a clock reading"""
    cached: bool
    cached_at_ms: int | None
    age_ms: int | None
    fresh: bool
    freshness_ms: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "cached": self.cached,
            "cached_at_ms": self.cached_at_ms,
            "age_ms": self.age_ms,
            "fresh": self.fresh,
            "freshness_ms": self.freshness_ms,
        }


class ConfigCacheFetcher:
    """
    Config fetcher with a time-boxed local cache and stale fallback.

    Store, source and clock are injected; the store must only be written
    by this fetcher for the two cache keys.
    """

    def __init__(
        self,
        store: KeyValueStore,
        source: ConfigSource,
        clock: Clock = now_ms,
        freshness_ms: int = DEFAULT_FRESHNESS_MS,
    ):
        self.store = store
        self.source = source
        self.clock = clock
        self.freshness_ms = freshness_ms

    @classmethod
    def from_settings(cls, settings: Settings) -> "ConfigCacheFetcher":
        """Build a fetcher backed by a JSON state file and HTTP source"""
        return cls(
            store=JsonFileStore(settings.state_file),
            source=ConfigSync(settings.url, timeout_s=settings.timeout_s),
            freshness_ms=settings.freshness_ms,
        )

    async def __aenter__(self) -> "ConfigCacheFetcher":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def close(self) -> None:
        """Release the source's HTTP client, if it has one"""
        close = getattr(self.source, "close", None)
        if close is not None:
            await close()

    async def get(self) -> Any:
        """
        Return the best available config.

        Returns:
            Fresh or fetched payload; on fetch failure the cached payload
            even if stale; None when neither network nor cache delivers
        """
        cached = self._read_cache()
        now = self.clock()

        if self._is_fresh(cached, now):
            log_cache_event(logger, "hit", age_ms=now - cached[CACHE_TIMESTAMP_KEY])
            return cached[CACHE_KEY]

        result = await self._fetch()
        if result.ok:
            self._store_payload(result.payload, now)
            return result.payload

        return self._fallback()

    async def refresh(self) -> FetchResult:
        """
        Fetch now regardless of freshness.

        Returns:
            The FetchResult; the store is updated only when it succeeded
        """
        now = self.clock()
        result = await self._fetch()
        if result.ok:
            self._store_payload(result.payload, now)
        return result

    def status(self) -> CacheStatus:
        """Describe the cached entry without touching the network"""
        cached = self._read_cache()
        now = self.clock()
        cached_at = cached.get(CACHE_TIMESTAMP_KEY)

        return CacheStatus(
            cached=cached.get(CACHE_KEY) is not None,
            cached_at_ms=cached_at,
            age_ms=now - cached_at if cached_at is not None else None,
            fresh=self._is_fresh(cached, now),
            freshness_ms=self.freshness_ms,
        )

    def clear(self) -> None:
        """Drop the cached payload and timestamp"""
        self.store.delete([CACHE_KEY, CACHE_TIMESTAMP_KEY])
        logger.info("Config cache cleared")

    def _is_fresh(self, cached: dict[str, Any], now: int) -> bool:
        payload = cached.get(CACHE_KEY)
        cached_at = cached.get(CACHE_TIMESTAMP_KEY)
        if payload is None or cached_at is None:
            return False
        # A timestamp ahead of the clock is not trusted
        age = now - cached_at
        return 0 <= age < self.freshness_ms

    def _read_cache(self) -> dict[str, Any]:
        try:
            cached = self.store.get([CACHE_KEY, CACHE_TIMESTAMP_KEY])
        except StoreError as e:
            logger.error(f"Cache read failed, treating as empty: {e.message}")
            return {}

        cached_at = cached.get(CACHE_TIMESTAMP_KEY)
        if cached_at is not None and (
            isinstance(cached_at, bool) or not isinstance(cached_at, (int, float))
        ):
            logger.warning(f"Ignoring non-numeric cache timestamp: {cached_at!r}")
            cached.pop(CACHE_TIMESTAMP_KEY)
        return cached

    async def _fetch(self) -> FetchResult:
        try:
            return await self.source.fetch()
        except Exception as e:
            logger.error(f"Config source raised: {e}", exc_info=True)
            return FetchResult.failure(REASON_TRANSPORT, str(e))

    def _store_payload(self, payload: Any, now: int) -> None:
        try:
            self.store.set({CACHE_KEY: payload, CACHE_TIMESTAMP_KEY: now})
        except StoreError as e:
            logger.error(f"Cache write failed: {e.message}")
            return
        log_cache_event(logger, "store", cached_at_ms=now)

    def _fallback(self) -> Any:
        cached = self._read_cache()
        payload = cached.get(CACHE_KEY)
        if payload is None:
            logger.error("No cached config available after fetch failure")
            return None

        cached_at = cached.get(CACHE_TIMESTAMP_KEY)
        age = self.clock() - cached_at if cached_at is not None else None
        log_cache_event(logger, "stale", age_ms=age)
        return payload

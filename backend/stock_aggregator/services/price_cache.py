import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from ..config.settings import settings
from ..models.price_point import PriceHistory
from ..utils.logger import log

logger = log


def make_key(ticker: str, minutes) -> str:
    return f"{ticker}:{minutes}"


@dataclass(frozen=True)
class CacheEntry:
    key: str
    value: PriceHistory
    expires_at: float


class PriceHistoryCache:
    """
    In-memory price history store with a fixed time-to-live per entry.

    Entries expire lazily on read and are also removed by ``sweep()``, which
    the background runner calls every ``CACHE_CHECK_PERIOD`` seconds. There is
    no size bound; growth is limited only by request volume within one TTL.
    """

    def __init__(self, ttl: Optional[float] = None, clock: Callable[[], float] = time.monotonic):
        self.ttl = settings.CACHE_TTL if ttl is None else ttl
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}

    def __len__(self) -> int:
        return len(self._entries)

    # -------------------------
    # READ / WRITE
    # -------------------------
    def get(self, key: str) -> Optional[PriceHistory]:
        entry = self._entries.get(key)
        if entry is None:
            logger.debug(f"cache miss {key}")
            return None
        if self._clock() >= entry.expires_at:
            del self._entries[key]
            logger.debug(f"cache expired {key}")
            return None
        logger.debug(f"cache hit {key}")
        return entry.value

    def set(self, key: str, value: PriceHistory, ttl: Optional[float] = None):
        ttl = self.ttl if ttl is None else ttl
        self._entries[key] = CacheEntry(key=key, value=tuple(value), expires_at=self._clock() + ttl)

    def delete(self, key: str):
        self._entries.pop(key, None)

    def clear(self):
        self._entries.clear()

    # -------------------------
    # EXPIRY
    # -------------------------
    def sweep(self) -> int:
        now = self._clock()
        expired = [k for k, e in self._entries.items() if now >= e.expires_at]
        for key in expired:
            del self._entries[key]
        if expired:
            logger.debug(f"Swept {len(expired)} expired cache entries")
        return len(expired)

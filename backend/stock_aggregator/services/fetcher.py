from typing import Optional
import httpx
from pydantic import ValidationError
from ..utils.logger import log
from ..config.settings import settings
from ..errors import MalformedPayloadError, UpstreamFetchError
from ..models.price_point import PriceHistory, to_price_history, upstream_payload_adapter
from .price_cache import PriceHistoryCache, make_key

logger = log


class PriceHistoryFetcher:
    """
    Cache-aside access to the stock feed's price history endpoint.

    A cached history is returned exactly as stored; callers that need a
    window-bounded view filter it themselves.
    """

    def __init__(
        self,
        cache: PriceHistoryCache,
        client: Optional[httpx.AsyncClient] = None,
        base_url: Optional[str] = None,
        token: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        self.cache = cache
        self.client = client
        self.base = (base_url or settings.STOCK_API_BASE).rstrip("/")
        self.token = settings.STOCK_API_TOKEN if token is None else token
        self.timeout = settings.UPSTREAM_TIMEOUT if timeout is None else timeout

    def _headers(self) -> dict:
        return {"Authorization": f"Bearer {self.token}"}

    async def _get(self, url: str, params: dict) -> httpx.Response:
        if self.client is not None:
            return await self.client.get(url, params=params, headers=self._headers(), timeout=self.timeout)
        async with httpx.AsyncClient() as client:
            return await client.get(url, params=params, headers=self._headers(), timeout=self.timeout)

    async def fetch(self, ticker: str, minutes) -> PriceHistory:
        key = make_key(ticker, minutes)
        cached = self.cache.get(key)
        if cached is not None:
            return cached

        url = f"{self.base}/stocks/{ticker}"
        try:
            r = await self._get(url, {"minutes": minutes})
            r.raise_for_status()
            body = r.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Upstream fetch failed {ticker}: {e}")
            raise UpstreamFetchError(ticker, str(e)) from e

        try:
            history = to_price_history(upstream_payload_adapter.validate_python(body))
        except ValidationError as e:
            logger.error(f"Malformed price history for {ticker}: {e}")
            raise MalformedPayloadError(ticker, f"malformed price history ({e.error_count()} errors)") from e

        self.cache.set(key, history)
        logger.info(f"Fetched {len(history)} points for {ticker} over {minutes}m")
        return history

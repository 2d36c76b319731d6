from datetime import datetime, timedelta, timezone

import httpx
import pytest

from stock_aggregator.models.price_point import PricePoint
from stock_aggregator.services.aggregation_service import AggregationService
from stock_aggregator.services.fetcher import PriceHistoryFetcher
from stock_aggregator.services.price_cache import PriceHistoryCache

BASE_URL = "http://feed.test/evaluation-service"
NOW = datetime(2025, 5, 8, 12, 0, tzinfo=timezone.utc)


class FakeClock:
    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


def point(price: float, minutes_ago: float = 0.0, now: datetime = NOW) -> PricePoint:
    return PricePoint(price=price, timestamp=now - timedelta(minutes=minutes_ago))


def feed_point(price: float, minutes_ago: float = 0.0) -> dict:
    """A point as the upstream feed serializes it, relative to the real clock."""
    ts = datetime.now(timezone.utc) - timedelta(minutes=minutes_ago)
    return {"price": price, "lastUpdatedAt": ts.isoformat().replace("+00:00", "Z")}


class FakeFeed:
    """Routes /stocks/{ticker} to canned bodies and records every request."""

    def __init__(self, bodies: dict, status: int = 200):
        self.bodies = bodies
        self.status = status
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        ticker = request.url.path.rsplit("/", 1)[-1]
        if ticker not in self.bodies:
            return httpx.Response(404, json={"message": "unknown ticker"})
        return httpx.Response(self.status, json=self.bodies[ticker])

    def calls_for(self, ticker: str) -> int:
        return sum(1 for r in self.requests if r.url.path.endswith(f"/stocks/{ticker}"))


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    return PriceHistoryCache(ttl=300, clock=clock)


@pytest.fixture
def make_fetcher(cache):
    def _make(feed: FakeFeed, token: str = "secret-token") -> PriceHistoryFetcher:
        client = httpx.AsyncClient(transport=httpx.MockTransport(feed))
        return PriceHistoryFetcher(cache, client=client, base_url=BASE_URL, token=token)
    return _make


@pytest.fixture
def make_service(make_fetcher):
    def _make(feed: FakeFeed) -> AggregationService:
        return AggregationService(make_fetcher(feed))
    return _make

import asyncio

import httpx
import pytest

from stock_aggregator.errors import QueryValidationError, UpstreamFetchError
from stock_aggregator.services.aggregation_service import AggregationService, parse_minutes
from stock_aggregator.services.fetcher import PriceHistoryFetcher
from conftest import BASE_URL, FakeFeed, feed_point


@pytest.mark.parametrize("raw, expected", [("60", 60), ("60.0", 60), ("1.5", 1.5), (15, 15)])
def test_parse_minutes_accepts_positive_numbers(raw, expected):
    assert parse_minutes(raw) == expected


@pytest.mark.parametrize("raw", [None, "", "abc", "0", "-5", "nan", "inf"])
def test_parse_minutes_rejects_bad_values(raw):
    with pytest.raises(QueryValidationError):
        parse_minutes(raw)


@pytest.mark.asyncio
async def test_average_returns_raw_history(make_service):
    feed = FakeFeed({"AAPL": [feed_point(100.0, 1), feed_point(200.0, 500)]})

    result = await make_service(feed).average("AAPL", "60")

    assert result.average_stock_price == 150
    assert len(result.price_history) == 2


@pytest.mark.asyncio
async def test_average_validates_before_fetching(make_service):
    feed = FakeFeed({"AAPL": [feed_point(100.0)]})

    with pytest.raises(QueryValidationError):
        await make_service(feed).average("AAPL", "-1")
    assert feed.requests == []


@pytest.mark.asyncio
async def test_correlation_uses_full_history_for_averages(make_service):
    feed = FakeFeed({
        "AAPL": [feed_point(1.0, 1), feed_point(2.0, 2), feed_point(3.0, 3), feed_point(1000.0, 600)],
        "MSFT": [feed_point(10.0, 1), feed_point(20.0, 2), feed_point(30.0, 3)],
    })

    report = await make_service(feed).correlation(["AAPL", "MSFT"], "10")

    assert report.correlation == pytest.approx(1.0)
    assert report.stocks["AAPL"].average_price == pytest.approx(251.5)
    assert len(report.stocks["AAPL"].price_history) == 4
    assert report.stocks["MSFT"].average_price == 20


@pytest.mark.asyncio
async def test_correlation_fetches_both_tickers(make_service):
    feed = FakeFeed({"AAPL": [feed_point(1.0)], "MSFT": [feed_point(2.0)]})

    report = await make_service(feed).correlation(["AAPL", "MSFT"], 30)

    assert feed.calls_for("AAPL") == 1
    assert feed.calls_for("MSFT") == 1
    assert report.correlation == 0


@pytest.mark.asyncio
@pytest.mark.parametrize("tickers", [None, [], ["AAPL"], ["AAPL", "MSFT", "NVDA"], ["AAPL", "AAPL"]])
async def test_correlation_requires_two_distinct_tickers(make_service, tickers):
    feed = FakeFeed({"AAPL": [feed_point(1.0)]})

    with pytest.raises(QueryValidationError):
        await make_service(feed).correlation(tickers, "30")
    assert feed.requests == []


@pytest.mark.asyncio
async def test_correlation_fails_when_either_fetch_fails(make_service):
    feed = FakeFeed({"AAPL": [feed_point(1.0)]})

    with pytest.raises(UpstreamFetchError) as excinfo:
        await make_service(feed).correlation(["AAPL", "ZZZZ"], "30")
    assert excinfo.value.ticker == "ZZZZ"


@pytest.mark.asyncio
async def test_correlation_requests_both_tickers_before_either_answers(cache):
    arrived = []
    both_in_flight = asyncio.Event()

    async def hold_until_both_arrive(request):
        arrived.append(request.url.path.rsplit("/", 1)[-1])
        if len(arrived) == 2:
            both_in_flight.set()
        await both_in_flight.wait()
        return httpx.Response(200, json=[feed_point(1.0, 1)])

    client = httpx.AsyncClient(transport=httpx.MockTransport(hold_until_both_arrive))
    service = AggregationService(PriceHistoryFetcher(cache, client=client, base_url=BASE_URL, token="t"))

    report = await asyncio.wait_for(service.correlation(["AAPL", "MSFT"], "10"), timeout=2)

    assert sorted(arrived) == ["AAPL", "MSFT"]
    assert set(report.stocks) == {"AAPL", "MSFT"}

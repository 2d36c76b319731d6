import asyncio
import math
from typing import Optional, Sequence, Union
from ..errors import QueryValidationError
from ..models.results import AverageResult, CorrelationReport, TickerSummary
from ..utils.logger import log
from .aligner import align_price_histories
from .correlation import average_price, correlate
from .fetcher import PriceHistoryFetcher

logger = log

Minutes = Union[int, float]


def parse_minutes(raw) -> Minutes:
    """Validate a trailing-window length taken from a query string."""
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        raise QueryValidationError("Invalid minutes parameter.")
    try:
        value = float(raw)
    except (TypeError, ValueError):
        raise QueryValidationError("Invalid minutes parameter.") from None
    if not math.isfinite(value) or value <= 0:
        raise QueryValidationError("Invalid minutes parameter.")
    # "60" and "60.0" must hit the same cache entry
    return int(value) if value.is_integer() else value


class AggregationService:
    def __init__(self, fetcher: PriceHistoryFetcher):
        self.fetcher = fetcher

    async def average(self, ticker: str, minutes) -> AverageResult:
        minutes = parse_minutes(minutes)
        if not ticker or not ticker.strip():
            raise QueryValidationError("A ticker symbol is required.")

        history = await self.fetcher.fetch(ticker, minutes)
        return AverageResult(
            average_stock_price=average_price(history),
            price_history=history,
        )

    async def correlation(self, tickers: Optional[Sequence[str]], minutes) -> CorrelationReport:
        minutes = parse_minutes(minutes)
        if not tickers or len(tickers) != 2:
            raise QueryValidationError("Exactly two tickers are required.")
        ticker_a, ticker_b = tickers
        if not ticker_a or not ticker_b:
            raise QueryValidationError("Exactly two tickers are required.")
        if ticker_a == ticker_b:
            raise QueryValidationError("The two tickers must be different.")

        history_a, history_b = await asyncio.gather(
            self.fetcher.fetch(ticker_a, minutes),
            self.fetcher.fetch(ticker_b, minutes),
        )

        aligned = align_price_histories(history_a, history_b, minutes)
        result = correlate(aligned.series_a, aligned.series_b)
        logger.info(
            f"Correlation {ticker_a}/{ticker_b} over {minutes}m: "
            f"{result.coefficient:.4f} (n={result.sample_size})"
        )

        # averages use the full fetched histories, not the aligned subset
        return CorrelationReport(
            correlation=result.coefficient,
            stocks={
                ticker_a: TickerSummary(average_price=average_price(history_a), price_history=history_a),
                ticker_b: TickerSummary(average_price=average_price(history_b), price_history=history_b),
            },
        )

# stock_aggregator/errors.py

class StockAggregatorError(Exception):
    """Base class for failures surfaced to a single request."""


class QueryValidationError(StockAggregatorError):
    """Bad or missing query parameters. Raised before anything is fetched."""


class UpstreamFetchError(StockAggregatorError):
    """The stock feed could not be reached or answered with a non-success status."""

    def __init__(self, ticker: str, message: str):
        self.ticker = ticker
        self.message = message
        super().__init__(f"Failed to fetch data for {ticker}: {message}")


class MalformedPayloadError(UpstreamFetchError):
    """The stock feed answered, but the body is not a usable price history."""

import asyncio
from contextlib import asynccontextmanager
from typing import List, Optional

import httpx
import uvicorn
from fastapi import FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config.settings import settings
from .errors import QueryValidationError, UpstreamFetchError
from .models.results import AverageResult, CorrelationReport
from .services.aggregation_service import AggregationService
from .services.fetcher import PriceHistoryFetcher
from .services.price_cache import PriceHistoryCache
from .tasks.runner import start_background_tasks
from .utils.logger import log


def create_app(service: Optional[AggregationService] = None) -> FastAPI:
    """
    Build the HTTP app. Without ``service`` a fresh cache, fetcher and shared
    upstream client are created on startup and closed on shutdown.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        client = None
        if service is None:
            if not settings.STOCK_API_TOKEN:
                log.warning("⚠️ STOCK_API_TOKEN is not set, upstream requests will be rejected")
            client = httpx.AsyncClient()
            app.state.service = AggregationService(PriceHistoryFetcher(PriceHistoryCache(), client=client))
        else:
            app.state.service = service

        tasks = start_background_tasks(app.state.service.fetcher.cache)
        log.info(f"🚀 Stock aggregator ready, upstream {app.state.service.fetcher.base}")

        yield

        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        if client is not None:
            await client.aclose()
        log.info("Stock aggregator shutdown complete")

    app = FastAPI(
        title="Stock Price Aggregator",
        description="Average and correlation over a third-party stock price feed",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # -----------------------------
    # Error mapping
    # -----------------------------
    @app.exception_handler(QueryValidationError)
    async def on_validation_error(request: Request, exc: QueryValidationError):
        return JSONResponse(status_code=400, content={"error": str(exc)})

    @app.exception_handler(UpstreamFetchError)
    async def on_fetch_error(request: Request, exc: UpstreamFetchError):
        return JSONResponse(status_code=500, content={"error": str(exc)})

    # -----------------------------
    # Routes
    # -----------------------------
    @app.get("/health")
    async def health(request: Request):
        return {
            "status": "healthy",
            "cachedEntries": len(request.app.state.service.fetcher.cache),
        }

    @app.get("/stocks/{ticker}", response_model=AverageResult)
    async def average_stock_price(
        request: Request,
        ticker: str,
        minutes: Optional[str] = None,
        aggregation: Optional[str] = None,
    ):
        if aggregation != "average":
            raise QueryValidationError('Invalid aggregation type. Use "average".')
        return await request.app.state.service.average(ticker, minutes)

    @app.get("/stockcorrelation", response_model=CorrelationReport)
    async def stock_correlation(
        request: Request,
        minutes: Optional[str] = None,
        ticker: Optional[List[str]] = Query(None),
    ):
        return await request.app.state.service.correlation(ticker, minutes)

    return app


app = create_app()


def run():
    log.info(f"Starting stock aggregator on {settings.HOST}:{settings.PORT}")
    uvicorn.run(app, host=settings.HOST, port=settings.PORT)


if __name__ == "__main__":
    run()

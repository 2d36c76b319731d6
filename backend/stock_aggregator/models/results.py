# models/results.py

from typing import Dict

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from .price_point import PriceHistory


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class CorrelationResult(_CamelModel):
    coefficient: float
    mean_a: float
    mean_b: float
    sample_size: int


class TickerSummary(_CamelModel):
    average_price: float
    price_history: PriceHistory


class AverageResult(_CamelModel):
    average_stock_price: float
    price_history: PriceHistory


class CorrelationReport(_CamelModel):
    correlation: float
    stocks: Dict[str, TickerSummary]

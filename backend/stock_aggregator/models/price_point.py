# models/price_point.py

from datetime import datetime
from typing import Optional, Tuple, Union

import pandas as pd
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    field_serializer,
    field_validator,
    model_validator,
)


class PricePoint(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "price": 189.42,
                "lastUpdatedAt": "2025-01-12T18:25:43.5115873Z",
            }
        },
    )

    price: float = Field(..., description="Price reported by the feed")
    timestamp: datetime = Field(..., alias="lastUpdatedAt", description="When the feed last updated this price")
    raw_timestamp: Optional[str] = Field(None, exclude=True, repr=False, description="lastUpdatedAt exactly as received")

    @model_validator(mode="before")
    @classmethod
    def keep_raw_timestamp(cls, data):
        if isinstance(data, dict) and data.get("raw_timestamp") is None:
            value = data.get("lastUpdatedAt", data.get("timestamp"))
            if isinstance(value, str):
                data = {**data, "raw_timestamp": value}
        return data

    @field_validator("timestamp", mode="before")
    @classmethod
    def parse_timestamp(cls, value):
        # The feed emits 100ns precision; datetime stops at microseconds.
        try:
            ts = pd.Timestamp(value)
        except (TypeError, ValueError) as e:
            raise ValueError(f"invalid timestamp: {value!r}") from e
        if pd.isna(ts):
            raise ValueError(f"invalid timestamp: {value!r}")
        if ts.tzinfo is None:
            ts = ts.tz_localize("UTC")
        return ts.floor("us").to_pydatetime()

    @field_serializer("timestamp")
    def serialize_timestamp(self, value: datetime):
        # echo the feed's own text so responses carry the history as fetched
        if self.raw_timestamp is not None:
            return self.raw_timestamp
        return value


PriceHistory = Tuple[PricePoint, ...]


class SinglePricePayload(BaseModel):
    """Shape the feed uses when only one point falls inside the window."""
    stock: PricePoint


# Either a bare array of points or one wrapped point.
UpstreamPayload = Union[list[PricePoint], SinglePricePayload]
upstream_payload_adapter = TypeAdapter(UpstreamPayload)


def to_price_history(payload: UpstreamPayload) -> PriceHistory:
    if isinstance(payload, SinglePricePayload):
        return (payload.stock,)
    return tuple(payload)

from datetime import datetime
from typing import Optional

from pydantic import Field, field_validator

from ..utils.dates import to_utc_naive
from .base import ApiModel


class PurchaseRequestPayload(ApiModel):
    """
    Body of purchase request writes.

    `id` is only read by the combined save endpoint, where its presence
    selects update over create.
    """

    id: Optional[str] = None
    black_pearl: int = Field(0, ge=0)
    powder_flavor: int = Field(0, ge=0)
    cup_small: int = Field(0, ge=0)
    cup_medium: int = Field(0, ge=0)
    cup_large: int = Field(0, ge=0)
    straw: int = Field(0, ge=0)
    ice: int = Field(0, ge=0)
    water_gallon: int = Field(0, ge=0)
    total_amount: float = Field(0.0, ge=0, allow_inf_nan=False)
    request_date: Optional[datetime] = None

    @field_validator("request_date")
    @classmethod
    def _normalize_date(cls, value):
        return to_utc_naive(value)

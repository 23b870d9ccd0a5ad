from datetime import datetime
from typing import Optional

from pydantic import Field, field_validator

from ..errors import ValidationError
from ..utils.dates import to_utc_naive
from .base import ApiModel


class SalePayload(ApiModel):
    """Body of create and update requests for a sale."""

    product_name: Optional[str] = None
    quantity: int = 0
    amount: float = Field(0, allow_inf_nan=False)
    category: Optional[str] = None
    description: Optional[str] = None
    sale_date: Optional[datetime] = None

    @field_validator("sale_date")
    @classmethod
    def _normalize_date(cls, value):
        return to_utc_naive(value)

    def check(self) -> None:
        if not self.product_name or not self.product_name.strip():
            raise ValidationError("Product name is required")
        if self.amount <= 0:
            raise ValidationError("Amount must be greater than 0")
        if self.quantity <= 0:
            raise ValidationError("Quantity must be greater than 0")


class CategoryStat(ApiModel):
    category: Optional[str] = None
    total_sales: float = 0.0
    total_quantity: int = 0
    count: int = 0


class SalesSummary(ApiModel):
    total_sales: float = 0.0
    total_quantity: int = 0
    count: int = 0
    average_sale: float = 0.0

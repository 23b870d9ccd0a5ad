from datetime import datetime
from typing import Optional

from pydantic import Field, field_validator

from ..errors import ValidationError
from ..utils.dates import to_utc_naive
from .base import ApiModel

TRANSACTION_TYPES = ("Income", "Expense")


class FinancialTransactionPayload(ApiModel):
    """Body of create and update requests for a financial transaction."""

    description: Optional[str] = None
    category: Optional[str] = None
    amount: float = Field(0, allow_inf_nan=False)
    transaction_date: Optional[datetime] = None
    payment_method: Optional[str] = None
    transaction_type: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("transaction_date")
    @classmethod
    def _normalize_date(cls, value):
        return to_utc_naive(value)

    def check(self) -> None:
        if not self.description or not self.description.strip():
            raise ValidationError("Description is required")
        if self.amount <= 0:
            raise ValidationError("Amount must be greater than 0")
        if self.transaction_type not in TRANSACTION_TYPES:
            raise ValidationError("Transaction type must be Income or Expense")


class FinancialSummary(ApiModel):
    total_income: float = 0.0
    total_expenses: float = 0.0
    net_profit: float = 0.0
    total_transactions: int = 0
    income_count: int = 0
    expense_count: int = 0
    average_transaction: float = 0.0


class MonthlySummary(ApiModel):
    month: str
    total_income: float = 0.0
    total_expenses: float = 0.0
    net_profit: float = 0.0

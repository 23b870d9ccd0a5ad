"""
Model for working with 'FinancialTransactions' documents in MongoDB.
"""

from datetime import datetime
from typing import ClassVar, Optional

from ..client import MongoModel


class FinancialTransactionModel(MongoModel):
    """
    Model for income and expense records.

    Validation of amount and type happens in the router before a model is
    built; this class only describes the stored shape.
    """

    collection_name: ClassVar[str] = "FinancialTransactions"
    indexes: ClassVar[list] = [
        ([("transactionDate", -1)], {"name": "transaction_date_desc"}),
        ([("transactionType", 1)], {"name": "transaction_type"}),
        ([("category", 1)], {"name": "category"}),
    ]

    description: str
    category: str = "Other"
    amount: float
    transaction_date: datetime
    payment_method: str = "Cash"
    transaction_type: str
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime

"""
Model for working with 'Sales' documents in MongoDB.
"""

from datetime import datetime
from typing import ClassVar, Optional

from ..client import MongoModel


class SaleModel(MongoModel):
    """Model for sale documents."""

    collection_name: ClassVar[str] = "Sales"
    indexes: ClassVar[list] = [
        ([("createdAt", -1)], {"name": "created_at_desc"}),
        ([("saleDate", -1)], {"name": "sale_date_desc"}),
        ([("category", 1)], {"name": "category"}),
    ]

    product_name: str
    quantity: int
    amount: float
    category: str = "Other"
    description: Optional[str] = None
    sale_date: datetime
    created_at: datetime
    updated_at: datetime

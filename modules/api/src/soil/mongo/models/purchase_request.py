"""
Model for working with 'purchases' documents in MongoDB.
"""

from datetime import datetime
from typing import ClassVar

from ..client import MongoModel


class PurchaseRequestModel(MongoModel):
    """
    Model for purchase requests.

    Each request lists the quantity wanted for every stock item the shop
    reorders, plus the total amount of the request.
    """

    collection_name: ClassVar[str] = "purchases"
    indexes: ClassVar[list] = [
        ([("requestDate", -1)], {"name": "request_date_desc"}),
    ]

    black_pearl: int = 0
    powder_flavor: int = 0
    cup_small: int = 0
    cup_medium: int = 0
    cup_large: int = 0
    straw: int = 0
    ice: int = 0
    water_gallon: int = 0
    total_amount: float = 0.0
    request_date: datetime

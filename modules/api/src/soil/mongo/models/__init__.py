"""
MongoDB models registry.

Every stored model is listed here so its indexes are created at startup.
"""

from .financial_transaction import FinancialTransactionModel
from .purchase_request import PurchaseRequestModel
from .sale import SaleModel
from .user import UserModel

MODELS = [
    UserModel,
    FinancialTransactionModel,
    SaleModel,
    PurchaseRequestModel,
]

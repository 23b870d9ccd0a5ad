from fastapi import APIRouter, Query, Request, Response, status
from typing import Dict, List, Tuple
from datetime import date

from ..errors import NotFoundError, ValidationError
from ..models.base import Message
from ..models.financial import (
    TRANSACTION_TYPES,
    FinancialSummary,
    FinancialTransactionPayload,
    MonthlySummary,
)
from ..mongo.client import is_valid_id
from ..mongo.models.financial_transaction import FinancialTransactionModel
from ..utils.dates import day_range, month_label, utcnow

import logging
logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/financial",
    tags=["financial"],
)

NEWEST_FIRST = [("transactionDate", -1)]
MONTHS_IN_SUMMARY = 12


def _check_id(transaction_id: str) -> None:
    if not is_valid_id(transaction_id):
        raise ValidationError("Invalid transaction ID format")


@router.get("", response_model=List[FinancialTransactionModel])
async def list_transactions(request: Request):
    store = request.app.state.mongo_store
    return await FinancialTransactionModel.find(store, sort=NEWEST_FIRST)


@router.get("/summary", response_model=FinancialSummary)
async def get_summary(request: Request):
    store = request.app.state.mongo_store
    rows = await FinancialTransactionModel.aggregate(store, [
        {"$group": {
            "_id": "$transactionType",
            "total": {"$sum": "$amount"},
            "count": {"$sum": 1},
        }},
    ])

    totals = {row["_id"]: row for row in rows}
    income = totals.get("Income", {})
    expense = totals.get("Expense", {})
    grand_total = sum(row["total"] for row in rows)
    count = sum(row["count"] for row in rows)

    total_income = income.get("total", 0.0)
    total_expenses = expense.get("total", 0.0)
    return FinancialSummary(
        total_income=total_income,
        total_expenses=total_expenses,
        net_profit=total_income - total_expenses,
        total_transactions=count,
        income_count=income.get("count", 0),
        expense_count=expense.get("count", 0),
        average_transaction=grand_total / count if count else 0.0,
    )


@router.get("/monthly-summary", response_model=List[MonthlySummary])
async def get_monthly_summary(request: Request):
    store = request.app.state.mongo_store
    rows = await FinancialTransactionModel.aggregate(store, [
        {"$group": {
            "_id": {
                "year": {"$year": "$transactionDate"},
                "month": {"$month": "$transactionDate"},
                "type": "$transactionType",
            },
            "total": {"$sum": "$amount"},
        }},
    ])

    months: Dict[Tuple[int, int], Dict[str, float]] = {}
    for row in rows:
        key = (row["_id"]["year"], row["_id"]["month"])
        bucket = months.setdefault(key, {"Income": 0.0, "Expense": 0.0})
        if row["_id"].get("type") in bucket:
            bucket[row["_id"]["type"]] += row["total"]

    # Most recent months first to pick the window, then oldest first for the response.
    recent = sorted(months, reverse=True)[:MONTHS_IN_SUMMARY]
    return [
        MonthlySummary(
            month=month_label(year, month),
            total_income=months[(year, month)]["Income"],
            total_expenses=months[(year, month)]["Expense"],
            net_profit=months[(year, month)]["Income"] - months[(year, month)]["Expense"],
        )
        for year, month in reversed(recent)
    ]


@router.get("/date-range", response_model=List[FinancialTransactionModel])
async def get_by_date_range(
    request: Request,
    start_date: date = Query(..., alias="startDate"),
    end_date: date = Query(..., alias="endDate"),
):
    if end_date < start_date:
        raise ValidationError("End date must be greater than or equal to start date")

    lower, upper = day_range(start_date, end_date)
    store = request.app.state.mongo_store
    return await FinancialTransactionModel.find(
        store,
        {"transactionDate": {"$gte": lower, "$lt": upper}},
        sort=NEWEST_FIRST,
    )


@router.get("/type/{transaction_type}", response_model=List[FinancialTransactionModel])
async def get_by_type(request: Request, transaction_type: str):
    if transaction_type not in TRANSACTION_TYPES:
        raise ValidationError("Invalid type. Must be Income or Expense")

    store = request.app.state.mongo_store
    return await FinancialTransactionModel.find(store, {"transactionType": transaction_type}, sort=NEWEST_FIRST)


@router.get("/category/{category}", response_model=List[FinancialTransactionModel])
async def get_by_category(request: Request, category: str):
    if not category.strip():
        raise ValidationError("Category is required")

    store = request.app.state.mongo_store
    return await FinancialTransactionModel.find(store, {"category": category}, sort=NEWEST_FIRST)


@router.get("/{transaction_id}", response_model=FinancialTransactionModel, name="get_transaction")
async def get_transaction(request: Request, transaction_id: str):
    _check_id(transaction_id)

    store = request.app.state.mongo_store
    transaction = await FinancialTransactionModel.get(store, transaction_id)
    if transaction is None:
        raise NotFoundError("Transaction not found")
    return transaction


@router.post("", response_model=FinancialTransactionModel, status_code=status.HTTP_201_CREATED)
async def create_transaction(request: Request, response: Response, payload: FinancialTransactionPayload):
    payload.check()

    now = utcnow()
    transaction = FinancialTransactionModel(
        description=payload.description,
        category=payload.category or "Other",
        amount=payload.amount,
        transaction_date=payload.transaction_date or now,
        payment_method=payload.payment_method or "Cash",
        transaction_type=payload.transaction_type,
        notes=payload.notes,
        created_at=now,
        updated_at=now,
    )

    store = request.app.state.mongo_store
    await transaction.insert(store)
    logger.info(f"Created financial transaction {transaction.id}")

    response.headers["Location"] = str(request.url_for("get_transaction", transaction_id=transaction.id))
    return transaction


@router.put("/{transaction_id}", response_model=FinancialTransactionModel)
async def update_transaction(request: Request, transaction_id: str, payload: FinancialTransactionPayload):
    _check_id(transaction_id)

    store = request.app.state.mongo_store
    existing = await FinancialTransactionModel.get(store, transaction_id)
    if existing is None:
        raise NotFoundError("Transaction not found")

    payload.check()

    existing.description = payload.description
    existing.category = payload.category or "Other"
    existing.amount = payload.amount
    existing.transaction_date = payload.transaction_date or existing.transaction_date
    existing.payment_method = payload.payment_method or "Cash"
    existing.transaction_type = payload.transaction_type
    existing.notes = payload.notes
    existing.updated_at = utcnow()

    # Last writer wins; a concurrent delete shows up as no match.
    if not await existing.replace(store):
        raise NotFoundError("Transaction not found")

    logger.info(f"Updated financial transaction {transaction_id}")
    return existing


@router.delete("/{transaction_id}", response_model=Message)
async def delete_transaction(request: Request, transaction_id: str):
    _check_id(transaction_id)

    store = request.app.state.mongo_store
    if not await FinancialTransactionModel.delete(store, transaction_id):
        raise NotFoundError("Transaction not found")

    logger.info(f"Deleted financial transaction {transaction_id}")
    return Message(message="Transaction deleted successfully")

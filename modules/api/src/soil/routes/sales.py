from fastapi import APIRouter, Query, Request, Response, status
from typing import List, Optional
from datetime import date
from pymongo.errors import OperationFailure

from ..errors import NotFoundError, ValidationError
from ..models.base import Message
from ..models.sale import CategoryStat, SalePayload, SalesSummary
from ..mongo.client import is_valid_id
from ..mongo.models.sale import SaleModel
from ..utils.dates import day_range, utcnow

import logging
logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/sales",
    tags=["sales"],
)

NEWEST_FIRST = [("createdAt", -1)]


def _check_id(sale_id: str) -> None:
    if not is_valid_id(sale_id):
        raise ValidationError("Invalid sale ID format")


@router.get("", response_model=List[SaleModel])
async def list_sales(request: Request):
    store = request.app.state.mongo_store
    return await SaleModel.find(store, sort=NEWEST_FIRST)


@router.get("/stats/category", response_model=List[CategoryStat])
async def get_category_stats(request: Request):
    store = request.app.state.mongo_store
    rows = await SaleModel.aggregate(store, [
        {"$group": {
            "_id": "$category",
            "totalSales": {"$sum": "$amount"},
            "totalQuantity": {"$sum": "$quantity"},
            "count": {"$sum": 1},
        }},
        {"$sort": {"totalSales": -1}},
    ])
    return [
        CategoryStat(
            category=row["_id"],
            total_sales=row["totalSales"],
            total_quantity=row["totalQuantity"],
            count=row["count"],
        )
        for row in rows
    ]


@router.get("/summary", response_model=SalesSummary)
async def get_summary(request: Request):
    store = request.app.state.mongo_store
    rows = await SaleModel.aggregate(store, [
        {"$group": {
            "_id": None,
            "totalSales": {"$sum": "$amount"},
            "totalQuantity": {"$sum": "$quantity"},
            "count": {"$sum": 1},
        }},
    ])
    if not rows:
        return SalesSummary()

    row = rows[0]
    return SalesSummary(
        total_sales=row["totalSales"],
        total_quantity=row["totalQuantity"],
        count=row["count"],
        average_sale=row["totalSales"] / row["count"] if row["count"] else 0.0,
    )


@router.get("/date-range", response_model=List[SaleModel])
async def get_by_date_range(
    request: Request,
    start_date: date = Query(..., alias="startDate"),
    end_date: date = Query(..., alias="endDate"),
):
    if end_date < start_date:
        raise ValidationError("End date must be greater than or equal to start date")

    lower, upper = day_range(start_date, end_date)
    store = request.app.state.mongo_store
    return await SaleModel.find(
        store,
        {"saleDate": {"$gte": lower, "$lt": upper}},
        sort=[("saleDate", -1)],
    )


@router.get("/category/{category}", response_model=List[SaleModel])
async def get_by_category(request: Request, category: str):
    if not category.strip():
        raise ValidationError("Category is required")

    store = request.app.state.mongo_store
    return await SaleModel.find(store, {"category": category}, sort=NEWEST_FIRST)


@router.get("/search", response_model=List[SaleModel])
async def search_sales(request: Request, query: Optional[str] = None):
    if not query or not query.strip():
        raise ValidationError("Search query is required")

    # The store compiles the pattern, so its regex dialect decides validity.
    pattern = {"$regex": query, "$options": "i"}
    store = request.app.state.mongo_store
    try:
        return await SaleModel.find(
            store,
            {"$or": [{"productName": pattern}, {"description": pattern}]},
            sort=NEWEST_FIRST,
        )
    except OperationFailure as exc:
        logger.info(f"Rejected search pattern {query!r}: {exc}")
        raise ValidationError("Invalid search pattern") from exc


@router.get("/{sale_id}", response_model=SaleModel, name="get_sale")
async def get_sale(request: Request, sale_id: str):
    _check_id(sale_id)

    store = request.app.state.mongo_store
    sale = await SaleModel.get(store, sale_id)
    if sale is None:
        raise NotFoundError("Sale not found")
    return sale


@router.post("", response_model=SaleModel, status_code=status.HTTP_201_CREATED)
async def create_sale(request: Request, response: Response, payload: SalePayload):
    payload.check()

    now = utcnow()
    sale = SaleModel(
        product_name=payload.product_name,
        quantity=payload.quantity,
        amount=payload.amount,
        category=payload.category or "Other",
        description=payload.description,
        sale_date=payload.sale_date or now,
        created_at=now,
        updated_at=now,
    )

    store = request.app.state.mongo_store
    await sale.insert(store)
    logger.info(f"Created sale {sale.id}")

    response.headers["Location"] = str(request.url_for("get_sale", sale_id=sale.id))
    return sale


@router.put("/{sale_id}", response_model=SaleModel)
async def update_sale(request: Request, sale_id: str, payload: SalePayload):
    _check_id(sale_id)

    store = request.app.state.mongo_store
    existing = await SaleModel.get(store, sale_id)
    if existing is None:
        raise NotFoundError("Sale not found")

    payload.check()

    existing.product_name = payload.product_name
    existing.quantity = payload.quantity
    existing.amount = payload.amount
    existing.category = payload.category or "Other"
    existing.description = payload.description
    existing.sale_date = payload.sale_date or existing.sale_date
    existing.updated_at = utcnow()

    if not await existing.replace(store):
        raise NotFoundError("Sale not found")

    logger.info(f"Updated sale {sale_id}")
    return existing


@router.delete("/{sale_id}", response_model=Message)
async def delete_sale(request: Request, sale_id: str):
    _check_id(sale_id)

    store = request.app.state.mongo_store
    if not await SaleModel.delete(store, sale_id):
        raise NotFoundError("Sale not found")

    logger.info(f"Deleted sale {sale_id}")
    return Message(message="Sale deleted successfully")

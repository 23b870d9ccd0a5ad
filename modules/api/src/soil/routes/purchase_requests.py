from fastapi import APIRouter, Request, Response, status
from typing import List

from ..errors import NotFoundError, ValidationError
from ..models.base import Message
from ..models.purchase_request import PurchaseRequestPayload
from ..mongo.client import MongoStore, is_valid_id
from ..mongo.models.purchase_request import PurchaseRequestModel
from ..utils.dates import utcnow

import logging
logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/purchaserequest",
    tags=["purchase-requests"],
)


def _check_id(pr_id: str) -> None:
    if not is_valid_id(pr_id):
        raise ValidationError("Invalid PR ID format")


def _fields(payload: PurchaseRequestPayload) -> dict:
    data = payload.model_dump(exclude={"id", "request_date"})
    data["request_date"] = payload.request_date or utcnow()
    return data


async def _create(store: MongoStore, payload: PurchaseRequestPayload) -> PurchaseRequestModel:
    pr = PurchaseRequestModel(**_fields(payload))
    await pr.insert(store)
    logger.info(f"Created purchase request {pr.id}")
    return pr


async def _update(store: MongoStore, pr_id: str, payload: PurchaseRequestPayload) -> PurchaseRequestModel:
    if await PurchaseRequestModel.get(store, pr_id) is None:
        raise NotFoundError("PR not found")

    pr = PurchaseRequestModel(id=pr_id, **_fields(payload))
    if not await pr.replace(store):
        raise NotFoundError("PR not found")

    logger.info(f"Updated purchase request {pr_id}")
    return pr


@router.get("", response_model=List[PurchaseRequestModel])
async def list_purchase_requests(request: Request):
    store = request.app.state.mongo_store
    return await PurchaseRequestModel.find(store, sort=[("requestDate", -1)])


@router.post("/savepr", response_model=PurchaseRequestModel)
async def save_purchase_request(request: Request, payload: PurchaseRequestPayload):
    """Create when the body carries no id, otherwise replace the stored request."""
    store = request.app.state.mongo_store
    if not payload.id:
        return await _create(store, payload)

    _check_id(payload.id)
    return await _update(store, payload.id, payload)


@router.get("/{pr_id}", response_model=PurchaseRequestModel, name="get_purchase_request")
async def get_purchase_request(request: Request, pr_id: str):
    _check_id(pr_id)

    store = request.app.state.mongo_store
    pr = await PurchaseRequestModel.get(store, pr_id)
    if pr is None:
        raise NotFoundError("PR not found")
    return pr


@router.post("", response_model=PurchaseRequestModel, status_code=status.HTTP_201_CREATED)
async def create_purchase_request(request: Request, response: Response, payload: PurchaseRequestPayload):
    if payload.id:
        raise ValidationError("New purchase requests must not carry an id")

    store = request.app.state.mongo_store
    pr = await _create(store, payload)
    response.headers["Location"] = str(request.url_for("get_purchase_request", pr_id=pr.id))
    return pr


@router.put("/{pr_id}", response_model=PurchaseRequestModel)
async def update_purchase_request(request: Request, pr_id: str, payload: PurchaseRequestPayload):
    _check_id(pr_id)
    if payload.id and payload.id != pr_id:
        raise ValidationError("Body id does not match the path id")

    store = request.app.state.mongo_store
    return await _update(store, pr_id, payload)


@router.delete("/{pr_id}", response_model=Message)
async def delete_purchase_request(request: Request, pr_id: str):
    _check_id(pr_id)

    store = request.app.state.mongo_store
    if not await PurchaseRequestModel.delete(store, pr_id):
        raise NotFoundError("PR not found")

    logger.info(f"Deleted purchase request {pr_id}")
    return Message(message="PR deleted successfully")

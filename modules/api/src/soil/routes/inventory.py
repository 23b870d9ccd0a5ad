"""
Account endpoints used by the inventory screens.

They share the identity service with `/api/auth`; only the response
messages differ.
"""

from fastapi import APIRouter, Depends

from ..models.auth import InventorySignInResponse, SignInRequest, SignUpRequest
from ..models.base import Message
from ..services.identity import IdentityService, get_identity_service
from .auth import user_summary

router = APIRouter(
    prefix="/api/inventory",
    tags=["inventory"],
)


@router.post("/signup", response_model=Message)
async def signup(payload: SignUpRequest, service: IdentityService = Depends(get_identity_service)):
    await service.sign_up(payload.full_name, payload.email, payload.password)
    return Message(message="Account created successfully.")


@router.post("/signin", response_model=InventorySignInResponse)
async def signin(payload: SignInRequest, service: IdentityService = Depends(get_identity_service)):
    token, user = await service.sign_in(payload.email, payload.password)
    return InventorySignInResponse(token=token, user=user_summary(user))

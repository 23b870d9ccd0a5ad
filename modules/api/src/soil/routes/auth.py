from fastapi import APIRouter, Depends

from ..models.auth import SignInRequest, SignInResponse, SignUpRequest, UserSummary
from ..models.base import Message
from ..mongo.models.user import UserModel
from ..services.identity import IdentityService, get_identity_service

router = APIRouter(
    prefix="/api/auth",
    tags=["auth"],
)


def user_summary(user: UserModel) -> UserSummary:
    return UserSummary(id=user.id, full_name=user.full_name, email=user.email, role=user.role)


@router.post("/signup", response_model=Message)
async def signup(payload: SignUpRequest, service: IdentityService = Depends(get_identity_service)):
    await service.sign_up(payload.full_name, payload.email, payload.password)
    return Message(message="User created successfully.")


@router.post("/signin", response_model=SignInResponse)
async def signin(payload: SignInRequest, service: IdentityService = Depends(get_identity_service)):
    token, user = await service.sign_in(payload.email, payload.password)
    return SignInResponse(token=token, user=user_summary(user))

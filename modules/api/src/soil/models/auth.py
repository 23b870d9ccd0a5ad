from typing import Optional

from .base import ApiModel


class SignUpRequest(ApiModel):
    full_name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None


class SignInRequest(ApiModel):
    email: Optional[str] = None
    password: Optional[str] = None
    remember_me: bool = False


class UserSummary(ApiModel):
    id: str
    full_name: str
    email: str
    role: str


class SignInResponse(ApiModel):
    token: str
    user: UserSummary


class InventorySignInResponse(SignInResponse):
    message: str = "Login successful."

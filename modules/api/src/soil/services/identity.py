"""
Account creation, credential checks and bearer token handling.

Both account surfaces (`/api/auth` and `/api/inventory`) go through this
service, so there is a single hashing policy (bcrypt) and a single token
format (HS256 JWT) for the whole API.
"""

import base64
import hashlib
import hmac
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional, Tuple

import bcrypt
from fastapi import Depends, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from pymongo.errors import DuplicateKeyError

from ..config import Settings
from ..errors import AuthenticationError, ConflictError, ValidationError
from ..mongo.client import MongoStore
from ..mongo.models.user import UserModel

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"
DEFAULT_ROLE = "User"
BCRYPT_MAX_BYTES = 72


@dataclass(frozen=True)
class Identity:
    user_id: str
    name: str
    email: str
    role: str


def hash_password(password: str, rounds: int = 12) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds)).decode("utf-8")


def _legacy_digest(password: str) -> str:
    # Unsalted SHA-256, base64 encoded. Only ever read, never written.
    return base64.b64encode(hashlib.sha256(password.encode("utf-8")).digest()).decode("ascii")


def is_legacy_hash(password_hash: str) -> bool:
    return not password_hash.startswith("$2")


def verify_password(password: str, password_hash: str) -> bool:
    if not password_hash:
        return False
    if is_legacy_hash(password_hash):
        return hmac.compare_digest(_legacy_digest(password), password_hash)
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        return False


def normalize_email(email: str) -> str:
    return email.strip().lower()


class IdentityService:
    def __init__(self, store: MongoStore, settings: Settings):
        self.store = store
        self.settings = settings

    async def sign_up(self, full_name: Optional[str], email: Optional[str], password: Optional[str]) -> UserModel:
        if not (full_name and full_name.strip()) or not (email and email.strip()) or not (password and password.strip()):
            raise ValidationError("Full name, email, and password are required.")
        if len(password.encode("utf-8")) > BCRYPT_MAX_BYTES:
            raise ValidationError(f"Password must be at most {BCRYPT_MAX_BYTES} bytes.")

        email_clean = normalize_email(email)
        if await UserModel.find_one(self.store, {"email": email_clean}):
            raise ConflictError("Email already exists.")

        password_hash = await run_in_threadpool(hash_password, password, self.settings.bcrypt_rounds)
        user = UserModel(
            full_name=full_name.strip(),
            email=email_clean,
            password_hash=password_hash,
            role=DEFAULT_ROLE,
        )
        try:
            await user.insert(self.store)
        except DuplicateKeyError as exc:
            # Lost a race with a concurrent signup for the same address.
            raise ConflictError("Email already exists.") from exc

        logger.info(f"Created user {user.id}")
        return user

    async def sign_in(self, email: Optional[str], password: Optional[str]) -> Tuple[str, UserModel]:
        if not (email and email.strip()) or not (password and password.strip()):
            raise ValidationError("Email and password are required.")

        email_clean = normalize_email(email)
        user = await UserModel.find_one(self.store, {"email": email_clean})
        if user is None or not await run_in_threadpool(verify_password, password, user.password_hash):
            logger.warning(f"Failed signin for {email_clean}")
            raise AuthenticationError("Invalid email or password.")

        if is_legacy_hash(user.password_hash):
            await self._upgrade_legacy_hash(user, password)

        logger.info(f"User {user.id} signed in")
        return self.issue_token(user), user

    async def _upgrade_legacy_hash(self, user: UserModel, password: str) -> None:
        # bcrypt cannot take the password; the legacy hash stays until it is reset.
        if len(password.encode("utf-8")) > BCRYPT_MAX_BYTES:
            logger.warning(f"Legacy password hash for user {user.id} kept: password exceeds {BCRYPT_MAX_BYTES} bytes")
            return

        user.password_hash = await run_in_threadpool(hash_password, password, self.settings.bcrypt_rounds)
        await user.replace(self.store)
        logger.info(f"Upgraded legacy password hash for user {user.id}")

    def issue_token(self, user: UserModel) -> str:
        now = datetime.now(timezone.utc)
        claims = {
            "sub": user.id,
            "name": user.full_name,
            "email": user.email,
            "role": user.role,
            "iss": self.settings.jwt_issuer,
            "aud": self.settings.jwt_audience,
            "iat": now,
            "exp": now + timedelta(hours=self.settings.jwt_expire_hours),
        }
        return jwt.encode(claims, self.settings.jwt_key, algorithm=ALGORITHM)

    def decode_token(self, token: str) -> Identity:
        try:
            claims = jwt.decode(
                token,
                self.settings.jwt_key,
                algorithms=[ALGORITHM],
                audience=self.settings.jwt_audience,
                issuer=self.settings.jwt_issuer,
            )
        except JWTError as exc:
            raise AuthenticationError("Invalid or expired token.") from exc

        return Identity(
            user_id=claims.get("sub", ""),
            name=claims.get("name", ""),
            email=claims.get("email", ""),
            role=claims.get("role", DEFAULT_ROLE),
        )


def get_identity_service(request: Request) -> IdentityService:
    return IdentityService(request.app.state.mongo_store, request.app.state.settings)


_bearer = HTTPBearer(auto_error=False)


async def current_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer),
    service: IdentityService = Depends(get_identity_service),
) -> Identity:
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Missing bearer token.")
    return service.decode_token(credentials.credentials)

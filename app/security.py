from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional
import logging

import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from passlib.context import CryptContext

from app.errors import Forbidden, Unauthenticated
from config import Settings, get_settings

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes = ["bcrypt"], deprecated = "auto")
bearer_scheme = HTTPBearer(auto_error = False)


@dataclass(frozen = True)
class Claim:
    """Decoded payload of a session token."""
    id: int
    role: str


def create_access_token(claim: Claim, settings: Settings, expires_delta: Optional[timedelta] = None) -> str:
    to_encode = {"id": claim.id, "role": claim.role}
    if expires_delta is None and settings.access_token_expire_minutes is not None:
        expires_delta = timedelta(minutes = settings.access_token_expire_minutes)
    if expires_delta is not None:
        to_encode["exp"] = datetime.now(timezone.utc) + expires_delta
    return jwt.encode(to_encode, settings.jwt_secret, algorithm = settings.jwt_algorithm)


def decode_access_token(token: str, settings: Settings) -> Claim:
    """Verify signature and expiry, then turn the payload into a Claim."""
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms = [settings.jwt_algorithm])
    except jwt.InvalidTokenError as exc:
        logger.warning("Rejected token: %s", exc)
        raise Forbidden("Invalid or expired token")

    user_id = payload.get("id")
    role = payload.get("role")
    if not isinstance(user_id, int) or isinstance(user_id, bool) or not isinstance(role, str):
        raise Forbidden("Invalid token claims")
    return Claim(id = user_id, role = role)


def verify_password(plain_password, hashed_password):
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password):
    return pwd_context.hash(password)


def get_current_claim(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    settings: Settings = Depends(get_settings),
) -> Claim:
    if credentials is None or not credentials.credentials:
        raise Unauthenticated("Authentication token required")
    return decode_access_token(credentials.credentials, settings)

"""
auth.py — Password hashing and bearer tokens.
Tokens carry `user_id`, `username` and a unique `jti`; sessions last JWT_EXPIRY_HOURS.
"""
from datetime import datetime, timedelta, timezone
import logging
import uuid

import bcrypt
from fastapi import Request, HTTPException, status
from jose import jwt, JWTError

from config import JWT_SECRET, JWT_ALGORITHM, JWT_EXPIRY_HOURS

logger = logging.getLogger(__name__)

# bcrypt only looks at the first 72 bytes and newer releases raise past that
BCRYPT_MAX_BYTES = 72


def _pw_bytes(password: str) -> bytes:
    return password.encode("utf-8")[:BCRYPT_MAX_BYTES]


def hash_password(password: str) -> str:
    return bcrypt.hashpw(_pw_bytes(password), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    try:
        return bcrypt.checkpw(_pw_bytes(plain_password), hashed_password.encode("utf-8"))
    except ValueError as e:
        logger.warning(f"Stored password hash is unreadable: {e}")
        return False


def create_token(claims: dict) -> str:
    """Sign `claims` plus an expiry and a fresh JTI."""
    payload = {
        **claims,
        "exp": datetime.now(timezone.utc) + timedelta(hours=JWT_EXPIRY_HOURS),
        "jti": str(uuid.uuid4()),
    }
    return jwt.encode(payload, JWT_SECRET, algorithm=JWT_ALGORITHM)


def verify_token(token: str) -> dict | None:
    try:
        return jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALGORITHM])
    except JWTError:
        return None


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(request: Request) -> int:
    """
    FastAPI dependency: the user id from a valid `Authorization: Bearer <token>` header.
    Raises HTTP 401 otherwise.
    """
    scheme, _, token = request.headers.get("Authorization", "").partition(" ")
    if scheme != "Bearer" or not token:
        raise _unauthorized("Missing or invalid Authorization header")

    payload = verify_token(token)
    if payload is None:
        raise _unauthorized("Invalid or expired token")

    try:
        user_id = int(payload["user_id"])
    except (KeyError, TypeError, ValueError):
        raise _unauthorized("Token payload missing required claims")
    if not payload.get("jti"):
        raise _unauthorized("Token payload missing required claims")
    return user_id

# crypto_dashboard/security.py
"""
Password hashing (bcrypt) and bearer tokens (PyJWT).

Tokens carry the public user view {id, email, name} and expire after
TOKEN_TTL_DAYS. `current_user` is the dependency every dashboard route uses.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .config import JWT_ALGORITHM, JWT_SECRET, TOKEN_TTL_DAYS
from .errors import AuthError
from .schema import UserView

BCRYPT_ROUNDS = 10

# auto_error=False: a missing header is reported through AuthError like every other 401
bearer = HTTPBearer(auto_error=False)


def hash_password(password: str) -> str:
    salt = bcrypt.gensalt(rounds=BCRYPT_ROUNDS)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        # Stored value is not a bcrypt hash
        return False


def issue_token(user: UserView) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        "id": user.id,
        "email": user.email,
        "name": user.name,
        "iat": now,
        "exp": now + timedelta(days=TOKEN_TTL_DAYS),
    }
    return jwt.encode(payload, JWT_SECRET, algorithm=JWT_ALGORITHM)


def decode_token(token: str) -> UserView:
    try:
        payload = jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise AuthError("Token expired")
    except jwt.InvalidTokenError:
        raise AuthError("Invalid token")

    try:
        return UserView(id=int(payload["id"]), email=payload["email"], name=payload["name"])
    except (KeyError, TypeError, ValueError):
        raise AuthError("Invalid token")


def current_user(creds: Optional[HTTPAuthorizationCredentials] = Depends(bearer)) -> UserView:
    if creds is None or not creds.credentials:
        raise AuthError("Access token required")
    return decode_token(creds.credentials)

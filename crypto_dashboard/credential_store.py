# crypto_dashboard/credential_store.py
"""
User identity: registration, login and the admin listing used by `manage`.
"""

from __future__ import annotations

from typing import List, Tuple

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from .errors import AuthError, ConflictError, ValidationError
from .logging_setup import get_logger
from .models import User
from .schema import UserView
from .security import hash_password, issue_token, verify_password
from .store import store_errors

logger = get_logger("crypto_dashboard.credentials")


def _normalize_email(email: str | None) -> str:
    return (email or "").strip().lower()


def _view(user: User) -> UserView:
    return UserView(id=user.id, email=user.email, name=user.name)


def find_by_email(session: Session, email: str) -> User | None:
    with store_errors("look up user"):
        return session.exec(select(User).where(User.email == _normalize_email(email))).first()


def register(session: Session, email: str, name: str, password: str) -> Tuple[str, UserView]:
    email = _normalize_email(email)
    name = (name or "").strip()
    if not email or not name or not password:
        raise ValidationError("Email, name, and password are required")

    if find_by_email(session, email) is not None:
        logger.info("REGISTER_DUPLICATE")
        raise ConflictError("User already exists")

    user = User(email=email, name=name, password=hash_password(password))
    with store_errors("create user"):
        try:
            session.add(user)
            session.commit()
        except IntegrityError:
            # Lost a race with a concurrent registration of the same email
            session.rollback()
            raise ConflictError("User already exists")
        session.refresh(user)

    view = _view(user)
    logger.info("USER_REGISTERED", extra={"user_id": view.id})
    return issue_token(view), view


def login(session: Session, email: str, password: str) -> Tuple[str, UserView]:
    if not _normalize_email(email) or not password:
        raise ValidationError("Email and password are required")

    user = find_by_email(session, email)
    # Same message for unknown email and wrong password
    if user is None or not verify_password(password, user.password):
        logger.info("LOGIN_FAILED")
        raise AuthError("Invalid credentials")

    view = _view(user)
    logger.info("LOGIN_OK", extra={"user_id": view.id})
    return issue_token(view), view


def list_users(session: Session) -> List[User]:
    with store_errors("list users"):
        return list(session.exec(select(User).order_by(User.id)).all())

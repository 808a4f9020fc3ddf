from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from .. import credential_store
from ..logging_setup import get_logger
from ..schema import AuthOut, LoginIn, RegisterIn
from ..store import session_dependency

logger = get_logger("crypto_dashboard.routes.auth")

router = APIRouter(prefix="/auth", tags=["auth"])

@router.post("/register", response_model=AuthOut, status_code=status.HTTP_201_CREATED)
def register(body: RegisterIn, session: Session = Depends(session_dependency)):
    logger.info("Registration attempt")
    token, user = credential_store.register(session, body.email, body.name, body.password)
    return AuthOut(message="User created successfully", token=token, user=user)

@router.post("/login", response_model=AuthOut)
def login(body: LoginIn, session: Session = Depends(session_dependency)):
    token, user = credential_store.login(session, body.email, body.password)
    return AuthOut(message="Login successful", token=token, user=user)

from fastapi import APIRouter
from ..logging_setup import get_logger

logger = get_logger("crypto_dashboard.routes.health")

router = APIRouter()

@router.get("/health")
def health():
    logger.debug("Health check invoked")
    return {"status": "OK", "message": "Crypto Dashboard API is running"}

@router.get("/")
def read_root():
    logger.debug("Root hit")
    return {"status": "OK", "message": "Welcome to the Crypto Dashboard API"}

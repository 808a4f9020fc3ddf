# crypto_dashboard/middleware.py
import time
import uuid
from typing import Optional

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from .logging_setup import request_id_var, get_logger

logger = get_logger("crypto_dashboard.http")

REQUEST_ID_HEADER = "X-Request-ID"


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Tag every request with a correlation id and log its start/end."""

    async def dispatch(self, request: Request, call_next):
        # Reuse the caller's id so frontend and backend logs line up
        inbound = (request.headers.get(REQUEST_ID_HEADER) or "").strip()
        req_id = inbound[:64] if inbound else uuid.uuid4().hex[:12]
        token = request_id_var.set(req_id)

        start = time.perf_counter()
        response: Optional[Response] = None
        client = request.client.host if request.client else "-"

        try:
            logger.info(f"REQUEST START: {request.method} {request.url.path} from {client}")
            response = await call_next(request)
            response.headers[REQUEST_ID_HEADER] = req_id
            return response
        except Exception:
            logger.exception(f"REQUEST EXCEPTION: {request.method} {request.url.path}")
            raise
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            status = getattr(response, "status_code", 500)
            logger.info(f"REQUEST END: {request.method} {request.url.path} -> {status} ({elapsed_ms:.1f} ms)")
            request_id_var.reset(token)

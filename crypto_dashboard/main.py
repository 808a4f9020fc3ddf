# crypto_dashboard/main.py
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .logging_setup import setup_logging, get_logger
from .middleware import RequestContextMiddleware
from .exception_handling import register_exception_handlers
from .lifespan import lifespan
from .cache import ResponseCache
from .aggregate import build_adapters
from .config import ALLOWED_ORIGINS

from .routers import auth, dashboard, feedback, health, prefs

setup_logging()  # <-- set up logging ASAP
logger = get_logger("crypto_dashboard.main")

app = FastAPI(title="Crypto Dashboard", version="0.1.0", lifespan=lifespan)

# Built once per process; routes reach them through dependencies
app.state.cache = ResponseCache()
app.state.adapters = build_adapters()

app.add_middleware(RequestContextMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID"],
)

register_exception_handlers(app)

# Include routers
app.include_router(health.router)
app.include_router(auth.router)
app.include_router(prefs.router)
app.include_router(feedback.router)
app.include_router(dashboard.router)

logger.info(f"CORS origins: {', '.join(ALLOWED_ORIGINS) or '(none)'}")

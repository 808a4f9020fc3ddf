# crypto_dashboard/logging_setup.py
import logging
from logging.config import dictConfig
from logging import LogRecord
from pathlib import Path
import contextvars
import os

# ---- Correlation ID (set by RequestContextMiddleware) ----
request_id_var: contextvars.ContextVar[str] = contextvars.ContextVar("request_id", default="-")

class RequestIdFilter(logging.Filter):
    def filter(self, record: LogRecord) -> bool:
        record.request_id = request_id_var.get()
        return True

# Attributes every LogRecord has; anything else came in through `extra=`
_STANDARD_ATTRS = set(vars(logging.makeLogRecord({}))) | {"message", "asctime", "request_id", "fields"}

class ExtraFieldsFilter(logging.Filter):
    """Renders `extra={...}` as `key=value` pairs, e.g. FEED_FALLBACK feed=prices error=timeout."""

    def filter(self, record: LogRecord) -> bool:
        pairs = [f"{k}={v}" for k, v in vars(record).items() if k not in _STANDARD_ATTRS]
        record.fields = (" " + " ".join(pairs)) if pairs else ""
        return True

# ---- Paths & levels ----
BASE_DIR = Path(__file__).resolve().parents[1]  # project root (folder that contains 'crypto_dashboard/')
LOG_DIR  = Path(os.getenv("LOG_DIR", BASE_DIR / "logs"))
LOG_FILE = LOG_DIR / "crypto_dashboard.log"
FEEDS_LOG_FILE = LOG_DIR / "feeds.log"

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Upstream traffic: adapters, the cache in front of them, the dashboard fan-out
FEED_LOGGERS = (
    "crypto_dashboard.feeds",
    "crypto_dashboard.sources",
    "crypto_dashboard.insight",
    "crypto_dashboard.cache",
    "crypto_dashboard.aggregate",
)

def _rotating(filename: Path, days: int) -> dict:
    return {
        "class": "logging.handlers.TimedRotatingFileHandler",
        "formatter": "standard",
        "filters": ["request_id", "extra_fields"],
        "filename": str(filename),
        "when": "midnight",
        "backupCount": days,
        "encoding": "utf-8",
    }

def setup_logging() -> Path:
    LOG_DIR.mkdir(parents=True, exist_ok=True)
    dictConfig({
        "version": 1,
        "disable_existing_loggers": False,

        "filters": {
            "request_id": {"()": RequestIdFilter},
            "extra_fields": {"()": ExtraFieldsFilter},
        },

        "formatters": {
            "standard": {
                "format": (
                    "%(asctime)s | %(levelname)s | %(name)s | req=%(request_id)s | "
                    "%(message)s%(fields)s (%(filename)s:%(lineno)d)"
                )
            },
            "uvicorn_access": {
                "format": "%(asctime)s | %(levelname)s | %(message)s"
            },
        },

        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "standard",
                "filters": ["request_id", "extra_fields"],
            },
            "file": _rotating(LOG_FILE, days=14),
            # Fallbacks and provider hand-overs, kept apart so upstream trouble is easy to scan
            "feeds_file": _rotating(FEEDS_LOG_FILE, days=7),
            "uvicorn_console": {
                "class": "logging.StreamHandler",
                "formatter": "uvicorn_access",
            },
        },

        "loggers": {
            # crypto_dashboard.* children inherit these handlers
            "crypto_dashboard": {"handlers": ["console", "file"], "level": LOG_LEVEL, "propagate": False},
            **{name: {"handlers": ["feeds_file"], "propagate": True} for name in FEED_LOGGERS},

            # Outbound HTTP logs every request at INFO; keep it quiet
            "httpx": {"handlers": ["console", "feeds_file"], "level": "WARNING", "propagate": False},

            "uvicorn.error":  {"handlers": ["uvicorn_console", "file"], "level": "INFO", "propagate": False},
            "uvicorn.access": {"handlers": ["uvicorn_console", "file"], "level": "INFO", "propagate": False},
        },

        "root": {"handlers": ["console"], "level": "WARNING"},
    })

    logging.getLogger("crypto_dashboard").info("LOGGING_READY", extra={"file": LOG_FILE, "feeds": FEEDS_LOG_FILE})
    return LOG_FILE

def get_logger(name: str = "crypto_dashboard") -> logging.Logger:
    return logging.getLogger(name)

import os
from dotenv import load_dotenv
from pathlib import Path

# Go up one level from crypto_dashboard/ to root/
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=env_path)


def _csv(raw: str) -> list[str]:
    return [part.strip() for part in raw.split(",") if part.strip()]


# Tokens
JWT_SECRET = os.getenv("JWT_SECRET", "dev-secret-change-me-before-deploying-0123")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
TOKEN_TTL_DAYS = int(os.getenv("TOKEN_TTL_DAYS", "7"))

# Upstream providers (all optional)
COINGECKO_API_KEY = os.getenv("COINGECKO_API_KEY", "")
CRYPTOPANIC_API_KEY = os.getenv("CRYPTOPANIC_API_KEY", "")
OPENAI_API_KEY = os.getenv("OPENAI_API_KEY", "")
OPENAI_MODEL = os.getenv("OPENAI_MODEL", "gpt-4o-mini")

# Every outbound call gets a timeout
UPSTREAM_TIMEOUT = float(os.getenv("UPSTREAM_TIMEOUT", "10"))

# Cache lifetimes in seconds
PRICES_TTL = int(os.getenv("PRICES_TTL", "60"))
NEWS_TTL = int(os.getenv("NEWS_TTL", "90"))
MEME_TTL = int(os.getenv("MEME_TTL", "60"))
INSIGHT_TTL = int(os.getenv("INSIGHT_TTL", "300"))

# Server
ALLOWED_ORIGINS = _csv(os.getenv("ALLOWED_ORIGINS", "http://localhost:3000"))
HOST = os.getenv("HOST", "127.0.0.1")
PORT = int(os.getenv("PORT", "5000"))

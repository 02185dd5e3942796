"""
Application configuration, read from the environment once at import time.
"""

import os

TRUTHY = ("1", "true", "yes", "on")


def env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in TRUTHY


DATABASE_URL = os.getenv("DATABASE_URL", "mongodb://localhost:27017")
DATABASE_NAME = os.getenv("DATABASE_NAME", "artfolio")

# JWT Config
SECRET_KEY = os.getenv("JWT_SECRET", "dev-secret-change")
ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", 60 * 24))  # 1 day
BCRYPT_ROUNDS = int(os.getenv("BCRYPT_ROUNDS", "12"))

CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]

# Marketplace policy
COMMISSION_BRIEF_MIN_LENGTH = int(os.getenv("COMMISSION_BRIEF_MIN_LENGTH", "10"))
ALLOW_REPEAT_PURCHASES = env_flag("ALLOW_REPEAT_PURCHASES", True)
PASSWORD_MIN_LENGTH = 6

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
PORT = int(os.getenv("PORT", 8000))

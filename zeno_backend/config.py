# zeno_backend/config.py

import os
from starlette.config import Config

# Values come from a local .env file when present, otherwise from the OS environment
config = Config(".env")

# --- Database ---

# Supabase/Postgres connection string example:
# postgresql://[USER]:[PASSWORD]@[DB_HOST]:5432/[DB_NAME]
DATABASE_URL: str = config("DATABASE_URL", default=os.environ.get("DATABASE_URL", "sqlite+aiosqlite:///./zeno.db"))

# The async engine needs an async driver
if DATABASE_URL.startswith("postgresql://"):
    DATABASE_URL = DATABASE_URL.replace("postgresql://", "postgresql+asyncpg://", 1)

DB_POOL_SIZE: int = config("DB_POOL_SIZE", cast=int, default=15)
DB_MAX_OVERFLOW: int = config("DB_MAX_OVERFLOW", cast=int, default=0)
SQL_ECHO: bool = config("SQL_ECHO", cast=bool, default=False)

# --- Security ---
ZENO_API_KEY: str = config("ZENO_API_KEY", default="")

# --- Insight pipeline ---

# Minimum gap between two generated insights for the same user
INSIGHT_COOLDOWN_MINUTES: int = config("INSIGHT_COOLDOWN_MINUTES", cast=int, default=60)

# Trailing window used for cash-flow metrics
TRANSACTION_WINDOW_DAYS: int = config("TRANSACTION_WINDOW_DAYS", cast=int, default=30)

# --- Logging ---
LOG_LEVEL: str = config("LOG_LEVEL", default="INFO")

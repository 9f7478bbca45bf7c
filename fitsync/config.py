import os
from datetime import timedelta

from dotenv import load_dotenv

load_dotenv()

ENVIRONMENT = os.getenv("ENV", "development").lower()

# ---- database ----
DEFAULT_DB_URL = "sqlite:///./fitsync.db"

if os.getenv("DATABASE_URL"):
    DATABASE_URL = os.environ["DATABASE_URL"]
else:
    if ENVIRONMENT == "production":
        raise RuntimeError("DATABASE_URL is required in production.")
    DATABASE_URL = DEFAULT_DB_URL

SQL_ECHO = os.getenv("SQL_ECHO", "false").lower() == "true"
DB_POOL_SIZE = int(os.getenv("DB_POOL_SIZE", "5"))

# ---- token config ----
DEFAULT_JWT_SECRET = "CHANGE_ME_to_a_long_random_secret"

JWT_SECRET = os.getenv("JWT_SECRET", DEFAULT_JWT_SECRET)
if ENVIRONMENT == "production" and JWT_SECRET == DEFAULT_JWT_SECRET:
    raise RuntimeError("JWT_SECRET must be set in production.")
JWT_ALG = os.getenv("JWT_ALG", "HS256")
JWT_TTL = timedelta(days=int(os.getenv("JWT_TTL_DAYS", "30")))

# ---- http ----
CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ORIGINS", "http://localhost:5173").split(",")
    if origin.strip()
]

LOG_LEVEL = os.getenv("LOG_LEVEL", "info").lower()

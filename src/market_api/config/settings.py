"""
Configuration settings for the Market API
"""

import os
import logging

logger = logging.getLogger(__name__)


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


# Environment configuration
ENV = os.getenv("ENV", "PROD")  # PROD or QA
DATABASE_URL = os.getenv("DATABASE_URL")
PORT = int(os.getenv("PORT", 8080))

# Connection pool sizing
DB_POOL_MIN_SIZE = int(os.getenv("DB_POOL_MIN_SIZE", 2))
DB_POOL_MAX_SIZE = int(os.getenv("DB_POOL_MAX_SIZE", 10))
DB_COMMAND_TIMEOUT = float(os.getenv("DB_COMMAND_TIMEOUT", 60))

# When enabled, 500 responses include the raw driver message (QA debugging only)
EXPOSE_ERROR_DETAILS = _env_flag("EXPOSE_ERROR_DETAILS")

# CORS settings
ALLOWED_ORIGINS = [origin.strip() for origin in os.getenv("ALLOWED_ORIGINS", "*").split(",") if origin.strip()]

logger.info(f"Environment: {ENV}")

if EXPOSE_ERROR_DETAILS and ENV == "PROD":
    logger.warning("EXPOSE_ERROR_DETAILS is enabled in PROD - store errors will be returned to clients")

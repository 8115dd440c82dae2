"""
Market API Server
Core functionality: user directory with hashed-credential authentication and
CRUD over the products catalog
"""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from market_api.config.settings import ALLOWED_ORIGINS
from market_api.database.connection import init_database, close_database
from market_api.api.routes import health, products, users
from market_api.utils.error_handling import setup_error_handling

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager; owns the pool unless one was injected"""
    owns_pool = getattr(app.state, "db_pool", None) is None
    if owns_pool:
        app.state.db_pool = await init_database()
    yield
    if owns_pool:
        await close_database(app.state.db_pool)
        app.state.db_pool = None


def create_app(db_pool=None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        db_pool: An already-open pool to use instead of creating one at startup

    Returns:
        Configured FastAPI instance
    """
    app = FastAPI(
        title="Market API",
        description="Backend API for user authentication and product catalog management",
        version="1.0.0",
        lifespan=lifespan
    )
    app.state.db_pool = db_pool

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ALLOWED_ORIGINS,
        allow_credentials="*" not in ALLOWED_ORIGINS,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )

    setup_error_handling(app)

    app.include_router(health.router, tags=["Health"])
    app.include_router(users.router, prefix="/usuarios", tags=["Users"])
    app.include_router(products.router, prefix="/productos", tags=["Products"])

    return app


# Exported for uvicorn; server startup is handled by main.py at the project root
app = create_app()

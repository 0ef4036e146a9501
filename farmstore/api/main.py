import logging
import os
import sys
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from farmstore.adapters.sqlite.migrator import SQLiteMigrator
from farmstore.api.deps import close_email_gateway, get_settings
from farmstore.rules.loader import load_rules

logging.basicConfig(
    level=os.environ.get("FARMSTORE_LOG_LEVEL", "INFO"),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    settings = get_settings()

    # Load rules and validate on startup (fail-fast)
    try:
        load_rules(settings.rules_path)
        logger.info("Rules loaded from %s", settings.rules_path)
    except (FileNotFoundError, ValueError) as e:
        logger.critical("Rules load failed: %s", e)
        sys.exit(1)

    settings.data_dir.mkdir(parents=True, exist_ok=True)
    SQLiteMigrator(settings.db_path, settings.migrations_dir).run_migrations()

    yield
    close_email_gateway()


app = FastAPI(
    title="Kmetija Maroša Storefront API",
    version="0.1.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# --- Routers ---
from farmstore.api.routes import public_discounts, public_newsletter  # noqa: E402

app.include_router(
    public_newsletter.router, prefix="/api/public/newsletter", tags=["Newsletter"]
)
app.include_router(
    public_discounts.router, prefix="/api/public/discounts", tags=["Discounts"]
)


# CORS (Allow Frontend)
origins = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
    "https://kmetija-marosa.si",
    "https://www.kmetija-marosa.si",
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
def health_check() -> dict[str, Any]:
    """Health check endpoint."""
    return {"status": "ok", "service": "farmstore"}

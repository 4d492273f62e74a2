import logging
import os
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from auth import router as auth_router
from auth import security
from core import db
from core.logging import configure_logging
from inventory import router as inventory_router

logger = logging.getLogger(__name__)


def cors_allow_origins() -> list[str]:
    raw = os.environ.get("CORS_ALLOW_ORIGINS", "*").strip() or "*"
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    # Fail on bad scheme/mode config before serving any request.
    app.state.credential_policy = security.credential_policy()
    provider = db.build_provider()
    await provider.open()
    app.state.provider = provider
    logger.info(
        "api_started db_mode=%s password_scheme=%s",
        provider.mode,
        app.state.credential_policy.scheme.value,
    )
    try:
        yield
    finally:
        await provider.close()
        app.state.provider = None


app = FastAPI(lifespan=lifespan)

# The mobile client calls from arbitrary LAN addresses during development.
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_allow_origins(),
    allow_methods=["GET", "POST"],
    allow_headers=["Content-Type"],
)

app.include_router(auth_router.router, tags=["auth"])
app.include_router(inventory_router.router, tags=["inventory"])


@app.get("/api/health")
def api_health() -> dict:
    return {
        "status": "online",
        "message": "Server is running",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@app.get("/health")
def health() -> dict:
    return {"status": "ok"}


@app.get("/")
def root() -> dict:
    return {"message": "SKU Checker API Server"}

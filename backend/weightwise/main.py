"""WeightWise — FastAPI application entry point."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from weightwise.api.v1.auth import router as auth_router
from weightwise.api.v1.billing import router as billing_router
from weightwise.api.v1.webhooks import router as webhooks_router
from weightwise.config import settings

# Configure root logger so all weightwise.* loggers output to stderr.
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan handler for startup and shutdown events."""
    # Startup
    if not settings.paystack_secret_key:
        logger.error("Paystack secret key (PAYSTACK_SECRET_KEY) is not configured.")
    if not settings.paystack_webhook_secret:
        logger.warning(
            "Paystack webhook secret (PAYSTACK_WEBHOOK_SECRET) is not configured. Webhooks will be refused."
        )
    yield
    # Shutdown — dispose engine connections
    from weightwise.database import engine

    await engine.dispose()


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="Premium subscription billing for the WeightWise fitness tracker.",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routers
app.include_router(auth_router)
app.include_router(billing_router)
app.include_router(webhooks_router)


@app.get("/health", tags=["health"])
async def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy", "service": settings.app_name}


@app.get("/", tags=["root"])
async def root() -> dict[str, str]:
    """Root endpoint."""
    return {
        "service": settings.app_name,
        "version": settings.app_version,
        "docs": "/docs",
    }


def run() -> None:
    """Run the API with uvicorn (``weightwise-api`` console script)."""
    import uvicorn

    uvicorn.run("weightwise.main:app", host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()

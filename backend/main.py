"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api import auth, banks, dashboard, plaid
from config import settings
from logging_config import setup_logging

setup_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Refuse to start with incomplete configuration."""
    settings.validate_required()
    logger.info(
        "Starting in %s (Plaid %s, Dwolla %s, account selection %s)",
        settings.ENVIRONMENT,
        settings.PLAID_ENVIRONMENT,
        settings.DWOLLA_ENVIRONMENT,
        settings.ACCOUNT_SELECTION_POLICY,
    )
    yield


app = FastAPI(
    title="Horizon Banking",
    description="Personal banking dashboard with Plaid-linked accounts",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS configuration for frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.FRONTEND_URL],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routers
app.include_router(auth.router)
app.include_router(banks.router)
app.include_router(dashboard.router)
app.include_router(plaid.router)


@app.get("/health")
def health_check():
    """Health check endpoint."""
    return {"status": "ok"}

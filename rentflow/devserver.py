"""
Rentflow dev backend — FastAPI stand-in for the rental service (dev/testing only).

Serves the five endpoints HttpGateway talks to, backed by memory, so the
client core can be exercised end to end without the real service:

    POST /auth/send-otp     → {"status": "sent"}
    POST /auth/verify-otp   → 200 only for DEV_OTP_CODE after a send-otp
    POST /vehicles          → {"id": "..."}
    GET  /vehicles          → listings in creation order
    POST /support/chat      → {"reply": "..."}

Run with:  uvicorn rentflow.devserver:app --port 8000
"""

import logging
import uuid
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from rentflow.config import Settings, get_settings
from rentflow.logging_config import setup_logging
from rentflow.models.request import (
    ChatRequest,
    CreateListingRequest,
    SendCodeRequest,
    VerifyCodeRequest,
)

logger = logging.getLogger("rentflow")

# ---------------------------------------------------------------------------
# Lifespan — runs once at startup / shutdown
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup and shutdown events for the FastAPI application."""
    settings: Settings = app.state.settings
    setup_logging(settings.log_level)

    logger.info(
        "Rentflow dev backend starting",
        extra={"step": "startup", "version": settings.app_version},
    )
    logger.warning(
        "Dev backend accepts a fixed one-time code — never expose it",
        extra={"step": "startup"},
    )

    yield  # app is running

    logger.info("Rentflow dev backend shutting down", extra={"step": "shutdown"})


# ---------------------------------------------------------------------------
# App factory
# ---------------------------------------------------------------------------


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build and return the configured FastAPI application."""
    settings = settings or get_settings()

    app = FastAPI(
        title="Rentflow — Dev Backend",
        description=(
            "In-memory stand-in for the rental service. "
            "For development and tests only."
        ),
        version=settings.app_version,
        lifespan=lifespan,
    )
    app.state.settings = settings

    # ── In-memory stores (per app instance) ───────────
    codes_sent: set[str] = set()
    vehicles: list[dict[str, Any]] = []

    # ── CORS ──────────────────────────────────────────
    origins = [o.strip() for o in settings.cors_origins.split(",")]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ── Global exception handler — no raw 500s ever ──
    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error(
            "Unhandled exception",
            extra={"step": "unhandled_error", "error": str(exc)},
            exc_info=True,
        )
        return JSONResponse(
            status_code=500,
            content={
                "error_code": "INTERNAL_ERROR",
                "message": "An unexpected error occurred.",
                "detail": None,
            },
        )

    # ── Health check ─────────────────────────────────
    @app.get("/health", tags=["system"])
    async def health_check() -> dict:
        """Lightweight health probe for dev server."""
        return {
            "status": "ok",
            "version": settings.app_version,
        }

    # ── Auth ─────────────────────────────────────────
    @app.post("/auth/send-otp", tags=["auth"])
    async def send_otp(payload: SendCodeRequest) -> dict:
        if not payload.phone:
            raise HTTPException(status_code=422, detail="phone is required")
        codes_sent.add(payload.phone)
        logger.info("Dev OTP issued", extra={"step": "dev_send_otp"})
        return {"status": "sent"}

    @app.post("/auth/verify-otp", tags=["auth"])
    async def verify_otp(payload: VerifyCodeRequest) -> dict:
        if payload.phone not in codes_sent or payload.code != settings.dev_otp_code:
            raise HTTPException(status_code=400, detail="invalid code")
        return {"status": "verified", "phone": payload.phone}

    # ── Vehicles ─────────────────────────────────────
    @app.post("/vehicles", tags=["vehicles"])
    async def create_vehicle(payload: CreateListingRequest) -> dict:
        # A null price never gets here: the body model requires a number.
        data = payload.model_dump(mode="json")
        data["id"] = uuid.uuid4().hex
        vehicles.append(data)
        logger.info(
            "Dev vehicle stored",
            extra={"step": "dev_create_vehicle", "vehicle_id": data["id"]},
        )
        return {"id": data["id"]}

    @app.get("/vehicles", tags=["vehicles"])
    async def list_vehicles() -> list[dict[str, Any]]:
        return list(vehicles)

    # ── Support ──────────────────────────────────────
    @app.post("/support/chat", tags=["support"])
    async def support_chat(payload: ChatRequest) -> dict:
        if "help" in payload.message.lower():
            return {"reply": "Sure, how can I help?"}
        return {"reply": "Thanks! A support agent will get back to you shortly."}

    return app


# ---------------------------------------------------------------------------
# Module-level app instance (uvicorn points here: rentflow.devserver:app)
# ---------------------------------------------------------------------------

app = create_app()

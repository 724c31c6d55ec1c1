"""
PayPal Webhook Broker - Main Application Entry Point

This module initializes the FastAPI application: PayPal order creation and
capture, and signature-verified intake of PayPal webhook notifications.
"""

import sys
from contextlib import asynccontextmanager

import structlog
from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from pydantic import ValidationError

from api import routes
from api.middleware import log_api_entry
from core.dependencies import clear_settings, get_settings, init_settings
from core.logging import configure_logging
from core.metrics import add_metrics_auth_middleware, init_metrics
from core.settings import Settings
from core.tracing import init_tracer

log = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for FastAPI application startup and shutdown events."""
    # Startup fails here when PayPal credentials are missing
    init_settings()
    settings = get_settings()
    init_tracer(settings.APP_NAME)
    log.info(
        "app.startup",
        paypal_mode=settings.PAYPAL_MODE,
        paypal_base=settings.paypal_base_url,
        webhook_configured=settings.webhook_configured,
    )
    if not settings.webhook_configured:
        log.warning("PAYPAL_WEBHOOK_ID not set, /webhook will answer 500")

    yield
    # Shutdown
    clear_settings()


app = FastAPI(
    title="PayPal Webhook Broker",
    description="""
    ## PayPal integration backend

    - **Orders**: create a CAPTURE-intent checkout order and capture it once approved
    - **Webhooks**: verify PayPal notifications through PayPal's signature
      verification endpoint before dispatching them
    """,
    version="1.0.0",
    lifespan=lifespan,
)

FastAPIInstrumentor.instrument_app(app)

init_metrics(app)
add_metrics_auth_middleware(app)

app.middleware("http")(log_api_entry)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


# Global exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    log.exception("api.unhandled_error", path=request.url.path)
    return JSONResponse(
        status_code=500,
        content={"error": "Erreur interne du serveur"},
    )


@app.get("/")
async def root():
    """Liveness probe."""
    return {"hello": "world"}


@app.get("/healthz")
async def health_check(settings: Settings = Depends(get_settings)):
    return {
        "status": "ok",
        "app_name": settings.APP_NAME,
        "environment": settings.ENVIRONMENT,
        "paypal_mode": settings.PAYPAL_MODE,
        "webhook_configured": settings.webhook_configured,
    }


app.include_router(routes.router)


def main():
    configure_logging()
    try:
        settings = Settings()
    except ValidationError as e:
        # Only field names: the error's input values may hold the secret
        log.error(
            "app.configuration_error",
            invalid=[".".join(map(str, err["loc"])) for err in e.errors()],
        )
        sys.exit(1)

    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=settings.PORT)


if __name__ == "__main__":
    main()

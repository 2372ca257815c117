"""Device Registry Management API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map ServiceInvocationError → structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Logging, tracer and registry initialized on startup via lifespan context manager
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from device_registry.api.error_handlers import register_error_handlers
from device_registry.api.routes import credentials, devices, health
from device_registry.config import get_settings
from device_registry.core.domain_types import HashFunction
from device_registry.infrastructure.observability import setup_logging
from device_registry.infrastructure.tracing import init_tracing
from device_registry.services.in_memory_registry import init_registry

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format, settings.service_name)
    init_tracing(settings.service_name)
    init_registry(HashFunction(settings.password_hash_function), settings.bcrypt_rounds)
    logger.info("Device registry API started")
    yield
    logger.info("Device registry API shutting down")


app = FastAPI(
    title="Device Registry Management API", version="1.0.0", lifespan=lifespan,
)

# CORS from settings; management endpoints use GET/PUT/POST/DELETE
settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["GET", "PUT", "POST", "DELETE"],
    allow_headers=["*"],
    expose_headers=["ETag", "Location"],
)

app.include_router(health.router)
app.include_router(credentials.router)
app.include_router(devices.router)

register_error_handlers(app)

# Copyright (c) Microsoft. All rights reserved.
"""
Shared FastAPI plumbing for both agents

Provides:
- Exception handlers mapping domain errors to JSON responses
- Correlation ID / request logging middleware
- Routes every agent exposes: banner, agent card, health, metrics
"""

import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse

from agentlink import __version__
from agentlink.config import Settings
from agentlink.observability import (
    CORRELATION_HEADER,
    AgentLinkError,
    ProtocolDecodeError,
    get_correlation_id,
    get_logger,
    metrics,
    new_correlation_id,
    set_correlation_id,
)
from agentlink.schemas import AgentCard, HealthResponse, utc_now

logger = get_logger(__name__)


# =============================================================================
# EXCEPTION HANDLERS
# =============================================================================

async def agent_error_handler(request: Request, exc: AgentLinkError) -> JSONResponse:
    """Handle domain-specific exceptions."""
    logger.warning(
        "domain_error",
        error_code=exc.error_code,
        message=exc.message,
        details=exc.details,
        path=str(request.url.path),
    )
    metrics.increment("api_errors", tags={"error_code": exc.error_code})

    content = exc.to_dict()
    content["correlationId"] = get_correlation_id()
    return JSONResponse(status_code=exc.status_code, content=jsonable_encoder(content))


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Bodies that do not decode into the expected shape are client errors."""
    error = ProtocolDecodeError(
        "Request body is not a valid JSON payload for this endpoint",
        errors=jsonable_encoder(exc.errors()),
    )
    return await agent_error_handler(request, error)


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions."""
    logger.exception(
        "unhandled_error",
        error_type=type(exc).__name__,
        error_message=str(exc),
        path=str(request.url.path),
    )
    metrics.increment("api_errors", tags={"error_code": "INTERNAL_ERROR"})

    return JSONResponse(
        status_code=500,
        content={
            "error": "An unexpected error occurred",
            "errorCode": "INTERNAL_ERROR",
            "correlationId": get_correlation_id(),
            "details": {"error_type": type(exc).__name__},
        },
    )


# =============================================================================
# MIDDLEWARE
# =============================================================================

async def correlation_id_middleware(request: Request, call_next):
    """Add correlation ID to all requests and log their timing."""
    correlation_id = request.headers.get(CORRELATION_HEADER, "")
    if correlation_id:
        set_correlation_id(correlation_id)
    else:
        correlation_id = new_correlation_id()

    start_time = time.perf_counter()
    logger.info(
        "request_started",
        method=request.method,
        path=str(request.url.path),
    )

    response = await call_next(request)

    duration_ms = (time.perf_counter() - start_time) * 1000
    logger.info(
        "request_completed",
        method=request.method,
        path=str(request.url.path),
        status_code=response.status_code,
        duration_ms=round(duration_ms, 2),
    )
    metrics.increment("api_requests", tags={
        "method": request.method,
        "path": str(request.url.path),
        "status": str(response.status_code),
    })
    metrics.histogram("api_request_duration_ms", duration_ms, tags={
        "path": str(request.url.path),
    })

    response.headers[CORRELATION_HEADER] = correlation_id
    return response


# =============================================================================
# APP FACTORY
# =============================================================================

def create_agent_app(
    settings: Settings,
    agent_card: AgentCard,
    banner: str,
    semantic_kernel: str,
) -> FastAPI:
    """
    Build a FastAPI app with the routes and plumbing every agent shares.

    Args:
        settings: Process settings
        agent_card: Static descriptor served for discovery
        banner: Plaintext served at /
        semantic_kernel: Completion status reported by /api/health
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("agent_starting", agent=agent_card.name, url=agent_card.url, version=__version__)
        yield
        logger.info("agent_shutdown", agent=agent_card.name)

    app = FastAPI(
        title=agent_card.name,
        description=agent_card.description,
        version=__version__,
        lifespan=lifespan,
    )

    app.add_exception_handler(AgentLinkError, agent_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.middleware("http")(correlation_id_middleware)

    app.state.settings = settings
    app.state.agent_card = agent_card

    @app.get("/", response_class=PlainTextResponse, tags=["Health"])
    async def banner_text():
        return banner

    @app.get("/agent-card", response_model=AgentCard, tags=["A2A"])
    @app.get("/.well-known/agent.json", response_model=AgentCard, tags=["A2A"])
    async def get_agent_card():
        """Static capability descriptor."""
        return agent_card

    @app.get("/api/health", response_model=HealthResponse, tags=["Health"])
    async def health_check():
        """Health check endpoint."""
        return HealthResponse(
            status="healthy",
            framework="FastAPI",
            version=__version__,
            timestamp=utc_now(),
            semantic_kernel=semantic_kernel,
            a2a_protocol=settings.a2a_protocol_version,
        )

    @app.get("/api/metrics", tags=["Health"])
    async def get_metrics():
        """Get application metrics."""
        return metrics.get_metrics()

    return app

"""Competency Hub — FastAPI Application Factory."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from competency_hub import __version__
from competency_hub.analytics.router import router as analytics_router
from competency_hub.auth.router import router as auth_router
from competency_hub.common.exceptions import register_exception_handlers
from competency_hub.common.log import configure_logging
from competency_hub.common.rate_limit import limiter
from competency_hub.competencies.router import router as competencies_router
from competency_hub.config import settings
from competency_hub.database import dispose_engine, init_models
from competency_hub.departments.router import router as departments_router
from competency_hub.employees.router import (
    employee_competencies_router,
    employees_router,
)
from competency_hub.evaluations.router import router as evaluations_router
from competency_hub.roles.router import router as roles_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown events."""
    # Startup
    configure_logging(settings.LOG_LEVEL)
    if settings.AUTO_CREATE_TABLES:
        await init_models()
    logger.info("Competency Hub %s started (%s)", __version__, settings.ENVIRONMENT)
    yield
    # Shutdown
    await dispose_engine()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="Competency Hub",
        description="Role competency requirements, employee evaluations and gap analytics",
        version=__version__,
        docs_url="/docs" if settings.ENVIRONMENT != "production" else None,
        redoc_url="/redoc" if settings.ENVIRONMENT != "production" else None,
        lifespan=lifespan,
    )

    # Exception handlers (RFC 7807, including slowapi 429s)
    register_exception_handlers(app)

    # Rate limiting (slowapi)
    app.state.limiter = limiter

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Health check (no auth)
    @app.get("/health", tags=["system"])
    async def health_check():
        return {
            "status": "healthy",
            "version": __version__,
            "environment": settings.ENVIRONMENT,
        }

    # Register routers; paths match the browser client's contract
    app.include_router(auth_router, tags=["auth"])
    app.include_router(departments_router, prefix="/departments", tags=["departments"])
    app.include_router(roles_router, prefix="/roles", tags=["roles"])
    app.include_router(competencies_router, prefix="/competency", tags=["competencies"])
    app.include_router(employees_router, prefix="/employees", tags=["employees"])
    app.include_router(
        employee_competencies_router,
        prefix="/employee-competencies",
        tags=["employee-competencies"],
    )
    app.include_router(evaluations_router, prefix="/evaluations", tags=["evaluations"])
    app.include_router(analytics_router, prefix="/analytics", tags=["analytics"])

    return app


app = create_app()

"""
Agenda - Main Application Entry Point
Multi-tenant appointment scheduling and capacity engine
"""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from sqlmodel import Session
import structlog

from agenda.core.config import get_settings
from agenda.core.database import engine
from agenda.core.exceptions import SchedulingError
from agenda.api import appointments, availability, calendar, catalog, plans, series
from agenda.services.quotas import QuotaService

# Configure structured logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.format_exc_info,
        structlog.processors.JSONRenderer()
    ],
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
)

logger = structlog.get_logger(__name__)
settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""
    # Startup
    logger.info("Initializing Agenda backend")
    # Tables are created by Alembic migrations; plan limits are seeded here
    with Session(engine) as session:
        QuotaService(session, settings).seed_plan_limits()

    yield

    # Shutdown
    logger.info("Shutting down Agenda backend")


# Create FastAPI application
app = FastAPI(
    title="Agenda API",
    description="Multi-tenant appointment booking with availability, recurrence and plan quotas",
    version="1.0.0",
    lifespan=lifespan,
)

# Configure middleware stack
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(SchedulingError)
async def scheduling_error_handler(request: Request, exc: SchedulingError):
    """Render engine errors as {"error": code, "detail": message}"""
    if exc.status_code >= 500:
        logger.error(f"{exc.code} on {request.url.path}: {exc.detail}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


# Include routers
prefix = settings.API_V1_PREFIX
app.include_router(appointments.router, prefix=f"{prefix}/appointments", tags=["appointments"])
app.include_router(series.router, prefix=f"{prefix}/series", tags=["series"])
app.include_router(availability.router, prefix=f"{prefix}/availability", tags=["availability"])
app.include_router(calendar.router, prefix=f"{prefix}/calendar", tags=["calendar"])
app.include_router(catalog.router, prefix=f"{prefix}/catalog", tags=["catalog"])
app.include_router(plans.router, prefix=f"{prefix}/plans", tags=["plans"])


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "service": "agenda-api"}


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "message": "Agenda API",
        "version": "1.0.0",
        "docs": "/docs",
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "agenda.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.ENVIRONMENT == "development",
        log_level="info",
    )

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.responses import JSONResponse

from dashquery.config import get_settings
from dashquery.database import check_database_connection, create_tables
from dashquery.core import logger
from dashquery.errors import DashQueryError, error_response
from dashquery.models.query_history import QueryHistory, QueryHistoryStar  # noqa: F401
from dashquery.models.dashboard import Dashboard  # noqa: F401
from dashquery.routes.query_history import router as query_history_router
from dashquery.routes.dashboards import router as dashboards_router

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan handler for application startup and shutdown."""

    logger.info("Starting DashQuery application")

    try:
        if await check_database_connection():
            logger.info("Database connection established")
            await create_tables()
            logger.info("Database tables created successfully!")
        else:
            logger.error("Database connection failed")
            raise RuntimeError("Failed to connect to database")

        logger.info("DashQuery application started")
        yield

    except Exception as e:
        logger.error(f"Failed to start DashQuery application: {e}")
        raise

app = FastAPI(
    title=settings.app_name,
    description="Query history and validated dashboard panel queries.",
    version=settings.app_version,
    lifespan=lifespan,
)

app.include_router(query_history_router)
app.include_router(dashboards_router)


@app.exception_handler(DashQueryError)
async def dashquery_error_handler(request, exc: DashQueryError):
    """Map domain errors to their 4xx responses."""
    return error_response(exc)

@app.exception_handler(Exception)
async def general_exception_handler(request, exc):
    """Handle general exceptions."""
    logger.error(f"Unhandled exception: {exc}")
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"}
    )

@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "version": settings.app_version}

@app.get("/health/detailed")
async def detailed_health_check():
    """Detailed health check with service status."""
    services = {}
    try:
        if await check_database_connection():
            services["database"] = "healthy"
        else:
            services["database"] = "unhealthy"
    except Exception:
        services["database"] = "unhealthy"

    all_healthy = all(status == "healthy" for status in services.values())

    return {
        "status": "healthy" if all_healthy else "degraded",
        "version": settings.app_version,
        "services": services
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=settings.host, port=settings.port)

from fastapi import FastAPI, Depends, Request, Response, status
from fastapi.exceptions import HTTPException, RequestValidationError
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
import structlog

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from dashboard.config import settings
from dashboard.database import init_db, close_db, get_db
from dashboard.logging_config import setup_logging
from dashboard.actions.invoices import InvoiceDeleteError
from dashboard.services.cache import cache
from dashboard.middleware.correlation import CorrelationIdMiddleware

# Import models so they are registered with Base.metadata
import dashboard.models  # noqa: F401

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    logger.info("starting_dashboard", env=settings.ENVIRONMENT)
    await init_db()
    yield
    await close_db()


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url="/redoc" if settings.DEBUG else None,
    lifespan=lifespan,
)


# ---------------------------------------------------------------------------
# Global exception handlers — raised errors render as
# {"error": {"code": "...", "message": "..."}}
# ---------------------------------------------------------------------------

@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    detail = exc.detail
    if isinstance(detail, str):
        detail = {"error": {"code": "HTTP_ERROR", "message": detail}}
    elif isinstance(detail, dict) and "error" not in detail:
        detail = {"error": detail}
    return JSONResponse(status_code=exc.status_code, content=detail, headers=exc.headers)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=422,
        content={
            "error": {
                "code": "VALIDATION_ERROR",
                "message": "Request validation failed",
                "details": exc.errors(),
            }
        },
    )


@app.exception_handler(InvoiceDeleteError)
async def invoice_delete_exception_handler(request: Request, exc: InvoiceDeleteError) -> JSONResponse:
    logger.error("invoice_delete_failed", path=request.url.path, error=str(exc))
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": {"code": "INVOICE_DELETE_FAILED", "message": str(exc)}},
    )


app.add_middleware(CorrelationIdMiddleware)


@app.get("/health", tags=["System"])
async def health(response: Response, db: AsyncSession = Depends(get_db)):
    health_status = {"status": "healthy", "version": settings.APP_VERSION, "checks": {}}

    try:
        await db.execute(text("SELECT 1"))
        health_status["checks"]["db"] = "ok"
    except Exception as e:
        logger.error("health_check_db_failed", error=str(e))
        health_status["checks"]["db"] = "error"
        health_status["status"] = "unhealthy"

    if settings.cache_enabled:
        try:
            await cache.ping()
            health_status["checks"]["cache"] = "ok"
        except Exception as e:
            logger.error("health_check_cache_failed", error=str(e))
            health_status["checks"]["cache"] = "error"
            health_status["status"] = "unhealthy"
    else:
        health_status["checks"]["cache"] = "disabled"

    if health_status["status"] == "unhealthy":
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    return health_status


# --- Routers ---
from dashboard.routes.auth import router as auth_router  # noqa: E402
from dashboard.routes.invoices import router as invoices_router  # noqa: E402

app.include_router(auth_router, tags=["Auth"])
app.include_router(invoices_router, prefix=settings.INVOICES_PATH, tags=["Invoices"])


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("dashboard.main:app", host="0.0.0.0", port=settings.PORT, log_level=settings.LOG_LEVEL.lower())

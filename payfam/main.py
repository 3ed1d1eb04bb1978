from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import InterfaceError, OperationalError
from payfam.api import auth, members, payments, reports, me
from payfam.core.config import settings
from payfam.core.exceptions import PayFamError
import logging

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)

# Get logger for this module
logger = logging.getLogger(__name__)
logger.info(f"Starting {settings.ORGANIZATION_NAME} dues API")

app = FastAPI(
    title=f"{settings.ORGANIZATION_NAME} API",
    description="Membership dues ledger",
    version="1.0.0",
    debug=settings.DEBUG,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000", "http://127.0.0.1:3000", "*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["Content-Disposition"],
)


@app.exception_handler(PayFamError)
async def payfam_error_handler(request: Request, exc: PayFamError):
    """Translate service errors into HTTP responses."""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc}")
    else:
        logger.info(f"{request.method} {request.url.path} rejected ({exc.status_code}): {exc}")
    return JSONResponse(status_code=exc.status_code, content={"detail": str(exc)})


@app.exception_handler(OperationalError)
@app.exception_handler(InterfaceError)
async def storage_error_handler(request: Request, exc: Exception):
    """Database failures outside a write unit (reads, lookups) are retryable."""
    logger.error(f"{request.method} {request.url.path} storage failure: {exc}")
    return JSONResponse(status_code=503, content={"detail": "Storage unavailable, please retry"})


# Include routers
app.include_router(auth.router)
app.include_router(members.router)
app.include_router(payments.router)
app.include_router(reports.router)
app.include_router(me.router)


@app.get("/")
def root():
    """Root endpoint."""
    return {"message": f"{settings.ORGANIZATION_NAME} API", "version": "1.0.0"}


@app.get("/api/health")
def health_check():
    """Health check endpoint: checks API and database connectivity."""
    from payfam.db.base import SessionLocal
    from sqlalchemy import text
    from datetime import datetime, timezone

    db_status = "unreachable"
    db_error = None
    db = SessionLocal()
    try:
        db.execute(text("SELECT 1"))
        db_status = "connected"
    except Exception as e:
        db_error = str(e)
    finally:
        db.close()

    status = "healthy" if db_status == "connected" else "degraded"

    return {
        "status": status,
        "version": "1.0.0",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "services": {
            "api": "ok",
            "database": db_status,
        },
        **({"database_error": db_error} if db_error else {})
    }

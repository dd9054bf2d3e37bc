"""
Campus Placement & Training Portal - Main Application

FastAPI backend with:
- MongoDB for every record (profiles, drives, trainings, ledger)
- JWT authentication with sign-out (revoked token ids)
- Role scopes: one capability descriptor per role
- Spreadsheet import/export (pandas + openpyxl)

Run: uvicorn campus_portal.main:app --reload
"""

import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pymongo.errors import PyMongoError

from campus_portal import __version__
from campus_portal.api.routes import api_router
from campus_portal.core.config import get_settings
from campus_portal.core.errors import PortalError
from campus_portal.db.mongodb import init_mongo_indexes, test_mongo_connection

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    force=True
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize MongoDB indexes on startup."""
    try:
        init_mongo_indexes()
    except PyMongoError as e:
        # The API still starts; store calls will surface 503s until MongoDB is back
        logger.warning("MongoDB index initialization failed: %s", e)
    yield


# Create FastAPI app
app = FastAPI(
    title="Campus Placement & Training Portal",
    description="""
    Role-based placement and training management.

    ## Features
    - **Authentication**: JWT login / logout for staff-provisioned accounts
    - **Users**: Provisioning, bulk import, profile completion and approval
    - **Drives**: Company drives with eligibility criteria, opt-in / opt-out
    - **Trainings**: Training programs and registration
    - **Placement Records**: Placement ledger with import / export
    - **Dashboard**: Per-role counts and calendar
    """,
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)


@app.exception_handler(PortalError)
async def portal_error_handler(request: Request, exc: PortalError):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


@app.middleware("http")
async def add_process_time_header(request: Request, call_next):
    start_time = time.time()
    response = await call_next(request)
    process_time = time.time() - start_time

    response.headers["X-Process-Time"] = str(process_time)
    logger.info(
        "Request processed: %s %s - %s in %.4f secs",
        request.method, request.url.path, response.status_code, process_time
    )
    return response


# CORS middleware (allow all for development)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routes
app.include_router(api_router, prefix="/api")


@app.get("/health", tags=["Health"])
async def health_check():
    """Liveness plus a MongoDB ping."""
    return {
        "status": "healthy",
        "mongodb": "connected" if test_mongo_connection() else "disconnected"
    }

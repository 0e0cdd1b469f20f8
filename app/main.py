from dotenv import load_dotenv
import logging
import os
from contextlib import asynccontextmanager

BASE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
load_dotenv(os.path.join(BASE_DIR, ".env"))

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from starlette.status import HTTP_409_CONFLICT, HTTP_422_UNPROCESSABLE_ENTITY

from app.core.config import settings
from app.core.database import dispose_engine
from app.core.logging_config import setup_logging
from app.services.hour_aggregator import InvalidListConfigError

# ───────────────── ROUTER IMPORTS ─────────────────
from app.routes.auth import router as auth_router
from app.routes.auth import users_router
from app.routes.student_lists import router as lists_router
from app.routes.students import list_students_router
from app.routes.students import router as students_router
from app.routes.activities import student_activities_router
from app.routes.activities import router as activities_router
from app.routes.reports import router as reports_router
from app.routes.dashboard import router as dashboard_router

setup_logging()
logger = logging.getLogger("app")


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting Complementary Hours API (env=%s)", settings.APP_ENV)
    yield
    await dispose_engine()
    logger.info("Database engine disposed")


app = FastAPI(
    title="Complementary Hours API",
    description="Tracks students' complementary activities against per-list hour requirements",
    version="1.0.0",
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url="/redoc" if settings.DEBUG else None,
    lifespan=lifespan,
)

# ───────── SAFE VALIDATION HANDLER ─────────

def _sanitize(obj):
    if isinstance(obj, (bytes, bytearray)):
        return f"<bytes:{len(obj)}>"
    if isinstance(obj, dict):
        return {k: _sanitize(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [_sanitize(v) for v in obj]
    if isinstance(obj, Exception):
        return str(obj)
    return obj


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    # ctx can carry Decimal / date limits from field constraints
    safe_errors = jsonable_encoder(_sanitize(exc.errors()))
    return JSONResponse(
        status_code=HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": safe_errors},
    )


@app.exception_handler(InvalidListConfigError)
async def invalid_list_config_handler(request: Request, exc: InvalidListConfigError):
    # stored list rules cannot be aggregated; a coordinator has to fix them
    logger.error("Aggregation refused on %s: %s", request.url.path, exc)
    return JSONResponse(
        status_code=HTTP_409_CONFLICT,
        content={"detail": str(exc)},
    )

# ───────────────── CORS ─────────────────

origins = settings.origins_list or [
    "http://localhost:3000",
    "http://localhost:5173",
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ───────────────── ROUTES ─────────────────

app.include_router(auth_router, prefix="/api")
app.include_router(users_router, prefix="/api")

# Lists + students (list-scoped first)
app.include_router(lists_router, prefix="/api")
app.include_router(list_students_router, prefix="/api")
app.include_router(students_router, prefix="/api")

# Activities
app.include_router(student_activities_router, prefix="/api")
app.include_router(activities_router, prefix="/api")

# Reports + dashboard
app.include_router(reports_router, prefix="/api")
app.include_router(dashboard_router, prefix="/api")

# ───────────────── HEALTH ─────────────────

@app.get("/", tags=["Health"])
async def root():
    return {
        "status": "ok",
        "app": "Complementary Hours API",
        "env": settings.APP_ENV,
    }


@app.get("/health", tags=["Health"])
async def health():
    return {"status": "healthy"}

import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

# Import models so they're registered with SQLAlchemy Base before create_all
from . import models  # noqa: F401
from .config import ALLOWED_ORIGINS, CALENDAR_TIMEZONE, GOOGLE_CLIENT_ID, GOOGLE_CLIENT_SECRET
from .database import Base, engine
from .domain.crew.router import router as crew_router
from .domain.events.router import router as events_router
from .domain.scheduling.router import router as scheduling_router
from .routes.google_calendar import router as google_calendar_router

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Reduce verbosity of third-party libraries
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"🚀 Rental Core starting (calendar zone: {CALENDAR_TIMEZONE})")
    if not GOOGLE_CLIENT_ID or not GOOGLE_CLIENT_SECRET:
        logger.warning("⚠️ Google OAuth not configured, crew members cannot connect calendars")

    try:
        Base.metadata.create_all(bind=engine, checkfirst=True)
        logger.info("✅ Crew, event and assignment tables ready")
    except Exception as e:
        # Workers started together race on the first create_all
        if "already exists" in str(e) or "duplicate key" in str(e):
            logger.info("ℹ️ Tables already created by another worker")
        else:
            logger.error(f"❌ Failed to create database tables: {e}")

    yield
    logger.info("👋 Rental Core shutting down")


app = FastAPI(title="Rental Core API", version="1.0.0", lifespan=lifespan)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.warning(f"⚠️ Validation error for {request.url.path}: {exc.errors()}")
    return JSONResponse(status_code=422, content={"detail": jsonable_errors(exc)})


def jsonable_errors(exc: RequestValidationError) -> list[dict]:
    """Validation errors without the raw exception objects pydantic puts in ctx"""
    errors = []
    for error in exc.errors():
        error = dict(error)
        if "ctx" in error:
            error["ctx"] = {k: str(v) for k, v in error["ctx"].items()}
        errors.append(error)
    return errors


@app.middleware("http")
async def log_requests(request: Request, call_next):
    started = time.time()
    try:
        response = await call_next(request)
    except Exception as e:
        logger.error(f"❌ {request.method} {request.url.path} failed: {str(e)}")
        raise

    if response.status_code >= 500:
        logger.error(
            f"❌ {request.method} {request.url.path} -> {response.status_code} "
            f"({time.time() - started:.2f}s)"
        )
    return response


# CORS Configuration
logger.info(f"CORS allowed origins: {ALLOWED_ORIGINS}")

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["*"],
)

# Routes
app.include_router(crew_router)
app.include_router(events_router)
app.include_router(scheduling_router)
app.include_router(google_calendar_router)


@app.get("/")
def root():
    return {"message": "Rental Core API is running"}


@app.get("/health")
def health():
    return {
        "status": "healthy",
        "google_calendar_configured": bool(GOOGLE_CLIENT_ID and GOOGLE_CLIENT_SECRET),
    }

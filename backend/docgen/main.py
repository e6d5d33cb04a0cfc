from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
import time
from .config import settings
from .db import engine
from .models import Base
from .routes import exports, jobs
from .schemas import HealthResponse
from .store import get_job_store
from .sweeper import RetentionSweeper
from .logger import logger
from .exceptions import (
    DocGenBaseException,
    docgen_exception_handler,
    http_exception_handler,
    generic_exception_handler,
)

app = FastAPI(
    title="HTML Document Generation API",
    version="1.0.0",
    description="Asynchronous HTML document generation with PDF and DOCX export"
)

app.add_exception_handler(DocGenBaseException, docgen_exception_handler)
app.add_exception_handler(HTTPException, http_exception_handler)
app.add_exception_handler(Exception, generic_exception_handler)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
    max_age=settings.CORS_MAX_AGE_SECONDS,
)
@app.middleware("http")
async def log_requests(request: Request, call_next):
    start_time = time.time()

    logger.info(
        f"Request: {request.method} {request.url.path}",
        extra={
            "method": request.method,
            "path": request.url.path,
            "query_params": dict(request.query_params),
        }
    )

    response = await call_next(request)

    duration = time.time() - start_time
    logger.info(
        f"Response: {response.status_code}",
        extra={
            "method": request.method,
            "path": request.url.path,
            "status_code": response.status_code,
            "duration_ms": round(duration * 1000, 2),
        }
    )

    return response

app.include_router(jobs.router)
app.include_router(exports.router)

@app.on_event("startup")
async def startup():
    logger.info("Starting HTML Document Generation API")
    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database tables created successfully")
    except Exception as e:
        logger.error(f"Failed to initialize database: {e}")
        raise

    app.state.sweeper = None
    if settings.SWEEPER_ENABLED:
        app.state.sweeper = RetentionSweeper(get_job_store())
        app.state.sweeper.start()

@app.on_event("shutdown")
async def shutdown():
    logger.info("Shutting down HTML Document Generation API")
    sweeper = getattr(app.state, "sweeper", None)
    if sweeper is not None:
        await sweeper.stop()
    await engine.dispose()

@app.get("/health", response_model=HealthResponse)
async def health_check():
    """Health check endpoint"""
    return {"status": "ok", "service": "docgen-backend"}

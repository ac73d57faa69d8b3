"""Main FastAPI application."""
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from exam_api.config import LOG_LEVEL
from exam_api.database import init_db
from exam_api.logging_setup import setup_console_logging
from exam_api.routes import attempts, statistics

setup_console_logging(LOG_LEVEL)

app = FastAPI(title="Paper Attempts API")

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


# Startup events
@app.on_event("startup")
def startup_events() -> None:
    """Initialize database on startup."""
    init_db()


@app.get("/api/health")
def health() -> dict[str, str]:
    """Liveness probe."""
    return {"status": "ok"}


# Include routers
app.include_router(attempts.router)
app.include_router(statistics.router)

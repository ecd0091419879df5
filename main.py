import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from chorecycle.core.config import Base, engine, settings
from chorecycle.core.exceptions import register_exception_handlers
from chorecycle.api.routers import (
    activities,
    completions,
    daily,
    families,
    long_term_tasks,
    schedule,
    stats,
    users,
)
import chorecycle.models  # noqa: F401  (registers tables on Base.metadata)

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# =====================================================================
# CREATE APP
# =====================================================================

app = FastAPI(
    title=settings.APP_NAME,
    debug=settings.DEBUG,
    description="Family chore rota and task tracking API",
    version="1.0.0",
)

# =====================================================================
# CORS MIDDLEWARE
# =====================================================================

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["*"],
)

logger.info("CORS allowed origins: %s", settings.CORS_ORIGINS)

# =====================================================================
# DATABASE INITIALIZATION
# =====================================================================

Base.metadata.create_all(bind=engine)

# =====================================================================
# ERROR HANDLING
# =====================================================================

register_exception_handlers(app)

# =====================================================================
# HEALTH CHECK
# =====================================================================


@app.get("/health")
def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}


# =====================================================================
# ROUTES
# =====================================================================

app.include_router(daily.router)
app.include_router(completions.router)
app.include_router(long_term_tasks.router)
app.include_router(activities.router)
app.include_router(schedule.router)
app.include_router(families.router)
app.include_router(users.router)
app.include_router(stats.router)

# =====================================================================
# ROOT ENDPOINT
# =====================================================================


@app.get("/")
def root():
    """API root endpoint."""
    return {
        "message": "Welcome to Chore Cycle API",
        "version": "1.0.0",
        "docs": "/docs",
        "endpoints": {
            "daily_tasks": "/daily-tasks",
            "completions": "/completions",
            "long_term_tasks": "/long-term-tasks",
            "activities": "/activities",
            "schedule": "/schedule",
            "families": "/families",
            "users": "/users",
            "stats": "/stats",
        },
    }

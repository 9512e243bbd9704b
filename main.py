"""Application entry point for the Feedback Collection API.

Defines the FastAPI app, middleware and exception handlers, and includes the
API routers from the `api` package. The `lifespan` handler initializes the
DB on startup and stops the stats worker on shutdown.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Depends, Request
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from database import init_db
from database.deps import get_db_read
from core.exceptions import DatabaseError
from core.error_handlers import register_exception_handlers
from core.logger import get_logger
from services.stats_worker import stats_worker
from api.feedback import router as feedback_router
from api.surveys import router as surveys_router, responses_router as survey_responses_router
from api.export import router as export_router
from api.menus import router as menus_router

logger = get_logger("main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize the database before serving; release the stats worker after."""
    init_db()
    yield
    stats_worker.shutdown(wait=False)


app = FastAPI(title="Feedback Collection API", version="1.0.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log incoming requests and their responses."""
    logger.info("%s %s", request.method, request.url.path)
    try:
        response = await call_next(request)
    except Exception:
        logger.exception("Request error: %s %s", request.method, request.url.path)
        raise
    logger.info("%s %s -> %s", request.method, request.url.path, response.status_code)
    return response


@app.get("/health")
def health(db: Session = Depends(get_db_read)):
    """Return basic health status and database connectivity.

    Raises:
        DatabaseError: If database connection fails.
    """
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.exception("Health check failed")
        raise DatabaseError(f"Database health check failed: {e}", operation="health")
    return {"status": "healthy", "database": "connected"}


app.include_router(feedback_router)
app.include_router(surveys_router)
app.include_router(survey_responses_router)
app.include_router(menus_router)
app.include_router(export_router)


if __name__ == "__main__":
    # Allow starting the app via `python ./main.py`
    import uvicorn

    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)

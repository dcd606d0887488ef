"""taskcore - task records with a status lifecycle behind a small HTTP API."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.responses import JSONResponse

from src.core import db_client
from src.core.logging import configure_logfire, instrument_fastapi
from src.interface.task_router import router as task_router
from src.modules.tasks.service import TaskOrchestrator
from src.modules.tasks.sqlite_repository import SqliteTaskRepository


logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan context manager."""
    # Startup
    configure_logfire()

    await db_client.init_db()
    logger.info("Database initialized")

    app.state.task_orchestrator = TaskOrchestrator(SqliteTaskRepository())
    yield
    # Shutdown
    await db_client.close_connection()


app = FastAPI(
    title="taskcore",
    description="Task records with a todo / in-progress / completed lifecycle",
    version="0.1.0",
    lifespan=lifespan,
)

# Instrument FastAPI with Logfire
instrument_fastapi(app)

# Register routers
app.include_router(task_router)


@app.get("/health")
async def health_check() -> JSONResponse:
    """Health check endpoint."""
    return JSONResponse(content={"status": "healthy"}, status_code=200)

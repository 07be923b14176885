"""HarMind API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map HarMindError → structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Database initialized and tables created on startup via lifespan

Design Decisions:
    - Lifespan over @app.on_event: cleanup (engine, Neo4j driver) runs on shutdown
    - Error handlers live in api/error_handlers.py
"""

import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from app.config import get_settings
from app.infrastructure.database import init_db
from app.infrastructure.observability import setup_logging
from app.api.error_handlers import register_error_handlers
from app.api.routes import (
    chat_stream, health, knowledge_db, knowledge_graph, projects,
)
from app.api.routes.chat_stream_helpers import close_shared_clients

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    manager = init_db(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    await manager.create_tables()
    logger.info("HarMind API started")
    yield
    logger.info("HarMind API shutting down")
    await close_shared_clients()
    await manager.dispose()


app = FastAPI(title="HarMind API", version="1.0.0", lifespan=lifespan)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)

app.include_router(health.router)
app.include_router(projects.router)
app.include_router(knowledge_db.router)
app.include_router(knowledge_graph.router)
app.include_router(chat_stream.router)

# Built frontend, mounted after the API so /api/v1/* takes precedence
if os.path.isdir("static"):
    app.mount("/", StaticFiles(directory="static", html=True), name="static")

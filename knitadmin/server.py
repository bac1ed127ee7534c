"""
Knit Pattern Admin - FastAPI Server

Back office for knitting/crochet pattern templates: categories,
measurement rules, templates with per-size tables, and chart types.
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import get_settings
from .db import init_db
from .patterns.sessions import editor_sessions
from .routes import (
    categories, chart_editor, chart_types, health, measurement_items,
    measurement_rules, templates,
)

settings = get_settings()
logging.basicConfig(level=getattr(logging, settings.log_level))
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown."""
    logger.info("Starting Knit Pattern Admin...")

    try:
        init_db()
        logger.info("Database initialized")
    except Exception as e:
        logger.error(f"Database initialization failed: {e}")

    logger.info("Knit Pattern Admin startup complete")
    yield

    logger.info("Shutting down Knit Pattern Admin...")
    editor_sessions.clear()


app = FastAPI(
    title="Knit Pattern Admin",
    description="""
    Admin service for knitting and crochet pattern templates

    ## Features
    - **Categories**: Three-level garment taxonomy
    - **Measurement Rules**: Required measurement items per category and sleeve type
    - **Templates**: Pattern templates with per-size measurement tables
    - **Chart Types**: Stitch-diagram geometry with size-adjusted previews
    """,
    version="1.0.0",
    debug=settings.debug,
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(categories.router)
app.include_router(measurement_items.router)
app.include_router(measurement_rules.router)
app.include_router(templates.router)
app.include_router(chart_types.router)
app.include_router(chart_editor.router)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)

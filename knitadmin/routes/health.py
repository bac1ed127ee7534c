"""Health check and status endpoints."""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from sqlalchemy import text
from pydantic import BaseModel

from ..db import get_db, ChartType, MeasurementRule, Template
from ..patterns.sessions import editor_sessions

router = APIRouter()


class HealthResponse(BaseModel):
    status: str
    module: str
    database: str
    measurement_rules: int
    templates: int
    chart_types: int
    editor_sessions: int


@router.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check(db: Session = Depends(get_db)):
    """Health check endpoint."""
    counts = {"measurement_rules": 0, "templates": 0, "chart_types": 0}
    try:
        db.execute(text("SELECT 1"))
        db_status = "connected"
        counts = {
            "measurement_rules": db.query(MeasurementRule).count(),
            "templates": db.query(Template).count(),
            "chart_types": db.query(ChartType).count(),
        }
    except Exception as e:
        db_status = f"error: {str(e)}"

    editor_sessions.expire_idle()
    return HealthResponse(
        status="healthy",
        module="knitadmin",
        database=db_status,
        **counts,
        editor_sessions=len(editor_sessions),
    )


@router.get("/")
async def root():
    """Root endpoint."""
    return {
        "module": "knitadmin",
        "name": "Knit Pattern Admin",
        "version": "1.0.0",
        "status": "operational",
        "docs": "/docs"
    }

"""Chart type endpoints."""
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..db import get_db, SizeRange
from ..patterns.chart_types import ChartTypeService
from ..patterns.geometry import ChartTypePayload
from ..patterns.sizes import base_size as default_base_size
from .errors import translate_errors

router = APIRouter()


@router.get("/api/chart-types", tags=["Chart Types"])
async def list_chart_types(db: Session = Depends(get_db)):
    service = ChartTypeService(db)
    charts = service.list_chart_types()
    return {
        "total": len(charts),
        "chart_types": [service.serialize(c, include_geometry=False) for c in charts]
    }


@router.post("/api/chart-types", tags=["Chart Types"])
async def create_chart_type(data: ChartTypePayload, db: Session = Depends(get_db)):
    """Store a chart type; the id is always assigned as chart{N}."""
    service = ChartTypeService(db)
    with translate_errors():
        chart = service.create_chart_type(data)
    return {"success": True, "chart_type_id": chart.id, "chart_type": service.serialize(chart)}


@router.get("/api/chart-types/{chart_type_id}", tags=["Chart Types"])
async def get_chart_type(chart_type_id: str, db: Session = Depends(get_db)):
    service = ChartTypeService(db)
    with translate_errors():
        chart = service.get_chart_type(chart_type_id)
    return service.serialize(chart)


@router.put("/api/chart-types/{chart_type_id}", tags=["Chart Types"])
async def update_chart_type(
    chart_type_id: str,
    data: ChartTypePayload,
    db: Session = Depends(get_db)
):
    service = ChartTypeService(db)
    with translate_errors():
        chart = service.update_chart_type(chart_type_id, data)
    return {"success": True, "chart_type": service.serialize(chart)}


@router.delete("/api/chart-types/{chart_type_id}", tags=["Chart Types"])
async def delete_chart_type(chart_type_id: str, db: Session = Depends(get_db)):
    """Refused with 409 while any template lists the chart type."""
    service = ChartTypeService(db)
    with translate_errors():
        service.delete_chart_type(chart_type_id)
    return {"success": True, "chart_type_id": chart_type_id}


@router.get("/api/chart-types/{chart_type_id}/preview", tags=["Chart Types"])
async def preview_chart_type(
    chart_type_id: str,
    size: SizeRange,
    template_id: Optional[str] = None,
    base_size: Optional[SizeRange] = None,
    db: Session = Depends(get_db)
):
    """Coordinates scaled from the base size to the requested size."""
    service = ChartTypeService(db)
    base = base_size or default_base_size()
    with translate_errors():
        coordinates = service.preview(chart_type_id, size, template_id=template_id, base_size=base)
    return {
        "chart_type_id": chart_type_id,
        "size_range": size.value,
        "base_size": base.value,
        "coordinates": [c.model_dump(mode="json") for c in coordinates]
    }

"""Template endpoints, including the size-detail table."""
from typing import Dict, List, Optional, Union

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from pydantic import BaseModel, Field

from ..db import (
    get_db, ConstructionMethod, NecklineType, PatternType, PublishStatus,
    SizeRange, SleeveType, ToolType,
)
from ..patterns.catalog import measurement_item_names
from ..patterns.sizes import is_slack_range
from ..patterns.templates import TemplateService
from .errors import translate_errors

router = APIRouter()


# Pydantic Models

class SizeDetailIn(BaseModel):
    size_range: SizeRange
    measurements: Dict[str, Optional[float]] = Field(default_factory=dict)


class TemplateCreate(BaseModel):
    name: str = Field(..., min_length=1)
    tool_type: ToolType = ToolType.KNITTING_NEEDLE
    pattern_type: PatternType = PatternType.WRITTEN
    publish_status: PublishStatus = PublishStatus.PUBLIC
    thumbnail: Optional[str] = None
    # Either the rule id, or the category/sleeve selection to look it up by
    measurement_rule_id: Optional[str] = None
    category_id: Optional[int] = None
    sleeve_type: Optional[SleeveType] = None
    construction_methods: List[ConstructionMethod] = Field(default_factory=list)
    neckline_type: Optional[NecklineType] = None
    chart_type_ids: List[str] = Field(default_factory=list)
    size_details: List[SizeDetailIn] = Field(default_factory=list)


class TemplateUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    tool_type: Optional[ToolType] = None
    pattern_type: Optional[PatternType] = None
    publish_status: Optional[PublishStatus] = None
    thumbnail: Optional[str] = None
    measurement_rule_id: Optional[str] = None
    category_id: Optional[int] = None
    sleeve_type: Optional[SleeveType] = None
    construction_methods: Optional[List[ConstructionMethod]] = None
    neckline_type: Optional[NecklineType] = None
    chart_type_ids: Optional[List[str]] = None
    size_details: Optional[List[SizeDetailIn]] = None


class SizeDetailCells(BaseModel):
    # {size_range: {item_id: value}}; blank or null clears the cell
    cells: Dict[str, Dict[str, Optional[Union[str, float]]]]


class SizeDetailPaste(BaseModel):
    text: str
    row: int = 0
    col: int = 0


def _table_response(table) -> dict:
    return {
        "items": table.items,
        "item_names": measurement_item_names(table.items),
        "size_ranges": [s.value for s in table.size_ranges],
        "slack_ranges": [s.value for s in table.size_ranges if is_slack_range(s)],
        "rows": table.rows(),
        "cells": table.grid(),
    }


# Endpoints

@router.get("/api/templates", tags=["Templates"])
async def list_templates(
    measurement_rule_id: Optional[str] = None,
    chart_type_id: Optional[str] = None,
    category_id: Optional[int] = None,
    tool_type: Optional[ToolType] = None,
    db: Session = Depends(get_db)
):
    service = TemplateService(db)
    templates = service.list_templates(
        measurement_rule_id=measurement_rule_id,
        chart_type_id=chart_type_id,
        category_id=category_id,
        tool_type=tool_type,
    )
    return {
        "total": len(templates),
        "templates": [service.serialize(t) for t in templates]
    }


@router.post("/api/templates", tags=["Templates"])
async def create_template(data: TemplateCreate, db: Session = Depends(get_db)):
    """Create a template; fails unless a measurement rule resolves."""
    service = TemplateService(db)
    with translate_errors():
        template = service.create_template(data.model_dump())
    return {
        "success": True,
        "template_id": template.id,
        "template": service.serialize(template, include_size_details=True)
    }


@router.get("/api/templates/{template_id}", tags=["Templates"])
async def get_template(template_id: str, db: Session = Depends(get_db)):
    service = TemplateService(db)
    with translate_errors():
        template = service.get_template(template_id)
    return service.serialize(template, include_size_details=True)


@router.put("/api/templates/{template_id}", tags=["Templates"])
async def update_template(
    template_id: str,
    data: TemplateUpdate,
    db: Session = Depends(get_db)
):
    service = TemplateService(db)
    with translate_errors():
        template = service.update_template(template_id, data.model_dump(exclude_unset=True))
    return {"success": True, "template": service.serialize(template, include_size_details=True)}


@router.delete("/api/templates/{template_id}", tags=["Templates"])
async def delete_template(template_id: str, db: Session = Depends(get_db)):
    service = TemplateService(db)
    with translate_errors():
        service.delete_template(template_id)
    return {"success": True, "template_id": template_id}


@router.get("/api/templates/{template_id}/size-details", tags=["Templates"])
async def get_size_details(template_id: str, db: Session = Depends(get_db)):
    """Size-detail grid: rule items by all size ranges."""
    service = TemplateService(db)
    with translate_errors():
        table = service.get_size_detail_table(template_id)
    return _table_response(table)


@router.put("/api/templates/{template_id}/size-details", tags=["Templates"])
async def save_size_details(
    template_id: str,
    data: SizeDetailCells,
    db: Session = Depends(get_db)
):
    service = TemplateService(db)
    with translate_errors():
        service.save_size_details(template_id, data.cells)
        table = service.get_size_detail_table(template_id)
    return {"success": True, **_table_response(table)}


@router.post("/api/templates/{template_id}/size-details/paste", tags=["Templates"])
async def paste_size_details(
    template_id: str,
    data: SizeDetailPaste,
    db: Session = Depends(get_db)
):
    """Spreadsheet paste anchored at (row, col); overflow is dropped."""
    service = TemplateService(db)
    with translate_errors():
        _, written = service.paste_size_details(template_id, data.text, data.row, data.col)
        table = service.get_size_detail_table(template_id)
    return {"success": True, "cells_written": written, **_table_response(table)}

"""Measurement rule endpoints."""
from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from pydantic import BaseModel, Field

from ..db import get_db, SleeveType
from ..patterns.rules import MeasurementRuleService
from ..patterns.templates import TemplateService
from .errors import translate_errors

router = APIRouter()


class MeasurementRuleCreate(BaseModel):
    category_id: int
    sleeve_type: Optional[SleeveType] = None
    items: List[str] = Field(..., min_length=1)
    name: Optional[str] = None  # ignored; rule names are derived


@router.get("/api/measurement-rules", tags=["Measurement Rules"])
async def list_measurement_rules(
    category_id: Optional[int] = None,
    db: Session = Depends(get_db)
):
    service = MeasurementRuleService(db)
    rules = service.list_rules(category_id)
    return {
        "total": len(rules),
        "rules": [service.serialize(r) for r in rules]
    }


@router.post("/api/measurement-rules", tags=["Measurement Rules"])
async def create_measurement_rule(
    data: MeasurementRuleCreate,
    db: Session = Depends(get_db)
):
    """Create a rule; one per (category, sleeve type)."""
    service = MeasurementRuleService(db)
    with translate_errors():
        rule = service.create_rule(data.category_id, data.items, data.sleeve_type)
    return {"success": True, "rule_id": rule.id, "rule": service.serialize(rule)}


@router.get("/api/measurement-rules/lookup", tags=["Measurement Rules"])
async def lookup_measurement_rule(
    category_id: int,
    sleeve_type: Optional[SleeveType] = None,
    db: Session = Depends(get_db)
):
    """Exact (category, sleeve type) match, as the template form uses it."""
    service = MeasurementRuleService(db)
    rule = service.find_measurement_rule(category_id, sleeve_type)
    return {
        "found": rule is not None,
        "rule": service.serialize(rule) if rule else None
    }


@router.get("/api/measurement-rules/{rule_id}", tags=["Measurement Rules"])
async def get_measurement_rule(rule_id: str, db: Session = Depends(get_db)):
    service = MeasurementRuleService(db)
    with translate_errors():
        rule = service.get_rule(rule_id)
    return service.serialize(rule)


@router.put("/api/measurement-rules/{rule_id}", tags=["Measurement Rules"])
async def update_measurement_rule(
    rule_id: str,
    data: MeasurementRuleCreate,
    db: Session = Depends(get_db)
):
    service = MeasurementRuleService(db)
    with translate_errors():
        rule = service.update_rule(rule_id, data.category_id, data.items, data.sleeve_type)
    return {"success": True, "rule": service.serialize(rule)}


@router.delete("/api/measurement-rules/{rule_id}", tags=["Measurement Rules"])
async def delete_measurement_rule(rule_id: str, db: Session = Depends(get_db)):
    """Refused with 409 while any template still uses the rule."""
    service = MeasurementRuleService(db)
    with translate_errors():
        service.delete_rule(rule_id)
    return {"success": True, "rule_id": rule_id}


@router.get("/api/measurement-rules/{rule_id}/templates", tags=["Measurement Rules"])
async def list_rule_templates(rule_id: str, db: Session = Depends(get_db)):
    service = MeasurementRuleService(db)
    with translate_errors():
        service.get_rule(rule_id)
    templates = TemplateService(db)
    linked = service.templates_using(rule_id)
    return {
        "total": len(linked),
        "templates": [templates.serialize(t) for t in linked]
    }

"""Measurement catalog endpoints."""
from typing import Optional

from fastapi import APIRouter, HTTPException

from ..patterns.catalog import (
    MEASUREMENT_ITEMS, get_measurement_item, measurement_items_by_category,
    measurement_items_by_section, serialize_item,
)

router = APIRouter()


@router.get("/api/measurement-items", tags=["Measurement Items"])
async def list_measurement_items(
    category: Optional[str] = None,
    section: Optional[str] = None,
):
    """List catalog items, optionally narrowed to a category and section."""
    items = measurement_items_by_category().get(category, []) if category else MEASUREMENT_ITEMS
    if section:
        items = [i for i in items if i["section"] == section]

    return {
        "total": len(items),
        "items": [serialize_item(i) for i in items]
    }


@router.get("/api/measurement-items/grouped", tags=["Measurement Items"])
async def list_measurement_items_grouped():
    """Items nested by category then section, as the rule form lays them out."""
    return {
        "categories": [
            {
                "category": category,
                "sections": [
                    {"section": section, "items": [serialize_item(i) for i in items]}
                    for section, items in sections.items()
                ]
            }
            for category, sections in measurement_items_by_section().items()
        ]
    }


@router.get("/api/measurement-items/{item_id}", tags=["Measurement Items"])
async def get_measurement_item_detail(item_id: str):
    item = get_measurement_item(item_id)
    if not item:
        raise HTTPException(status_code=404, detail="Measurement item not found")
    return serialize_item(item)

"""Category tree endpoints (read-only)."""
from fastapi import APIRouter, HTTPException

from ..patterns.categories import (
    CATEGORY_TREE, flattened_categories, get_category_by_id, get_child_categories,
    get_parent_categories, is_leaf_category, serialize_category,
)

router = APIRouter()


@router.get("/api/categories", tags=["Categories"])
async def get_category_tree():
    """Whole taxonomy, nested."""
    return {
        "categories": [serialize_category(c, include_children=True) for c in CATEGORY_TREE]
    }


@router.get("/api/categories/flat", tags=["Categories"])
async def list_categories_flat():
    categories = flattened_categories()
    return {
        "total": len(categories),
        "categories": [
            {**serialize_category(c), "is_leaf": is_leaf_category(c["id"])}
            for c in categories
        ]
    }


@router.get("/api/categories/{category_id}", tags=["Categories"])
async def get_category(category_id: int):
    category = get_category_by_id(category_id)
    if not category:
        raise HTTPException(status_code=404, detail="Category not found")

    return {
        **serialize_category(category),
        "is_leaf": is_leaf_category(category_id),
        "path": [serialize_category(c) for c in get_parent_categories(category_id)] + [serialize_category(category)],
        "children": [serialize_category(c) for c in get_child_categories(category_id)],
    }


@router.get("/api/categories/{category_id}/parents", tags=["Categories"])
async def get_category_parents(category_id: int):
    """Ancestors root-first; empty for root categories."""
    if not get_category_by_id(category_id):
        raise HTTPException(status_code=404, detail="Category not found")
    return {"parents": [serialize_category(c) for c in get_parent_categories(category_id)]}


@router.get("/api/categories/{category_id}/children", tags=["Categories"])
async def get_category_children(category_id: int):
    if not get_category_by_id(category_id):
        raise HTTPException(status_code=404, detail="Category not found")
    return {"children": [serialize_category(c) for c in get_child_categories(category_id)]}

"""
Category Tree

Static garment taxonomy: major type -> sub-type -> sub-sub-type.
Rules and templates are classified by a leaf of this tree.
"""
from typing import Dict, List, Optional

CATEGORY_TREE = [
    {
        "id": 1,
        "parent_id": None,
        "name": "의류",
        "children": [
            {
                "id": 10,
                "parent_id": 1,
                "name": "상의",
                "children": [
                    {"id": 103, "parent_id": 10, "name": "스웨터"},
                    {"id": 104, "parent_id": 10, "name": "가디건"},
                ],
            },
            {
                "id": 11,
                "parent_id": 1,
                "name": "하의",
                "children": [
                    {"id": 201, "parent_id": 11, "name": "바지"},
                    {"id": 202, "parent_id": 11, "name": "스커트"},
                ],
            },
        ],
    },
    {
        "id": 2,
        "parent_id": None,
        "name": "소품류",
        "children": [
            {
                "id": 20,
                "parent_id": 2,
                "name": "모자류",
                "children": [
                    {"id": 301, "parent_id": 20, "name": "비니"},
                    {"id": 302, "parent_id": 20, "name": "바라클라바"},
                ],
            },
            {
                "id": 21,
                "parent_id": 2,
                "name": "가방류",
                "children": [
                    {"id": 311, "parent_id": 21, "name": "숄더백"},
                    {"id": 312, "parent_id": 21, "name": "크로스백"},
                    {"id": 313, "parent_id": 21, "name": "파우치"},
                ],
            },
            {
                "id": 22,
                "parent_id": 2,
                "name": "손/발 ACC",
                "children": [
                    {"id": 321, "parent_id": 22, "name": "장갑"},
                    {"id": 322, "parent_id": 22, "name": "양말"},
                ],
            },
            {
                "id": 23,
                "parent_id": 2,
                "name": "목/몸 ACC",
                "children": [
                    {"id": 331, "parent_id": 23, "name": "목도리"},
                    {"id": 332, "parent_id": 23, "name": "숄"},
                ],
            },
            {
                "id": 24,
                "parent_id": 2,
                "name": "기타",
                "children": [
                    {"id": 341, "parent_id": 24, "name": "인형"},
                ],
            },
        ],
    },
]

# Mid-level category whose knitting templates carry construction/neckline fields
TOPS_CATEGORY_ID = 10


def flattened_categories() -> List[Dict]:
    """Depth-first flattening of the whole tree."""
    flattened = []

    def _flatten(nodes):
        for node in nodes:
            flattened.append(node)
            _flatten(node.get("children", []))

    _flatten(CATEGORY_TREE)
    return flattened


def get_category_by_id(category_id: int) -> Optional[Dict]:
    for category in flattened_categories():
        if category["id"] == category_id:
            return category
    return None


def get_parent_categories(category_id: int) -> List[Dict]:
    """Ancestor chain ordered root-first; empty for roots and unknown ids."""
    result = []
    category = get_category_by_id(category_id)

    while category and category["parent_id"] is not None:
        parent = get_category_by_id(category["parent_id"])
        if not parent:
            break
        result.insert(0, parent)
        category = parent

    return result


def get_category_path(category_id: int) -> List[int]:
    """Root-first ids ending with the category itself, e.g. [1, 10, 103]."""
    category = get_category_by_id(category_id)
    if not category:
        return []
    return [c["id"] for c in get_parent_categories(category_id)] + [category_id]


def get_child_categories(parent_id: Optional[int] = None) -> List[Dict]:
    if parent_id is None:
        return list(CATEGORY_TREE)
    parent = get_category_by_id(parent_id)
    return list(parent.get("children", [])) if parent else []


def is_leaf_category(category_id: int) -> bool:
    category = get_category_by_id(category_id)
    return bool(category) and not category.get("children")


def serialize_category(category: Dict, include_children: bool = False) -> Dict:
    data = {
        "id": category["id"],
        "parent_id": category["parent_id"],
        "name": category["name"],
    }
    if include_children:
        data["children"] = [
            serialize_category(child, include_children=True)
            for child in category.get("children", [])
        ]
    return data

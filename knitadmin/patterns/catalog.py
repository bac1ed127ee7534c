"""
Measurement Catalog

Named body/garment measurements that rules select from and that chart
edges bind to. Each entry declares the axis its ratio scales in the
size preview: widths stretch X, lengths and depths stretch Y.
"""
from collections import OrderedDict
from typing import Dict, Iterable, List, Optional

from ..db import MeasurementAxis

MEASUREMENT_ITEMS = [
    # 상의 / 몸통
    {
        "id": "shoulder_drop",
        "name": "어깨처짐",
        "category": "상의",
        "section": "몸통",
        "unit": "cm",
        "description": "목옆점에서 어깨끝점까지 내려가는 높이",
        "axis": MeasurementAxis.BOTH,
    },
    {
        "id": "armhole_depth",
        "name": "진동길이",
        "category": "상의",
        "section": "몸통",
        "unit": "cm",
        "description": "어깨선에서 겨드랑이까지의 길이",
        "axis": MeasurementAxis.Y,
    },
    {
        "id": "side_length",
        "name": "옆길이",
        "category": "상의",
        "section": "몸통",
        "unit": "cm",
        "description": "겨드랑이에서 밑단까지의 옆선 길이",
        "axis": MeasurementAxis.Y,
    },
    {
        "id": "shoulder_width",
        "name": "어깨너비",
        "category": "상의",
        "section": "몸통",
        "unit": "cm",
        "description": "양 어깨끝점 사이의 너비",
        "axis": MeasurementAxis.X,
    },
    {
        "id": "chest_width",
        "name": "가슴너비",
        "category": "상의",
        "section": "몸통",
        "unit": "cm",
        "description": "겨드랑이 아래 몸판 너비",
        "axis": MeasurementAxis.X,
    },
    # 상의 / 목
    {
        "id": "back_neck_depth",
        "name": "뒷목깊이",
        "category": "상의",
        "section": "목",
        "unit": "cm",
        "description": "뒷목 파임의 깊이",
        "axis": MeasurementAxis.Y,
    },
    {
        "id": "front_neck_depth",
        "name": "앞목깊이",
        "category": "상의",
        "section": "목",
        "unit": "cm",
        "description": "앞목 파임의 깊이",
        "axis": MeasurementAxis.Y,
    },
    {
        "id": "neck_width",
        "name": "목너비",
        "category": "상의",
        "section": "목",
        "unit": "cm",
        "description": "양 목옆점 사이의 너비",
        "axis": MeasurementAxis.X,
    },
    # 상의 / 소매
    {
        "id": "sleeve_length",
        "name": "소매 길이",
        "category": "상의",
        "section": "소매",
        "unit": "cm",
        "description": "소매산에서 소매끝까지의 길이",
        "axis": MeasurementAxis.Y,
    },
    {
        "id": "sleeve_width",
        "name": "소매 너비",
        "category": "상의",
        "section": "소매",
        "unit": "cm",
        "description": "소매 윗부분 너비",
        "axis": MeasurementAxis.X,
    },
    {
        "id": "wrist_width",
        "name": "손목 너비",
        "category": "상의",
        "section": "소매",
        "unit": "cm",
        "description": "소매끝 손목 부분 너비",
        "axis": MeasurementAxis.X,
    },
    # 마감 / 고무단
    {
        "id": "sleeve_ribbing_length",
        "name": "소매 고무단 길이",
        "category": "마감",
        "section": "고무단",
        "unit": "cm",
        "description": "소매끝 고무단의 길이",
        "axis": MeasurementAxis.Y,
    },
    {
        "id": "neck_ribbing_length",
        "name": "목 고무단 길이",
        "category": "마감",
        "section": "고무단",
        "unit": "cm",
        "description": "목둘레 고무단의 길이",
        "axis": MeasurementAxis.Y,
    },
    {
        "id": "hem_ribbing_length",
        "name": "아랫단 고무단 길이",
        "category": "마감",
        "section": "고무단",
        "unit": "cm",
        "description": "밑단 고무단의 길이",
        "axis": MeasurementAxis.Y,
    },
    # 소품 / 모자
    {
        "id": "head_circumference",
        "name": "머리둘레",
        "category": "소품",
        "section": "모자",
        "unit": "cm",
        "description": "이마와 뒤통수를 지나는 머리 둘레",
        "axis": MeasurementAxis.BOTH,
    },
]

_ITEMS_BY_ID = {item["id"]: item for item in MEASUREMENT_ITEMS}


def get_measurement_item(item_id: str) -> Optional[Dict]:
    return _ITEMS_BY_ID.get(item_id)


def is_known_item(item_id: str) -> bool:
    return item_id in _ITEMS_BY_ID


def unknown_items(item_ids: Iterable[str]) -> List[str]:
    return [item_id for item_id in item_ids if item_id not in _ITEMS_BY_ID]


def axis_for(item_id: str) -> MeasurementAxis:
    """Scaling axis for an item; unknown ids scale both axes."""
    item = _ITEMS_BY_ID.get(item_id)
    return item["axis"] if item else MeasurementAxis.BOTH


def measurement_item_names(item_ids: Iterable[str]) -> List[str]:
    return [
        _ITEMS_BY_ID[item_id]["name"] if item_id in _ITEMS_BY_ID else item_id
        for item_id in item_ids
    ]


def measurement_items_by_category() -> Dict[str, List[Dict]]:
    grouped = OrderedDict()
    for item in MEASUREMENT_ITEMS:
        grouped.setdefault(item["category"], []).append(item)
    return grouped


def measurement_items_by_section() -> Dict[str, Dict[str, List[Dict]]]:
    """Items nested category -> section, in catalog order."""
    grouped = OrderedDict()
    for item in MEASUREMENT_ITEMS:
        sections = grouped.setdefault(item["category"], OrderedDict())
        sections.setdefault(item["section"], []).append(item)
    return grouped


def serialize_item(item: Dict) -> Dict:
    return {
        "id": item["id"],
        "name": item["name"],
        "category": item["category"],
        "section": item["section"],
        "unit": item["unit"],
        "description": item["description"],
        "axis": item["axis"].value,
    }

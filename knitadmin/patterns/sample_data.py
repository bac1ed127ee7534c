"""
Sample Data

Starter rules, templates and chart types loaded into an empty store so the
dashboard has something to show. Values are cm.
"""
import logging

from sqlalchemy.orm import Session

from ..db import (
    ChartType, ConstructionMethod, LineType, MeasurementRule, NecklineType,
    PatternType, PublishStatus, SleeveType, Template, ToolType,
)
from .categories import get_category_path
from .rules import rule_name

logger = logging.getLogger(__name__)

SAMPLE_RULES = [
    {
        "id": "rule1",
        "category_id": 103,  # 스웨터
        "sleeve_type": SleeveType.RAGLAN,
        "items": ["shoulder_width", "chest_width", "sleeve_length", "sleeve_width", "wrist_width", "neck_width"],
    },
    {
        "id": "rule2",
        "category_id": 103,
        "sleeve_type": SleeveType.SET_IN,
        "items": ["shoulder_width", "chest_width", "sleeve_length", "sleeve_width", "armhole_depth"],
    },
    {
        "id": "rule3",
        "category_id": 301,  # 비니
        "sleeve_type": None,
        "items": ["head_circumference"],
    },
]

SAMPLE_CHART_TYPES = [
    ("chart1", "앞 몸판"),
    ("chart2", "뒤 몸판"),
    ("chart3", "소매"),
    ("chart4", "카라"),
    ("chart5", "포켓"),
    ("chart6", "후드"),
]

# Front body outline drawn at the base size
FRONT_BODY_OUTLINE = {
    "coordinates": [
        {"x": 300, "y": 200, "measurement_item": None, "angle": None},
        {"x": 700, "y": 200, "measurement_item": None, "angle": None},
        {"x": 700, "y": 800, "measurement_item": None, "angle": None},
        {"x": 300, "y": 800, "measurement_item": None, "angle": None},
    ],
    "draw_order": [0, 1, 2, 3],
    "line_connections": [
        {"from_index": 0, "to_index": 1, "type": LineType.CURVE.value, "measurement_item": "neck_width"},
        {"from_index": 1, "to_index": 2, "type": LineType.STRAIGHT.value, "measurement_item": "side_length"},
        {"from_index": 2, "to_index": 3, "type": LineType.STRAIGHT.value, "measurement_item": "chest_width"},
        {"from_index": 3, "to_index": 0, "type": LineType.STRAIGHT.value, "measurement_item": None},
    ],
    "control_points": {"conn-0-1": {"x": 500, "y": 300}},
}

# Column order for SWEATER_SIZE_TABLE rows
SWEATER_COLUMNS = (
    "shoulder_drop", "back_neck_depth", "front_neck_depth", "armhole_depth",
    "side_length", "neck_width", "shoulder_width", "chest_width",
    "sleeve_length", "sleeve_width", "wrist_width",
    "sleeve_ribbing_length", "neck_ribbing_length", "hem_ribbing_length",
)

SWEATER_SIZE_TABLE = {
    "50-53": (0.6, 1.2, 1.8, 13.0, 22.0, 15.0, 30.0, 32.0, 40.0, 12.0, 6.0, 3, 1.5, 3.0),
    "54-57": (0.9, 1.5, 1.8, 14.5, 23.0, 15.5, 32.0, 34.0, 45.0, 13.0, 6.0, 3, 1.5, 3.0),
    "58-61": (1.2, 1.8, 1.8, 15.5, 23.5, 16.0, 34.0, 36.0, 50.0, 14.0, 6.0, 3, 1.5, 3.0),
    "62-65": (1.5, 1.8, 2.1, 16.5, 24.0, 16.0, 36.0, 38.0, 55.0, 15.0, 6.0, 3, 1.5, 3.0),
    "66-69": (1.8, 2.1, 2.1, 17.5, 24.5, 16.5, 38.0, 40.0, 57.0, 15.0, 7.0, 3, 1.5, 3.0),
    "70-73": (2.1, 2.1, 2.1, 18.5, 25.0, 17.0, 40.0, 42.0, 59.0, 15.5, 7.0, 3, 1.5, 3.0),
    "74-79": (2.4, 2.4, 2.4, 19.5, 26.0, 17.0, 42.0, 45.0, 60.0, 16.0, 8.0, 3, 1.5, 3.0),
    "80-84": (2.4, 2.4, 2.4, 20.5, 23.6, 16.0, 42.0, 52.0, 61.0, 16.0, 9.5, 3, 1.5, 4.0),
    "85-89": (2.4, 2.4, 2.4, 22.0, 27.0, 18.0, 45.0, 50.0, 61.5, 16.5, 9.5, 4, 2.0, 5.0),
    "90-94": (2.4, 2.4, 2.4, 23.0, 28.0, 19.0, 47.0, 54.0, 62.0, 17.0, 10.0, 4, 2.0, 5.0),
    "95-99": (2.4, 2.4, 2.4, 25.0, 29.0, 19.0, 50.0, 57.0, 62.5, 18.0, 10.0, 4, 2.0, 5.0),
    "100-104": (2.4, 2.4, 2.4, 26.0, 30.0, 20.0, 52.0, 60.0, 63.0, 19.0, 10.0, 4, 2.5, 5.0),
    "105-109": (2.4, 2.4, 2.4, 27.0, 31.0, 20.0, 55.0, 63.0, 63.0, 19.0, 10.5, 4, 2.5, 6.0),
    "110-114": (2.4, 2.4, 2.4, 28.0, 32.0, 20.0, 57.0, 65.0, 63.5, 20.0, 10.5, 5, 3.0, 6.0),
    "115-120": (2.4, 2.4, 2.4, 30.0, 33.1, 21.0, 60.0, 68.0, 63.5, 20.7, 11.0, 6, 3.2, 6.5),
    "121-129": (2.4, 2.4, 2.4, 30.0, 33.1, 21.7, 62.0, 68.0, 63.5, 20.7, 11.0, 6, 3.2, 6.5),
    # slack: how far a knitter may adjust each measurement
    "min": (2, 2, 2, 2, 5, 2, 3, 3, 5, 3, 2, 3, 2, 2),
    "max": (2, 2, 2, 2, 5, 2, 3, 3, 5, 3, 2, 3, 2, 2),
}


def sweater_size_details():
    return [
        {
            "size_range": size_range,
            "measurements": {item: float(value) for item, value in zip(SWEATER_COLUMNS, row)},
        }
        for size_range, row in SWEATER_SIZE_TABLE.items()
    ]


def seed_sample_data(db: Session) -> bool:
    """Load the sample set into an empty store.

    Returns:
        True if anything was written
    """
    if db.query(MeasurementRule).first() or db.query(ChartType).first():
        return False

    rules = {}
    for entry in SAMPLE_RULES:
        rule = MeasurementRule(
            id=entry["id"],
            category_id=entry["category_id"],
            sleeve_type=entry["sleeve_type"],
            name=rule_name(entry["category_id"], entry["sleeve_type"]),
            items=list(entry["items"]),
        )
        db.add(rule)
        rules[rule.id] = rule

    for chart_id, name in SAMPLE_CHART_TYPES:
        geometry = FRONT_BODY_OUTLINE if chart_id == "chart1" else {}
        db.add(ChartType(
            id=chart_id,
            name=name,
            coordinates=list(geometry.get("coordinates", [])),
            draw_order=list(geometry.get("draw_order", [])),
            line_connections=list(geometry.get("line_connections", [])),
            control_points=dict(geometry.get("control_points", {})),
        ))

    sweater_rule = rules["rule1"]
    db.add(Template(
        id="1",
        name="베이직 스웨터",
        tool_type=ToolType.KNITTING_NEEDLE,
        pattern_type=PatternType.MIXED,
        publish_status=PublishStatus.PUBLIC,
        thumbnail="/thumbnails/sweater.jpg",
        category_ids=get_category_path(sweater_rule.category_id),
        construction_methods=[ConstructionMethod.TOP_DOWN.value],
        sleeve_type=sweater_rule.sleeve_type,
        neckline_type=NecklineType.ROUND,
        measurement_items=list(sweater_rule.items),
        chart_type_ids=["chart1"],
        measurement_rule_id=sweater_rule.id,
        size_details=sweater_size_details(),
    ))

    beanie_rule = rules["rule3"]
    db.add(Template(
        id="2",
        name="비니",
        tool_type=ToolType.CROCHET_HOOK,
        pattern_type=PatternType.WRITTEN,
        publish_status=PublishStatus.PUBLIC,
        thumbnail="/thumbnails/beanie.jpg",
        category_ids=get_category_path(beanie_rule.category_id),
        construction_methods=[],
        measurement_items=list(beanie_rule.items),
        chart_type_ids=[],
        measurement_rule_id=beanie_rule.id,
        size_details=[],
    ))

    db.commit()
    logger.info(
        f"Seeded sample data: {len(SAMPLE_RULES)} rules, 2 templates, {len(SAMPLE_CHART_TYPES)} chart types"
    )
    return True

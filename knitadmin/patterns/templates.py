"""
Template Store

A template is a reusable pattern definition built on exactly one
measurement rule. Category path, sleeve type and measurement items are
always copied from that rule; the size-detail table holds one value per
rule item per size range.
"""
import logging
import uuid
from typing import Dict, List, Optional, Tuple

from sqlalchemy.orm import Session

from ..db import (
    ChartType, PatternType, PublishStatus, Template, ToolType,
)
from .catalog import unknown_items
from .categories import get_category_by_id
from .errors import (
    InvalidSizeValueError, MissingMeasurementRuleError, NotFoundError,
    UnknownChartTypeError, UnknownMeasurementItemError,
)
from .rules import MeasurementRuleService, apply_rule
from .size_table import SizeDetailTable
from .sizes import ordered_size_ranges, parse_size_range

logger = logging.getLogger(__name__)

# Fields the caller may set; everything else is derived from the rule
EDITABLE_FIELDS = (
    "name", "tool_type", "pattern_type", "publish_status", "thumbnail",
    "construction_methods", "neckline_type", "chart_type_ids", "size_details",
)


def normalize_size_details(size_details: Optional[List[Dict]]) -> List[Dict]:
    """Validate bins and items and coerce values to float, in display order."""
    by_size = {}
    for detail in size_details or []:
        size = parse_size_range(detail["size_range"])
        measurements = dict(detail.get("measurements") or {})
        missing = unknown_items(measurements)
        if missing:
            raise UnknownMeasurementItemError(missing)
        values = {}
        for item, value in measurements.items():
            try:
                values[item] = float(value) if value not in (None, "") else 0.0
            except (TypeError, ValueError):
                raise InvalidSizeValueError(size.value, item, str(value))
        by_size.setdefault(size, {}).update(values)

    return [
        {"size_range": size.value, "measurements": by_size[size]}
        for size in ordered_size_ranges(by_size)
    ]


class TemplateService:
    """CRUD for templates plus their size-detail table."""

    def __init__(self, db: Session):
        self.db = db
        self.rules = MeasurementRuleService(db)

    def list_templates(
        self,
        measurement_rule_id: Optional[str] = None,
        chart_type_id: Optional[str] = None,
        category_id: Optional[int] = None,
        tool_type: Optional[ToolType] = None,
    ) -> List[Template]:
        query = self.db.query(Template)
        if measurement_rule_id:
            query = query.filter(Template.measurement_rule_id == measurement_rule_id)
        if tool_type:
            query = query.filter(Template.tool_type == tool_type)
        templates = query.order_by(Template.id).all()

        # JSON list columns are filtered in Python
        if chart_type_id:
            templates = [t for t in templates if chart_type_id in (t.chart_type_ids or [])]
        if category_id is not None:
            templates = [t for t in templates if category_id in (t.category_ids or [])]
        return templates

    def get_template(self, template_id: str) -> Template:
        template = self.db.query(Template).filter(Template.id == template_id).first()
        if not template:
            raise NotFoundError("Template", template_id)
        return template

    def resolve_rule(
        self,
        measurement_rule_id: Optional[str] = None,
        category_id: Optional[int] = None,
        sleeve_type=None,
    ):
        """Rule by id, else by the (category, sleeve type) the form selected."""
        if measurement_rule_id:
            try:
                return self.rules.get_rule(measurement_rule_id)
            except NotFoundError:
                raise MissingMeasurementRuleError(
                    f"Measurement rule '{measurement_rule_id}' does not exist"
                )

        if category_id is not None:
            rule = self.rules.find_measurement_rule(category_id, sleeve_type)
            if rule:
                return rule
            category = get_category_by_id(category_id)
            label = category["name"] if category else str(category_id)
            if sleeve_type:
                label = f"{label} / {getattr(sleeve_type, 'value', sleeve_type)}"
            raise MissingMeasurementRuleError(f"No measurement rule registered for {label}")

        raise MissingMeasurementRuleError("A template must reference a measurement rule")

    def _check_chart_types(self, chart_type_ids: List[str]):
        if not chart_type_ids:
            return
        found = {
            row.id for row in
            self.db.query(ChartType.id).filter(ChartType.id.in_(chart_type_ids)).all()
        }
        missing = [cid for cid in chart_type_ids if cid not in found]
        if missing:
            raise UnknownChartTypeError(missing)

    def _apply(self, template: Template, data: Dict, rule) -> None:
        values = {field: data[field] for field in EDITABLE_FIELDS if field in data}
        for field in ("name", "tool_type", "pattern_type", "publish_status"):
            if values.get(field, "") is None:
                del values[field]

        chart_type_ids = list(dict.fromkeys(values.get("chart_type_ids", template.chart_type_ids) or []))
        self._check_chart_types(chart_type_ids)
        size_details = normalize_size_details(values.get("size_details", template.size_details))

        for field, value in values.items():
            setattr(template, field, value)
        template.chart_type_ids = chart_type_ids
        template.size_details = size_details

        apply_rule(template, rule)

    def create_template(self, data: Dict) -> Template:
        rule = self.resolve_rule(
            data.get("measurement_rule_id"),
            data.get("category_id"),
            data.get("sleeve_type"),
        )

        template = Template(
            id=uuid.uuid4().hex[:12],
            tool_type=ToolType.KNITTING_NEEDLE,
            pattern_type=PatternType.WRITTEN,
            publish_status=PublishStatus.PUBLIC,
        )
        self._apply(template, data, rule)

        self.db.add(template)
        self.db.commit()
        self.db.refresh(template)

        logger.info(f"Created template {template.id} ({template.name}) on rule {rule.id}")
        return template

    def update_template(self, template_id: str, data: Dict) -> Template:
        """Apply the given fields; the rule is re-resolved when any selector is present."""
        template = self.get_template(template_id)

        rule = self.rules.get_rule(template.measurement_rule_id)
        if data.get("measurement_rule_id"):
            rule = self.resolve_rule(data["measurement_rule_id"])
        elif "category_id" in data or "sleeve_type" in data:
            rule = self.resolve_rule(
                category_id=data.get("category_id", rule.category_id),
                sleeve_type=data.get("sleeve_type"),
            )

        self._apply(template, data, rule)
        self.db.commit()
        self.db.refresh(template)

        logger.info(f"Updated template {template.id} ({template.name})")
        return template

    def delete_template(self, template_id: str) -> None:
        template = self.get_template(template_id)
        self.db.delete(template)
        self.db.commit()
        logger.info(f"Deleted template {template_id}")

    # ---------- size details ----------

    def get_size_detail_table(self, template_id: str) -> SizeDetailTable:
        template = self.get_template(template_id)
        items = template.measurement_items or []
        if not items:
            raise MissingMeasurementRuleError(
                f"Template '{template.name}' has no measurement items to fill in"
            )
        return SizeDetailTable.from_size_details(items, template.size_details)

    def _store_table(self, template: Template, table: SizeDetailTable) -> None:
        # Values for items outside the rule are kept as they were
        existing = {
            parse_size_range(d["size_range"]).value: dict(d.get("measurements") or {})
            for d in template.size_details or []
        }
        for detail in table.to_size_details():
            existing.setdefault(detail["size_range"], {}).update(detail["measurements"])

        template.size_details = normalize_size_details([
            {"size_range": size, "measurements": measurements}
            for size, measurements in existing.items()
        ])
        self.db.commit()
        self.db.refresh(template)

    def save_size_details(self, template_id: str, cells: Dict[str, Dict[str, Optional[str]]]) -> Template:
        """Overwrite the given cells; blank cells are stored as 0."""
        table = self.get_size_detail_table(template_id)
        table.set_cells(cells)

        template = self.get_template(template_id)
        self._store_table(template, table)
        logger.info(f"Saved size details for template {template_id}")
        return template

    def paste_size_details(self, template_id: str, text: str, row: int, col: int) -> Tuple[Template, int]:
        table = self.get_size_detail_table(template_id)
        written = table.paste(text, row, col)

        template = self.get_template(template_id)
        self._store_table(template, table)
        logger.info(f"Pasted {written} cells into template {template_id} at ({row}, {col})")
        return template, written

    # ---------- output ----------

    def serialize(self, template: Template, include_size_details: bool = False) -> Dict:
        rule = template.measurement_rule
        data = {
            "id": template.id,
            "name": template.name,
            "tool_type": template.tool_type.value if template.tool_type else None,
            "pattern_type": template.pattern_type.value if template.pattern_type else None,
            "publish_status": template.publish_status.value if template.publish_status else None,
            "thumbnail": template.thumbnail,
            "category_ids": list(template.category_ids or []),
            "category_names": [
                get_category_by_id(cid)["name"] for cid in template.category_ids or []
                if get_category_by_id(cid)
            ],
            "construction_methods": list(template.construction_methods or []),
            "sleeve_type": template.sleeve_type.value if template.sleeve_type else None,
            "neckline_type": template.neckline_type.value if template.neckline_type else None,
            "measurement_items": list(template.measurement_items or []),
            "chart_type_ids": list(template.chart_type_ids or []),
            "measurement_rule_id": template.measurement_rule_id,
            "measurement_rule_name": rule.name if rule else None,
            "last_modified": template.updated_at.isoformat() if template.updated_at else None,
        }
        if include_size_details:
            data["size_details"] = list(template.size_details or [])
        return data

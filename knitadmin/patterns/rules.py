"""
Measurement Rule Store

One rule per (category, sleeve type) pair, naming the measurement items
templates in that category must fill in. Rule names are always derived
from the category and sleeve type.
"""
import logging
import uuid
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from ..db import (
    ConstructionMethod, MeasurementRule, NecklineType, SleeveType, Template, ToolType,
)
from .catalog import measurement_item_names, unknown_items
from .categories import TOPS_CATEGORY_ID, get_category_by_id, get_category_path, is_leaf_category
from .errors import (
    DuplicateMeasurementRuleError, NotFoundError, ReferenceConflictError,
    UnknownCategoryError, UnknownMeasurementItemError,
)

logger = logging.getLogger(__name__)


def _sleeve(value) -> Optional[SleeveType]:
    if value is None or value == "":
        return None
    return value if isinstance(value, SleeveType) else SleeveType(value)


def rule_name(category_id: int, sleeve_type=None) -> str:
    """"{sleeve type} {category}" or just the category name."""
    category = get_category_by_id(category_id)
    if not category:
        raise UnknownCategoryError(f"Category {category_id} not found")
    sleeve = _sleeve(sleeve_type)
    return f"{sleeve.value} {category['name']}" if sleeve else category["name"]


def is_knitting_top(tool_type, category_ids: List[int]) -> bool:
    """Construction/neckline options only apply to knitting-needle tops."""
    return (
        ToolType(tool_type) == ToolType.KNITTING_NEEDLE
        and len(category_ids) > 1
        and category_ids[1] == TOPS_CATEGORY_ID
    )


def apply_rule(template: Template, rule: MeasurementRule) -> None:
    """Copy the rule's derived fields onto a template and re-gate its construction options."""
    template.measurement_rule_id = rule.id
    template.category_ids = get_category_path(rule.category_id)
    template.sleeve_type = rule.sleeve_type
    template.measurement_items = list(rule.items)

    if is_knitting_top(template.tool_type, template.category_ids):
        template.construction_methods = [
            ConstructionMethod(m).value for m in template.construction_methods or []
        ]
        if template.neckline_type is not None:
            template.neckline_type = NecklineType(template.neckline_type)
    else:
        template.construction_methods = []
        template.neckline_type = None


class MeasurementRuleService:
    """CRUD plus the duplicate and in-use checks for measurement rules."""

    def __init__(self, db: Session):
        self.db = db

    def list_rules(self, category_id: Optional[int] = None) -> List[MeasurementRule]:
        query = self.db.query(MeasurementRule)
        if category_id is not None:
            query = query.filter(MeasurementRule.category_id == category_id)
        return query.order_by(MeasurementRule.created_at, MeasurementRule.id).all()

    def get_rule(self, rule_id: str) -> MeasurementRule:
        rule = self.db.query(MeasurementRule).filter(MeasurementRule.id == rule_id).first()
        if not rule:
            raise NotFoundError("Measurement rule", rule_id)
        return rule

    def find_measurement_rule(self, category_id: int, sleeve_type=None) -> Optional[MeasurementRule]:
        """Exact match on both fields; no sleeve type matches only sleeveless rules."""
        sleeve = _sleeve(sleeve_type)
        query = self.db.query(MeasurementRule).filter(MeasurementRule.category_id == category_id)
        if sleeve:
            query = query.filter(MeasurementRule.sleeve_type == sleeve)
        else:
            query = query.filter(MeasurementRule.sleeve_type.is_(None))
        return query.first()

    def is_duplicate_measurement_rule(
        self,
        category_id: int,
        sleeve_type=None,
        exclude_id: Optional[str] = None,
    ) -> bool:
        sleeve = _sleeve(sleeve_type)
        query = self.db.query(MeasurementRule).filter(MeasurementRule.category_id == category_id)
        if sleeve:
            query = query.filter(MeasurementRule.sleeve_type == sleeve)
        else:
            query = query.filter(MeasurementRule.sleeve_type.is_(None))
        if exclude_id:
            query = query.filter(MeasurementRule.id != exclude_id)
        return query.first() is not None

    def _validate(self, category_id: int, sleeve_type, items: List[str], exclude_id: Optional[str] = None):
        if not get_category_by_id(category_id):
            raise UnknownCategoryError(f"Category {category_id} not found")
        if not is_leaf_category(category_id):
            raise UnknownCategoryError(f"Category {category_id} is not a leaf category")

        missing = unknown_items(items)
        if missing:
            raise UnknownMeasurementItemError(missing)

        if self.is_duplicate_measurement_rule(category_id, sleeve_type, exclude_id):
            sleeve = _sleeve(sleeve_type)
            sleeve_value = sleeve.value if sleeve else None
            logger.warning(
                f"Duplicate measurement rule rejected: category={category_id} sleeve={sleeve_value}"
            )
            raise DuplicateMeasurementRuleError(category_id, sleeve_value)

    def create_rule(
        self,
        category_id: int,
        items: List[str],
        sleeve_type=None,
        rule_id: Optional[str] = None,
    ) -> MeasurementRule:
        self._validate(category_id, sleeve_type, items)

        rule = MeasurementRule(
            id=rule_id or f"rule_{uuid.uuid4().hex[:12]}",
            category_id=category_id,
            sleeve_type=_sleeve(sleeve_type),
            name=rule_name(category_id, sleeve_type),
            items=list(dict.fromkeys(items)),
        )
        self.db.add(rule)
        self.db.commit()
        self.db.refresh(rule)

        logger.info(f"Created measurement rule {rule.id} ({rule.name}, {len(rule.items)} items)")
        return rule

    def update_rule(
        self,
        rule_id: str,
        category_id: int,
        items: List[str],
        sleeve_type=None,
    ) -> MeasurementRule:
        rule = self.get_rule(rule_id)
        self._validate(category_id, sleeve_type, items, exclude_id=rule_id)

        rule.category_id = category_id
        rule.sleeve_type = _sleeve(sleeve_type)
        rule.name = rule_name(category_id, sleeve_type)
        rule.items = list(dict.fromkeys(items))

        # Templates carry copies of the rule's derived fields
        for template in self.templates_using(rule_id):
            apply_rule(template, rule)

        self.db.commit()
        self.db.refresh(rule)

        logger.info(f"Updated measurement rule {rule.id} ({rule.name})")
        return rule

    def delete_rule(self, rule_id: str) -> None:
        rule = self.get_rule(rule_id)

        in_use = self.templates_using(rule_id)
        if in_use:
            names = [t.name for t in in_use]
            logger.warning(f"Refused to delete measurement rule {rule_id}: used by {names}")
            raise ReferenceConflictError(
                f"Measurement rule '{rule.name}' is used by {len(names)} template(s)",
                names,
            )

        self.db.delete(rule)
        self.db.commit()
        logger.info(f"Deleted measurement rule {rule_id}")

    def templates_using(self, rule_id: str) -> List[Template]:
        return self.db.query(Template).filter(
            Template.measurement_rule_id == rule_id
        ).order_by(Template.id).all()

    def serialize(self, rule: MeasurementRule) -> Dict:
        category = get_category_by_id(rule.category_id)
        return {
            "id": rule.id,
            "name": rule.name,
            "category_id": rule.category_id,
            "category_name": category["name"] if category else None,
            "sleeve_type": rule.sleeve_type.value if rule.sleeve_type else None,
            "items": list(rule.items or []),
            "item_names": measurement_item_names(rule.items or []),
            "template_count": len(self.templates_using(rule.id)),
            "created_at": rule.created_at.isoformat() if rule.created_at else None,
            "updated_at": rule.updated_at.isoformat() if rule.updated_at else None,
        }

"""
Chart Type Store

Persists the point/edge geometry produced by the chart editor and
renders size-adjusted previews against a template's size table.
"""
import logging
import re
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from ..config import get_settings
from ..db import ChartType, LineType, Template
from .errors import MissingMeasurementRuleError, NotFoundError, ReferenceConflictError
from .geometry import (
    DEFAULT_CHART_NAME, ChartTypePayload, Coordinate, adjusted_coordinates, control_point_for,
    size_table_from_details, validate_geometry,
)
from .sizes import base_size as default_base_size, parse_size_range

logger = logging.getLogger(__name__)

CHART_ID_PATTERN = re.compile(r"^chart(\d+)$")


class ChartTypeService:
    """CRUD and preview for chart types."""

    def __init__(self, db: Session):
        self.db = db
        self.scale = get_settings().coord_scale

    def list_chart_types(self) -> List[ChartType]:
        charts = self.db.query(ChartType).all()
        return sorted(charts, key=_chart_sort_key)

    def get_chart_type(self, chart_type_id: str) -> ChartType:
        chart = self.db.query(ChartType).filter(ChartType.id == chart_type_id).first()
        if not chart:
            raise NotFoundError("Chart type", chart_type_id)
        return chart

    def next_chart_type_id(self) -> str:
        """chart{N+1} after the highest numbered id."""
        existing = {row.id for row in self.db.query(ChartType.id).all()}
        numbers = [int(m.group(1)) for m in map(CHART_ID_PATTERN.match, existing) if m]
        n = max(numbers, default=0) + 1
        while f"chart{n}" in existing:
            n += 1
        return f"chart{n}"

    def to_payload(self, chart: ChartType) -> ChartTypePayload:
        return ChartTypePayload.model_validate({
            "id": chart.id,
            "name": chart.name,
            "coordinates": chart.coordinates or [],
            "draw_order": chart.draw_order or [],
            "line_connections": chart.line_connections or [],
            "control_points": chart.control_points or {},
            "armhole_depth": chart.armhole_depth,
        })

    def _store(self, chart: ChartType, payload: ChartTypePayload):
        validate_geometry(payload, self.scale)
        data = payload.model_dump(mode="json")

        chart.name = payload.name.strip() or DEFAULT_CHART_NAME
        chart.coordinates = data["coordinates"]
        chart.draw_order = data["draw_order"]
        chart.line_connections = data["line_connections"]
        chart.control_points = data["control_points"]
        chart.armhole_depth = payload.armhole_depth

    def create_chart_type(self, payload: ChartTypePayload) -> ChartType:
        chart = ChartType(id=self.next_chart_type_id())
        self._store(chart, payload)

        self.db.add(chart)
        self.db.commit()
        self.db.refresh(chart)

        logger.info(
            f"Created chart type {chart.id} ({chart.name}): "
            f"{len(chart.coordinates)} points, {len(chart.line_connections)} connections"
        )
        return chart

    def update_chart_type(self, chart_type_id: str, payload: ChartTypePayload) -> ChartType:
        chart = self.get_chart_type(chart_type_id)
        self._store(chart, payload)

        self.db.commit()
        self.db.refresh(chart)

        logger.info(f"Updated chart type {chart.id} ({chart.name})")
        return chart

    def save(self, payload: ChartTypePayload) -> ChartType:
        """Update when the payload names a stored chart type, else create."""
        if payload.id and self.db.query(ChartType).filter(ChartType.id == payload.id).first():
            return self.update_chart_type(payload.id, payload)
        return self.create_chart_type(payload)

    def templates_using(self, chart_type_id: str) -> List[Template]:
        templates = self.db.query(Template).order_by(Template.id).all()
        return [t for t in templates if chart_type_id in (t.chart_type_ids or [])]

    def delete_chart_type(self, chart_type_id: str) -> None:
        chart = self.get_chart_type(chart_type_id)

        in_use = self.templates_using(chart_type_id)
        if in_use:
            names = [t.name for t in in_use]
            logger.warning(f"Refused to delete chart type {chart_type_id}: used by {names}")
            raise ReferenceConflictError(
                f"Chart type '{chart.name}' is used by {len(names)} template(s)",
                names,
            )

        self.db.delete(chart)
        self.db.commit()
        logger.info(f"Deleted chart type {chart_type_id}")

    def size_table_for(self, chart_type_id: Optional[str], template_id: Optional[str] = None) -> Dict[str, Dict[str, float]]:
        """Size table of the given template, else of the first template using the chart."""
        if template_id:
            template = self.db.query(Template).filter(Template.id == template_id).first()
            if not template:
                raise NotFoundError("Template", template_id)
            return size_table_from_details(template.size_details)

        in_use = self.templates_using(chart_type_id) if chart_type_id else []
        if not in_use:
            raise MissingMeasurementRuleError(
                "No template provides a size table for this chart; pass template_id"
            )
        return size_table_from_details(in_use[0].size_details)

    def preview(
        self,
        chart_type_id: str,
        size_range,
        template_id: Optional[str] = None,
        base_size=None,
    ) -> List[Coordinate]:
        payload = self.to_payload(self.get_chart_type(chart_type_id))
        size_table = self.size_table_for(chart_type_id, template_id)
        return adjusted_coordinates(
            payload.coordinates,
            payload.line_connections,
            size_table,
            parse_size_range(size_range),
            parse_size_range(base_size) if base_size else default_base_size(),
        )

    def control_handles(self, chart: ChartType) -> Dict[str, Dict]:
        """Handle position per curve edge index, placed or generated."""
        payload = self.to_payload(chart)
        offset = get_settings().curve_control_offset
        return {
            str(idx): control_point_for(payload, idx, offset).model_dump()
            for idx, conn in enumerate(payload.line_connections)
            if conn.type == LineType.CURVE
        }

    def serialize(self, chart: ChartType, include_geometry: bool = True) -> Dict:
        data = {
            "id": chart.id,
            "name": chart.name,
            "point_count": len(chart.coordinates or []),
            "connection_count": len(chart.line_connections or []),
            "template_ids": [t.id for t in self.templates_using(chart.id)],
            "updated_at": chart.updated_at.isoformat() if chart.updated_at else None,
        }
        if include_geometry:
            payload = self.to_payload(chart).model_dump(mode="json")
            for key in ("coordinates", "draw_order", "line_connections", "control_points", "armhole_depth"):
                data[key] = payload[key]
            data["control_handles"] = self.control_handles(chart)
        return data


def _chart_sort_key(chart: ChartType):
    match = CHART_ID_PATTERN.match(chart.id)
    return (0, int(match.group(1)), "") if match else (1, 0, chart.id)

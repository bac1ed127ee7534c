"""
Chart Geometry

Point/edge payload of a chart type and the size-adjusted preview.

The preview is a local heuristic, not a layout solve: every point is
scaled by the mean ratio (target size / base size) of the measurements
bound to the edges touching it, per axis. Coordinates live on a
0..COORD_SCALE integer grid.
"""
import math
from enum import Enum as PyEnum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ..db import LineType, MeasurementAxis
from .catalog import axis_for, unknown_items
from .errors import InvalidGeometryError

DEFAULT_CHART_NAME = "새 차트"


class _PayloadModel(BaseModel):
    # camelCase input is accepted for payloads exported by the old dashboard
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Coordinate(_PayloadModel):
    x: int
    y: int
    measurement_item: Optional[str] = None
    angle: Optional[float] = None


class LineConnection(_PayloadModel):
    from_index: int
    to_index: int
    type: LineType = LineType.STRAIGHT
    measurement_item: Optional[str] = None


class ControlPoint(_PayloadModel):
    x: int
    y: int


class ChartTypePayload(_PayloadModel):
    id: Optional[str] = None
    name: str = ""
    coordinates: List[Coordinate] = Field(default_factory=list)
    draw_order: List[int] = Field(default_factory=list)
    line_connections: List[LineConnection] = Field(default_factory=list)
    control_points: Dict[str, ControlPoint] = Field(default_factory=dict)
    armhole_depth: Optional[float] = None


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positives, like the canvas always did."""
    return int(math.floor(value + 0.5))


def clamp(value: float, scale: int) -> int:
    return max(0, min(scale, round_half_up(value)))


def canvas_to_coordinate(client: float, origin: float, size: float, scale: int) -> int:
    """Convert a pointer position in canvas pixels to grid units."""
    if size <= 0:
        raise InvalidGeometryError("Canvas size must be positive")
    return round_half_up((client - origin) / size * scale)


def connection_key(from_index: int, to_index: int) -> str:
    return f"conn-{from_index}-{to_index}"


def default_control_point(start: Coordinate, end: Coordinate, offset: int) -> ControlPoint:
    """Midpoint of the chord raised above the higher endpoint."""
    return ControlPoint(
        x=round_half_up((start.x + end.x) / 2),
        y=min(start.y, end.y) - offset,
    )


def control_point_for(payload: ChartTypePayload, edge_index: int, offset: int) -> ControlPoint:
    """Explicit control point if one was placed, else the generated default."""
    conn = payload.line_connections[edge_index]
    explicit = payload.control_points.get(connection_key(conn.from_index, conn.to_index))
    if explicit:
        return explicit
    return default_control_point(
        payload.coordinates[conn.from_index],
        payload.coordinates[conn.to_index],
        offset,
    )


def _size_key(size_range) -> str:
    return size_range.value if isinstance(size_range, PyEnum) else str(size_range)


def size_table_from_details(size_details: Optional[List[Dict]]) -> Dict[str, Dict[str, float]]:
    """Template size_details -> {size_range: {item_id: value}}."""
    table = {}
    for detail in size_details or []:
        table[_size_key(detail["size_range"])] = {
            item: float(value) for item, value in (detail.get("measurements") or {}).items()
        }
    return table


def adjusted_coordinates(
    coordinates: List[Coordinate],
    connections: List[LineConnection],
    size_table: Dict[str, Dict[str, float]],
    target_size,
    base_size,
) -> List[Coordinate]:
    """Scale every point for a target size.

    Args:
        coordinates: Points in index order
        connections: Edges referencing point indices
        size_table: {size_range: {item_id: value}}
        target_size: Size range to preview
        base_size: Size range the raw coordinates were drawn at

    Returns:
        New coordinates; points without measured incident edges are unchanged
    """
    base_values = size_table.get(_size_key(base_size), {})
    target_values = size_table.get(_size_key(target_size), {})

    adjusted = []
    for index, point in enumerate(coordinates):
        measured = [
            conn for conn in connections
            if (conn.from_index == index or conn.to_index == index) and conn.measurement_item
        ]
        if not measured:
            adjusted.append(point.model_copy())
            continue

        x_sum = y_sum = 0.0
        x_count = y_count = 0
        for conn in measured:
            base_value = base_values.get(conn.measurement_item)
            target_value = target_values.get(conn.measurement_item)
            if not base_value or not target_value:
                continue

            ratio = target_value / base_value
            axis = axis_for(conn.measurement_item)
            if axis in (MeasurementAxis.X, MeasurementAxis.BOTH):
                x_sum += ratio
                x_count += 1
            if axis in (MeasurementAxis.Y, MeasurementAxis.BOTH):
                y_sum += ratio
                y_count += 1

        x_ratio = x_sum / x_count if x_count else 1.0
        y_ratio = y_sum / y_count if y_count else 1.0

        adjusted.append(point.model_copy(update={
            "x": round_half_up(point.x * x_ratio),
            "y": round_half_up(point.y * y_ratio),
        }))

    return adjusted


def validate_geometry(payload: ChartTypePayload, scale: int) -> None:
    """Reject payloads whose indices or item references don't resolve."""
    count = len(payload.coordinates)

    for idx, point in enumerate(payload.coordinates):
        if not (0 <= point.x <= scale and 0 <= point.y <= scale):
            raise InvalidGeometryError(
                f"Point {idx} ({point.x}, {point.y}) is outside the 0..{scale} grid"
            )

    for entry in payload.draw_order:
        if not 0 <= entry < count:
            raise InvalidGeometryError(f"Draw order entry {entry} does not reference a point")

    for idx, conn in enumerate(payload.line_connections):
        for end in (conn.from_index, conn.to_index):
            if not 0 <= end < count:
                raise InvalidGeometryError(f"Connection {idx} references missing point {end}")
        if conn.from_index == conn.to_index:
            raise InvalidGeometryError(f"Connection {idx} joins point {conn.from_index} to itself")

    referenced = [p.measurement_item for p in payload.coordinates if p.measurement_item]
    referenced += [c.measurement_item for c in payload.line_connections if c.measurement_item]
    missing = unknown_items(referenced)
    if missing:
        raise InvalidGeometryError(f"Unknown measurement items: {', '.join(sorted(set(missing)))}")

    valid_keys = {connection_key(c.from_index, c.to_index) for c in payload.line_connections}
    stray = sorted(set(payload.control_points) - valid_keys)
    if stray:
        raise InvalidGeometryError(f"Control points without a connection: {', '.join(stray)}")

"""
Chart Geometry Editor

Three-step editor (name -> points/edges -> size preview) that builds a
chart type payload.

Operators address points and edges by their position, as the canvas and
connection table show them. Internally every point and edge carries a
stable id assigned at creation, so draw order, edges and control points
never need renumbering when a point is removed; positions are only
resolved when the payload is projected back out.
"""
import itertools
import logging
from contextlib import contextmanager
from dataclasses import dataclass
from enum import IntEnum
from typing import Callable, Dict, List, Optional, Tuple

from ..config import get_settings
from ..db import LineType
from .catalog import is_known_item
from .errors import InvalidGeometryError
from .geometry import (
    DEFAULT_CHART_NAME, ChartTypePayload, ControlPoint, Coordinate, LineConnection,
    adjusted_coordinates, canvas_to_coordinate, clamp, connection_key, default_control_point,
    validate_geometry,
)
from .sizes import base_size as default_base_size

logger = logging.getLogger(__name__)


class EditorStep(IntEnum):
    NAME = 0
    GEOMETRY = 1
    PREVIEW = 2


class DragKind:
    POINT = "point"
    CONTROL = "control"


@dataclass
class Canvas:
    """On-screen canvas rectangle, in client pixels."""
    left: float = 0.0
    top: float = 0.0
    width: float = 1600.0
    height: float = 800.0

    def to_grid(self, client_x: float, client_y: float, scale: int) -> Tuple[int, int]:
        return (
            canvas_to_coordinate(client_x, self.left, self.width, scale),
            canvas_to_coordinate(client_y, self.top, self.height, scale),
        )


class PointerListeners:
    """Pointer-move / pointer-up handlers attached while a drag is live."""

    MOVE = "pointermove"
    UP = "pointerup"

    def __init__(self):
        self._handlers: Dict[str, List[Callable[[float, float], None]]] = {
            self.MOVE: [],
            self.UP: [],
        }

    def add(self, event: str, handler: Callable[[float, float], None]):
        self._handlers[event].append(handler)

    def remove(self, event: str, handler: Callable[[float, float], None]):
        if handler in self._handlers[event]:
            self._handlers[event].remove(handler)

    def dispatch(self, event: str, client_x: float, client_y: float) -> bool:
        """Call every handler for the event; False when nobody listens."""
        handlers = list(self._handlers[event])
        for handler in handlers:
            handler(client_x, client_y)
        return bool(handlers)

    def count(self, event: Optional[str] = None) -> int:
        if event:
            return len(self._handlers[event])
        return sum(len(h) for h in self._handlers.values())

    def clear(self):
        for handlers in self._handlers.values():
            handlers.clear()


@dataclass
class _Point:
    id: int
    x: int
    y: int
    measurement_item: Optional[str] = None
    angle: Optional[float] = None


@dataclass
class _Edge:
    id: int
    from_id: int
    to_id: int
    type: LineType = LineType.STRAIGHT
    measurement_item: Optional[str] = None


@dataclass
class _DragState:
    kind: str
    target_id: int
    offset_x: int
    offset_y: int


class ChartEditor:
    """Builds one chart type's point set, draw order and typed edges."""

    def __init__(
        self,
        name: str = "",
        chart_type_id: Optional[str] = None,
        scale: Optional[int] = None,
        canvas: Optional[Canvas] = None,
        default_line_type: Optional[LineType] = None,
        control_offset: Optional[int] = None,
        armhole_depth: Optional[float] = None,
    ):
        settings = get_settings()
        self.name = name
        self.chart_type_id = chart_type_id
        self.armhole_depth = armhole_depth
        self.scale = scale or settings.coord_scale
        self.canvas = canvas or Canvas(width=settings.canvas_width, height=settings.canvas_height)
        self.default_line_type = LineType(default_line_type or settings.default_line_type)
        self.control_offset = (
            control_offset if control_offset is not None else settings.curve_control_offset
        )

        self.step = EditorStep.NAME
        self.listeners = PointerListeners()
        self.closed = False

        self._ids = itertools.count(1)
        self._points: List[_Point] = []
        self._draw_order: List[int] = []
        self._edges: List[_Edge] = []
        self._control_points: Dict[int, ControlPoint] = {}
        self._selected: Optional[int] = None
        self._drag: Optional[_DragState] = None

    # ---------- steps ----------

    def next(self) -> EditorStep:
        self.step = EditorStep(min(self.step + 1, EditorStep.PREVIEW))
        return self.step

    def back(self) -> EditorStep:
        self.step = EditorStep(max(self.step - 1, EditorStep.NAME))
        return self.step

    def go_to(self, step: int) -> EditorStep:
        self.step = EditorStep(step)
        return self.step

    def set_name(self, name: str):
        self.name = name

    # ---------- lookups ----------

    def _positions(self) -> Dict[int, int]:
        return {point.id: idx for idx, point in enumerate(self._points)}

    def _point_at(self, index: int) -> _Point:
        if not 0 <= index < len(self._points):
            raise InvalidGeometryError(f"No point at index {index}")
        return self._points[index]

    def _edge_at(self, index: int) -> _Edge:
        if not 0 <= index < len(self._edges):
            raise InvalidGeometryError(f"No connection at index {index}")
        return self._edges[index]

    def _point_by_id(self, point_id: int) -> Optional[_Point]:
        for point in self._points:
            if point.id == point_id:
                return point
        return None

    def _edge_by_id(self, edge_id: int) -> Optional[_Edge]:
        for edge in self._edges:
            if edge.id == edge_id:
                return edge
        return None

    @staticmethod
    def _check_item(measurement_item: Optional[str]):
        if measurement_item is not None and not is_known_item(measurement_item):
            raise InvalidGeometryError(f"Unknown measurement item '{measurement_item}'")

    @property
    def coordinates(self) -> List[Coordinate]:
        return [
            Coordinate(x=p.x, y=p.y, measurement_item=p.measurement_item, angle=p.angle)
            for p in self._points
        ]

    @property
    def draw_order(self) -> List[int]:
        positions = self._positions()
        return [positions[point_id] for point_id in self._draw_order]

    @property
    def line_connections(self) -> List[LineConnection]:
        positions = self._positions()
        return [
            LineConnection(
                from_index=positions[edge.from_id],
                to_index=positions[edge.to_id],
                type=edge.type,
                measurement_item=edge.measurement_item,
            )
            for edge in self._edges
        ]

    @property
    def selected_index(self) -> Optional[int]:
        if self._selected is None:
            return None
        return self._positions().get(self._selected)

    # ---------- points ----------

    def add_point(
        self,
        x: int,
        y: int,
        measurement_item: Optional[str] = None,
        angle: Optional[float] = None,
    ) -> int:
        """Append a point and connect it to the last point in draw order.

        Returns:
            Index of the new point
        """
        if not (0 <= x <= self.scale and 0 <= y <= self.scale):
            raise InvalidGeometryError(f"({x}, {y}) is outside the 0..{self.scale} grid")
        self._check_item(measurement_item)

        point = _Point(id=next(self._ids), x=x, y=y, measurement_item=measurement_item, angle=angle)
        self._points.append(point)

        if self._draw_order:
            previous = self._draw_order[-1]
            self._edges.append(_Edge(
                id=next(self._ids),
                from_id=previous,
                to_id=point.id,
                type=self.default_line_type,
            ))
        self._draw_order.append(point.id)

        return len(self._points) - 1

    def canvas_click(self, client_x: float, client_y: float) -> int:
        x, y = self.canvas.to_grid(client_x, client_y, self.scale)
        return self.add_point(clamp(x, self.scale), clamp(y, self.scale))

    def remove_point(self, index: int) -> Coordinate:
        """Delete a point with its draw-order entry and every incident edge."""
        point = self._point_at(index)
        del self._points[index]

        self._draw_order = [pid for pid in self._draw_order if pid != point.id]

        survivors = []
        for edge in self._edges:
            if point.id in (edge.from_id, edge.to_id):
                self._control_points.pop(edge.id, None)
            else:
                survivors.append(edge)
        logger.debug(f"Removed point {index}, dropped {len(self._edges) - len(survivors)} connections")
        self._edges = survivors

        if self._selected == point.id:
            self._selected = None
        if self._drag and self._drag_target_missing():
            self.end_drag()

        return Coordinate(x=point.x, y=point.y, measurement_item=point.measurement_item, angle=point.angle)

    def point(self, index: int) -> Coordinate:
        p = self._point_at(index)
        return Coordinate(x=p.x, y=p.y, measurement_item=p.measurement_item, angle=p.angle)

    def update_point(self, index: int, changes: Dict) -> Coordinate:
        """Apply a partial edit of one point; nothing changes unless all of it is valid."""
        point = self._point_at(index)
        if "measurement_item" in changes:
            self._check_item(changes["measurement_item"])

        x, y = changes.get("x"), changes.get("y")
        if x is not None or y is not None:
            point.x = clamp(point.x if x is None else x, self.scale)
            point.y = clamp(point.y if y is None else y, self.scale)
        if "measurement_item" in changes:
            point.measurement_item = changes["measurement_item"]
        if "angle" in changes:
            point.angle = changes["angle"]

        if changes.get("selected") is True:
            self._selected = point.id
        elif changes.get("selected") is False and self._selected == point.id:
            self._selected = None
        return self.point(index)

    # ---------- edges ----------

    def update_connection(self, index: int, changes: Dict) -> LineConnection:
        """Apply a partial edit of one connection; nothing changes unless all of it is valid."""
        edge = self._edge_at(index)
        line_type = LineType(changes["type"]) if changes.get("type") is not None else edge.type
        if "measurement_item" in changes:
            self._check_item(changes["measurement_item"])
            edge.measurement_item = changes["measurement_item"]
        edge.type = line_type
        return self.line_connections[index]

    def reorder_connection(self, from_position: int, to_position: int):
        """Move a connection within the table; geometry is unaffected."""
        edge = self._edge_at(from_position)
        if not 0 <= to_position < len(self._edges):
            raise InvalidGeometryError(f"No connection at index {to_position}")
        self._edges.pop(from_position)
        self._edges.insert(to_position, edge)

    def remove_connection(self, index: int) -> LineConnection:
        edge = self._edge_at(index)
        removed = self.line_connections[index]
        del self._edges[index]
        self._control_points.pop(edge.id, None)
        if self._drag and self._drag_target_missing():
            self.end_drag()
        return removed

    def set_control_point(self, index: int, x: float, y: float) -> ControlPoint:
        edge = self._edge_at(index)
        control = ControlPoint(x=clamp(x, self.scale), y=clamp(y, self.scale))
        self._control_points[edge.id] = control
        return control

    def clear_control_point(self, index: int):
        self._control_points.pop(self._edge_at(index).id, None)

    def control_point(self, index: int) -> ControlPoint:
        """Placed control handle, or the generated default above the chord."""
        edge = self._edge_at(index)
        if edge.id in self._control_points:
            return self._control_points[edge.id]
        start = self._point_by_id(edge.from_id)
        end = self._point_by_id(edge.to_id)
        return default_control_point(
            Coordinate(x=start.x, y=start.y),
            Coordinate(x=end.x, y=end.y),
            self.control_offset,
        )

    def has_explicit_control_point(self, index: int) -> bool:
        return self._edge_at(index).id in self._control_points

    # ---------- drag ----------

    @property
    def is_dragging(self) -> bool:
        return self._drag is not None

    def begin_drag(self, kind: str, index: int, client_x: float, client_y: float):
        """Pointer-down on a point or control handle; attaches move/up listeners."""
        if self.closed:
            raise InvalidGeometryError("Editor is closed")
        if self._drag:
            self.end_drag()

        pointer_x, pointer_y = self.canvas.to_grid(client_x, client_y, self.scale)
        if kind == DragKind.POINT:
            target = self._point_at(index)
            origin_x, origin_y, target_id = target.x, target.y, target.id
        elif kind == DragKind.CONTROL:
            control = self.control_point(index)
            origin_x, origin_y, target_id = control.x, control.y, self._edge_at(index).id
        else:
            raise InvalidGeometryError(f"Unknown drag target '{kind}'")

        self._drag = _DragState(
            kind=kind,
            target_id=target_id,
            offset_x=pointer_x - origin_x,
            offset_y=pointer_y - origin_y,
        )
        self.listeners.add(PointerListeners.MOVE, self._on_pointer_move)
        self.listeners.add(PointerListeners.UP, self._on_pointer_up)

    def pointer_move(self, client_x: float, client_y: float) -> bool:
        return self.listeners.dispatch(PointerListeners.MOVE, client_x, client_y)

    def pointer_up(self, client_x: float, client_y: float) -> bool:
        return self.listeners.dispatch(PointerListeners.UP, client_x, client_y)

    def end_drag(self):
        self.listeners.remove(PointerListeners.MOVE, self._on_pointer_move)
        self.listeners.remove(PointerListeners.UP, self._on_pointer_up)
        self._drag = None

    @contextmanager
    def dragging(self, kind: str, index: int, client_x: float, client_y: float):
        """Scope a drag gesture; listeners are detached however it ends."""
        self.begin_drag(kind, index, client_x, client_y)
        try:
            yield self
        finally:
            self.end_drag()

    def _drag_target_missing(self) -> bool:
        if self._drag.kind == DragKind.POINT:
            return self._point_by_id(self._drag.target_id) is None
        return self._edge_by_id(self._drag.target_id) is None

    def _on_pointer_move(self, client_x: float, client_y: float):
        drag = self._drag
        if drag is None:
            return
        if self._drag_target_missing():
            self.end_drag()
            return

        pointer_x, pointer_y = self.canvas.to_grid(client_x, client_y, self.scale)
        x = clamp(pointer_x - drag.offset_x, self.scale)
        y = clamp(pointer_y - drag.offset_y, self.scale)

        if drag.kind == DragKind.POINT:
            point = self._point_by_id(drag.target_id)
            point.x, point.y = x, y
        else:
            self._control_points[drag.target_id] = ControlPoint(x=x, y=y)

    def _on_pointer_up(self, client_x: float, client_y: float):
        self.end_drag()

    def close(self):
        """Teardown: drop any live drag and its listeners."""
        self.end_drag()
        self.listeners.clear()
        self.closed = True

    # ---------- output ----------

    def preview(self, size_range, size_table: Dict[str, Dict[str, float]], base_size=None) -> List[Coordinate]:
        return adjusted_coordinates(
            self.coordinates,
            self.line_connections,
            size_table,
            size_range,
            base_size or default_base_size(),
        )

    def to_payload(self) -> ChartTypePayload:
        positions = self._positions()
        control_points = {}
        for edge in self._edges:
            if edge.id in self._control_points:
                key = connection_key(positions[edge.from_id], positions[edge.to_id])
                control_points[key] = self._control_points[edge.id]

        return ChartTypePayload(
            id=self.chart_type_id,
            name=self.name,
            coordinates=self.coordinates,
            draw_order=self.draw_order,
            line_connections=self.line_connections,
            control_points=control_points,
            armhole_depth=self.armhole_depth,
        )

    def submit(self) -> ChartTypePayload:
        payload = self.to_payload()
        if not payload.name.strip():
            payload.name = DEFAULT_CHART_NAME
        return payload

    @classmethod
    def from_payload(cls, payload: ChartTypePayload, **kwargs) -> "ChartEditor":
        """Load a stored chart type, assigning fresh ids to its points and edges."""
        editor = cls(
            name=payload.name,
            chart_type_id=payload.id,
            armhole_depth=payload.armhole_depth,
            **kwargs,
        )
        validate_geometry(payload, editor.scale)

        for coord in payload.coordinates:
            editor._points.append(_Point(
                id=next(editor._ids),
                x=coord.x,
                y=coord.y,
                measurement_item=coord.measurement_item,
                angle=coord.angle,
            ))
        ids = [point.id for point in editor._points]

        editor._draw_order = [ids[entry] for entry in payload.draw_order]
        for conn in payload.line_connections:
            edge = _Edge(
                id=next(editor._ids),
                from_id=ids[conn.from_index],
                to_id=ids[conn.to_index],
                type=conn.type,
                measurement_item=conn.measurement_item,
            )
            editor._edges.append(edge)
            key = connection_key(conn.from_index, conn.to_index)
            if key in payload.control_points:
                editor._control_points[edge.id] = payload.control_points[key]

        return editor

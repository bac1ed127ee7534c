"""Chart editor session endpoints.

Each session holds one live ChartEditor. Points and connections are
addressed by their current position, as the canvas and connection table
show them.
"""
from typing import Literal, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from pydantic import BaseModel

from ..db import get_db, LineType, SizeRange, Template
from ..patterns.chart_editor import ChartEditor, EditorStep
from ..patterns.chart_types import ChartTypeService
from ..patterns.errors import NotFoundError
from ..patterns.sessions import EditorSession, editor_sessions
from .errors import translate_errors

router = APIRouter()


# Pydantic Models

class SessionOpen(BaseModel):
    chart_type_id: Optional[str] = None  # load an existing chart type
    template_id: Optional[str] = None  # size table used by previews
    name: str = ""


class NameUpdate(BaseModel):
    name: str


class PointCreate(BaseModel):
    x: int
    y: int
    measurement_item: Optional[str] = None
    angle: Optional[float] = None


class PointUpdate(BaseModel):
    x: Optional[float] = None
    y: Optional[float] = None
    measurement_item: Optional[str] = None
    angle: Optional[float] = None
    selected: Optional[bool] = None


class PointerPosition(BaseModel):
    client_x: float
    client_y: float


class ConnectionUpdate(BaseModel):
    type: Optional[LineType] = None
    measurement_item: Optional[str] = None


class ConnectionReorder(BaseModel):
    from_position: int
    to_position: int


class ControlPointUpdate(BaseModel):
    x: float
    y: float


class DragStart(PointerPosition):
    kind: Literal["point", "control"]
    index: int


def _state(session: EditorSession) -> dict:
    editor = session.editor
    payload = editor.to_payload().model_dump(mode="json")
    return {
        "session_id": session.id,
        "template_id": session.template_id,
        "chart_type_id": editor.chart_type_id,
        "name": editor.name,
        "step": editor.step.name.lower(),
        "step_index": int(editor.step),
        "coordinates": payload["coordinates"],
        "draw_order": payload["draw_order"],
        "line_connections": payload["line_connections"],
        "control_points": payload["control_points"],
        # Handle positions for every curve, explicit or generated
        "control_handles": {
            str(idx): editor.control_point(idx).model_dump()
            for idx, conn in enumerate(editor.line_connections)
            if conn.type == LineType.CURVE
        },
        "placed_handles": [
            idx for idx in range(len(editor.line_connections))
            if editor.has_explicit_control_point(idx)
        ],
        "selected_index": editor.selected_index,
        "is_dragging": editor.is_dragging,
        "active_listeners": editor.listeners.count(),
    }


def _get_session(session_id: str) -> EditorSession:
    with translate_errors():
        return editor_sessions.get(session_id)


# Endpoints

@router.post("/api/chart-editor/sessions", tags=["Chart Editor"])
async def open_session(data: SessionOpen, db: Session = Depends(get_db)):
    """Open an editor, blank or loaded from a stored chart type."""
    with translate_errors():
        if data.template_id and not db.query(Template).filter(Template.id == data.template_id).first():
            raise NotFoundError("Template", data.template_id)

        if data.chart_type_id:
            service = ChartTypeService(db)
            editor = ChartEditor.from_payload(service.to_payload(service.get_chart_type(data.chart_type_id)))
        else:
            editor = ChartEditor(name=data.name)

    session = editor_sessions.open(editor, template_id=data.template_id)
    return _state(session)


@router.get("/api/chart-editor/sessions/{session_id}", tags=["Chart Editor"])
async def get_session(session_id: str):
    return _state(_get_session(session_id))


@router.delete("/api/chart-editor/sessions/{session_id}", tags=["Chart Editor"])
async def close_session(session_id: str):
    """Teardown; any live drag listeners are detached."""
    with translate_errors():
        session = editor_sessions.close(session_id)
    return {
        "success": True,
        "session_id": session_id,
        "active_listeners": session.editor.listeners.count()
    }


@router.post("/api/chart-editor/sessions/{session_id}/name", tags=["Chart Editor"])
async def set_name(session_id: str, data: NameUpdate):
    session = _get_session(session_id)
    session.editor.set_name(data.name)
    return _state(session)


@router.post("/api/chart-editor/sessions/{session_id}/next", tags=["Chart Editor"])
async def next_step(session_id: str):
    session = _get_session(session_id)
    session.editor.next()
    return _state(session)


@router.post("/api/chart-editor/sessions/{session_id}/back", tags=["Chart Editor"])
async def previous_step(session_id: str):
    session = _get_session(session_id)
    session.editor.back()
    return _state(session)


@router.post("/api/chart-editor/sessions/{session_id}/points", tags=["Chart Editor"])
async def add_point(session_id: str, data: PointCreate):
    """Append a point; it is connected to the previous point in draw order."""
    session = _get_session(session_id)
    with translate_errors():
        index = session.editor.add_point(data.x, data.y, data.measurement_item, data.angle)
    return {"index": index, **_state(session)}


@router.post("/api/chart-editor/sessions/{session_id}/canvas-click", tags=["Chart Editor"])
async def canvas_click(session_id: str, data: PointerPosition):
    session = _get_session(session_id)
    with translate_errors():
        index = session.editor.canvas_click(data.client_x, data.client_y)
    return {"index": index, **_state(session)}


@router.put("/api/chart-editor/sessions/{session_id}/points/{index}", tags=["Chart Editor"])
async def update_point(session_id: str, index: int, data: PointUpdate):
    session = _get_session(session_id)
    with translate_errors():
        session.editor.update_point(index, data.model_dump(exclude_unset=True))
    return _state(session)


@router.delete("/api/chart-editor/sessions/{session_id}/points/{index}", tags=["Chart Editor"])
async def remove_point(session_id: str, index: int):
    """Delete a point and every connection touching it; later points shift down."""
    session = _get_session(session_id)
    with translate_errors():
        removed = session.editor.remove_point(index)
    return {"removed": removed.model_dump(mode="json"), **_state(session)}


@router.patch("/api/chart-editor/sessions/{session_id}/connections/{index}", tags=["Chart Editor"])
async def update_connection(session_id: str, index: int, data: ConnectionUpdate):
    session = _get_session(session_id)
    with translate_errors():
        session.editor.update_connection(index, data.model_dump(exclude_unset=True))
    return _state(session)


@router.delete("/api/chart-editor/sessions/{session_id}/connections/{index}", tags=["Chart Editor"])
async def remove_connection(session_id: str, index: int):
    session = _get_session(session_id)
    with translate_errors():
        removed = session.editor.remove_connection(index)
    return {"removed": removed.model_dump(mode="json"), **_state(session)}


@router.post("/api/chart-editor/sessions/{session_id}/connections/reorder", tags=["Chart Editor"])
async def reorder_connection(session_id: str, data: ConnectionReorder):
    session = _get_session(session_id)
    with translate_errors():
        session.editor.reorder_connection(data.from_position, data.to_position)
    return _state(session)


@router.put("/api/chart-editor/sessions/{session_id}/control-points/{index}", tags=["Chart Editor"])
async def set_control_point(session_id: str, index: int, data: ControlPointUpdate):
    session = _get_session(session_id)
    with translate_errors():
        session.editor.set_control_point(index, data.x, data.y)
    return _state(session)


@router.delete("/api/chart-editor/sessions/{session_id}/control-points/{index}", tags=["Chart Editor"])
async def clear_control_point(session_id: str, index: int):
    """Drop a placed handle; the curve falls back to the generated one."""
    session = _get_session(session_id)
    with translate_errors():
        session.editor.clear_control_point(index)
    return _state(session)


@router.post("/api/chart-editor/sessions/{session_id}/drag/start", tags=["Chart Editor"])
async def drag_start(session_id: str, data: DragStart):
    """Pointer-down on a point or a curve's control handle."""
    session = _get_session(session_id)
    with translate_errors():
        session.editor.begin_drag(data.kind, data.index, data.client_x, data.client_y)
    return _state(session)


@router.post("/api/chart-editor/sessions/{session_id}/drag/move", tags=["Chart Editor"])
async def drag_move(session_id: str, data: PointerPosition):
    session = _get_session(session_id)
    handled = session.editor.pointer_move(data.client_x, data.client_y)
    return {"handled": handled, **_state(session)}


@router.post("/api/chart-editor/sessions/{session_id}/drag/end", tags=["Chart Editor"])
async def drag_end(session_id: str, data: PointerPosition):
    session = _get_session(session_id)
    handled = session.editor.pointer_up(data.client_x, data.client_y)
    return {"handled": handled, **_state(session)}


@router.get("/api/chart-editor/sessions/{session_id}/preview", tags=["Chart Editor"])
async def preview(
    session_id: str,
    size: SizeRange,
    base_size: Optional[SizeRange] = None,
    db: Session = Depends(get_db)
):
    """Size-adjusted coordinates for the preview step."""
    session = _get_session(session_id)
    editor = session.editor
    with translate_errors():
        size_table = ChartTypeService(db).size_table_for(editor.chart_type_id, session.template_id)
        coordinates = editor.preview(size, size_table, base_size)

    return {
        "size_range": size.value,
        "step": editor.step.name.lower(),
        "coordinates": [c.model_dump(mode="json") for c in coordinates],
        "line_connections": [c.model_dump(mode="json") for c in editor.line_connections],
    }


@router.post("/api/chart-editor/sessions/{session_id}/submit", tags=["Chart Editor"])
async def submit(session_id: str, close: bool = True, db: Session = Depends(get_db)):
    """Persist the editor's payload as a chart type."""
    session = _get_session(session_id)
    editor = session.editor
    service = ChartTypeService(db)

    with translate_errors():
        chart = service.save(editor.submit())
        editor.chart_type_id = chart.id
        if close:
            editor_sessions.close(session_id)
        else:
            editor.go_to(EditorStep.PREVIEW)

    return {
        "success": True,
        "chart_type_id": chart.id,
        "session_closed": close,
        "chart_type": service.serialize(chart)
    }

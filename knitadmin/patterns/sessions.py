"""Process-local registry of open chart editors."""
import logging
import threading
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Dict, Optional

from ..config import get_settings
from .chart_editor import ChartEditor
from .errors import NotFoundError

logger = logging.getLogger(__name__)


@dataclass
class EditorSession:
    id: str
    editor: ChartEditor
    template_id: Optional[str] = None  # size table source for previews
    opened_at: datetime = field(default_factory=datetime.utcnow)
    last_used: datetime = field(default_factory=datetime.utcnow)


class EditorSessionRegistry:
    def __init__(self):
        self._sessions: Dict[str, EditorSession] = {}
        self._lock = threading.Lock()

    def open(self, editor: ChartEditor, template_id: Optional[str] = None) -> EditorSession:
        self.expire_idle()
        session = EditorSession(id=uuid.uuid4().hex, editor=editor, template_id=template_id)
        with self._lock:
            self._sessions[session.id] = session
        logger.info(f"Opened editor session {session.id} (chart type {editor.chart_type_id or 'new'})")
        return session

    def get(self, session_id: str) -> EditorSession:
        self.expire_idle()
        with self._lock:
            session = self._sessions.get(session_id)
            if session:
                session.last_used = datetime.utcnow()
        if not session:
            raise NotFoundError("Editor session", session_id)
        return session

    def close(self, session_id: str) -> EditorSession:
        """Remove the session and tear down its editor."""
        with self._lock:
            session = self._sessions.pop(session_id, None)
        if not session:
            raise NotFoundError("Editor session", session_id)
        session.editor.close()
        logger.info(f"Closed editor session {session_id}")
        return session

    def expire_idle(self, now: Optional[datetime] = None) -> int:
        """Close sessions untouched for longer than the idle limit. Returns count closed."""
        idle_minutes = get_settings().editor_session_idle_minutes
        cutoff = (now or datetime.utcnow()) - timedelta(minutes=idle_minutes)
        with self._lock:
            expired = [s for s in self._sessions.values() if s.last_used <= cutoff]
            for session in expired:
                del self._sessions[session.id]

        for session in expired:
            session.editor.close()

        if expired:
            logger.warning(
                f"Expired {len(expired)} editor session(s) idle for over {idle_minutes} minutes"
            )
        return len(expired)

    def clear(self):
        with self._lock:
            sessions = list(self._sessions.values())
            self._sessions.clear()
        for session in sessions:
            session.editor.close()

    def __len__(self):
        with self._lock:
            return len(self._sessions)


editor_sessions = EditorSessionRegistry()

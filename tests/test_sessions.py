"""Editor session registry and idle expiry."""
from datetime import datetime, timedelta

import pytest

from knitadmin.patterns.chart_editor import ChartEditor, DragKind
from knitadmin.patterns.errors import NotFoundError
from knitadmin.patterns.sessions import EditorSessionRegistry


@pytest.fixture
def registry():
    registry = EditorSessionRegistry()
    yield registry
    registry.clear()


class TestRegistry:
    def test_open_get_close(self, registry):
        session = registry.open(ChartEditor(name="요크"), template_id="1")
        assert registry.get(session.id).template_id == "1"
        assert len(registry) == 1

        registry.close(session.id)
        assert len(registry) == 0
        with pytest.raises(NotFoundError):
            registry.get(session.id)

    def test_get_touches_last_used(self, registry):
        session = registry.open(ChartEditor())
        session.last_used = datetime.utcnow() - timedelta(minutes=30)
        registry.get(session.id)
        assert datetime.utcnow() - session.last_used < timedelta(minutes=1)


class TestIdleExpiry:
    def test_expires_only_idle_sessions(self, registry):
        idle = registry.open(ChartEditor())
        active = registry.open(ChartEditor())
        idle.last_used = datetime.utcnow() - timedelta(minutes=61)

        assert registry.expire_idle() == 1
        assert len(registry) == 1
        assert registry.get(active.id) is active
        with pytest.raises(NotFoundError):
            registry.get(idle.id)

    def test_expiry_tears_down_live_drag(self, registry):
        editor = ChartEditor()
        editor.add_point(0, 0)
        session = registry.open(editor)
        editor.begin_drag(DragKind.POINT, 0, 0, 0)
        assert editor.listeners.count() == 2

        later = session.last_used + timedelta(hours=2)
        assert registry.expire_idle(now=later) == 1
        assert editor.listeners.count() == 0
        assert editor.closed

    def test_nothing_to_expire(self, registry):
        registry.open(ChartEditor())
        assert registry.expire_idle() == 0

    def test_abandoned_session_is_gone_on_next_lookup(self, registry):
        abandoned = registry.open(ChartEditor())
        abandoned.last_used = datetime.utcnow() - timedelta(days=1)
        other = registry.open(ChartEditor())

        # opening the second session already swept the first
        assert len(registry) == 1
        assert registry.get(other.id) is other

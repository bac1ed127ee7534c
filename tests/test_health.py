from knitadmin.db import ChartType, MeasurementRule, Template, init_db


def test_health_reports_store_counts(client):
    data = client.get("/health").json()
    assert data["status"] == "healthy"
    assert data["database"] == "connected"
    assert (data["measurement_rules"], data["templates"], data["chart_types"]) == (3, 2, 6)
    assert data["editor_sessions"] == 0


def test_root(client):
    assert client.get("/").json()["module"] == "knitadmin"


def test_init_db_seeds_once(engine, session_factory):
    init_db(bind=engine)
    init_db(bind=engine)

    db = session_factory()
    try:
        assert db.query(MeasurementRule).count() == 3
        assert db.query(Template).count() == 2
        assert db.query(ChartType).count() == 6
    finally:
        db.close()

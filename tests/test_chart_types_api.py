"""Chart type store and its endpoints."""
import pytest

from knitadmin.patterns.chart_types import ChartTypeService
from knitadmin.patterns.errors import (
    InvalidGeometryError,
    MissingMeasurementRuleError,
    NotFoundError,
    ReferenceConflictError,
)
from knitadmin.patterns.geometry import ChartTypePayload

TRIANGLE = {
    "name": "삼각 포켓",
    "coordinates": [{"x": 100, "y": 100}, {"x": 300, "y": 100}, {"x": 200, "y": 300}],
    "draw_order": [0, 1, 2],
    "line_connections": [
        {"from_index": 0, "to_index": 1, "type": "straight", "measurement_item": "chest_width"},
        {"from_index": 1, "to_index": 2, "type": "curve"},
    ],
    "control_points": {"conn-1-2": {"x": 280, "y": 220}},
}


@pytest.fixture
def charts(db):
    return ChartTypeService(db)


class TestChartTypeService:
    def test_sample_chart_types(self, charts):
        assert [c.id for c in charts.list_chart_types()] == [f"chart{n}" for n in range(1, 7)]

    def test_create_assigns_next_id(self, charts):
        chart = charts.create_chart_type(ChartTypePayload.model_validate(TRIANGLE))
        assert chart.id == "chart7"
        assert chart.control_points == {"conn-1-2": {"x": 280, "y": 220}}
        assert charts.next_chart_type_id() == "chart8"

    def test_blank_name_gets_default(self, charts):
        chart = charts.create_chart_type(ChartTypePayload.model_validate({**TRIANGLE, "name": "  "}))
        assert chart.name == "새 차트"

    def test_invalid_geometry_is_rejected(self, charts):
        bad = {**TRIANGLE, "draw_order": [0, 1, 5]}
        with pytest.raises(InvalidGeometryError):
            charts.create_chart_type(ChartTypePayload.model_validate(bad))

    def test_payload_round_trip(self, charts):
        payload = charts.to_payload(charts.get_chart_type("chart1"))
        assert payload.draw_order == [0, 1, 2, 3]
        assert payload.line_connections[0].measurement_item == "neck_width"

    def test_delete_referenced_chart_is_refused(self, charts):
        with pytest.raises(ReferenceConflictError) as exc:
            charts.delete_chart_type("chart1")
        assert exc.value.conflicts == ["베이직 스웨터"]

    def test_delete_unreferenced_chart(self, charts):
        charts.delete_chart_type("chart6")
        with pytest.raises(NotFoundError):
            charts.get_chart_type("chart6")

    def test_preview_uses_first_template_listing_the_chart(self, charts):
        preview = charts.preview("chart1", "121-129")
        # chest_width 68 / 45, side_length 33.1 / 26, neck_width 21.7 / 17
        assert preview[2].x == round(700 * (68 / 45))
        assert preview[0].x != 300

    def test_preview_at_base_size_is_identity(self, charts):
        raw = charts.to_payload(charts.get_chart_type("chart1")).coordinates
        assert charts.preview("chart1", "74-79") == raw

    def test_preview_without_size_source(self, charts):
        with pytest.raises(MissingMeasurementRuleError):
            charts.preview("chart2", "80-84")


class TestChartTypeEndpoints:
    def test_list_omits_geometry(self, client):
        data = client.get("/api/chart-types").json()
        assert data["total"] == 6
        assert "coordinates" not in data["chart_types"][0]
        assert data["chart_types"][0]["template_ids"] == ["1"]

    def test_create_accepts_camel_case(self, client):
        response = client.post("/api/chart-types", json={
            "name": "카멜",
            "coordinates": [{"x": 0, "y": 0}, {"x": 10, "y": 10}],
            "drawOrder": [0, 1],
            "lineConnections": [{"fromIndex": 0, "toIndex": 1, "type": "curve"}],
        })
        assert response.status_code == 200
        data = response.json()["chart_type"]
        assert data["id"] == "chart7"
        assert data["line_connections"][0] == {
            "from_index": 0, "to_index": 1, "type": "curve", "measurement_item": None,
        }

    def test_get_includes_curve_handles(self, client):
        data = client.get("/api/chart-types/chart1").json()
        # only the neckline edge is a curve
        assert data["control_handles"] == {"0": {"x": 500, "y": 300}}

    def test_generated_handle_for_unplaced_curve(self, client):
        data = client.put("/api/chart-types/chart3", json={**TRIANGLE, "control_points": {}}).json()
        # chord midpoint, raised above the higher endpoint
        assert data["chart_type"]["control_handles"] == {"1": {"x": 250, "y": 50}}

    def test_update(self, client):
        response = client.put("/api/chart-types/chart3", json=TRIANGLE)
        assert response.status_code == 200
        assert response.json()["chart_type"]["point_count"] == 3

    def test_invalid_geometry_is_400(self, client):
        response = client.post("/api/chart-types", json={**TRIANGLE, "line_connections": [
            {"from_index": 0, "to_index": 0},
        ]})
        assert response.status_code == 400

    def test_delete_referenced_is_409(self, client):
        response = client.delete("/api/chart-types/chart1")
        assert response.status_code == 409
        assert response.json()["detail"]["conflicts"] == ["베이직 스웨터"]

    def test_preview(self, client):
        data = client.get("/api/chart-types/chart1/preview", params={"size": "74-79"}).json()
        assert data["base_size"] == "74-79"
        assert [(c["x"], c["y"]) for c in data["coordinates"]] == [(300, 200), (700, 200), (700, 800), (300, 800)]

    def test_preview_with_explicit_template(self, client):
        response = client.get("/api/chart-types/chart1/preview", params={"size": "80-84", "template_id": "2"})
        # template 2 has no values for the chart's items
        assert response.status_code == 200
        assert response.json()["coordinates"][0] == {"x": 300, "y": 200, "measurement_item": None, "angle": None}

    def test_preview_bad_size_is_422(self, client):
        assert client.get("/api/chart-types/chart1/preview", params={"size": "XL"}).status_code == 422

    def test_unknown_chart_is_404(self, client):
        assert client.get("/api/chart-types/chart99").status_code == 404
        assert client.get("/api/chart-types/chart99/preview", params={"size": "74-79"}).status_code == 404

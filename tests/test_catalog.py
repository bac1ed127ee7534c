"""Measurement catalog, size ranges and the catalog endpoints."""
import pytest

from knitadmin.db import MeasurementAxis, SizeRange
from knitadmin.patterns.catalog import (
    MEASUREMENT_ITEMS,
    axis_for,
    is_known_item,
    measurement_item_names,
    measurement_items_by_category,
    measurement_items_by_section,
    unknown_items,
)
from knitadmin.patterns.errors import UnknownSizeRangeError
from knitadmin.patterns.sizes import (
    SIZE_RANGES,
    is_slack_range,
    ordered_size_ranges,
    parse_size_range,
)


class TestCatalog:
    def test_ids_are_unique(self):
        ids = [item["id"] for item in MEASUREMENT_ITEMS]
        assert len(ids) == len(set(ids))

    def test_every_item_declares_an_axis(self):
        assert all(isinstance(item["axis"], MeasurementAxis) for item in MEASUREMENT_ITEMS)

    @pytest.mark.parametrize("item_id, axis", [
        ("chest_width", MeasurementAxis.X),
        ("neck_width", MeasurementAxis.X),
        ("sleeve_length", MeasurementAxis.Y),
        ("back_neck_depth", MeasurementAxis.Y),
        ("head_circumference", MeasurementAxis.BOTH),
    ])
    def test_axis_for(self, item_id, axis):
        assert axis_for(item_id) == axis

    def test_unknown_item_scales_both_axes(self):
        assert axis_for("no_such_item") == MeasurementAxis.BOTH

    def test_unknown_items(self):
        assert is_known_item("chest_width")
        assert unknown_items(["chest_width", "tail_length"]) == ["tail_length"]

    def test_names_fall_back_to_id(self):
        assert measurement_item_names(["chest_width", "tail_length"]) == ["가슴너비", "tail_length"]

    def test_grouped_by_category(self):
        grouped = measurement_items_by_category()
        assert sum(len(items) for items in grouped.values()) == len(MEASUREMENT_ITEMS)
        assert "chest_width" in [i["id"] for i in grouped["상의"]]

    def test_grouped_by_section(self):
        grouped = measurement_items_by_section()
        assert list(grouped)[0] == "상의"
        assert [i["id"] for i in grouped["상의"]["목"]] == ["back_neck_depth", "front_neck_depth", "neck_width"]


class TestSizeRanges:
    def test_eighteen_bins_in_display_order(self):
        assert len(SIZE_RANGES) == 18
        assert SIZE_RANGES[0] == SizeRange.S50_53
        assert SIZE_RANGES[-2:] == [SizeRange.MIN, SizeRange.MAX]

    def test_parse(self):
        assert parse_size_range("74-79") == SizeRange.S74_79
        assert parse_size_range(SizeRange.MIN) is SizeRange.MIN
        with pytest.raises(UnknownSizeRangeError):
            parse_size_range("XL")

    def test_ordering(self):
        assert ordered_size_ranges(["max", "74-79", "50-53", "74-79"]) == [
            SizeRange.S50_53, SizeRange.S74_79, SizeRange.MAX,
        ]

    def test_slack_bins(self):
        assert is_slack_range("min")
        assert not is_slack_range("74-79")


class TestCatalogEndpoints:
    def test_list_and_filter(self, client):
        data = client.get("/api/measurement-items").json()
        assert data["total"] == len(MEASUREMENT_ITEMS)

        necks = client.get("/api/measurement-items", params={"category": "상의", "section": "목"}).json()
        assert necks["total"] == 3
        assert {i["axis"] for i in necks["items"]} == {"x", "y"}

    def test_grouped(self, client):
        data = client.get("/api/measurement-items/grouped").json()
        assert data["categories"][0]["category"] == "상의"
        assert data["categories"][0]["sections"][0]["section"] == "몸통"

    def test_detail(self, client):
        assert client.get("/api/measurement-items/chest_width").json()["axis"] == "x"
        assert client.get("/api/measurement-items/nope").status_code == 404

"""Measurement rule lookup, duplicate detection and referential integrity."""
import pytest

from knitadmin.db import NecklineType, SleeveType
from knitadmin.patterns.errors import (
    DuplicateMeasurementRuleError,
    NotFoundError,
    ReferenceConflictError,
    UnknownCategoryError,
    UnknownMeasurementItemError,
)
from knitadmin.patterns.rules import MeasurementRuleService, rule_name


@pytest.fixture
def rules(db):
    return MeasurementRuleService(db)


class TestRuleName:
    def test_with_sleeve_type(self):
        assert rule_name(103, SleeveType.RAGLAN) == "래글런형 스웨터"
        assert rule_name(103, "셋인형") == "셋인형 스웨터"

    def test_without_sleeve_type(self):
        assert rule_name(301) == "비니"

    def test_unknown_category(self):
        with pytest.raises(UnknownCategoryError):
            rule_name(999999)


class TestFindMeasurementRule:
    def test_exact_match(self, rules):
        rule = rules.find_measurement_rule(103, SleeveType.RAGLAN)
        assert rule.id == "rule1"
        assert rule.category_id == 103
        assert rule.sleeve_type == SleeveType.RAGLAN

    def test_no_match_returns_none(self, rules):
        assert rules.find_measurement_rule(103, SleeveType.YOKE) is None
        assert rules.find_measurement_rule(104, SleeveType.RAGLAN) is None

    def test_missing_sleeve_type_only_matches_sleeveless_rules(self, rules):
        # 103 has only sleeved rules
        assert rules.find_measurement_rule(103) is None
        assert rules.find_measurement_rule(301).id == "rule3"

    def test_sleeve_type_does_not_match_sleeveless_rule(self, rules):
        assert rules.find_measurement_rule(301, SleeveType.RAGLAN) is None


class TestDuplicateDetection:
    def test_same_pair_is_duplicate(self, rules):
        assert rules.is_duplicate_measurement_rule(103, SleeveType.RAGLAN)

    def test_excluding_the_rule_itself(self, rules):
        assert not rules.is_duplicate_measurement_rule(103, SleeveType.RAGLAN, exclude_id="rule1")

    def test_both_sleeve_types_absent_is_duplicate(self, rules):
        assert rules.is_duplicate_measurement_rule(301)
        assert not rules.is_duplicate_measurement_rule(301, exclude_id="rule3")

    def test_different_pair_is_not_duplicate(self, rules):
        assert not rules.is_duplicate_measurement_rule(103, SleeveType.YOKE)
        assert not rules.is_duplicate_measurement_rule(104, SleeveType.RAGLAN)
        assert not rules.is_duplicate_measurement_rule(103)


class TestRuleCrud:
    def test_create_derives_name(self, rules):
        rule = rules.create_rule(104, ["chest_width", "sleeve_length"], SleeveType.YOKE)
        assert rule.id.startswith("rule_")
        assert rule.name == "요크형 가디건"
        assert rule.items == ["chest_width", "sleeve_length"]

    def test_create_duplicate_is_rejected(self, rules):
        with pytest.raises(DuplicateMeasurementRuleError):
            rules.create_rule(103, ["chest_width"], SleeveType.RAGLAN)

    def test_create_requires_a_leaf_category(self, rules):
        with pytest.raises(UnknownCategoryError):
            rules.create_rule(10, ["chest_width"])
        with pytest.raises(UnknownCategoryError):
            rules.create_rule(999999, ["chest_width"])

    def test_create_rejects_unknown_items(self, rules):
        with pytest.raises(UnknownMeasurementItemError) as exc:
            rules.create_rule(104, ["chest_width", "tail_length"])
        assert exc.value.item_ids == ["tail_length"]

    def test_update_can_keep_its_own_pair(self, rules):
        rule = rules.update_rule("rule2", 103, ["chest_width"], SleeveType.SET_IN)
        assert rule.items == ["chest_width"]
        assert rule.name == "셋인형 스웨터"

    def test_update_into_an_existing_pair_is_rejected(self, rules):
        with pytest.raises(DuplicateMeasurementRuleError):
            rules.update_rule("rule2", 103, ["chest_width"], SleeveType.RAGLAN)

    def test_update_refreshes_derived_template_fields(self, rules, db):
        rules.update_rule("rule1", 104, ["chest_width"], SleeveType.RAGLAN)
        template = rules.templates_using("rule1")[0]
        assert template.category_ids == [1, 10, 104]
        assert template.measurement_items == ["chest_width"]
        # still a knitting top, so construction options survive
        assert template.construction_methods == ["탑다운"]
        assert template.neckline_type == NecklineType.ROUND

    def test_moving_rule_out_of_tops_clears_construction_options(self, rules):
        rules.update_rule("rule1", 301, ["head_circumference"], SleeveType.RAGLAN)
        template = rules.templates_using("rule1")[0]
        assert template.category_ids == [2, 20, 301]
        assert template.construction_methods == []
        assert template.neckline_type is None

    def test_delete_in_use_rule_names_the_templates(self, rules):
        with pytest.raises(ReferenceConflictError) as exc:
            rules.delete_rule("rule1")
        assert exc.value.conflicts == ["베이직 스웨터"]
        assert rules.get_rule("rule1")

    def test_delete_unused_rule(self, rules):
        rules.delete_rule("rule2")
        with pytest.raises(NotFoundError):
            rules.get_rule("rule2")


class TestRuleEndpoints:
    def test_list(self, client):
        data = client.get("/api/measurement-rules").json()
        assert {r["id"] for r in data["rules"]} == {"rule1", "rule2", "rule3"}

    def test_lookup(self, client):
        found = client.get(
            "/api/measurement-rules/lookup",
            params={"category_id": 103, "sleeve_type": "래글런형"},
        ).json()
        assert found["found"] is True
        assert found["rule"]["name"] == "래글런형 스웨터"

        missing = client.get("/api/measurement-rules/lookup", params={"category_id": 103}).json()
        assert missing == {"found": False, "rule": None}

    def test_create_ignores_supplied_name(self, client):
        response = client.post("/api/measurement-rules", json={
            "category_id": 104,
            "sleeve_type": "셋인형",
            "items": ["chest_width"],
            "name": "whatever",
        })
        assert response.status_code == 200
        assert response.json()["rule"]["name"] == "셋인형 가디건"

    def test_create_duplicate_is_409(self, client):
        response = client.post("/api/measurement-rules", json={
            "category_id": 103, "sleeve_type": "래글런형", "items": ["chest_width"],
        })
        assert response.status_code == 409

    def test_create_with_no_items_is_422(self, client):
        response = client.post("/api/measurement-rules", json={"category_id": 104, "items": []})
        assert response.status_code == 422

    def test_delete_in_use_is_409_with_conflicts(self, client):
        response = client.delete("/api/measurement-rules/rule1")
        assert response.status_code == 409
        assert response.json()["detail"]["conflicts"] == ["베이직 스웨터"]

    def test_linked_templates(self, client):
        data = client.get("/api/measurement-rules/rule1/templates").json()
        assert [t["id"] for t in data["templates"]] == ["1"]

    def test_unknown_rule_is_404(self, client):
        assert client.get("/api/measurement-rules/nope").status_code == 404
        assert client.delete("/api/measurement-rules/nope").status_code == 404

"""Category tree lookups and the read-only category endpoints."""
from knitadmin.patterns.categories import (
    flattened_categories,
    get_category_by_id,
    get_category_path,
    get_child_categories,
    get_parent_categories,
    is_leaf_category,
)


class TestCategoryTree:
    def test_lookup_by_id(self):
        assert get_category_by_id(103)["name"] == "스웨터"
        assert get_category_by_id(999999) is None

    def test_parents_are_root_first(self):
        parents = get_parent_categories(103)
        assert [c["id"] for c in parents] == [1, 10]

    def test_parents_of_root_and_unknown_are_empty(self):
        assert get_parent_categories(1) == []
        assert get_parent_categories(999999) == []

    def test_category_path_ends_with_the_category(self):
        assert get_category_path(103) == [1, 10, 103]
        assert get_category_path(301) == [2, 20, 301]
        assert get_category_path(999999) == []

    def test_children(self):
        assert [c["id"] for c in get_child_categories(10)][:2] == [103, 104]
        assert [c["id"] for c in get_child_categories()] == [c["id"] for c in get_child_categories(None)]
        assert get_child_categories(103) == []

    def test_leaves(self):
        assert is_leaf_category(103)
        assert not is_leaf_category(10)
        assert not is_leaf_category(999999)

    def test_flattening_visits_every_node_once(self):
        ids = [c["id"] for c in flattened_categories()]
        assert len(ids) == len(set(ids))
        assert {1, 10, 103, 2, 20, 301}.issubset(ids)


class TestCategoryEndpoints:
    def test_tree(self, client):
        response = client.get("/api/categories")
        assert response.status_code == 200
        roots = response.json()["categories"]
        assert roots[0]["id"] == 1
        assert roots[0]["children"][0]["children"][0]["id"] == 103

    def test_detail_includes_path(self, client):
        data = client.get("/api/categories/103").json()
        assert data["is_leaf"] is True
        assert [c["id"] for c in data["path"]] == [1, 10, 103]

    def test_parents_and_children(self, client):
        assert [c["id"] for c in client.get("/api/categories/103/parents").json()["parents"]] == [1, 10]
        children = client.get("/api/categories/20/children").json()["children"]
        assert 301 in [c["id"] for c in children]

    def test_unknown_category_is_404(self, client):
        assert client.get("/api/categories/999999").status_code == 404
        assert client.get("/api/categories/999999/parents").status_code == 404

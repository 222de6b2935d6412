import pytest

from catalog.models.category import Category

API = "/api/categories"


class TestCreate:
    def test_create_root(self, client):
        resp = client.post(
            API,
            json={
                "name": "Home & Garden!!",
                "description": "House and yard",
                "imageUrl": "https://cdn.example.com/home.png",
            },
        )
        assert resp.status_code == 201
        body = resp.get_json()
        assert body["success"] is True
        data = body["data"]
        assert data["slug"] == "home-garden-"
        assert data["level"] == 0
        assert data["parentId"] is None
        assert data["parent"] is None
        assert data["isActive"] is True
        assert data["imageUrl"] == "https://cdn.example.com/home.png"

    def test_create_child(self, client, make_category):
        parent = make_category("Electronics")
        resp = client.post(API, json={"name": "Phones", "parentId": parent.id})
        assert resp.status_code == 201
        data = resp.get_json()["data"]
        assert data["level"] == 1
        assert data["parent"] == {"id": parent.id, "name": "Electronics"}

    def test_parent_id_as_string(self, client, make_category):
        parent = make_category("Electronics")
        resp = client.post(API, json={"name": "Phones", "parentId": str(parent.id)})
        assert resp.status_code == 201
        assert resp.get_json()["data"]["parentId"] == parent.id

    def test_inactive(self, client):
        resp = client.post(API, json={"name": "Archive", "isActive": False})
        assert resp.get_json()["data"]["isActive"] is False

    def test_missing_parent(self, client, session):
        resp = client.post(API, json={"name": "Orphan", "parentId": 9999})
        assert resp.status_code == 400
        body = resp.get_json()
        assert body["success"] is False
        assert body["kind"] == "NotFound"
        assert body["error"] == "Parent category not found"
        assert Category.query.count() == 0

    @pytest.mark.parametrize(
        "payload,field",
        [
            ({}, "name"),
            ({"name": "   "}, "name"),
            ({"name": "x" * 101}, "name"),
            ({"name": "Books", "description": "d" * 501}, "description"),
            ({"name": "Books", "imageUrl": "not a url"}, "imageUrl"),
            ({"name": "Books", "parentId": "abc"}, "parentId"),
            ({"name": ["Books"]}, "name"),
        ],
    )
    def test_validation_errors(self, client, payload, field):
        resp = client.post(API, json=payload)
        assert resp.status_code == 400
        body = resp.get_json()
        assert body["kind"] == "ValidationError"
        assert field in body["errors"]

    def test_name_trimmed_before_length_check(self, client):
        resp = client.post(API, json={"name": "  " + "x" * 99 + "  "})
        assert resp.status_code == 201
        assert resp.get_json()["data"]["name"] == "x" * 99

    def test_description_trimmed_before_length_check(self, client):
        resp = client.post(
            API, json={"name": "Books", "description": " " + "d" * 500 + " "}
        )
        assert resp.status_code == 201
        assert resp.get_json()["data"]["description"] == "d" * 500

    @pytest.mark.parametrize("value", [0, 1, "0", "no", "false", "maybe", None])
    def test_is_active_must_be_boolean(self, client, session, value):
        resp = client.post(API, json={"name": "Archive", "isActive": value})
        assert resp.status_code == 400
        body = resp.get_json()
        assert body["kind"] == "ValidationError"
        assert "isActive" in body["errors"]
        assert Category.query.count() == 0

    def test_body_must_be_object(self, client):
        resp = client.post(API, json=["Books"])
        assert resp.status_code == 400
        assert resp.get_json()["kind"] == "ValidationError"

    def test_body_must_be_json(self, client):
        resp = client.post(API, data="name=Books")
        assert resp.status_code == 400


class TestList:
    @pytest.fixture
    def catalog(self, make_category):
        electronics = make_category("Electronics")
        make_category("Phones", parent=electronics)
        make_category("Laptops", parent=electronics)
        garden = make_category("Home & Garden")
        make_category("Garden Tools", parent=garden, is_active=False)
        return electronics, garden

    def test_default_pagination(self, client, catalog):
        body = client.get(API).get_json()
        assert body["success"] is True
        assert body["count"] == 5
        assert body["pagination"] == {"total": 5, "page": 1, "limit": 10, "pages": 1}
        assert [c["name"] for c in body["data"]][0] == "Electronics"

    def test_page_and_limit(self, client, catalog):
        body = client.get(f"{API}?page=2&limit=2").get_json()
        assert body["count"] == 2
        assert body["pagination"] == {"total": 5, "page": 2, "limit": 2, "pages": 3}

    def test_limit_is_capped(self, client, app, catalog):
        body = client.get(f"{API}?limit=1000").get_json()
        assert body["pagination"]["limit"] == app.config["CATEGORIES_MAX_PER_PAGE"]

    def test_name_filter(self, client, catalog):
        body = client.get(f"{API}?name=garden").get_json()
        assert {c["name"] for c in body["data"]} == {"Garden Tools", "Home & Garden"}

    def test_root_filter(self, client, catalog):
        body = client.get(f"{API}?parentId=null").get_json()
        assert [c["name"] for c in body["data"]] == ["Electronics", "Home & Garden"]

    def test_parent_filter(self, client, catalog):
        electronics = catalog[0]
        body = client.get(f"{API}?parentId={electronics.id}").get_json()
        assert [c["name"] for c in body["data"]] == ["Laptops", "Phones"]
        assert all(c["parent"]["name"] == "Electronics" for c in body["data"])

    def test_active_filter(self, client, catalog):
        body = client.get(f"{API}?isActive=false").get_json()
        assert [c["name"] for c in body["data"]] == ["Garden Tools"]
        assert client.get(f"{API}?isActive=true").get_json()["count"] == 4

    def test_sort_desc(self, client, catalog):
        body = client.get(f"{API}?sortBy=name&sortOrder=desc").get_json()
        assert body["data"][0]["name"] == "Phones"

    def test_invalid_sort(self, client, catalog):
        resp = client.get(f"{API}?sortBy=secret")
        assert resp.status_code == 400
        assert resp.get_json()["kind"] == "ValidationError"

    def test_invalid_parent_filter(self, client):
        resp = client.get(f"{API}?parentId=abc")
        assert resp.status_code == 400


class TestGet:
    def test_found(self, client, make_category):
        cat = make_category("Books", description="Paper")
        resp = client.get(f"{API}/{cat.id}")
        assert resp.status_code == 200
        assert resp.get_json()["data"]["description"] == "Paper"

    def test_missing(self, client):
        resp = client.get(f"{API}/9999")
        assert resp.status_code == 404
        assert resp.get_json() == {
            "success": False,
            "kind": "NotFound",
            "error": "Category not found",
        }


class TestUpdate:
    def test_partial_update(self, client, make_category):
        cat = make_category("Books", description="Paper")
        resp = client.put(f"{API}/{cat.id}", json={"name": "Books & Media"})
        assert resp.status_code == 200
        data = resp.get_json()["data"]
        assert data["name"] == "Books & Media"
        assert data["slug"] == "books-media"
        assert data["description"] == "Paper"

    def test_move_to_root(self, client, make_category):
        parent = make_category("Electronics")
        child = make_category("Phones", parent=parent)
        resp = client.put(f"{API}/{child.id}", json={"parentId": None})
        data = resp.get_json()["data"]
        assert data["parentId"] is None
        assert data["level"] == 0

    def test_deactivate(self, client, make_category):
        cat = make_category("Books")
        resp = client.put(f"{API}/{cat.id}", json={"isActive": False})
        assert resp.status_code == 200
        assert resp.get_json()["data"]["isActive"] is False

    @pytest.mark.parametrize("value", [0, "no", "maybe"])
    def test_non_boolean_is_active_rejected(self, client, session, make_category, value):
        cat = make_category("Books")
        resp = client.put(f"{API}/{cat.id}", json={"isActive": value})
        assert resp.status_code == 400
        assert "isActive" in resp.get_json()["errors"]
        assert session.get(Category, cat.id).is_active is True

    def test_padded_name_is_trimmed(self, client, make_category):
        cat = make_category("Books")
        resp = client.put(f"{API}/{cat.id}", json={"name": "  " + "y" * 100 + " "})
        assert resp.status_code == 200
        data = resp.get_json()["data"]
        assert data["name"] == "y" * 100
        assert data["slug"] == "y" * 100

    def test_self_parent(self, client, make_category):
        cat = make_category("Books")
        resp = client.put(f"{API}/{cat.id}", json={"parentId": cat.id})
        assert resp.status_code == 400
        assert resp.get_json()["kind"] == "SelfParent"

    def test_circular(self, client, chain):
        a, b, c = chain
        resp = client.put(f"{API}/{a.id}", json={"parentId": c.id})
        assert resp.status_code == 400
        assert resp.get_json()["kind"] == "CircularReference"

    def test_missing_parent(self, client, make_category):
        cat = make_category("Books")
        resp = client.put(f"{API}/{cat.id}", json={"parentId": 9999})
        assert resp.status_code == 400
        assert resp.get_json()["kind"] == "NotFound"

    def test_missing_category(self, client):
        resp = client.put(f"{API}/9999", json={"name": "X"})
        assert resp.status_code == 404

    def test_empty_name_rejected(self, client, make_category):
        cat = make_category("Books")
        resp = client.put(f"{API}/{cat.id}", json={"name": ""})
        assert resp.status_code == 400
        assert resp.get_json()["kind"] == "ValidationError"

    def test_corrupt_hierarchy(self, client, session, make_category):
        x = make_category("X")
        y = make_category("Y", parent=x)
        outsider = make_category("Outsider")
        x.parent_id = y.id
        session.commit()

        resp = client.put(f"{API}/{outsider.id}", json={"parentId": x.id})
        assert resp.status_code == 500
        assert resp.get_json()["kind"] == "CorruptHierarchy"


class TestDelete:
    def test_delete_leaf(self, client, chain):
        a, b, c = chain
        c_id = c.id
        resp = client.delete(f"{API}/{c_id}")
        assert resp.status_code == 200
        assert resp.get_json() == {
            "success": True,
            "data": {},
            "message": "Category deleted successfully",
        }
        assert client.get(f"{API}/{c_id}").status_code == 404

    def test_has_children(self, client, chain):
        a, b, c = chain
        resp = client.delete(f"{API}/{a.id}")
        assert resp.status_code == 400
        assert resp.get_json()["kind"] == "HasChildren"

    def test_missing(self, client):
        assert client.delete(f"{API}/9999").status_code == 404


class TestSubcategories:
    def test_by_parent(self, client, make_category):
        parent = make_category("Fashion")
        for name in ("Shoes", "Kids", "Men"):
            make_category(name, parent=parent)
        body = client.get(f"{API}/parent/{parent.id}").get_json()
        assert body["count"] == 3
        assert [c["name"] for c in body["data"]] == ["Kids", "Men", "Shoes"]

    def test_roots(self, client, chain, make_category):
        make_category("Books")
        body = client.get(f"{API}/parent/null").get_json()
        assert [c["name"] for c in body["data"]] == ["A", "Books"]

    def test_unknown_parent_is_empty(self, client):
        body = client.get(f"{API}/parent/9999").get_json()
        assert body == {"success": True, "count": 0, "data": []}

    def test_invalid_parent(self, client):
        resp = client.get(f"{API}/parent/abc")
        assert resp.status_code == 400
        assert resp.get_json()["kind"] == "ValidationError"


class TestTree:
    def test_tree(self, client, chain, make_category):
        make_category("Books")
        body = client.get(f"{API}/tree").get_json()
        assert body["success"] is True
        assert body["count"] == 2
        a_node, books = body["data"]
        assert a_node["name"] == "A"
        assert a_node["children"][0]["name"] == "B"
        assert a_node["children"][0]["children"][0]["name"] == "C"
        assert "children" not in a_node["children"][0]["children"][0]
        assert books["name"] == "Books"
        assert "children" not in books

    def test_empty(self, client):
        assert client.get(f"{API}/tree").get_json() == {
            "success": True,
            "count": 0,
            "data": [],
        }

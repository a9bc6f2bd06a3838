import pytest

from app.services.category_service import match_category_slug


@pytest.mark.parametrize(
    "name,slug",
    [
        ("Milk", "dairy-eggs"),
        ("Free range eggs", "dairy-eggs"),
        ("Bananas", "produce"),
        ("Chocolate ice cream", "frozen-foods"),
        ("Toilet paper", "household"),
        ("Sourdough bread", "bakery"),
        ("Potato chips", "snacks-candy"),
        ("Orange juice", "produce"),
        ("Batteries", None),
    ],
)
def test_match_category_slug(name, slug):
    assert match_category_slug(name) == slug


def test_seed_is_idempotent(client, seeded):
    assert seeded.categories_created == 13
    assert seeded.stores_created == 4
    resp = client.post("/api/dev/seed")
    assert resp.status_code == 200
    assert resp.json() == {"categoriesCreated": 0, "storesCreated": 0}


def test_all_categories(client, auth, seeded):
    resp = client.get("/api/v1/categories?all=true", headers=auth)
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert len(data) == 13
    assert data[0]["slug"] == "produce"
    assert data[-1]["slug"] == "other"


def test_search_categories(client, auth, seeded):
    resp = client.get("/api/v1/categories?q=dai", headers=auth)
    assert [c["slug"] for c in resp.json()["data"]] == ["dairy-eggs"]


def test_usage_stats_default_view(client, auth, seeded, make_list, add_item):
    """Default listing ranks default categories by how often the user's items use them."""
    shopping_list = make_list(auth)
    add_item(auth, shopping_list["id"], name="Beer")
    add_item(auth, shopping_list["id"], name="Coffee")
    add_item(auth, shopping_list["id"], name="Bread")

    data = client.get("/api/v1/categories", headers=auth).json()["data"]
    assert data[0]["slug"] == "beverages"
    assert data[0]["usageCount"] == 2
    assert data[1]["slug"] == "bakery"
    assert data[1]["usageCount"] == 1
    # ties keep seed order
    assert data[2]["slug"] == "produce"
    assert data[2]["usageCount"] == 0


def test_get_category_by_id_or_slug(client, auth, seeded):
    by_slug = client.get("/api/v1/categories/bakery", headers=auth).json()["data"]
    by_id = client.get(f"/api/v1/categories/{by_slug['id']}", headers=auth).json()["data"]
    assert by_id == by_slug
    assert client.get("/api/v1/categories/nope", headers=auth).status_code == 404


def test_create_category_slug(client, auth):
    resp = client.post("/api/v1/categories", json={"name": "Party Supplies!"}, headers=auth)
    assert resp.status_code == 201
    assert resp.json()["data"]["slug"] == "party-supplies"
    assert resp.json()["data"]["isDefault"] is False

    resp = client.post("/api/v1/categories", json={"name": "Party supplies"}, headers=auth)
    assert resp.json()["data"]["slug"] == "party-supplies-1"


def test_create_category_explicit_slug_conflict(client, auth, seeded):
    resp = client.post("/api/v1/categories", json={"name": "Fruit", "slug": "produce"}, headers=auth)
    assert resp.status_code == 409
    assert resp.json()["error"]["code"] == "CONFLICT"

    resp = client.post("/api/v1/categories", json={"name": "Fruit", "slug": "Bad Slug"}, headers=auth)
    assert resp.status_code == 400


def test_default_categories_are_read_only(client, auth, seeded):
    assert client.patch("/api/v1/categories/produce", json={"name": "Veg"}, headers=auth).status_code == 400
    assert client.delete("/api/v1/categories/produce", headers=auth).status_code == 400


def test_update_and_delete_custom_category(client, auth):
    category = client.post("/api/v1/categories", json={"name": "Garden"}, headers=auth).json()["data"]
    resp = client.patch(f"/api/v1/categories/{category['id']}", json={"color": "#00ff00"}, headers=auth)
    assert resp.json()["data"]["color"] == "#00ff00"
    assert client.delete(f"/api/v1/categories/{category['id']}", headers=auth).status_code == 204
    assert client.get(f"/api/v1/categories/{category['id']}", headers=auth).status_code == 404

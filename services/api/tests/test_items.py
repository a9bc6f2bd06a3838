from app.settings import settings


def test_add_item_defaults(client, auth, make_list):
    shopping_list = make_list(auth)
    resp = client.post(f"/api/v1/lists/{shopping_list['id']}/items", json={"name": "Paper plates"}, headers=auth)
    assert resp.status_code == 201
    item = resp.json()["data"]
    assert item["quantity"] == 1
    assert item["priority"] == 0
    assert item["isChecked"] is False
    assert item["sortOrder"] == 0
    assert item["listId"] == shopping_list["id"]
    assert item["categoryId"] is None


def test_sort_order_appends(client, auth, make_list, add_item):
    shopping_list = make_list(auth)
    orders = [add_item(auth, shopping_list["id"], name=f"Thing {n}")["sortOrder"] for n in range(3)]
    assert orders == [0, 1, 2]


def test_add_item_auto_category(client, auth, seeded, make_list, add_item):
    """Known keywords land in the matching default category."""
    shopping_list = make_list(auth)
    milk = add_item(auth, shopping_list["id"], name="Whole Milk")
    assert milk["category"]["slug"] == "dairy-eggs"

    cream = add_item(auth, shopping_list["id"], name="Vanilla Ice Cream")
    assert cream["category"]["slug"] == "frozen-foods"

    tomatoes = add_item(auth, shopping_list["id"], name="Tomatoes")
    assert tomatoes["category"]["slug"] == "produce"


def test_add_item_explicit_category(client, auth, seeded, make_list):
    shopping_list = make_list(auth)
    household = client.get("/api/v1/categories/household", headers=auth).json()["data"]
    resp = client.post(
        f"/api/v1/lists/{shopping_list['id']}/items",
        json={"name": "Milk", "categoryId": household["id"]},
        headers=auth,
    )
    assert resp.json()["data"]["categoryId"] == household["id"]

    resp = client.post(
        f"/api/v1/lists/{shopping_list['id']}/items",
        json={"name": "Milk", "categoryId": "missing"},
        headers=auth,
    )
    assert resp.status_code == 404


def test_add_item_validation(client, auth, make_list):
    shopping_list = make_list(auth)
    url = f"/api/v1/lists/{shopping_list['id']}/items"
    assert client.post(url, json={"name": ""}, headers=auth).status_code == 400
    assert client.post(url, json={"name": "X", "quantity": 0}, headers=auth).status_code == 400
    assert client.post(url, json={"name": "X", "priority": 5}, headers=auth).status_code == 400

    resp = client.post(url, json={"name": "X", "quantity": 0}, headers=auth)
    assert resp.json()["error"]["details"][0]["field"] == "quantity"


def test_bulk_add(client, auth, make_list):
    shopping_list = make_list(auth)
    resp = client.post(
        f"/api/v1/lists/{shopping_list['id']}/items/bulk",
        json={"items": [{"name": "Rice"}, {"name": "Beans", "quantity": 2}]},
        headers=auth,
    )
    assert resp.status_code == 201
    items = resp.json()["data"]
    assert [i["name"] for i in items] == ["Rice", "Beans"]
    assert [i["sortOrder"] for i in items] == [0, 1]


def test_bulk_add_empty_rejected(client, auth, make_list):
    shopping_list = make_list(auth)
    resp = client.post(f"/api/v1/lists/{shopping_list['id']}/items/bulk", json={"items": []}, headers=auth)
    assert resp.status_code == 400


def test_item_limit(client, auth, make_list, add_item, monkeypatch):
    monkeypatch.setattr(settings, "max_items_per_list", 2)
    shopping_list = make_list(auth)
    add_item(auth, shopping_list["id"], name="A")
    resp = client.post(
        f"/api/v1/lists/{shopping_list['id']}/items/bulk",
        json={"items": [{"name": "B"}, {"name": "C"}]},
        headers=auth,
    )
    assert resp.status_code == 400
    items = client.get(f"/api/v1/lists/{shopping_list['id']}/items", headers=auth).json()["data"]
    assert len(items) == 1


def test_get_items_filters(client, auth, make_list, add_item):
    shopping_list = make_list(auth)
    add_item(auth, shopping_list["id"], name="A")
    b = add_item(auth, shopping_list["id"], name="B")
    client.post(f"/api/v1/items/{b['id']}/check", headers=auth)

    url = f"/api/v1/lists/{shopping_list['id']}/items"
    assert [i["name"] for i in client.get(url + "?isChecked=true", headers=auth).json()["data"]] == ["B"]
    assert [i["name"] for i in client.get(url + "?isChecked=false", headers=auth).json()["data"]] == ["A"]


def test_update_item(client, auth, make_list, add_item):
    shopping_list = make_list(auth)
    item = add_item(auth, shopping_list["id"], name="Milk")
    resp = client.patch(
        f"/api/v1/items/{item['id']}",
        json={"quantity": 2, "unit": "gal", "notes": None},
        headers=auth,
    )
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["quantity"] == 2
    assert data["unit"] == "gal"
    assert data["name"] == "Milk"


def test_price_update_logged(client, auth, make_list, add_item):
    shopping_list = make_list(auth)
    item = add_item(auth, shopping_list["id"], name="Milk")
    client.patch(f"/api/v1/items/{item['id']}", json={"estimatedPrice": 3.49}, headers=auth)

    activity = client.get(f"/api/v1/lists/{shopping_list['id']}/activity", headers=auth).json()["data"]
    price_rows = [row for row in activity if row["action"] == "PRICE_UPDATED"]
    assert len(price_rows) == 1
    assert price_rows[0]["price"] == 3.49


def test_toggle_check_round_trip(client, auth, make_list, add_item):
    shopping_list = make_list(auth)
    item = add_item(auth, shopping_list["id"])

    resp = client.post(f"/api/v1/items/{item['id']}/check", json={"actualPrice": 2.25}, headers=auth)
    data = resp.json()["data"]
    assert data["isChecked"] is True
    assert data["checkedAt"] is not None
    assert data["actualPrice"] == 2.25

    resp = client.post(f"/api/v1/items/{item['id']}/check", headers=auth)
    data = resp.json()["data"]
    assert data["isChecked"] is False
    assert data["checkedAt"] is None


def test_viewer_can_check_but_not_edit(client, user, other_user, make_list, add_item, share):
    shopping_list = make_list(user["headers"])
    item = add_item(user["headers"], shopping_list["id"])
    share(user["headers"], shopping_list["id"], other_user["email"], role="VIEWER")
    viewer = other_user["headers"]

    assert client.post(f"/api/v1/items/{item['id']}/check", headers=viewer).status_code == 200
    assert client.get(f"/api/v1/items/{item['id']}", headers=viewer).status_code == 200

    resp = client.patch(f"/api/v1/items/{item['id']}", json={"name": "Nope"}, headers=viewer)
    assert resp.status_code == 403
    assert client.delete(f"/api/v1/items/{item['id']}", headers=viewer).status_code == 403
    resp = client.post(f"/api/v1/lists/{shopping_list['id']}/items", json={"name": "Nope"}, headers=viewer)
    assert resp.status_code == 403


def test_editor_can_edit_items(client, user, other_user, make_list, add_item, share):
    shopping_list = make_list(user["headers"])
    item = add_item(user["headers"], shopping_list["id"])
    share(user["headers"], shopping_list["id"], other_user["email"])
    editor = other_user["headers"]

    resp = client.patch(f"/api/v1/items/{item['id']}", json={"name": "Oat milk"}, headers=editor)
    assert resp.status_code == 200
    resp = client.post(f"/api/v1/lists/{shopping_list['id']}/items", json={"name": "Bread"}, headers=editor)
    assert resp.status_code == 201
    assert resp.json()["data"]["addedById"] == other_user["id"]


def test_item_on_invisible_list_is_404(client, user, other_user, make_list, add_item):
    theirs = make_list(other_user["headers"])
    item = add_item(other_user["headers"], theirs["id"])

    resp = client.get(f"/api/v1/items/{item['id']}", headers=user["headers"])
    assert resp.status_code == 404
    assert resp.json()["error"]["message"] == "Item not found"
    assert client.post(f"/api/v1/items/{item['id']}/check", headers=user["headers"]).status_code == 404


def test_delete_item(client, auth, make_list, add_item):
    shopping_list = make_list(auth)
    item = add_item(auth, shopping_list["id"])
    assert client.delete(f"/api/v1/items/{item['id']}", headers=auth).status_code == 204
    assert client.get(f"/api/v1/items/{item['id']}", headers=auth).status_code == 404


def test_move_item(client, auth, make_list, add_item):
    """Moving unchecks the item and appends it to the target list."""
    source = make_list(auth, name="Source")
    target = make_list(auth, name="Target")
    add_item(auth, target["id"], name="Already there")
    item = add_item(auth, source["id"], name="Mover")
    client.post(f"/api/v1/items/{item['id']}/check", headers=auth)

    resp = client.patch(f"/api/v1/items/{item['id']}/move", json={"targetListId": target["id"]}, headers=auth)
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["listId"] == target["id"]
    assert data["isChecked"] is False
    assert data["sortOrder"] == 1

    assert client.get(f"/api/v1/lists/{source['id']}/items", headers=auth).json()["data"] == []


def test_move_item_same_list(client, auth, make_list, add_item):
    shopping_list = make_list(auth)
    item = add_item(auth, shopping_list["id"])
    resp = client.patch(
        f"/api/v1/items/{item['id']}/move", json={"targetListId": shopping_list["id"]}, headers=auth
    )
    assert resp.status_code == 400


def test_move_item_to_foreign_list(client, user, other_user, make_list, add_item):
    mine = make_list(user["headers"])
    theirs = make_list(other_user["headers"])
    item = add_item(user["headers"], mine["id"])
    resp = client.patch(
        f"/api/v1/items/{item['id']}/move", json={"targetListId": theirs["id"]}, headers=user["headers"]
    )
    assert resp.status_code == 404
    assert resp.json()["error"]["message"] == "List not found"

from datetime import date, timedelta


def _add(client, headers, name="Milk", **extra):
    resp = client.post("/api/v1/pantry", json={"name": name, **extra}, headers=headers)
    assert resp.status_code == 201, resp.text
    return resp.json()["data"]


def test_create_pantry_item(client, auth):
    """Create pantry item works."""
    expires = str(date.today() + timedelta(days=7))
    item = _add(client, auth, name="Milk", unit="gal", location="Fridge", expirationDate=expires)
    assert item["name"] == "Milk"
    assert item["quantity"] == 1
    assert item["expirationDate"] == expires
    assert item["isConsumed"] is False


def test_create_pantry_item_validation(client, auth):
    assert client.post("/api/v1/pantry", json={"name": ""}, headers=auth).status_code == 400
    resp = client.post("/api/v1/pantry", json={"name": "X", "quantity": -1}, headers=auth)
    assert resp.status_code == 400
    resp = client.post("/api/v1/pantry", json={"name": "X", "categoryId": "missing"}, headers=auth)
    assert resp.status_code == 404


def test_list_pantry_items(client, auth):
    """List returns the user's items soonest-expiring first."""
    _add(client, auth, name="Later", expirationDate=str(date.today() + timedelta(days=10)))
    _add(client, auth, name="Sooner", expirationDate=str(date.today() + timedelta(days=1)))
    _add(client, auth, name="Never")

    body = client.get("/api/v1/pantry", headers=auth).json()
    assert [i["name"] for i in body["data"]] == ["Sooner", "Later", "Never"]
    assert body["meta"]["total"] == 3


def test_pantry_filters(client, auth):
    _add(client, auth, name="Frozen peas", location="Freezer")
    _add(client, auth, name="Rice", location="Cupboard", barcode="0123")

    resp = client.get("/api/v1/pantry?location=freezer", headers=auth)
    assert [i["name"] for i in resp.json()["data"]] == ["Frozen peas"]
    resp = client.get("/api/v1/pantry?barcode=0123", headers=auth)
    assert [i["name"] for i in resp.json()["data"]] == ["Rice"]
    resp = client.get("/api/v1/pantry?q=PEAS", headers=auth)
    assert [i["name"] for i in resp.json()["data"]] == ["Frozen peas"]


def test_pantry_is_per_user(client, user, other_user):
    item = _add(client, user["headers"])
    assert client.get("/api/v1/pantry", headers=other_user["headers"]).json()["data"] == []
    resp = client.get(f"/api/v1/pantry/{item['id']}", headers=other_user["headers"])
    assert resp.status_code == 404
    assert resp.json()["error"]["message"] == "Pantry item not found"


def test_expiring_items(client, auth):
    """Expiring includes already expired items, skips consumed and undated ones."""
    _add(client, auth, name="Expired", expirationDate=str(date.today() - timedelta(days=1)))
    _add(client, auth, name="Soon", expirationDate=str(date.today() + timedelta(days=2)))
    _add(client, auth, name="Far", expirationDate=str(date.today() + timedelta(days=20)))
    _add(client, auth, name="Undated")
    eaten = _add(client, auth, name="Eaten", expirationDate=str(date.today()))
    client.patch(f"/api/v1/pantry/{eaten['id']}", json={"isConsumed": True}, headers=auth)

    resp = client.get("/api/v1/pantry/expiring", headers=auth)
    assert [i["name"] for i in resp.json()["data"]] == ["Expired", "Soon"]

    resp = client.get("/api/v1/pantry/expiring?days=30", headers=auth)
    assert [i["name"] for i in resp.json()["data"]] == ["Expired", "Soon", "Far"]


def test_update_pantry_item(client, auth):
    item = _add(client, auth)
    resp = client.patch(f"/api/v1/pantry/{item['id']}", json={"quantity": 0.5, "notes": "half left"}, headers=auth)
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["quantity"] == 0.5
    assert data["notes"] == "half left"


def test_consume_many(client, auth, other_user):
    a = _add(client, auth, name="A")
    b = _add(client, auth, name="B")
    theirs = _add(client, other_user["headers"], name="Theirs")

    resp = client.post(
        "/api/v1/pantry/consume", json={"itemIds": [a["id"], b["id"], theirs["id"]]}, headers=auth
    )
    assert resp.status_code == 200
    assert resp.json()["data"] == {"consumed": 2}

    resp = client.get("/api/v1/pantry?isConsumed=false", headers=auth)
    assert resp.json()["data"] == []


def test_delete_pantry_item(client, auth):
    item = _add(client, auth)
    assert client.delete(f"/api/v1/pantry/{item['id']}", headers=auth).status_code == 204
    assert client.get(f"/api/v1/pantry/{item['id']}", headers=auth).status_code == 404

from app.services.store_service import haversine_km


def test_haversine_km():
    assert haversine_km(0, 0, 0, 0) == 0
    # San Francisco -> Los Angeles is roughly 559 km
    assert 550 < haversine_km(37.7749, -122.4194, 34.0522, -118.2437) < 570


def test_list_stores(client, auth, seeded):
    resp = client.get("/api/v1/stores", headers=auth)
    assert resp.status_code == 200
    body = resp.json()
    assert body["meta"]["total"] == 4
    assert body["meta"]["limit"] == 50
    names = [s["name"] for s in body["data"]]
    assert names == sorted(names)
    assert all(s["isFavorite"] is False for s in body["data"])


def test_search_stores(client, auth, seeded):
    resp = client.get("/api/v1/stores?q=trader", headers=auth)
    assert [s["chain"] for s in resp.json()["data"]] == ["Trader Joe's"]

    resp = client.get("/api/v1/stores?chain=costco", headers=auth)
    assert [s["chain"] for s in resp.json()["data"]] == ["Costco"]


def test_nearby_stores_sorted_by_distance(client, auth, seeded):
    resp = client.get("/api/v1/stores?near=37.7749,-122.4194&radius=2", headers=auth)
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data[0]["name"] == "Whole Foods Market - Downtown"
    assert data[0]["distanceKm"] == 0
    distances = [s["distanceKm"] for s in data]
    assert distances == sorted(distances)
    # Safeway - Sunset is about 4 km away
    assert "Safeway - Sunset" not in [s["name"] for s in data]


def test_nearby_bad_coordinates(client, auth):
    assert client.get("/api/v1/stores?near=abc", headers=auth).status_code == 400
    assert client.get("/api/v1/stores?near=95,0", headers=auth).status_code == 400
    assert client.get("/api/v1/stores?near=0,0&radius=500", headers=auth).status_code == 400


def test_store_crud(client, auth):
    resp = client.post(
        "/api/v1/stores",
        json={"name": "Corner Shop", "chain": "Indie", "latitude": 10, "longitude": 20},
        headers=auth,
    )
    assert resp.status_code == 201
    store = resp.json()["data"]

    resp = client.patch(f"/api/v1/stores/{store['id']}", json={"address": "1 Corner St"}, headers=auth)
    assert resp.json()["data"]["address"] == "1 Corner St"

    assert client.get(f"/api/v1/stores/{store['id']}", headers=auth).json()["data"]["name"] == "Corner Shop"
    assert client.delete(f"/api/v1/stores/{store['id']}", headers=auth).status_code == 204
    resp = client.get(f"/api/v1/stores/{store['id']}", headers=auth)
    assert resp.status_code == 404
    assert resp.json()["error"]["message"] == "Store not found"


def test_store_validation(client, auth):
    assert client.post("/api/v1/stores", json={"name": ""}, headers=auth).status_code == 400
    resp = client.post("/api/v1/stores", json={"name": "X", "latitude": 91}, headers=auth)
    assert resp.status_code == 400


def test_favorites_flow(client, auth, seeded):
    store = client.get("/api/v1/stores?q=costco", headers=auth).json()["data"][0]

    resp = client.post("/api/v1/stores/favorites", json={"storeId": store["id"]}, headers=auth)
    assert resp.status_code == 201
    assert resp.json()["data"]["store"]["name"] == store["name"]

    # Adding again is a no-op
    assert client.post("/api/v1/stores/favorites", json={"storeId": store["id"]}, headers=auth).status_code == 201

    favorites = client.get("/api/v1/stores/favorites", headers=auth).json()["data"]
    assert [f["storeId"] for f in favorites] == [store["id"]]

    listed = client.get("/api/v1/stores?q=costco", headers=auth).json()["data"][0]
    assert listed["isFavorite"] is True

    resp = client.request("DELETE", "/api/v1/stores/favorites", json={"storeId": store["id"]}, headers=auth)
    assert resp.status_code == 204
    assert client.get("/api/v1/stores/favorites", headers=auth).json()["data"] == []


def test_favorites_are_per_user(client, user, other_user, seeded):
    store = client.get("/api/v1/stores", headers=user["headers"]).json()["data"][0]
    client.post("/api/v1/stores/favorites", json={"storeId": store["id"]}, headers=user["headers"])
    assert client.get("/api/v1/stores/favorites", headers=other_user["headers"]).json()["data"] == []


def test_remove_favorite_by_query(client, auth, seeded):
    store = client.get("/api/v1/stores", headers=auth).json()["data"][0]
    client.post("/api/v1/stores/favorites", json={"storeId": store["id"]}, headers=auth)
    resp = client.delete(f"/api/v1/stores/favorites?storeId={store['id']}", headers=auth)
    assert resp.status_code == 204


def test_favorite_requires_store_id(client, auth):
    resp = client.post("/api/v1/stores/favorites", json={}, headers=auth)
    assert resp.status_code == 400
    assert resp.json()["error"]["message"] == "storeId is required"

    assert client.delete("/api/v1/stores/favorites", headers=auth).status_code == 400


def test_favorite_unknown_store(client, auth):
    resp = client.post("/api/v1/stores/favorites", json={"storeId": "missing"}, headers=auth)
    assert resp.status_code == 404

    resp = client.delete("/api/v1/stores/favorites?storeId=missing", headers=auth)
    assert resp.status_code == 404
    assert resp.json()["error"]["message"] == "Favorite store not found"

import pytest


@pytest.fixture
def make_recipe(client):
    def _make(headers, title="Pancakes", **extra):
        body = {
            "title": title,
            "servings": 2,
            "ingredients": [
                {"name": "Flour", "quantity": 2, "unit": "cup", "sortOrder": 0},
                {"name": "Eggs", "quantity": 2, "sortOrder": 1},
                {"name": "Milk", "quantity": 1, "unit": "cup", "sortOrder": 2},
            ],
        }
        body.update(extra)
        resp = client.post("/api/v1/recipes", json=body, headers=headers)
        assert resp.status_code == 201, resp.text
        return resp.json()["data"]
    return _make


def test_create_recipe(client, auth, make_recipe):
    recipe = make_recipe(auth, difficulty="easy", prepTime=10, cookTime=15)
    assert recipe["title"] == "Pancakes"
    assert recipe["isPublic"] is False
    assert [i["name"] for i in recipe["ingredients"]] == ["Flour", "Eggs", "Milk"]
    assert recipe["difficulty"] == "easy"


def test_create_recipe_validation(client, auth):
    assert client.post("/api/v1/recipes", json={"title": ""}, headers=auth).status_code == 400
    resp = client.post("/api/v1/recipes", json={"title": "X", "difficulty": "insane"}, headers=auth)
    assert resp.status_code == 400


def test_get_recipes_filters(client, auth, make_recipe):
    make_recipe(auth, title="Quick salad", prepTime=5, cookTime=0, cuisine="Greek")
    make_recipe(auth, title="Slow roast", prepTime=30, cookTime=180, cuisine="British")

    resp = client.get("/api/v1/recipes?maxTime=30", headers=auth)
    assert [r["title"] for r in resp.json()["data"]] == ["Quick salad"]

    resp = client.get("/api/v1/recipes?cuisine=british", headers=auth)
    assert [r["title"] for r in resp.json()["data"]] == ["Slow roast"]

    resp = client.get("/api/v1/recipes?q=SALAD", headers=auth)
    assert resp.json()["meta"]["total"] == 1


def test_recipes_are_private_by_default(client, user, other_user, make_recipe):
    recipe = make_recipe(user["headers"])
    resp = client.get(f"/api/v1/recipes/{recipe['id']}", headers=other_user["headers"])
    assert resp.status_code == 404
    assert client.get("/api/v1/recipes", headers=other_user["headers"]).json()["data"] == []


def test_public_recipes(client, user, other_user, make_recipe):
    shared = make_recipe(user["headers"], title="Shared", isPublic=True)
    make_recipe(user["headers"], title="Secret")

    resp = client.get("/api/v1/recipes/public", headers=other_user["headers"])
    assert [r["title"] for r in resp.json()["data"]] == ["Shared"]

    resp = client.get(f"/api/v1/recipes/{shared['id']}", headers=other_user["headers"])
    assert resp.status_code == 200

    resp = client.patch(f"/api/v1/recipes/{shared['id']}", json={"title": "Mine now"}, headers=other_user["headers"])
    assert resp.status_code == 403
    assert client.delete(f"/api/v1/recipes/{shared['id']}", headers=other_user["headers"]).status_code == 403


def test_update_recipe_replaces_ingredients(client, auth, make_recipe):
    recipe = make_recipe(auth)
    resp = client.patch(
        f"/api/v1/recipes/{recipe['id']}",
        json={"title": "Crepes", "ingredients": [{"name": "Butter", "quantity": 1, "unit": "tbsp"}]},
        headers=auth,
    )
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["title"] == "Crepes"
    assert [i["name"] for i in data["ingredients"]] == ["Butter"]


def test_update_recipe_keeps_ingredients_when_omitted(client, auth, make_recipe):
    recipe = make_recipe(auth)
    resp = client.patch(f"/api/v1/recipes/{recipe['id']}", json={"servings": 4}, headers=auth)
    data = resp.json()["data"]
    assert data["servings"] == 4
    assert len(data["ingredients"]) == 3


def test_delete_recipe(client, auth, make_recipe):
    recipe = make_recipe(auth)
    assert client.delete(f"/api/v1/recipes/{recipe['id']}", headers=auth).status_code == 204
    assert client.get(f"/api/v1/recipes/{recipe['id']}", headers=auth).status_code == 404


def test_shopping_list_from_recipe(client, auth, seeded, make_recipe):
    recipe = make_recipe(auth)
    resp = client.post("/api/v1/recipes/shopping-list", json={"recipeIds": [recipe["id"]]}, headers=auth)
    assert resp.status_code == 201
    data = resp.json()["data"]
    assert data["name"] == "Pancakes ingredients"
    assert data["role"] == "OWNER"
    items = {i["name"]: i for i in data["items"]}
    assert set(items) == {"Flour", "Eggs", "Milk"}
    assert items["Flour"]["quantity"] == 2
    assert items["Flour"]["notes"] == "For: Pancakes"
    assert items["Milk"]["category"]["slug"] == "dairy-eggs"


def test_shopping_list_aggregates_and_scales(client, auth, make_recipe):
    """Same ingredient + unit across recipes is summed; servings scale quantities."""
    pancakes = make_recipe(auth)
    waffles = make_recipe(
        auth,
        title="Waffles",
        servings=2,
        ingredients=[
            {"name": "flour", "quantity": 1, "unit": "Cup"},
            {"name": "Fresh eggs", "quantity": 1},
        ],
    )
    resp = client.post(
        "/api/v1/recipes/shopping-list",
        json={"recipeIds": [pancakes["id"], waffles["id"]], "servings": 4, "listName": "Brunch"},
        headers=auth,
    )
    assert resp.status_code == 201
    data = resp.json()["data"]
    assert data["name"] == "Brunch"
    items = {i["name"].lower(): i for i in data["items"]}
    assert len(data["items"]) == 3
    assert items["flour"]["quantity"] == 6
    assert items["eggs"]["quantity"] == 6
    assert items["milk"]["quantity"] == 2
    assert "Pancakes" in items["flour"]["notes"]
    assert "Waffles" in items["flour"]["notes"]


def test_shopping_list_unknown_recipe(client, user, other_user, make_recipe):
    private = make_recipe(other_user["headers"])
    resp = client.post(
        "/api/v1/recipes/shopping-list", json={"recipeIds": [private["id"]]}, headers=user["headers"]
    )
    assert resp.status_code == 404
    assert resp.json()["error"]["message"] == "Recipe not found"


def test_shopping_list_recipe_without_ingredients(client, auth):
    recipe = client.post("/api/v1/recipes", json={"title": "Air"}, headers=auth).json()["data"]
    resp = client.post("/api/v1/recipes/shopping-list", json={"recipeIds": [recipe["id"]]}, headers=auth)
    assert resp.status_code == 400


def test_shopping_list_requires_recipe_ids(client, auth):
    resp = client.post("/api/v1/recipes/shopping-list", json={"recipeIds": []}, headers=auth)
    assert resp.status_code == 400

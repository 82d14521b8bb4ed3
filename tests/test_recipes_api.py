from models import RecipeDB, UserDB, saved_recipes

NEW_RECIPE = {
    "title": "Shakshuka",
    "category": "Breakfast",
    "ingredients": "eggs, tomatoes ,  peppers",
    "steps": "Simmer sauce\nPoach eggs",
    "difficulty": 2,
    "cookingTime": "25 min",
}


def test_create_recipe_forces_pending_and_chef_name(client, make_user, auth_headers):
    user = make_user(name="Alice")
    payload = dict(NEW_RECIPE, status="approved", chefName="Someone Else")

    res = client.post("/recipes", json=payload, headers=auth_headers(user))
    assert res.status_code == 201
    recipe = res.json()["recipe"]
    assert recipe["status"] == "pending"
    assert recipe["chefName"] == "Alice"
    assert recipe["ownerId"] == user.id
    assert recipe["ingredients"] == ["eggs", "tomatoes", "peppers"]
    assert recipe["image"] is None
    assert recipe["likesCount"] == 0


def test_create_recipe_keeps_image_and_premium(client, make_user, auth_headers):
    user = make_user(name="Alice")
    payload = dict(NEW_RECIPE, image="https://cdn/img.jpg", isPremium="true", price=4.5)

    recipe = client.post("/recipes", json=payload, headers=auth_headers(user)).json()["recipe"]
    assert recipe["image"] == "https://cdn/img.jpg"
    assert recipe["isPremium"] is True
    assert recipe["price"] == 4.5


def test_create_recipe_validates_input(client, make_user, auth_headers):
    user = make_user(name="Alice")
    for bad in (
        dict(NEW_RECIPE, category="Brunch"),
        dict(NEW_RECIPE, difficulty=6),
        dict(NEW_RECIPE, price=-1),
        dict(NEW_RECIPE, ingredients=" , "),
    ):
        res = client.post("/recipes", json=bad, headers=auth_headers(user))
        assert res.status_code == 400
        assert res.json()["success"] is False


def test_create_recipe_rejects_blank_text(client, db, make_user, auth_headers):
    user = make_user(name="Alice")
    for field in ("title", "steps", "cookingTime"):
        res = client.post("/recipes", json=dict(NEW_RECIPE, **{field: "   "}), headers=auth_headers(user))
        assert res.status_code == 400
        assert res.json()["message"] == "Please provide all required fields"
    assert db.query(RecipeDB).count() == 0


def test_create_recipe_trims_text(client, make_user, auth_headers):
    user = make_user(name="Alice")
    res = client.post("/recipes", json=dict(NEW_RECIPE, title="  Shakshuka "), headers=auth_headers(user))
    assert res.json()["recipe"]["title"] == "Shakshuka"


def test_create_recipe_requires_session(client):
    assert client.post("/recipes", json=NEW_RECIPE).status_code == 401


def test_edit_resets_approved_recipe_to_pending(client, db, make_user, make_recipe, auth_headers):
    user = make_user(name="Alice")
    recipe = make_recipe(user, status="approved")

    res = client.put(f"/recipes/{recipe.id}", json={"cookingTime": "30 min"}, headers=auth_headers(user))
    assert res.status_code == 200
    body = res.json()["recipe"]
    assert body["status"] == "pending"
    assert body["cookingTime"] == "30 min"
    # merge semantics: untouched fields keep their values
    assert body["title"] == "Pancakes"
    assert body["ingredients"] == ["flour", "egg", "milk"]


def test_edit_ignores_null_and_empty_values(client, make_user, make_recipe, auth_headers):
    user = make_user(name="Alice")
    recipe = make_recipe(user, image="https://cdn/a.jpg")

    res = client.put(
        f"/recipes/{recipe.id}",
        json={"title": "   ", "image": None, "steps": "Whisk\nFry"},
        headers=auth_headers(user),
    )
    body = res.json()["recipe"]
    assert body["title"] == "Pancakes"
    assert body["image"] == "https://cdn/a.jpg"
    assert body["steps"] == "Whisk\nFry"


def test_non_owner_cannot_edit(client, db, make_user, make_recipe, auth_headers):
    owner = make_user(name="Alice")
    other = make_user(name="Mallory")
    recipe = make_recipe(owner, status="approved")

    res = client.put(f"/recipes/{recipe.id}", json={"title": "Hacked"}, headers=auth_headers(other))
    assert res.status_code == 401
    assert res.json()["success"] is False

    db.expire_all()
    stored = db.get(RecipeDB, recipe.id)
    assert stored.title == "Pancakes"
    assert stored.status == "approved"


def test_admin_can_edit_any_recipe(client, make_user, make_recipe, auth_headers):
    owner = make_user(name="Alice")
    admin = make_user(name="Root", role="admin")
    recipe = make_recipe(owner, status="approved")

    res = client.put(f"/recipes/{recipe.id}", json={"difficulty": 4}, headers=auth_headers(admin))
    assert res.status_code == 200
    assert res.json()["recipe"]["difficulty"] == 4
    assert res.json()["recipe"]["status"] == "pending"


def test_edit_missing_recipe_is_404(client, make_user, auth_headers):
    user = make_user(name="Alice")
    assert client.put("/recipes/nope", json={"title": "x"}, headers=auth_headers(user)).status_code == 404


def test_like_twice_round_trips(client, make_user, make_recipe, auth_headers):
    owner = make_user(name="Alice")
    fan = make_user(name="Bob")
    recipe = make_recipe(owner, status="approved")

    first = client.post(f"/recipes/{recipe.id}/like", headers=auth_headers(fan)).json()
    assert first == {"success": True, "likesCount": 1, "isLiked": True}

    second = client.post(f"/recipes/{recipe.id}/like", headers=auth_headers(fan)).json()
    assert second == {"success": True, "likesCount": 0, "isLiked": False}


def test_likes_are_counted_per_user(client, make_user, make_recipe, auth_headers):
    owner = make_user(name="Alice")
    recipe = make_recipe(owner, status="approved")
    for name in ("Bob", "Carol"):
        client.post(f"/recipes/{recipe.id}/like", headers=auth_headers(make_user(name=name)))

    body = client.get(f"/recipes/{recipe.id}").json()["recipe"]
    assert body["likesCount"] == 2
    assert len(set(body["likes"])) == 2


def test_comment_captures_author_snapshot(client, make_user, make_recipe, auth_headers):
    owner = make_user(name="Alice")
    bob = make_user(name="Bob")
    recipe = make_recipe(owner)

    res = client.post(f"/recipes/{recipe.id}/comment", json={"text": "Lovely"}, headers=auth_headers(bob))
    assert res.status_code == 200
    comments = res.json()["comments"]
    assert len(comments) == 1
    assert comments[0]["authorId"] == bob.id
    assert comments[0]["authorName"] == "Bob"
    assert comments[0]["text"] == "Lovely"
    assert comments[0]["createdAt"]

    res = client.post(f"/recipes/{recipe.id}/comment", json={"text": "  "}, headers=auth_headers(bob))
    assert res.status_code == 400


def test_save_toggles_and_lists_in_order(client, db, make_user, make_recipe, auth_headers):
    owner = make_user(name="Alice")
    bob = make_user(name="Bob")
    first = make_recipe(owner, title="First")
    second = make_recipe(owner, title="Second")

    assert client.post(f"/recipes/{first.id}/save", headers=auth_headers(bob)).json()["isSaved"] is True
    assert client.post(f"/recipes/{second.id}/save", headers=auth_headers(bob)).json()["isSaved"] is True

    saved = client.get("/recipes/saved", headers=auth_headers(bob)).json()["savedRecipes"]
    assert [r["title"] for r in saved] == ["First", "Second"]

    assert client.post(f"/recipes/{first.id}/save", headers=auth_headers(bob)).json()["isSaved"] is False
    saved = client.get("/recipes/saved", headers=auth_headers(bob)).json()["savedRecipes"]
    assert [r["title"] for r in saved] == ["Second"]


def test_save_unknown_recipe_is_404(client, make_user, auth_headers):
    bob = make_user(name="Bob")
    assert client.post("/recipes/missing/save", headers=auth_headers(bob)).status_code == 404


def test_purchase_twice_keeps_single_entry(client, db, make_user, make_recipe, auth_headers):
    owner = make_user(name="Alice")
    bob = make_user(name="Bob")
    recipe = make_recipe(owner, is_premium=True, price=3)

    first = client.post(f"/recipes/{recipe.id}/purchase", headers=auth_headers(bob))
    second = client.post(f"/recipes/{recipe.id}/purchase", headers=auth_headers(bob))
    assert first.status_code == second.status_code == 200
    assert first.json()["success"] and second.json()["success"]
    assert second.json()["message"] == "Already purchased"

    db.expire_all()
    assert [r.id for r in db.get(UserDB, bob.id).purchased_recipes] == [recipe.id]
    assert len(client.get("/recipes/purchased", headers=auth_headers(bob)).json()["purchasedRecipes"]) == 1


def test_public_listing_shows_only_approved(client, make_user, make_recipe):
    owner = make_user(name="Alice")
    make_recipe(owner, title="Live", status="approved")
    make_recipe(owner, title="Waiting", status="pending")
    make_recipe(owner, title="Nope", status="rejected")

    body = client.get("/recipes").json()
    assert body["count"] == 1
    assert [r["title"] for r in body["recipes"]] == ["Live"]


def test_my_recipes_lists_every_status(client, make_user, make_recipe, auth_headers):
    owner = make_user(name="Alice")
    other = make_user(name="Bob")
    make_recipe(owner, status="approved")
    make_recipe(owner, status="pending")
    make_recipe(other, status="approved")

    recipes = client.get("/recipes/my-recipes", headers=auth_headers(owner)).json()["recipes"]
    assert len(recipes) == 2
    assert all(r["ownerId"] == owner.id for r in recipes)


def test_owner_delete_clears_memberships(client, db, make_user, make_recipe, auth_headers):
    owner = make_user(name="Alice")
    bob = make_user(name="Bob")
    recipe = make_recipe(owner)
    rid = recipe.id
    client.post(f"/recipes/{recipe.id}/save", headers=auth_headers(bob))
    client.post(f"/recipes/{recipe.id}/like", headers=auth_headers(bob))

    assert client.delete(f"/recipes/{recipe.id}", headers=auth_headers(bob)).status_code == 401
    assert client.delete(f"/recipes/{recipe.id}", headers=auth_headers(owner)).status_code == 200

    db.expire_all()
    assert db.get(RecipeDB, rid) is None
    assert db.query(saved_recipes).count() == 0
    assert client.get(f"/recipes/{rid}").status_code == 404

def _business_id(client, login, owner="auth0|owner"):
    login(owner, first_name="Owner")
    response = client.post("/api/business-profile", json={"businessName": "Green Bowl"})
    return response.json()["id"]


def test_preferences_lifecycle(client, login):
    login()
    assert client.get("/api/customer-preferences").status_code == 404

    created = client.post(
        "/api/customer-preferences",
        json={"preferredCategories": ["restaurant", "fitness"], "budgetRange": "$$"},
    )
    assert created.status_code == 201
    body = created.json()
    assert body["preferredCategories"] == ["restaurant", "fitness"]
    assert body["dietaryRestrictions"] == []
    assert body["interests"] == []
    assert body["budgetRange"] == "$$"

    # one row per user
    again = client.post("/api/customer-preferences", json={"budgetRange": "$"})
    assert again.status_code == 409

    updated = client.put(
        "/api/customer-preferences",
        json={"dietaryRestrictions": ["vegan"], "location": "Austin"},
    )
    assert updated.status_code == 200
    assert updated.json()["dietaryRestrictions"] == ["vegan"]
    assert updated.json()["location"] == "Austin"
    # untouched fields keep their values
    assert updated.json()["preferredCategories"] == ["restaurant", "fitness"]
    assert updated.json()["id"] == body["id"]

    actions = [log["action"] for log in client.get("/api/activity-logs").json()]
    assert actions == ["preferences_update", "preferences_create"]


def test_preferences_update_requires_existing_row(client, login):
    login()
    assert client.put("/api/customer-preferences", json={"location": "Austin"}).status_code == 404
    assert client.put("/api/customer-preferences", json={}).status_code == 400


def test_preferences_are_per_user(client, login):
    login("auth0|alice")
    client.post("/api/customer-preferences", json={"interests": ["yoga"]})
    login("auth0|bob", first_name="Bob")
    assert client.get("/api/customer-preferences").status_code == 404


def test_review_a_business(client, login):
    business_id = _business_id(client, login)
    login("auth0|customer", first_name="Cus")

    response = client.post(
        f"/api/businesses/{business_id}/reviews",
        json={"rating": 5, "reviewText": "Great bowls"},
    )
    assert response.status_code == 201
    review = response.json()
    assert review["businessId"] == business_id
    assert review["customerId"] == "auth0|customer"
    assert review["rating"] == 5

    client.post(f"/api/businesses/{business_id}/reviews", json={"rating": 3})

    client.cookies.clear()
    reviews = client.get(f"/api/businesses/{business_id}/reviews").json()
    # newest first
    assert [r["rating"] for r in reviews] == [3, 5]

    login("auth0|customer", first_name="Cus")
    mine = client.get("/api/reviews/mine").json()
    assert len(mine) == 2

    log = client.get("/api/activity-logs").json()[0]
    assert log["action"] == "review_create"
    assert log["metadata"]["businessId"] == business_id


def test_review_rating_bounds(client, login):
    business_id = _business_id(client, login)
    for rating in (0, 6):
        response = client.post(f"/api/businesses/{business_id}/reviews", json={"rating": rating})
        assert response.status_code == 400
    assert client.get(f"/api/businesses/{business_id}/reviews").json() == []


def test_review_unknown_business(client, login):
    login()
    response = client.post("/api/businesses/4242/reviews", json={"rating": 4})
    assert response.status_code == 404
    assert client.get("/api/activity-logs").json() == []


def test_review_requires_login(client, login):
    business_id = _business_id(client, login)
    client.cookies.clear()
    assert client.post(f"/api/businesses/{business_id}/reviews", json={"rating": 4}).status_code == 401
    assert client.get("/api/reviews/mine").status_code == 401

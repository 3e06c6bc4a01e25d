from datetime import datetime, timedelta, timezone
from decimal import Decimal

from app.schemas import RecommendationCreate
from app.services import storage


def _business(client, login, name):
    login("auth0|owner", first_name="Owner")
    return client.post("/api/business-profile", json={"businessName": name}).json()["id"]


def _recommend(run_db, user_id, business_id, score, created_at=None, kind="category_match"):
    data = RecommendationCreate(
        user_id=user_id,
        business_id=business_id,
        recommendation_type=kind,
        score=Decimal(score),
        reason="Matches your preferred categories",
    ).model_dump()
    if created_at is not None:
        data["created_at"] = created_at
    return run_db(storage.create_recommendation, data).id


def test_recommendations_ordered_by_score_then_recency(client, login, run_db):
    gym = _business(client, login, "Iron Gym")
    cafe = _business(client, login, "Green Cafe")
    bar = _business(client, login, "Juice Bar")
    login("auth0|bob", first_name="Bob")
    login("auth0|alice")

    now = datetime.now(timezone.utc)
    older = _recommend(run_db, "auth0|alice", gym, "80.00", created_at=now - timedelta(days=2))
    newer = _recommend(run_db, "auth0|alice", cafe, "80.00", created_at=now - timedelta(days=1))
    top = _recommend(run_db, "auth0|alice", bar, "95.50", created_at=now - timedelta(days=3))
    _recommend(run_db, "auth0|bob", bar, "99.00")

    recs = client.get("/api/recommendations").json()
    assert [r["id"] for r in recs] == [top, newer, older]
    assert recs[0]["business"]["businessName"] == "Juice Bar"
    assert Decimal(str(recs[0]["score"])) == Decimal("95.5")
    assert recs[0]["isViewed"] is False

    assert [r["id"] for r in client.get("/api/recommendations", params={"limit": 1}).json()] == [top]


def test_mark_recommendation_viewed(client, login, run_db):
    gym = _business(client, login, "Iron Gym")
    login("auth0|alice")
    rec_id = _recommend(run_db, "auth0|alice", gym, "70.00")

    login("auth0|bob", first_name="Bob")
    assert client.post(f"/api/recommendations/{rec_id}/viewed").status_code == 404

    login("auth0|alice")
    response = client.post(f"/api/recommendations/{rec_id}/viewed")
    assert response.status_code == 200
    assert response.json() == {"message": "Recommendation marked as viewed"}
    assert client.get("/api/recommendations").json()[0]["isViewed"] is True

    # already viewed is still a success
    assert client.post(f"/api/recommendations/{rec_id}/viewed").status_code == 200
    assert client.post("/api/recommendations/999/viewed").status_code == 404


def test_recommendations_require_login(client):
    assert client.get("/api/recommendations").status_code == 401

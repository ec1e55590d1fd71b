import asyncio
import uuid
from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient

from main import app
from models.schemas_user import UserOut
from recommendation.logic.adapter import StoreBundle
from recommendation.routes import get_stores, get_now
from utils.auth_deps import auth_user

from helpers import (
    NOW,
    transcript,
    ielts,
    profile_fields,
    scholarship,
    FakeDocumentStore,
    FakeScholarshipStore,
    FakeProfileStore,
)

CURRENT_USER = UserOut(
    id="user-1",
    email="student@example.com",
    full_name="Test Student",
    role="student",
    created_at=datetime(2026, 1, 1),
)


def make_stores(documents=None, candidates=None):
    return StoreBundle(
        documents=FakeDocumentStore(
            [transcript(gpa=3.5, stream="Computer Science"), ielts(7.0)] if documents is None else documents
        ),
        scholarships=FakeScholarshipStore(
            [
                scholarship("s-open", country="Germany"),
                scholarship("s-phd", levels=["PhD"]),
                scholarship("s-upcoming", status="upcoming", levels=["Master"]),
            ] if candidates is None else candidates
        ),
        profiles=FakeProfileStore(profile_fields(preferred_countries=["Germany"])),
    )


@pytest.fixture
def client():
    app.dependency_overrides[auth_user] = lambda: CURRENT_USER
    app.dependency_overrides[get_stores] = make_stores
    app.dependency_overrides[get_now] = lambda: NOW
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}
    assert client.get("/recommendations/health").json()["status"] == "ok"


def test_recommendations_full(client):
    response = client.get("/scholarships/recommendations")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "success"
    data = body["data"]
    assert [s["scholarship"]["id"] for s in data["highlyRecommended"]] == ["s-open"]
    assert [s["scholarship"]["id"] for s in data["partiallyRecommended"]] == ["s-phd"]
    assert data["exploreAndPrepare"] == []
    first = data["highlyRecommended"][0]
    assert first["score"] == 100
    assert first["eligible"] is True
    assert first["category"] == "highly_recommended"
    assert "Country Preference" in first["matchedCriteria"]
    assert data["stats"] == {
        "totalAnalyzed": 2,
        "eligibleCount": 1,
        "missingData": [],
        "hasDocuments": True,
        "documentCount": 2,
    }
    assert data["engineVersion"]


def test_recommendations_simple(client):
    response = client.get("/scholarships/recommendations", params={"format": "simple", "limit": 1})

    data = response.json()["data"]
    assert data["count"] == 1
    assert data["scholarships"][0]["id"] == "s-open"
    assert data["scholarships"][0]["matchedBy"]


@pytest.mark.parametrize("params", [{"limit": 0}, {"limit": 51}, {"format": "xml"}])
def test_recommendations_reject_bad_params(client, params):
    assert client.get("/scholarships/recommendations", params=params).status_code == 422


def test_recommendations_without_documents_still_succeed(client):
    app.dependency_overrides[get_stores] = lambda: make_stores(documents=[])

    body = client.get("/scholarships/recommendations").json()

    assert body["status"] == "success"
    assert "No parsed documents" in body["message"]
    assert body["data"]["stats"]["hasDocuments"] is False


def test_match_all(client):
    body = client.get("/scholarships/match").json()

    assert body["message"] == "Matching completed"
    matches = body["data"]["matches"]
    assert [m["scholarshipId"] for m in matches] == ["s-open", "s-phd", "s-upcoming"]
    assert body["data"]["eligibleCount"] == 1
    assert body["data"]["userDocumentsCount"] == 2


def test_match_without_documents(client):
    app.dependency_overrides[get_stores] = lambda: make_stores(documents=[])

    body = client.get("/scholarships/match").json()

    assert body["data"]["matches"] == []
    assert body["message"].startswith("No documents found")


def test_single_scholarship_match(client):
    body = client.get("/scholarships/s-phd/match").json()

    assert body["data"]["failedCriteria"] == ["Degree Level"]
    assert body["data"]["scholarship"]["level"] == ["PhD"]


def test_single_scholarship_not_found(client):
    response = client.get("/scholarships/missing/match")

    assert response.status_code == 404
    assert response.json() == {"status": "error", "message": "Scholarship not found"}


class BrokenDocumentStore:
    def __init__(self, error):
        self.error = error

    async def fetch_completed(self, user_id):
        raise self.error


@pytest.mark.parametrize("error, status_code", [
    (asyncio.TimeoutError(), 504),
    (RuntimeError("connection reset"), 500),
])
def test_store_failures_map_to_error_responses(client, error, status_code):
    def broken():
        stores = make_stores()
        stores.documents = BrokenDocumentStore(error)
        return stores

    app.dependency_overrides[get_stores] = broken

    response = client.get("/scholarships/recommendations")

    assert response.status_code == status_code
    assert response.json()["status"] == "error"
    assert "connection reset" not in response.json()["message"]


def test_matching_requires_a_token(client):
    del app.dependency_overrides[auth_user]

    response = client.get("/scholarships/match")

    assert response.status_code == 401


def test_deadlines_are_measured_from_the_request_clock(client):
    app.dependency_overrides[get_now] = lambda: NOW + timedelta(days=100)

    body = client.get("/scholarships/recommendations").json()

    assert body["data"]["stats"]["totalAnalyzed"] == 0
    assert body["message"] == "No scholarships available for matching."


def test_matching_with_a_real_token(client):
    del app.dependency_overrides[auth_user]
    email = f"matcher-{uuid.uuid4().hex[:8]}@example.com"
    tokens = client.post("/auth/register", json={"email": email, "password": "hunter22"}).json()

    response = client.get(
        "/scholarships/match",
        headers={"Authorization": f"Bearer {tokens['access_token']}"},
    )

    assert response.status_code == 200
    assert response.json()["data"]["totalScholarships"] == 3

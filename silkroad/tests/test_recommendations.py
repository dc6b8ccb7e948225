from __future__ import annotations

from unittest.mock import patch

from fastapi.testclient import TestClient

from silkroad.app import app
from silkroad.catalog.data_store import reset_catalog

client = TestClient(app)


def _login_user(c):
    c.post("/auth/login", json={"username": "traveler", "password": "traveler123"})


def _login_admin(c):
    c.post("/auth/login", json={"username": "admin", "password": "admin123"})


def test_health():
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


def test_metadata():
    reset_catalog()
    body = client.get("/metadata").json()
    assert body["site_count"] == 23
    assert body["tag_count"] == 35
    assert "geography" in body["categories"]
    assert "Dunhuang" in body["cities"]


def test_recommendations_by_tag():
    reset_catalog()
    _login_user(client)
    resp = client.post("/recommendations", json={"tags": ["geo-desert"]})
    assert resp.status_code == 200
    body = resp.json()
    assert body["strategy"] == "personalized"
    assert body["error"] is None
    assert len(body["results"]) == 15

    top = body["results"][0]
    assert top["site"]["id"] == "scenic-001"
    assert top["match_score"] == 35
    assert top["match_tags"] == ["geo-desert"]
    assert [r["site"]["id"] for r in body["results"][1:4]] == ["scenic-010", "scenic-004", "scenic-008"]


def test_recommendations_score_ordering():
    reset_catalog()
    _login_user(client)
    resp = client.post("/recommendations", json={"tags": ["type-religious", "culture-ethnic"]})
    scores = [item["match_score"] for item in resp.json()["results"]]
    assert scores == sorted(scores, reverse=True)
    assert all(0 <= s <= 100 for s in scores)


def test_unmatched_results_show_site_tags():
    reset_catalog()
    _login_user(client)
    body = client.post("/recommendations", json={"tags": ["geo-lake"]}).json()
    for item in body["results"]:
        assert item["match_tags"]
        if "geo-lake" not in item["site"]["tags"]:
            assert item["match_tags"] == item["site"]["tags"][:3]


def test_recommendations_default_without_tags():
    reset_catalog()
    _login_user(client)
    body = client.post("/recommendations", json={"tags": []}).json()
    assert body["strategy"] == "default"
    assert len(body["results"]) == 8
    assert all(item["match_score"] == 75 for item in body["results"])
    assert [item["site"]["id"] for item in body["results"]] == [
        "scenic-015", "scenic-001", "scenic-013", "scenic-014",
        "scenic-018", "scenic-021", "scenic-007", "scenic-010",
    ]


def test_session_recommendations_follow_saved_preferences():
    reset_catalog()
    c = TestClient(app)
    _login_user(c)
    assert c.get("/recommendations").json()["strategy"] == "default"

    c.put("/preferences", json={"tags": ["activity-hiking", "geo-mountain"]})
    body = c.get("/recommendations").json()
    assert body["strategy"] == "personalized"
    assert body["results"][0]["site"]["id"] == "scenic-018"
    assert body["results"][0]["match_tags"] == ["geo-mountain", "activity-hiking"]


def test_recommendations_are_repeatable():
    reset_catalog()
    _login_user(client)
    payload = {"tags": ["culture-architecture"], "budget": "low"}
    first = client.post("/recommendations", json=payload).json()
    second = client.post("/recommendations", json=payload).json()
    assert first == second


def test_recommendations_validation_rejects_bad_tags():
    _login_user(client)
    resp = client.post("/recommendations", json={"tags": "geo-desert"})
    assert resp.status_code == 422


@patch("silkroad.recommendations.engine.rank_sites", side_effect=RuntimeError("boom"))
def test_scoring_failure_reports_error(mock_rank):
    reset_catalog()
    _login_user(client)
    resp = client.post("/recommendations", json={"tags": ["geo-desert"]})
    assert resp.status_code == 200
    body = resp.json()
    assert body["error"] == "Failed to generate recommendations"
    assert body["strategy"] == "default"
    assert len(body["results"]) == 8


# ── Catalog browsing and similarity ──────────────────────────────────────


def test_sites_filter_by_tags():
    reset_catalog()
    body = client.get("/sites", params={"tags": "geo-lake,geo-river"}).json()
    assert {site["id"] for site in body} == {"scenic-007", "scenic-011"}
    assert len(client.get("/sites").json()) == 23


def test_site_detail_and_tags():
    reset_catalog()
    resp = client.get("/sites/scenic-014")
    assert resp.status_code == 200
    assert resp.json()["placeholder"].startswith("linear-gradient(")
    tags = client.get("/sites/scenic-014/tags").json()
    assert [t["id"] for t in tags] == ["type-natural", "geo-mountain", "activity-photography"]
    assert client.get("/sites/scenic-999").status_code == 404
    assert client.get("/sites/scenic-999/tags").status_code == 404


def test_tags_by_category_endpoint():
    reset_catalog()
    groups = client.get("/tags/by-category").json()
    assert {g["category"] for g in groups} == {
        "type", "geography", "culture", "activity", "season", "budget", "crowd",
    }


def test_similar_sites():
    reset_catalog()
    body = client.get("/sites/scenic-001/similar").json()
    ids = [site["id"] for site in body["similar"]]
    assert len(ids) == 5
    assert "scenic-001" not in ids
    assert ids[:2] == ["scenic-004", "scenic-015"]


def test_similar_sites_limit_and_unknown():
    reset_catalog()
    assert len(client.get("/sites/scenic-001/similar", params={"limit": 2}).json()["similar"]) == 2
    resp = client.get("/sites/scenic-999/similar")
    assert resp.status_code == 200
    assert resp.json()["similar"] == []
    assert client.get("/sites/scenic-001/similar", params={"limit": 0}).status_code == 422


def test_pairwise_similarity():
    reset_catalog()
    resp = client.get("/similarity", params={"a": "scenic-001", "b": "scenic-004"})
    assert resp.json()["similarity"] == 1.0
    forward = client.get("/similarity", params={"a": "scenic-001", "b": "scenic-018"}).json()
    backward = client.get("/similarity", params={"a": "scenic-018", "b": "scenic-001"}).json()
    assert forward["similarity"] == backward["similarity"] == 0.0
    assert client.get("/similarity", params={"a": "scenic-001", "b": "nope"}).status_code == 404


# ── Admin catalog management ─────────────────────────────────────────────


def test_admin_tag_and_site_flow():
    reset_catalog()
    c = TestClient(app)
    _login_admin(c)

    resp = c.post("/admin/tags", json={"id": "activity-camel", "name": "Camel Trek", "category": "activity"})
    assert resp.status_code == 201
    assert c.post("/admin/tags", json={"id": "activity-camel", "name": "Dup", "category": "activity"}).status_code == 409
    assert c.post("/admin/tags", json={"name": "Bad", "category": "weather"}).status_code == 422

    resp = c.post("/admin/sites", json={
        "id": "scenic-100",
        "name": "Mingsha Dunes",
        "tags": ["activity-camel", "geo-desert"],
        "rating": 4.7,
    })
    assert resp.status_code == 201
    assert c.post("/admin/sites", json={"id": "scenic-100", "name": "Again"}).status_code == 409

    body = c.post("/recommendations", json={"tags": ["activity-camel", "geo-desert"]}).json()
    assert body["results"][0]["site"]["id"] == "scenic-100"
    assert body["results"][0]["match_score"] == 54

    resp = c.put("/admin/sites/scenic-100", json={"rating": 3.0})
    assert resp.status_code == 200
    assert resp.json()["rating"] == 3.0
    assert c.put("/admin/sites/scenic-999", json={"rating": 3.0}).status_code == 404

    resp = c.put("/admin/sites/scenic-100", json={"latitude": 40.1, "price_child": 20})
    assert resp.json()["latitude"] == 40.1
    resp = c.put("/admin/sites/scenic-100", json={"latitude": None, "price_child": None})
    assert resp.json()["latitude"] is None
    assert resp.json()["price_child"] is None

    assert c.put("/admin/tags/activity-camel", json={"name": "Camel Caravan"}).json()["name"] == "Camel Caravan"
    assert c.put("/admin/tags/nope", json={"name": "x"}).status_code == 404

    assert c.delete("/admin/tags/activity-camel").status_code == 200
    assert c.get("/sites/scenic-100").json()["tags"] == ["geo-desert"]
    assert c.delete("/admin/tags/activity-camel").status_code == 404

    assert c.delete("/admin/sites/scenic-100").status_code == 200
    assert c.get("/sites/scenic-100").status_code == 404
    assert c.delete("/admin/sites/scenic-100").status_code == 404
    reset_catalog()


def test_admin_site_validation():
    reset_catalog()
    c = TestClient(app)
    _login_admin(c)
    assert c.post("/admin/sites", json={"name": "Too Good", "rating": 5.5}).status_code == 422
    assert c.put("/admin/sites/scenic-001", json={"rating": 0.5}).status_code == 422


def test_similarity_matrix_endpoint():
    reset_catalog()
    c = TestClient(app)
    _login_admin(c)
    body = c.get("/admin/similarity-matrix").json()
    assert len(body["site_ids"]) == 23
    matrix = body["matrix"]
    assert len(matrix) == 23
    for i in range(23):
        assert matrix[i][i] == 1.0
        for j in range(23):
            assert matrix[i][j] == matrix[j][i]

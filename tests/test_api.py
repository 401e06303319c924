"""
HTTP tests for the tournaments, rankings, users and categories routes
"""
import pytest
from fastapi.testclient import TestClient

from api.deps.db import get_db
from main import app

XLSX = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
HEADER = ("Member ID1", "Player1", "Member ID2", "Player2", "Position", "Position2")


@pytest.fixture
def client(db):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def spring_xlsx(make_xlsx):
    return make_xlsx({
        "MS": (HEADER, [("1001", "Alice", None, None, 1, None)]),
        "MD": (HEADER, [("1002", "Bob", "1003", "Carol", 2, None)]),
    })


def _upload(client, content, file_name="spring.xlsx", **form):
    data = {"name": "Spring Open", "location": "City Hall"}
    data.update(form)
    return client.post(
        "/tournaments/upload",
        files={"file": (file_name, content, XLSX)},
        data=data,
    )


def test_upload_tournament(client, spring_xlsx):
    response = _upload(client, spring_xlsx)

    assert response.status_code == 201
    body = response.json()
    assert body["tournament"]["name"] == "Spring Open"
    assert body["tournament"]["location"] == "City Hall"
    assert body["tournament"]["players_count"] == 2
    assert body["tournament"]["original_file_name"] == "spring.xlsx"
    assert {c["name"]: c["status"] for c in body["categories"]} == {"MS": "processed", "MD": "processed"}
    assert len(body["created_players"]) == 3


def test_upload_twice_is_conflict(client, spring_xlsx):
    assert _upload(client, spring_xlsx).status_code == 201

    response = _upload(client, spring_xlsx, file_name="copy.xlsx")

    assert response.status_code == 409
    assert response.json()["type"] == "points_error"


def test_upload_requires_name(client, spring_xlsx):
    response = _upload(client, spring_xlsx, name="")
    assert response.status_code == 400


def test_upload_rejects_other_files(client):
    response = _upload(client, b"a,b,c", file_name="results.csv")
    assert response.status_code == 400


def test_upload_rejects_inverted_dates(client, spring_xlsx):
    response = _upload(client, spring_xlsx, start_date="2026-05-02T00:00:00", end_date="2026-05-01T00:00:00")
    assert response.status_code == 400


def test_check_file(client, spring_xlsx):
    before = client.post("/tournaments/check-file", files={"file": ("spring.xlsx", spring_xlsx, XLSX)})
    assert before.status_code == 200
    assert before.json()["is_file_name_unique"] is True
    assert before.json()["is_file_content_unique"] is True

    _upload(client, spring_xlsx)

    after = client.post("/tournaments/check-file", files={"file": ("other.xlsx", spring_xlsx, XLSX)})
    body = after.json()
    assert body["is_file_name_unique"] is True
    assert body["is_file_content_unique"] is False
    assert body["existing_tournament"]["name"] == "Spring Open"


def test_list_and_get_tournament(client, spring_xlsx):
    tournament_id = _upload(client, spring_xlsx).json()["tournament"]["id"]

    listing = client.get("/tournaments/")
    assert listing.status_code == 200
    assert listing.json()[0]["categories_count"] == 2

    details = client.get(f"/tournaments/{tournament_id}").json()
    assert details["statistics"]["total_player_entries"] == 2
    assert details["statistics"]["total_individual_players"] == 3
    assert details["statistics"]["unique_users"] == 3
    md = next(c for c in details["categories"] if c["name"] == "MD")
    entry = md["players"][0]
    assert entry["display_position"] == "Runner-Up"
    assert entry["points"] == 75
    assert entry["user2"]["category_points"] == 75


def test_get_missing_tournament(client):
    response = client.get("/tournaments/999")
    assert response.status_code == 404
    assert response.json() == {"detail": "Tournament not found", "type": "points_error"}


def test_rankings_routes(client, spring_xlsx):
    tournament_id = _upload(client, spring_xlsx).json()["tournament"]["id"]

    overall = client.get("/rankings/overall").json()
    assert [(i["name"], i["rank"]) for i in overall["ranked_items"]] == [("Alice", 1), ("Bob", 2), ("Carol", 2)]

    categories = client.get("/categories/", params={"type": "doubles"}).json()
    assert [c["name"] for c in categories] == ["MD"]
    md_id = categories[0]["id"]

    assert client.get(f"/rankings/category/{md_id}").json()["pagination"]["total_count"] == 2
    assert client.get(f"/rankings/tournament/{tournament_id}").json()["ranked_items"][0]["name"] == "Alice"
    pair = client.get(f"/rankings/tournament/{tournament_id}/category/{md_id}").json()
    assert len(pair["ranked_items"]) == 2
    assert client.get("/rankings/type/singles").json()["ranked_items"][0]["name"] == "Alice"
    assert client.get("/rankings/universal", params={"category_id": md_id}).json()["scope"]["type"] == "category"


def test_rankings_validation(client):
    assert client.get("/rankings/universal").status_code == 400
    assert client.get("/rankings/type/triples").status_code == 400
    assert client.get("/rankings/overall", params={"limit": 5000}).status_code == 400


def test_users_routes(client, spring_xlsx):
    _upload(client, spring_xlsx)

    found = client.get("/users/search", params={"q": "car"}).json()
    assert [u["name"] for u in found] == ["Carol"]
    assert client.get("/users/search", params={"q": "1002"}).json()[0]["name"] == "Bob"

    user_id = found[0]["id"]
    profile = client.get(f"/users/{user_id}").json()
    assert profile["total_points"] == 75
    assert profile["category_points"][0]["category_name"] == "MD"

    breakdown = client.get(f"/users/{user_id}/breakdown").json()
    assert breakdown["category_breakdown"][0]["rank"] == 1
    assert breakdown["tournament_breakdown"][0]["tournament_name"] == "Spring Open"

    assert client.get("/users/999").status_code == 404


def test_delete_tournament_route(client, spring_xlsx):
    tournament_id = _upload(client, spring_xlsx).json()["tournament"]["id"]

    response = client.delete(f"/tournaments/{tournament_id}")

    assert response.status_code == 200
    assert response.json()["players_reverted"] == 3
    overall = client.get("/rankings/overall").json()
    assert all(i["total_points"] == 0 for i in overall["ranked_items"])
    assert client.get(f"/tournaments/{tournament_id}").status_code == 404

    # The same file can be uploaded again once its tournament is gone
    assert _upload(client, spring_xlsx).status_code == 201

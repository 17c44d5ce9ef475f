from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient

from portfolio_api.db.models import ProjectTechnology, Skill
from portfolio_api.db.session import make_session_factory

SKILL = {"name": "Python", "category": "technical", "icon": "python", "proficiency": 90, "ordinal": 1}

PROJECT = {
    "title": "Dashboard",
    "description": "Real-time analytics",
    "image": "https://example.com/dash.png",
    "github": "https://github.com/jane/dash",
    "featured": True,
    "year": "2023",
    "ordinal": 1,
}

EXPERIENCE = {
    "company": "Acme",
    "position": "Engineer",
    "startDate": "2020-01",
    "endDate": "Present",
    "description": "Built services",
    "ordinal": 1,
}

EDUCATION = {
    "institution": "University of Washington",
    "degree": "BSc",
    "field": "Computer Science",
    "startDate": "2011-09",
    "endDate": "2015-06",
    "gpa": "3.8/4.0",
    "ordinal": 1,
}

PERSONAL = {
    "name": "Jane Doe",
    "title": "Software Developer",
    "description": "Builds things for the web.",
    "email": "jane@example.com",
    "location": "Seattle",
    "social": {"github": "https://github.com/jane"},
}


def _count(engine, model) -> int:
    session = make_session_factory(engine)()
    try:
        return session.query(model).count()
    finally:
        session.close()


def test_create_then_get_skill_round_trips(client) -> None:
    """Test POST then GET returns the input plus id and timestamp."""
    created = client.post("/api/portfolio/skills", json=SKILL)
    assert created.status_code == 201
    body = created.json()
    assert isinstance(body["id"], int)
    assert body["updatedAt"]

    fetched = client.get(f"/api/portfolio/skills/{body['id']}")
    assert fetched.status_code == 200
    record = fetched.json()
    for key, value in SKILL.items():
        assert record[key] == value
    assert record == body


def test_patch_changes_only_given_fields(client) -> None:
    """Test PATCH leaves unspecified fields alone."""
    skill_id = client.post("/api/portfolio/skills", json=SKILL).json()["id"]

    response = client.patch(f"/api/portfolio/skills/{skill_id}", json={"proficiency": 70})
    assert response.status_code == 200
    record = response.json()
    assert record["proficiency"] == 70
    assert record["name"] == SKILL["name"]
    assert record["category"] == SKILL["category"]
    assert record["icon"] == SKILL["icon"]
    assert record["ordinal"] == SKILL["ordinal"]


def test_patch_rejects_null_for_required_column(client) -> None:
    """Test explicit null on a non-null column is a validation error."""
    skill_id = client.post("/api/portfolio/skills", json=SKILL).json()["id"]
    response = client.patch(f"/api/portfolio/skills/{skill_id}", json={"name": None})
    assert response.status_code == 400
    assert response.json()["errors"][0]["field"] == "name"


def test_patch_missing_returns_404(client) -> None:
    """Test PATCH on an unknown id returns 404."""
    response = client.patch("/api/portfolio/skills/999", json={"name": "Go"})
    assert response.status_code == 404
    assert response.json()["detail"] == "Skill not found"


def test_delete_then_get_returns_404(client) -> None:
    """Test DELETE answers 204 and the row is gone afterwards."""
    skill_id = client.post("/api/portfolio/skills", json=SKILL).json()["id"]

    deleted = client.delete(f"/api/portfolio/skills/{skill_id}")
    assert deleted.status_code == 204
    assert deleted.content == b""

    assert client.get(f"/api/portfolio/skills/{skill_id}").status_code == 404


def test_delete_missing_returns_404(client) -> None:
    """Test DELETE on an unknown id returns 404, not 204."""
    assert client.delete("/api/portfolio/skills/12345").status_code == 404
    assert client.delete("/api/portfolio/projects/12345").status_code == 404


def test_create_missing_field_returns_400(client, engine) -> None:
    """Test a body without a required field is rejected and nothing is stored."""
    payload = {k: v for k, v in SKILL.items() if k != "name"}
    response = client.post("/api/portfolio/skills", json=payload)

    assert response.status_code == 400
    body = response.json()
    assert body["detail"] == "Invalid request data"
    assert "name" in [err["field"] for err in body["errors"]]
    assert _count(engine, Skill) == 0


def test_proficiency_out_of_range_returns_400(client) -> None:
    """Test proficiency must stay within 0-100."""
    response = client.post("/api/portfolio/skills", json={**SKILL, "proficiency": 101})
    assert response.status_code == 400
    assert response.json()["errors"][0]["field"] == "proficiency"


def test_non_integer_id_returns_400(client) -> None:
    """Test path ids must be integers."""
    response = client.get("/api/portfolio/skills/abc")
    assert response.status_code == 400
    assert response.json()["errors"][0]["field"] == "skill_id"


def test_updated_at_is_timezone_aware(client) -> None:
    """Test timestamps read back from the database are reported in UTC."""
    body = client.post("/api/portfolio/skills", json=SKILL).json()
    for item in (body, client.get("/api/portfolio/skills").json()[0]):
        stamp = datetime.fromisoformat(item["updatedAt"].replace("Z", "+00:00"))
        assert stamp.utcoffset() == timedelta(0)


def test_malformed_json_reports_body_field(client) -> None:
    """Test an unparseable body is reported against the body, not an offset."""
    response = client.post(
        "/api/portfolio/skills",
        content=b'{"name": ',
        headers={"content-type": "application/json"},
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid request data"
    assert [err["field"] for err in response.json()["errors"]] == ["body"]


def test_list_skills_ordered_and_filtered(client) -> None:
    """Test listing orders by ordinal and honours the category filter."""
    client.post("/api/portfolio/skills", json={**SKILL, "name": "Go", "ordinal": 3})
    client.post("/api/portfolio/skills", json={**SKILL, "name": "SQL", "ordinal": 2})
    client.post(
        "/api/portfolio/skills",
        json={"name": "Leadership", "category": "soft", "ordinal": 1},
    )

    names = [s["name"] for s in client.get("/api/portfolio/skills").json()]
    assert names == ["Leadership", "SQL", "Go"]

    soft = client.get("/api/portfolio/skills", params={"category": "soft"}).json()
    assert [s["name"] for s in soft] == ["Leadership"]


def test_personal_info_put_upserts(client) -> None:
    """Test PUT creates personal info once and then updates it."""
    assert client.get("/api/portfolio/personal-info").status_code == 404

    first = client.put("/api/portfolio/personal-info", json=PERSONAL)
    assert first.status_code == 200
    second = client.put("/api/portfolio/personal-info", json={**PERSONAL, "title": "Staff Engineer"})
    assert second.status_code == 200
    assert second.json()["id"] == first.json()["id"]

    current = client.get("/api/portfolio/personal-info").json()
    assert current["title"] == "Staff Engineer"
    assert current["social"]["github"] == "https://github.com/jane"


def test_personal_info_put_requires_full_record(client) -> None:
    """Test PUT rejects a partial personal info body."""
    response = client.put("/api/portfolio/personal-info", json={"name": "Jane"})
    assert response.status_code == 400
    fields = {err["field"] for err in response.json()["errors"]}
    assert {"title", "description", "email", "location"} <= fields


@pytest.mark.parametrize(
    "path,payload,patch",
    [
        ("/api/portfolio/education", EDUCATION, {"gpa": "4.0/4.0"}),
        ("/api/portfolio/experience", EXPERIENCE, {"location": "Remote"}),
        ("/api/portfolio/projects", PROJECT, {"featured": False}),
    ],
)
def test_entity_crud_cycle(client, path, payload, patch) -> None:
    """Test education, experience and projects share the CRUD contract."""
    created = client.post(path, json=payload)
    assert created.status_code == 201
    entity_id = created.json()["id"]

    listed = client.get(path).json()
    assert [item["id"] for item in listed] == [entity_id]

    patched = client.patch(f"{path}/{entity_id}", json=patch)
    assert patched.status_code == 200
    for key, value in patch.items():
        assert patched.json()[key] == value
    for key, value in payload.items():
        if key not in patch:
            assert patched.json()[key] == value

    assert client.delete(f"{path}/{entity_id}").status_code == 204
    assert client.get(f"{path}/{entity_id}").status_code == 404


def test_project_year_longer_than_four_chars_returns_400(client) -> None:
    """Test year is limited to four characters."""
    response = client.post("/api/portfolio/projects", json={**PROJECT, "year": "20231"})
    assert response.status_code == 400


def test_project_technology_links(client, engine) -> None:
    """Test linking is idempotent and deleting a project clears its links."""
    project_id = client.post("/api/portfolio/projects", json=PROJECT).json()["id"]
    react = client.post("/api/portfolio/technologies", json={"name": "React"})
    assert react.status_code == 201
    tech_id = react.json()["id"]

    link_path = f"/api/portfolio/projects/{project_id}/technologies/{tech_id}"
    assert client.post(link_path).status_code == 201
    first = _count(engine, ProjectTechnology)
    assert client.post(link_path).status_code == 201
    assert _count(engine, ProjectTechnology) == first == 1

    techs = client.get(f"/api/portfolio/projects/{project_id}/technologies").json()
    assert [t["name"] for t in techs] == ["React"]

    assert client.delete(f"/api/portfolio/projects/{project_id}").status_code == 204
    assert client.get(f"/api/portfolio/projects/{project_id}/technologies").json() == []
    assert _count(engine, ProjectTechnology) == 0


def test_unlink_technology_returns_204(client) -> None:
    """Test removing a link answers 204 with an empty body."""
    project_id = client.post("/api/portfolio/projects", json=PROJECT).json()["id"]
    tech_id = client.post("/api/portfolio/technologies", json={"name": "Django"}).json()["id"]
    client.post(f"/api/portfolio/projects/{project_id}/technologies/{tech_id}")

    response = client.delete(f"/api/portfolio/projects/{project_id}/technologies/{tech_id}")
    assert response.status_code == 204
    assert client.get(f"/api/portfolio/projects/{project_id}/technologies").json() == []


def test_link_unknown_project_returns_404(client) -> None:
    """Test linking to a missing project or technology answers 404."""
    tech_id = client.post("/api/portfolio/technologies", json={"name": "Go"}).json()["id"]
    assert client.post(f"/api/portfolio/projects/999/technologies/{tech_id}").status_code == 404

    project_id = client.post("/api/portfolio/projects", json=PROJECT).json()["id"]
    assert client.post(f"/api/portfolio/projects/{project_id}/technologies/999").status_code == 404


def test_technologies_listed_by_name(client) -> None:
    """Test technologies are returned alphabetically."""
    for name in ("TypeScript", "Django", "React"):
        client.post("/api/portfolio/technologies", json={"name": name})
    names = [t["name"] for t in client.get("/api/portfolio/technologies").json()]
    assert names == ["Django", "React", "TypeScript"]


def test_unexpected_error_returns_500(client, monkeypatch) -> None:
    """Test uncaught errors map to a generic 500."""
    from portfolio_api.api import server
    from portfolio_api.db.storage import DatabaseStorage

    def boom(self):
        raise RuntimeError("database unreachable")

    monkeypatch.setattr(DatabaseStorage, "get_all_skills", boom)

    safe_client = TestClient(server.app, raise_server_exceptions=False)
    response = safe_client.get("/api/portfolio/skills")
    assert response.status_code == 500
    assert response.json() == {"detail": "An error occurred while processing your request."}

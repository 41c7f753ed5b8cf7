import json

import pytest

from course_builder.application.builder.sync import DATA_KEY, ENABLED_KEY
from course_builder.models.audit_log import AuditLog
from course_builder.stores.database import SQLAlchemyContentStore

BASE = "/api/v1"


def _builder(document_id="course-1", suffix=""):
    return f"{BASE}/documents/{document_id}/builder{suffix}"


def test_health(client):
    response = client.get(f"{BASE}/health")
    assert response.status_code == 200
    assert response.get_json()["status"] == "ok"


def test_login_issues_a_token_with_role(client, make_user):
    make_user(email="ed@example.com", password="pw-123456", role="editor")

    response = client.post(f"{BASE}/auth/login", json={"email": "ed@example.com", "password": "pw-123456"})

    assert response.status_code == 200
    body = response.get_json()
    assert body["role"] == "editor"

    headers = {"Authorization": f"Bearer {body['access_token']}"}
    assert client.get(f"{BASE}/widgets", headers=headers).status_code == 200


def test_login_rejects_bad_password(client, make_user):
    make_user(email="ed@example.com", password="pw-123456")

    response = client.post(f"{BASE}/auth/login", json={"email": "ed@example.com", "password": "nope"})

    assert response.status_code == 401


def test_login_rejects_disabled_user(client, make_user):
    make_user(email="ed@example.com", password="pw-123456", is_active=False)

    response = client.post(f"{BASE}/auth/login", json={"email": "ed@example.com", "password": "pw-123456"})

    assert response.status_code == 403


def test_builder_requires_a_token(client):
    assert client.get(_builder()).status_code == 401


def test_viewer_role_is_forbidden(client, auth_headers):
    response = client.get(_builder(), headers=auth_headers("viewer"))

    assert response.status_code == 403
    assert response.get_json()["error"] == "Forbidden"


def test_widget_catalog(client, editor_headers):
    body = client.get(f"{BASE}/widgets", headers=editor_headers).get_json()

    types = [w["type"] for w in body["widgets"]]
    assert "heading" in types and "course_card" in types


def test_widget_fields(client, editor_headers):
    body = client.get(f"{BASE}/widgets/button/fields", headers=editor_headers).get_json()

    assert body["defaults"]["text"] == "Click here"
    assert [f["name"] for f in body["fields"]][:2] == ["text", "link_url"]


def test_unknown_widget_fields_is_404(client, editor_headers):
    response = client.get(f"{BASE}/widgets/carousel/fields", headers=editor_headers)

    assert response.status_code == 404
    assert response.get_json()["error"] == "UnknownWidgetType"


def test_widget_preview(client, editor_headers):
    response = client.post(
        f"{BASE}/widgets/heading/render",
        json={"settings": {"text": "Preview", "level": "h4"}},
        headers=editor_headers,
    )

    assert response.status_code == 200
    assert response.get_json()["html"].startswith("<h4")


def test_widget_preview_rejects_invalid_settings(client, editor_headers):
    response = client.post(
        f"{BASE}/widgets/heading/render",
        json={"settings": {"text": "x", "level": "h9"}},
        headers=editor_headers,
    )

    assert response.status_code == 400


def test_load_of_unknown_document_is_empty(client, editor_headers):
    response = client.get(_builder("new-course"), headers=editor_headers)

    body = response.get_json()
    assert response.status_code == 200
    assert body["revision"] == 0
    assert body["is_empty"] is True
    assert body["enabled"] is False
    assert body["document"] == {"version": "1.0.0", "sections": []}


def test_too_long_document_id_is_rejected(client, editor_headers):
    response = client.get(_builder("x" * 65), headers=editor_headers)
    assert response.status_code == 400


def test_enable_and_disable(client, editor_headers):
    response = client.post(_builder(suffix="/enable"), headers=editor_headers)
    assert response.status_code == 200
    assert response.get_json()["revision"] == 1
    assert response.headers["ETag"] == '"1"'

    assert client.get(_builder(), headers=editor_headers).get_json()["enabled"] is True

    client.delete(_builder(suffix="/enable"), headers=editor_headers)
    assert client.get(_builder(), headers=editor_headers).get_json()["enabled"] is False


def test_editing_flow(client, editor_headers):
    client.post(_builder(suffix="/enable"), headers=editor_headers)

    response = client.post(_builder(suffix="/widgets"), json={"type": "heading"}, headers=editor_headers)
    assert response.status_code == 201
    body = response.get_json()
    widget_id = body["widget"]["id"]
    section = body["document"]["sections"][0]
    assert section["columns"][0]["width"] == 100

    response = client.put(
        _builder(suffix=f"/widgets/{widget_id}/settings"),
        json={"settings": {"text": "Course intro", "level": "h1"}},
        headers=editor_headers,
    )
    assert response.status_code == 200
    assert response.get_json()["widget"]["settings"] == {"text": "Course intro", "level": "h1"}

    form = client.get(_builder(suffix=f"/widgets/{widget_id}/settings"), headers=editor_headers).get_json()
    values = {f["name"]: f["value"] for f in form["fields"]}
    assert values["text"] == "Course intro"
    assert values["text_align"] == "left"

    second = client.post(
        _builder(suffix="/widgets"),
        json={"type": "button", "section_id": section["id"]},
        headers=editor_headers,
    ).get_json()["widget"]["id"]

    column_id = section["columns"][0]["id"]
    response = client.post(
        _builder(suffix=f"/columns/{column_id}/reorder"),
        json={"order": [second, widget_id]},
        headers=editor_headers,
    )
    assert [w["id"] for w in response.get_json()["column"]["widgets"]] == [second, widget_id]

    html = client.get(f"{BASE}/documents/course-1/render").get_data(as_text=True)
    assert "Course intro</h1>" in html
    assert html.index(second) < html.index(widget_id)

    client.delete(_builder(suffix=f"/widgets/{second}"), headers=editor_headers)
    response = client.delete(_builder(suffix=f"/widgets/{widget_id}"), headers=editor_headers)
    body = response.get_json()
    assert body["is_empty"] is True
    assert len(body["document"]["sections"]) == 1


def test_each_edit_is_audited(client, editor_headers):
    client.post(_builder(suffix="/enable"), headers=editor_headers)
    client.post(_builder(suffix="/sections"), headers=editor_headers)

    actions = sorted(log.action for log in AuditLog.query.all())
    assert actions == ["builder.enable", "builder.section.add"]
    assert all(log.actor_id for log in AuditLog.query.all())


def test_unknown_section_is_404(client, editor_headers):
    response = client.post(
        _builder(suffix="/widgets"),
        json={"type": "text", "section_id": "missing"},
        headers=editor_headers,
    )

    assert response.status_code == 404
    assert response.get_json()["error"] == "NodeNotFound"


def test_unknown_widget_type_is_404(client, editor_headers):
    response = client.post(_builder(suffix="/widgets"), json={"type": "carousel"}, headers=editor_headers)
    assert response.status_code == 404


def test_bad_reorder_is_400(client, editor_headers):
    client.post(_builder(suffix="/sections"), headers=editor_headers)

    response = client.post(_builder(suffix="/sections/reorder"), json={"order": ["x"]}, headers=editor_headers)

    assert response.status_code == 400


def test_put_document(client, editor_headers):
    document = {"version": "1.0.0", "sections": [{"id": "s1", "columns": [
        {"id": "c1", "width": 60, "widgets": [{"id": "w1", "type": "text", "settings": {"content": "Hi"}}]},
        {"id": "c2", "width": 40, "widgets": [{"id": "w2", "type": "carousel"}]},
    ]}]}

    response = client.put(_builder(), json={"document": document}, headers=editor_headers)

    assert response.status_code == 200
    body = client.get(_builder(), headers=editor_headers).get_json()
    columns = body["document"]["sections"][0]["columns"]
    assert [c["width"] for c in columns] == [60, 40]
    assert columns[1]["widgets"] == []


def test_put_surface_snapshot(client, editor_headers):
    surface = {"role": "editor", "children": [{
        "role": "section",
        "attrs": {"data-section-id": "s1"},
        "children": [{
            "role": "column",
            "attrs": {"data-column-id": "c1"},
            "width": "300px",
            "parent_width": 1200,
            "children": [{"role": "widget", "attrs": {
                "data-widget-id": "w1",
                "data-widget-type": "heading",
                "data-widget-settings": '{"text": "From surface"}',
            }}],
        }],
    }]}

    response = client.put(_builder(), json={"surface": surface}, headers=editor_headers)

    assert response.status_code == 200
    column = response.get_json()["document"]["sections"][0]["columns"][0]
    assert column["width"] == 25
    assert column["widgets"][0]["settings"] == {"text": "From surface"}


def test_put_without_document_is_400(client, editor_headers):
    assert client.put(_builder(), json={}, headers=editor_headers).status_code == 400


@pytest.mark.parametrize("surface", [
    {"role": "editor", "children": "abc"},
    {"role": "editor", "attrs": ["x"]},
    {"role": "editor", "children": [1]},
])
def test_put_malformed_surface_is_400(client, editor_headers, surface):
    response = client.put(_builder("5"), json={"surface": surface}, headers=editor_headers)

    assert response.status_code == 400
    assert response.get_json()["error"] == "ValidationError"
    assert client.get(_builder("5"), headers=editor_headers).get_json()["revision"] == 0


def test_put_document_with_non_string_version_is_409(client, editor_headers):
    response = client.put(
        _builder("5"), json={"document": {"version": ["1.0.0"], "sections": []}}, headers=editor_headers
    )
    assert response.status_code == 409


def test_put_with_duplicate_ids_gets_fresh_ids(client, editor_headers):
    document = {"sections": [{"id": "same", "columns": [{"id": "same", "widgets": []}]}]}

    response = client.put(_builder(), json={"document": document}, headers=editor_headers)

    ids = response.get_json()["document"]["sections"][0]
    assert ids["id"] != ids["columns"][0]["id"]


def test_stale_if_match_is_409(client, editor_headers):
    client.post(_builder(suffix="/enable"), headers=editor_headers)
    headers = {**editor_headers, "If-Match": '"1"'}

    first = client.post(_builder(suffix="/sections"), headers=headers)
    assert first.status_code == 201
    assert first.headers["ETag"] == '"2"'

    stale = client.post(_builder(suffix="/sections"), headers=headers)
    assert stale.status_code == 409
    assert stale.get_json()["revision"] == 2

    body = client.get(_builder(), headers=editor_headers).get_json()
    assert len(body["document"]["sections"]) == 1


def test_malformed_if_match_is_400(client, editor_headers):
    headers = {**editor_headers, "If-Match": "yesterday"}
    assert client.post(_builder(suffix="/sections"), headers=headers).status_code == 400


def test_public_render_of_disabled_empty_document(client):
    response = client.get(f"{BASE}/documents/nothing-here/render")

    assert response.status_code == 200
    assert response.mimetype == "text/html"
    assert response.get_data(as_text=True) == ""


@pytest.mark.parametrize("path", ["/openapi/builder.yaml", "/swagger/"])
def test_api_docs_are_served(client, path):
    assert client.get(path).status_code == 200


@pytest.mark.parametrize("version", [[], {"v": 1}, "3.0.0"])
def test_public_render_of_unsupported_version_is_empty(client, editor_headers, version):
    store = SQLAlchemyContentStore()
    store.set_meta("5", DATA_KEY, json.dumps({"version": version, "sections": []}))
    store.set_meta("5", ENABLED_KEY, "1")

    response = client.get(f"{BASE}/documents/5/render")

    assert response.status_code == 200
    assert response.get_data(as_text=True) == ""
    assert client.get(_builder("5"), headers=editor_headers).status_code == 409

"""Integration Tests: REST API — projects, records, selection, Knowledge DB, graph, backup.

Invariants:
    - Unknown projects and entries are 404 with a structured error body
    - Mutations persist to the snapshot column (cold restore sees them)
    - Pipeline regressions are 409 unless allow_regression is set
    - Invalid backups are rejected whole (400) and change nothing
"""

import uuid

from app.api.routes import projects


# -- Projects ------------------------------------------------------------------

async def test_create_and_get_project(client, project_id):
    resp = await client.get(f"/api/v1/projects/{project_id}")
    assert resp.status_code == 200
    body = resp.json()
    assert body["name"] == "Shop capture"
    assert body["record_count"] == 0
    assert body["entry_count"] == 0


async def test_create_project_rejects_blank_name(client):
    resp = await client.post("/api/v1/projects", json={"name": "   "})
    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == "VALIDATION_ERROR"


async def test_list_projects(client, project_id):
    resp = await client.get("/api/v1/projects")
    assert resp.status_code == 200
    assert [p["id"] for p in resp.json()["projects"]] == [project_id]


async def test_update_project(client, project_id):
    resp = await client.patch(
        f"/api/v1/projects/{project_id}",
        json={"name": "Renamed", "backend_url": "http://localhost:9000"},
    )
    assert resp.status_code == 200
    assert resp.json()["name"] == "Renamed"
    assert resp.json()["backend_url"] == "http://localhost:9000"


async def test_unknown_project_is_404(client):
    resp = await client.get(f"/api/v1/projects/{uuid.uuid4()}")
    assert resp.status_code == 404
    assert resp.json()["detail"]["error"]["code"] == "RESOURCE_NOT_FOUND"


async def test_delete_project(client, project_id):
    resp = await client.delete(f"/api/v1/projects/{project_id}")
    assert resp.status_code == 204
    assert (await client.get(f"/api/v1/projects/{project_id}")).status_code == 404


# -- Records and selection -----------------------------------------------------

async def test_upload_and_list_records(client, project_id, record_payload):
    resp = await client.post(
        f"/api/v1/projects/{project_id}/records", json={"records": record_payload},
    )
    assert resp.status_code == 200
    assert resp.json() == {"count": 3, "selected": 0}

    listing = (await client.get(f"/api/v1/projects/{project_id}/records")).json()
    assert listing["total"] == 3
    assert "responseBodyText" not in listing["records"][0]
    assert listing["records"][1]["method"] == "POST"


async def test_append_with_clashing_index_is_409(client, project_id, record_payload):
    url = f"/api/v1/projects/{project_id}/records"
    await client.post(url, json={"records": record_payload})
    resp = await client.post(url, json={"records": record_payload[:1], "replace": False})
    assert resp.status_code == 409


async def test_selection(client, project_id, record_payload):
    await client.post(
        f"/api/v1/projects/{project_id}/records", json={"records": record_payload},
    )
    url = f"/api/v1/projects/{project_id}/selection"
    resp = await client.put(url, json={"indices": [0, 2]})
    assert resp.json() == {"changed": 2, "selected": [0, 2]}

    resp = await client.put(url, json={"indices": [1], "clear_others": True})
    assert resp.json()["selected"] == [1]

    resp = await client.put(url, json={"indices": [42]})
    assert resp.status_code == 404


async def test_state_restored_from_snapshot(client, project_id, record_payload):
    await client.post(
        f"/api/v1/projects/{project_id}/records", json={"records": record_payload},
    )
    projects._project_states.clear()
    resp = await client.get(f"/api/v1/projects/{project_id}")
    assert resp.json()["record_count"] == 3


# -- Knowledge DB --------------------------------------------------------------

async def _sync_all(client, project_id, record_payload):
    await client.post(
        f"/api/v1/projects/{project_id}/records", json={"records": record_payload},
    )
    resp = await client.post(
        f"/api/v1/projects/{project_id}/knowledge-db/sync",
        json={"indices": [0, 1, 2]},
    )
    assert resp.status_code == 201
    return resp.json()["row_ids"]


async def test_sync_and_group(client, project_id, record_payload):
    row_ids = await _sync_all(client, project_id, record_payload)
    assert len(row_ids) == 3

    groups = (await client.get(f"/api/v1/projects/{project_id}/knowledge-db")).json()
    slugs = {g["group_slug"] for g in groups["groups"]}
    assert slugs == {"GET:/api/products", "POST:/api/graphql", "GET:/about"}


async def test_sync_without_selection_is_400(client, project_id, record_payload):
    await client.post(
        f"/api/v1/projects/{project_id}/records", json={"records": record_payload},
    )
    resp = await client.post(f"/api/v1/projects/{project_id}/knowledge-db/sync", json={})
    assert resp.status_code == 400


async def test_soft_deleted_entry_still_retrievable(client, project_id, record_payload):
    row_ids = await _sync_all(client, project_id, record_payload)
    base = f"/api/v1/projects/{project_id}/knowledge-db"

    resp = await client.delete(f"{base}/{row_ids[0]}")
    assert resp.json() == {"success": True, "row_id": row_ids[0]}

    rows = (await client.get(base, params={"view": "rows"})).json()["rows"]
    assert row_ids[0] not in [r["id"] for r in rows]
    entry = (await client.get(f"{base}/{row_ids[0]}")).json()
    assert entry["is_deleted"] is True


async def test_update_entry_and_regression_guard(client, project_id, record_payload):
    row_ids = await _sync_all(client, project_id, record_payload)
    url = f"/api/v1/projects/{project_id}/knowledge-db/{row_ids[0]}"

    resp = await client.patch(url, json={"status": "converted", "notes": "checked"})
    assert resp.status_code == 200
    assert resp.json()["processing_status"] == "converted"
    assert resp.json()["notes"] == "checked"

    resp = await client.patch(url, json={"status": "unprocessed"})
    assert resp.status_code == 409
    assert resp.json()["error"]["code"] == "INVALID_TRANSITION"

    resp = await client.patch(url, json={"status": "unprocessed", "allow_regression": True})
    assert resp.json()["processing_status"] == "unprocessed"


async def test_unknown_status_rejected(client, project_id, record_payload):
    row_ids = await _sync_all(client, project_id, record_payload)
    resp = await client.patch(
        f"/api/v1/projects/{project_id}/knowledge-db/{row_ids[0]}",
        json={"status": "done"},
    )
    assert resp.status_code == 400


async def test_unknown_entry_is_404(client, project_id):
    resp = await client.get(f"/api/v1/projects/{project_id}/knowledge-db/nope")
    assert resp.status_code == 404
    assert resp.json()["error"]["code"] == "RESOURCE_NOT_FOUND"


# -- Knowledge graph -----------------------------------------------------------

async def test_entity_ingest_links_references(client, project_id):
    resp = await client.post(
        f"/api/v1/projects/{project_id}/graph/entities",
        json={"entities": [{"id": "p1"}, {"id": "t1", "data": {"projectId": "p1"}}]},
    )
    assert resp.json() == {"nodes_added": 2, "links_added": 1, "skipped": 0}

    graph = (await client.get(f"/api/v1/projects/{project_id}/graph")).json()
    assert {n["id"] for n in graph["nodes"]} == {"p1", "t1"}
    assert graph["links"] == [{"source": "t1", "target": "p1", "label": "projectId"}]


# -- Backup --------------------------------------------------------------------

async def test_backup_round_trip(client, project_id, record_payload):
    await client.post(
        f"/api/v1/projects/{project_id}/records", json={"records": record_payload},
    )
    await client.post(
        f"/api/v1/projects/{project_id}/graph/entities",
        json={"entities": [{"id": "p1"}]},
    )
    backup = (await client.get(f"/api/v1/projects/{project_id}/backup")).json()
    assert backup["name"] == "Shop capture"
    assert len(backup["harEntries"]) == 3

    other = (await client.post("/api/v1/projects", json={"name": "Copy"})).json()["id"]
    resp = await client.post(f"/api/v1/projects/{other}/backup", json=backup)
    assert resp.status_code == 200
    assert resp.json()["record_count"] == 3
    assert resp.json()["node_count"] == 1


async def test_invalid_backup_rejected(client, project_id, record_payload):
    await client.post(
        f"/api/v1/projects/{project_id}/records", json={"records": record_payload},
    )
    resp = await client.post(
        f"/api/v1/projects/{project_id}/backup", json={"harEntries": []},
    )
    assert resp.status_code == 400
    assert "missing Knowledge Graph" in resp.json()["error"]["message"]
    project = (await client.get(f"/api/v1/projects/{project_id}")).json()
    assert project["record_count"] == 3


# -- Health --------------------------------------------------------------------

async def test_health(client):
    resp = await client.get("/api/v1/health/")
    assert resp.status_code == 200
    assert resp.json()["service"] == "harmind-api"

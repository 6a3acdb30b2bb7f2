from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from siteaudit.src.main import create_app
from siteaudit.src.storage import InMemorySiteRepository

SITE1_B64 = "aHR0cHM6Ly9zaXRlMS5jb20K"


def test_docs_redirect(client):
    resp = client.get("/", follow_redirects=False)
    assert resp.status_code in (302, 307)


def test_trigger_cwv_skips_disabled_site(settings, dispatcher, sites, cwv_disabled_site):
    repo = InMemorySiteRepository([sites[0], cwv_disabled_site])
    with TestClient(create_app(repo, dispatcher, settings)) as client:
        resp = client.post("/trigger", json={"type": "cwv", "url": "all"})

    assert resp.status_code == 200
    assert resp.json() == {"message": ["Triggered cwv audit for site1"]}

    messages = dispatcher.drain()
    assert len(messages) == 1
    assert messages[0].payload["siteIds"] == ["site1"]


def test_trigger_forwards_audit_context(client, dispatcher):
    context = {"slackContext": {"channel": "C42", "ts": "1712.01"}, "extra": 1}
    resp = client.post(
        "/trigger",
        json={"type": "lhs", "url": "https://site2.com", "auditContext": context},
    )

    assert resp.status_code == 200
    assert len(resp.json()["message"]) == 2
    payloads = [m.payload for m in dispatcher.drain()]
    assert [p["type"] for p in payloads] == ["lhs-desktop", "lhs-mobile"]
    assert all(p["auditContext"] == context for p in payloads)
    assert all(p["siteIds"] == ["site2"] for p in payloads)


def test_trigger_unknown_site_returns_404(client):
    resp = client.post("/trigger", json={"type": "cwv", "url": "https://nope.com"})
    assert resp.status_code == 404
    assert resp.json() == {"message": "Site not found"}


def test_trigger_backend_failure_returns_500(settings, dispatcher):
    repo = AsyncMock()
    repo.get_sites.side_effect = RuntimeError("connection reset by peer")
    with TestClient(create_app(repo, dispatcher, settings)) as client:
        resp = client.post("/trigger", json={"type": "cwv", "url": "all"})

    assert resp.status_code == 500
    assert resp.json() == {"message": "Internal server error"}


def test_trigger_requires_type_and_url(client):
    resp = client.post("/trigger", json={"url": "all"})
    assert resp.status_code == 422


def test_create_and_fetch_site(client):
    resp = client.post("/sites", json={"baseURL": "https://new.com", "isLive": True})
    assert resp.status_code == 201
    created = resp.json()
    assert created["baseURL"] == "https://new.com"
    assert created["isLive"] is True
    assert created["auditConfig"] == {"auditsDisabled": False, "auditTypeConfigs": {}}

    resp = client.get(f"/sites/{created['id']}")
    assert resp.status_code == 200
    assert resp.json()["baseURL"] == "https://new.com"


def test_create_duplicate_site_returns_500(client):
    resp = client.post("/sites", json={"baseURL": "https://site1.com"})
    assert resp.status_code == 500
    assert resp.json() == {"message": "Internal server error"}


def test_get_all_sites(client):
    resp = client.get("/sites")
    assert resp.status_code == 200
    assert [s["id"] for s in resp.json()] == ["site1", "site2"]


def test_get_site_by_base_url(client):
    resp = client.get(f"/sites/by-base-url/{SITE1_B64}")
    assert resp.status_code == 200
    assert resp.json()["id"] == "site1"


def test_get_site_by_base_url_missing(client):
    resp = client.get("/sites/by-base-url/")
    assert resp.status_code == 400
    assert resp.json() == {"message": "Base URL required"}


def test_get_site_by_id_not_found(client):
    resp = client.get("/sites/missing")
    assert resp.status_code == 404
    assert resp.json() == {"message": "Site not found"}


def test_update_site(client):
    resp = client.patch("/sites/site1", json={"imsOrgId": "abcd124"})
    assert resp.status_code == 200
    assert resp.json()["imsOrgId"] == "abcd124"
    assert client.get("/sites/site1").json()["imsOrgId"] == "abcd124"


@pytest.mark.parametrize(
    ("body", "message"),
    [
        (None, "Request body required"),
        ({}, "No updates provided"),
        ({"unknown": 1}, "No updates provided"),
    ],
)
def test_update_site_rejections(client, body, message):
    resp = client.patch("/sites/site1", json=body)
    assert resp.status_code == 400
    assert resp.json() == {"message": message}


def test_update_missing_site(client):
    resp = client.patch("/sites/missing", json={"isLive": True})
    assert resp.status_code == 404


def test_remove_site(client):
    resp = client.delete("/sites/site1")
    assert resp.status_code == 204
    assert resp.content == b""
    assert client.get("/sites/site1").status_code == 404


def test_remove_site_blank_id(client):
    resp = client.delete("/sites/%20")
    assert resp.status_code == 400
    assert resp.json() == {"message": "Site ID required"}


def test_export_without_exporter_returns_501(client):
    assert client.get("/sites.csv").status_code == 501
    assert client.get("/sites.xlsx").status_code == 501


def test_trigger_all_lists_site_count(client):
    resp = client.post("/trigger", json={"type": "cwv", "url": "all"})
    assert resp.status_code == 200
    assert resp.json() == {"message": ["Triggered cwv audit for 2 sites"]}


def test_get_site_by_raw_unknown_url_returns_404(client):
    resp = client.get("/sites/by-base-url/https://unknown.com")
    assert resp.status_code == 404
    assert resp.json() == {"message": "Site not found"}


def test_remove_missing_site_returns_404(client):
    resp = client.delete("/sites/does-not-exist")
    assert resp.status_code == 404
    assert resp.json() == {"message": "Site not found"}


def test_export_failure_returns_json_500(repository, dispatcher, settings):
    exporter = MagicMock()
    exporter.to_csv.side_effect = RuntimeError("formatter crashed")
    app = create_app(repository, dispatcher, settings, exporter)
    with TestClient(app) as client:
        resp = client.get("/sites.csv")

    assert resp.status_code == 500
    assert resp.json() == {"message": "Internal server error"}


def test_export_with_exporter(repository, dispatcher, settings):
    exporter = MagicMock()
    exporter.to_csv.return_value = b"id,baseURL\nsite1,https://site1.com\n"
    app = create_app(repository, dispatcher, settings, exporter)
    with TestClient(app) as client:
        resp = client.get("/sites.csv")

    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/csv")
    assert resp.content == b"id,baseURL\nsite1,https://site1.com\n"

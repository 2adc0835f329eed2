from fastapi.testclient import TestClient

from tabreaper.adapters import InMemoryTabProvider, ManualScheduler, RecordingBadge
from tabreaper.api import create_app
from tabreaper.clock import DAY_MS, MINUTE_MS
from tabreaper.errors import StoreError
from tabreaper.service import TabReaper
from tabreaper.stores import InMemoryStore

T0 = 1_700_000_000_000


def _client(store=None):
    now = [T0]
    provider = InMemoryTabProvider()
    reaper = TabReaper(
        store or InMemoryStore(),
        provider,
        ManualScheduler(),
        RecordingBadge(),
        clock=lambda: now[0],
    )
    return TestClient(create_app(reaper)), reaper, provider, now


def test_settings_default_and_update():
    client, _, _, _ = _client()
    assert client.get("/v1/settings").json() == {"maxAgeDays": 7.0}

    resp = client.put("/v1/settings", json={"maxAgeDays": "3"})
    assert resp.status_code == 200
    assert resp.json() == {"maxAgeDays": 3.0}


def test_invalid_settings_rejected_and_previous_kept():
    client, _, _, _ = _client()
    client.put("/v1/settings", json={"maxAgeDays": 2})
    for bad in (0, -5, "abc", None):
        resp = client.put("/v1/settings", json={"maxAgeDays": bad})
        assert resp.status_code == 400
        assert resp.json()["error"]["code"] == "INVALID_SETTINGS"
    assert client.get("/v1/settings").json() == {"maxAgeDays": 2.0}


def test_events_then_listing():
    client, reaper, provider, now = _client()
    assert client.post("/v1/events/created", json={"id": 7, "url": "https://a", "title": "Test Page"}).status_code == 200
    client.post("/v1/events/created", json={"id": 8, "url": "https://b", "title": "Other"})
    now[0] += DAY_MS
    client.post("/v1/events/activated", json={"tabId": 8})

    assert reaper.engine.timestamps() == {7: T0, 8: T0 + DAY_MS}

    client.post("/v1/events/removed", json={"tabId": 7})
    assert reaper.engine.timestamps() == {8: T0 + DAY_MS}


def test_list_tabs_with_search():
    client, reaper, provider, now = _client()
    provider.open_tab("https://a", title="Test Page")
    provider.open_tab("https://b", title="Elsewhere")
    reaper.on_installed()

    body = client.get("/v1/tabs").json()
    assert len(body["tabs"]) == 2
    assert body["settings"] == {"maxAgeDays": 7.0}

    body = client.get("/v1/tabs", params={"q": "test page"}).json()
    assert [row["title"] for row in body["tabs"]] == ["Test Page"]


def test_sweep_and_at_risk():
    client, reaper, provider, now = _client()
    old = provider.open_tab("https://old")
    reaper.on_installed()
    now[0] += 7 * DAY_MS - 20 * MINUTE_MS

    assert client.get("/v1/at-risk").json() == {"count": 1}
    assert client.get("/v1/at-risk", params={"window_minutes": 10}).json() == {"count": 0}

    now[0] += 20 * MINUTE_MS
    body = client.post("/v1/sweep").json()
    assert body == {"skipped": False, "closed": [old.id], "purged": [], "failed": []}


class _FailingStore(InMemoryStore):
    def load(self):
        raise StoreError("unavailable")


def test_store_failure_maps_to_503():
    client, _, _, _ = _client(store=_FailingStore())
    resp = client.post("/v1/sweep")
    assert resp.status_code == 503
    assert resp.json()["error"]["code"] == "STORE_UNAVAILABLE"

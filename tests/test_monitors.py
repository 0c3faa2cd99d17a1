import pytest
from httpx import AsyncClient
from sqlalchemy import select

from cronguard.models import Ping

from tests.conftest import test_session_factory


MONITOR_DATA = {
    "name": "Nightly backup",
    "schedule": "Every 5 minutes",
    "grace_minutes": 10,
}


@pytest.mark.asyncio
async def test_create_monitor(client: AsyncClient):
    response = await client.post("/api/monitors", json=MONITOR_DATA)
    assert response.status_code == 201
    data = response.json()
    assert data["name"] == "Nightly backup"
    assert data["schedule"] == "Every 5 minutes"
    assert data["interval_minutes"] == 5
    assert data["grace_minutes"] == 10
    assert data["status"] == "down"
    assert data["last_ping"] is None
    assert data["next_expected"] is None
    assert data["paused"] is False
    assert data["pings"] == []
    assert data["ping_url"] == f"/api/ping/{data['id']}"


@pytest.mark.asyncio
async def test_create_monitor_default_grace(client: AsyncClient):
    response = await client.post("/api/monitors", json={"name": "Weekly report", "schedule": "Weekly"})
    assert response.status_code == 201
    assert response.json()["grace_minutes"] == 15
    assert response.json()["interval_minutes"] == 10080


@pytest.mark.asyncio
@pytest.mark.parametrize("overrides", [
    {"name": "   "},
    {"name": "x" * 101},
    {"schedule": "at midnight"},
    {"schedule": "0 * * * *"},
    {"schedule": "Every 0 minutes"},
    {"schedule": "every 0 hours"},
    {"grace_minutes": 0},
    {"grace_minutes": 1441},
])
async def test_create_monitor_invalid(client: AsyncClient, overrides):
    response = await client.post("/api/monitors", json={**MONITOR_DATA, **overrides})
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_list_monitors_empty(client: AsyncClient):
    response = await client.get("/api/monitors")
    assert response.status_code == 200
    assert response.json() == []


@pytest.mark.asyncio
async def test_list_monitors(client: AsyncClient):
    await client.post("/api/monitors", json=MONITOR_DATA)
    await client.post("/api/monitors", json={**MONITOR_DATA, "name": "Cache warmer"})

    response = await client.get("/api/monitors")
    assert response.status_code == 200
    data = response.json()
    assert len(data) == 2
    assert {m["name"] for m in data} == {"Nightly backup", "Cache warmer"}


@pytest.mark.asyncio
async def test_get_monitor_includes_recent_pings(client: AsyncClient, monitor_id: str, clock):
    for _ in range(3):
        await client.get(f"/api/ping/{monitor_id}")
        clock.advance(minutes=1)

    response = await client.get(f"/api/monitors/{monitor_id}")
    assert response.status_code == 200
    data = response.json()
    assert len(data["pings"]) == 3
    timestamps = [p["timestamp"] for p in data["pings"]]
    assert timestamps == sorted(timestamps, reverse=True)
    assert data["last_ping"] == timestamps[0]
    assert data["next_expected"].startswith("2026-01-15T12:07:00")


@pytest.mark.asyncio
async def test_get_monitor_not_found(client: AsyncClient):
    response = await client.get("/api/monitors/nonexistent-id")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_update_monitor_rederives_interval(client: AsyncClient, monitor_id: str):
    response = await client.patch(f"/api/monitors/{monitor_id}", json={
        "name": "Hourly backup",
        "schedule": "Every 2 hours",
    })
    assert response.status_code == 200
    data = response.json()
    assert data["name"] == "Hourly backup"
    assert data["schedule"] == "Every 2 hours"
    assert data["interval_minutes"] == 120
    assert data["grace_minutes"] == 10  # unchanged


@pytest.mark.asyncio
async def test_update_grace_keeps_interval(client: AsyncClient, monitor_id: str):
    response = await client.patch(f"/api/monitors/{monitor_id}", json={"grace_minutes": 30})
    assert response.status_code == 200
    assert response.json()["grace_minutes"] == 30
    assert response.json()["interval_minutes"] == 5


@pytest.mark.asyncio
@pytest.mark.parametrize("schedule", ["sometimes", "Every 0 minutes"])
async def test_update_monitor_invalid_schedule(client: AsyncClient, monitor_id: str, schedule):
    response = await client.patch(f"/api/monitors/{monitor_id}", json={"schedule": schedule})
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_update_monitor_not_found(client: AsyncClient):
    response = await client.patch("/api/monitors/nonexistent", json={"name": "Updated"})
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_delete_monitor_removes_pings(client: AsyncClient, monitor_id: str):
    await client.get(f"/api/ping/{monitor_id}")
    await client.get(f"/api/ping/{monitor_id}")

    response = await client.delete(f"/api/monitors/{monitor_id}")
    assert response.status_code == 204

    response = await client.get(f"/api/monitors/{monitor_id}")
    assert response.status_code == 404

    async with test_session_factory() as db:
        result = await db.execute(select(Ping).where(Ping.monitor_id == monitor_id))
        assert result.scalars().all() == []


@pytest.mark.asyncio
async def test_delete_monitor_not_found(client: AsyncClient):
    response = await client.delete("/api/monitors/nonexistent")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_stats(client: AsyncClient, clock):
    ids = []
    for name in ("healthy", "late", "down", "never", "paused"):
        res = await client.post("/api/monitors", json={**MONITOR_DATA, "name": name})
        ids.append(res.json()["id"])
    healthy_id, late_id, down_id, _, paused_id = ids

    await client.get(f"/api/ping/{down_id}")
    clock.advance(minutes=10)
    await client.get(f"/api/ping/{late_id}")
    clock.advance(minutes=10)
    await client.get(f"/api/ping/{healthy_id}")
    await client.post("/api/pause", json={"id": paused_id})

    # down: pinged 20m ago; late: pinged 10m ago; healthy: pinged just now
    response = await client.get("/api/monitors", params={"stats": "true"})
    assert response.status_code == 200
    assert response.json() == {
        "total": 5,
        "healthy": 1,
        "late": 1,
        "down": 2,
        "paused": 1,
        "totalPings": 3,
    }


@pytest.mark.asyncio
async def test_timeline(client: AsyncClient, monitor_id: str, clock):
    await client.get(f"/api/ping/{monitor_id}")
    clock.advance(minutes=30)
    await client.post(f"/api/ping/{monitor_id}", json={"success": False})
    clock.advance(minutes=7)

    response = await client.get(f"/api/monitors/{monitor_id}/timeline")
    assert response.status_code == 200
    markers = response.json()

    # late now, newest ping, 5 missed cycles in the 30 minute gap, first ping
    assert [m["type"] for m in markers] == ["late", "ping"] + ["missed"] * 5 + ["ping"]
    assert markers[1]["ping"]["status"] == "failure"
    assert markers[2]["ping"] is None


@pytest.mark.asyncio
async def test_timeline_not_found(client: AsyncClient):
    response = await client.get("/api/monitors/nonexistent/timeline")
    assert response.status_code == 404

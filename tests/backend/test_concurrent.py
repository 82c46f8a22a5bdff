"""
并发测试：同一会话的并发模拟请求只保留最新一次，播放驱动任务按时钟推进。
"""

import asyncio

import numpy as np
import pytest
from httpx import ASGITransport, AsyncClient

from conftest import FakeOracle

from firespread.api.deps import get_oracle, get_rng
from firespread.core.config import settings
from firespread.core.storage import simulation_storage
from firespread.core.task_manager import get_simulation, release_all
from firespread.main import app

REQUEST_DATA = {"lat": 34.05, "lng": -118.24, "address": "Los Angeles, CA"}


class GatedOracle(FakeOracle):
    """第一次调用阻塞直到放行，之后的调用立即返回。"""

    def __init__(self):
        super().__init__()
        self.first_called = asyncio.Event()
        self.release = asyncio.Event()

    async def fetch_timeframes(self, location, date=None):
        self.calls += 1
        if self.calls == 1:
            self.first_called.set()
            await self.release.wait()
        return await super().fetch_timeframes(location, date)


@pytest.fixture
async def async_client():
    """异步测试客户端。"""
    app.dependency_overrides[get_rng] = lambda: np.random.default_rng(5)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.mark.anyio
async def test_last_request_wins(async_client):
    """测试较早请求的结果在较新请求之后到达时被丢弃。"""
    oracle = GatedOracle()
    app.dependency_overrides[get_oracle] = lambda: oracle
    payload = {**REQUEST_DATA, "session_id": "focus-1"}

    stale = asyncio.create_task(async_client.post("/api/fire-simulation", json=payload))
    await asyncio.wait_for(oracle.first_called.wait(), timeout=5.0)

    fresh = await async_client.post(
        "/api/fire-simulation", json={**payload, "lat": 36.0, "lng": -119.0}
    )
    oracle.release.set()
    stale_response = await asyncio.wait_for(stale, timeout=5.0)

    assert fresh.status_code == 201
    assert stale_response.status_code == 409

    fresh_id = fresh.json()["simulation_id"]
    response = await async_client.get(f"/api/simulation/{fresh_id}")
    assert response.status_code == 200


@pytest.mark.anyio
async def test_independent_sessions(async_client):
    """测试不同会话的请求互不影响。"""
    app.dependency_overrides[get_oracle] = lambda: FakeOracle()

    responses = await asyncio.gather(
        *[
            async_client.post(
                "/api/fire-simulation", json={**REQUEST_DATA, "session_id": f"focus-{i}"}
            )
            for i in range(5)
        ]
    )

    assert all(r.status_code == 201 for r in responses)
    ids = {r.json()["simulation_id"] for r in responses}
    assert len(ids) == 5


@pytest.mark.anyio
async def test_playback_driver_runs_to_completion(async_client, monkeypatch):
    """测试播放驱动任务推进到最后一帧并自动停止。"""
    app.dependency_overrides[get_oracle] = lambda: FakeOracle()
    monkeypatch.setattr(settings, "segment_duration_ms", 30.0)
    monkeypatch.setattr(settings, "playback_tick_interval_s", 0.005)

    created = await async_client.post("/api/fire-simulation", json=REQUEST_DATA)
    simulation_id = created.json()["simulation_id"]
    base = f"/api/simulation/{simulation_id}"

    response = await async_client.post(f"{base}/playback/play")
    assert response.json()["state"]["is_playing"] is True

    state = None
    for _ in range(200):
        await asyncio.sleep(0.01)
        state = (await async_client.get(f"{base}/playback")).json()["state"]
        if not state["is_playing"]:
            break

    assert state["status"] == "finished"
    assert state["current_index"] == 3
    assert state["progress"] == 1.0

    frame = (await async_client.get(f"{base}/frame")).json()["frame"]
    assert frame["hours"] == 96
    assert frame["perimeter"] == created.json()["result"]["timeframes"][-1]["perimeter"]


@pytest.mark.anyio
async def test_pause_stops_driver(async_client, monkeypatch):
    """测试暂停后进度不再推进。"""
    app.dependency_overrides[get_oracle] = lambda: FakeOracle()
    monkeypatch.setattr(settings, "playback_tick_interval_s", 0.005)

    created = await async_client.post("/api/fire-simulation", json=REQUEST_DATA)
    base = f"/api/simulation/{created.json()['simulation_id']}"

    await async_client.post(f"{base}/playback/play")
    await asyncio.sleep(0.05)
    paused = (await async_client.post(f"{base}/playback/pause")).json()["state"]
    await asyncio.sleep(0.05)
    later = (await async_client.get(f"{base}/playback")).json()["state"]

    assert paused["is_playing"] is False
    assert later == paused

    await async_client.delete(base)


@pytest.mark.anyio
async def test_release_all_waits_for_drivers(async_client, monkeypatch):
    """测试关闭时取消并等待所有播放驱动任务结束。"""
    app.dependency_overrides[get_oracle] = lambda: FakeOracle()
    monkeypatch.setattr(settings, "playback_tick_interval_s", 0.005)

    drivers = []
    for i in range(3):
        created = await async_client.post(
            "/api/fire-simulation", json={**REQUEST_DATA, "session_id": f"shutdown-{i}"}
        )
        simulation_id = created.json()["simulation_id"]
        await async_client.post(f"/api/simulation/{simulation_id}/playback/play")
        drivers.append(get_simulation(simulation_id).driver)

    assert all(driver is not None and not driver.done() for driver in drivers)

    released = await release_all()

    assert released == 3
    assert all(driver.done() for driver in drivers)
    assert simulation_storage.list_simulations() == []

"""Unit tests for profile store adapters (learnquest/services/profile_store.py)"""
import json
import pytest
import httpx

from learnquest.exceptions import ProfileStoreError
from learnquest.models.progression import ProgressionState
from learnquest.services.profile_store import HttpProfileStore, MockProfileStore


def _client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(base_url="http://profile.test/api", transport=httpx.MockTransport(handler))


# ============================================================================
# HTTP Store Tests
# ============================================================================

@pytest.mark.asyncio
async def test_http_get_profile():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.method == "GET"
        assert request.url.path == "/api/user/profile"
        return httpx.Response(200, json={
            "user": {"xp": 750, "level": 4, "coins": 150, "streak": 5, "ageGroup": "teen", "name": "Sam"},
        })

    store = HttpProfileStore("http://profile.test/api", client=_client(handler))
    profile = await store.get_profile()

    assert profile.xp == 750
    assert profile.age_group == "teen"


@pytest.mark.asyncio
async def test_http_get_profile_unwrapped_payload():
    store = HttpProfileStore(
        "http://profile.test/api",
        client=_client(lambda request: httpx.Response(200, json={"xp": 5, "coins": 1})),
    )

    profile = await store.get_profile()

    assert profile.xp == 5
    assert profile.level == 1


@pytest.mark.asyncio
async def test_http_get_profile_invalid_payload():
    store = HttpProfileStore(
        "http://profile.test/api",
        client=_client(lambda request: httpx.Response(200, json={"xp": -10})),
    )

    with pytest.raises(ProfileStoreError):
        await store.get_profile()


@pytest.mark.asyncio
async def test_http_get_profile_server_error():
    store = HttpProfileStore(
        "http://profile.test/api",
        client=_client(lambda request: httpx.Response(503)),
    )

    with pytest.raises(ProfileStoreError) as exc_info:
        await store.get_profile()

    assert exc_info.value.status_code == 503


@pytest.mark.asyncio
async def test_http_push_progress():
    received = {}

    def handler(request: httpx.Request) -> httpx.Response:
        received["method"] = request.method
        received["body"] = json.loads(request.content)
        return httpx.Response(200, json={"ok": True})

    store = HttpProfileStore("http://profile.test/api", client=_client(handler))
    await store.push_progress(ProgressionState(xp=120, level=2, coins=50, streak=3, total_missions_completed=4))

    assert received["method"] == "PUT"
    assert received["body"] == {"xp": 120, "level": 2, "coins": 50, "streak": 3}


@pytest.mark.asyncio
async def test_http_push_progress_connection_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    store = HttpProfileStore("http://profile.test/api", client=_client(handler))

    with pytest.raises(ProfileStoreError):
        await store.push_progress(ProgressionState())


@pytest.mark.asyncio
async def test_http_store_sends_token():
    store = HttpProfileStore("http://profile.test/api", token="secret")

    assert store._client.headers["Authorization"] == "Bearer secret"
    await store.close()


# ============================================================================
# Mock Store Tests
# ============================================================================

@pytest.mark.asyncio
async def test_mock_store_default_learner():
    profile = await MockProfileStore().get_profile()

    assert profile.xp == 750
    assert profile.coins == 150
    assert profile.streak == 5


@pytest.mark.asyncio
async def test_mock_store_saves_progress():
    store = MockProfileStore()

    await store.push_progress(ProgressionState(xp=800, level=4, coins=10, streak=6))

    profile = await store.get_profile()
    assert profile.xp == 800
    assert profile.coins == 10
    assert len(store.pushed) == 1


@pytest.mark.asyncio
async def test_mock_store_failure_switches():
    store = MockProfileStore()
    store.fail_reads = True
    store.fail_writes = True

    with pytest.raises(ProfileStoreError):
        await store.get_profile()
    with pytest.raises(ProfileStoreError):
        await store.push_progress(ProgressionState())

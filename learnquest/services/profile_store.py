"""
Profile store adapters

The profile backend is the system of record. The session reads a profile
at start and on refresh, and pushes progress fire-and-forget after changes.

- HttpProfileStore: REST backend (GET/PUT /user/profile) over httpx
- MockProfileStore: in-memory stand-in for development and tests
"""

import logging
from typing import Any, Dict, Optional

import httpx
from pydantic import ValidationError as PydanticValidationError

from learnquest.exceptions import ProfileStoreError, wrap_external_exception
from learnquest.models.progression import Profile, ProgressionState

logger = logging.getLogger(__name__)


class ProfileStore:
    """Interface expected by GameSession"""

    async def get_profile(self) -> Profile:
        raise NotImplementedError

    async def push_progress(self, state: ProgressionState) -> None:
        raise NotImplementedError

    async def close(self) -> None:
        return None


def _parse_profile(data: Any) -> Profile:
    # Some backends wrap the user object: {"user": {...}}
    if isinstance(data, dict) and isinstance(data.get("user"), dict):
        data = data["user"]
    try:
        return Profile.model_validate(data)
    except PydanticValidationError as e:
        raise ProfileStoreError(f"Profile payload is invalid: {e}", operation="get_profile", cause=e)


class HttpProfileStore(ProfileStore):
    """Profile backend over HTTP"""

    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        headers = {"Content-Type": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"

        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(base_url=base_url, headers=headers, timeout=timeout)

    async def get_profile(self) -> Profile:
        try:
            response = await self._client.get("/user/profile")
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise wrap_external_exception(e, operation="get_profile")

        profile = _parse_profile(response.json())
        logger.debug(f"Fetched profile: {profile.xp} XP, {profile.coins} coins, streak {profile.streak}")
        return profile

    async def push_progress(self, state: ProgressionState) -> None:
        payload: Dict[str, Any] = {
            "xp": state.xp,
            "level": state.level,
            "coins": state.coins,
            "streak": state.streak,
        }
        try:
            response = await self._client.put("/user/profile", json=payload)
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise wrap_external_exception(e, operation="push_progress", context=payload)

        logger.debug(f"Pushed progress: {payload}")

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()


class MockProfileStore(ProfileStore):
    """
    In-memory profile store (NOT persisted)

    Starts from the development learner used by the mock backend. Set
    `fail_reads` / `fail_writes` to simulate an unavailable backend.
    """

    DEFAULT_PROFILE = {
        "xp": 750,
        "level": 4,
        "coins": 150,
        "streak": 5,
        "ageGroup": "teen",
    }

    def __init__(self, profile: Optional[Dict[str, Any]] = None):
        self._profile = Profile.model_validate(profile if profile is not None else self.DEFAULT_PROFILE)
        self.fail_reads = False
        self.fail_writes = False
        self.pushed: list = []

    async def get_profile(self) -> Profile:
        if self.fail_reads:
            raise ProfileStoreError("Mock profile store unavailable", operation="get_profile", status_code=503)
        return self._profile.model_copy()

    async def push_progress(self, state: ProgressionState) -> None:
        if self.fail_writes:
            raise ProfileStoreError("Mock profile store unavailable", operation="push_progress", status_code=503)

        self.pushed.append(state)
        self._profile = self._profile.model_copy(update={
            "xp": state.xp,
            "level": state.level,
            "coins": state.coins,
            "streak": state.streak,
        })
        logger.debug(f"Saved progress to mock store (NOT PERSISTED): {state.xp} XP")

    def set_profile(self, **changes) -> None:
        """Simulate a change made elsewhere on the backend"""
        self._profile = self._profile.model_copy(update=changes)

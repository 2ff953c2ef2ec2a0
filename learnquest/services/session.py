"""
GameSession - per-login owner of the progression state

Responsibilities:
- Build the starting state from the profile store (session start)
- Serialize every engine transition so concurrent callers never lose updates
- Expose the read-model the UI renders (snapshot, feed, unread count)
- Push progress to the profile store fire-and-forget; failures never roll
  back local state
- Tear down cleanly on logout

One session per learner login; there is no process-wide session.
"""

import asyncio
import logging
import threading
from typing import Callable, List, Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict

from learnquest import config as settings
from learnquest.exceptions import SessionClosedError
from learnquest.gamification import (
    GameState,
    Transition,
    acknowledge_level_up,
    advance_streak,
    apply_event,
    complete_mission,
    get_level_table,
    grant_coins,
    grant_xp,
    initial_state,
    reset_mission_counters,
    unlock_achievement,
)
from learnquest.gamification.engine import mark_all_notifications_read, mark_notification_read
from learnquest.gamification.messaging import parse_age_group
from learnquest.gamification.state import rebase_state
from learnquest.models.achievement import Achievement
from learnquest.models.events import CanonicalEvent
from learnquest.models.game_config import AgeGroup, GameConfig
from learnquest.models.notification import NotificationEvent
from learnquest.models.progression import Profile, ProgressionState
from learnquest.observability.metrics import active_sessions, profile_sync_failures_total
from learnquest.resilience.retry import BASE_DELAY, retry_with_backoff
from learnquest.services.profile_store import ProfileStore

logger = logging.getLogger(__name__)

Subscriber = Callable[["SessionSnapshot"], None]


class SessionSnapshot(BaseModel):
    """Read-model handed to the UI layer"""
    model_config = ConfigDict(frozen=True)

    session_id: str
    progression: ProgressionState
    xp_to_next_level: int
    xp_in_current_level: int
    next_level_threshold: Optional[int]
    progress_to_next_level: float
    max_level_reached: bool
    achievements: List[Achievement]
    notifications: List[NotificationEvent]
    unread_count: int
    level_up_pending: bool
    age_group: AgeGroup


class GameSession:
    """
    Session context for one learner.

    Create with `await GameSession.start(store, config)`, end with
    `await session.close()`.
    """

    def __init__(
        self,
        store: ProfileStore,
        config: GameConfig,
        profile: Profile,
        default_age_group: Optional[AgeGroup] = None,
        sync_max_retries: int = settings.PROFILE_SYNC_MAX_RETRIES,
        sync_base_delay: float = BASE_DELAY,
        session_id: Optional[str] = None,
    ):
        self.session_id = session_id or uuid4().hex
        self._store = store
        self._config = config
        self._table = get_level_table(config)
        self._sync_max_retries = sync_max_retries
        self._sync_base_delay = sync_base_delay

        default_age_group = default_age_group or parse_age_group(settings.DEFAULT_AGE_GROUP)
        self._state: GameState = initial_state(profile, config, default_age_group)
        self._lock = threading.Lock()
        self._subscribers: List[Subscriber] = []
        self._sync_task: Optional[asyncio.Task] = None
        self._sync_requested = False
        self._version = 0
        self._synced_version = 0
        self._closed = False

        try:
            self._loop: Optional[asyncio.AbstractEventLoop] = asyncio.get_running_loop()
        except RuntimeError:
            self._loop = None

        active_sessions.inc()
        logger.info(
            f"Session {self.session_id} started: {self._state.progression.xp} XP, "
            f"level {self._state.progression.level}, {self._state.progression.coins} coins"
        )

    @classmethod
    async def start(
        cls,
        store: ProfileStore,
        config: GameConfig,
        **kwargs
    ) -> "GameSession":
        """
        Fetch the profile and open a session

        Raises:
            ProfileStoreError: the profile could not be read after retries
        """
        max_retries = kwargs.get("sync_max_retries", settings.PROFILE_SYNC_MAX_RETRIES)
        base_delay = kwargs.get("sync_base_delay", BASE_DELAY)
        try:
            profile = await retry_with_backoff(store.get_profile, max_retries=max_retries, base_delay=base_delay)
        except Exception:
            profile_sync_failures_total.labels(operation="get_profile").inc()
            raise
        return cls(store, config, profile, **kwargs)

    # ------------------------------------------------------------------
    # Read-model
    # ------------------------------------------------------------------

    @property
    def state(self) -> GameState:
        return self._state

    @property
    def progression(self) -> ProgressionState:
        return self._state.progression

    @property
    def config(self) -> GameConfig:
        return self._config

    @property
    def closed(self) -> bool:
        return self._closed

    def xp_to_next_level(self) -> int:
        progression = self._state.progression
        return self._table.xp_to_next_level(progression.xp, progression.level)

    def progress_to_next_level(self) -> float:
        progression = self._state.progression
        return self._table.progress_to_next_level(progression.xp, progression.level)

    def notifications(self) -> List[NotificationEvent]:
        """Feed entries, newest first"""
        return list(self._state.feed.entries)

    def unread_count(self) -> int:
        return self._state.feed.unread_count()

    def snapshot(self) -> SessionSnapshot:
        state = self._state
        progression = state.progression
        info = self._table.level_info(progression.xp)
        return SessionSnapshot(
            session_id=self.session_id,
            progression=progression,
            xp_to_next_level=info["xp_to_next_level"],
            xp_in_current_level=info["xp_in_current_level"],
            next_level_threshold=info["next_level_threshold"],
            progress_to_next_level=info["progress_percent"],
            max_level_reached=info["max_level_reached"],
            achievements=list(state.achievements.values()),
            notifications=list(state.feed.entries),
            unread_count=state.feed.unread_count(),
            level_up_pending=state.level_up_pending,
            age_group=state.age_group,
        )

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """
        Call `callback(snapshot)` after every state change

        Returns:
            Function that removes the subscription
        """
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    # ------------------------------------------------------------------
    # Engine operations
    # ------------------------------------------------------------------

    def grant_xp(self, amount: int, source: str = "unknown") -> Transition:
        return self._transition(lambda state: grant_xp(state, amount, source, self._config))

    def grant_coins(self, amount: int, source: str = "unknown") -> Transition:
        return self._transition(lambda state: grant_coins(state, amount, source, self._config))

    def advance_streak(self, continued: bool = True) -> Transition:
        return self._transition(lambda state: advance_streak(state, continued, self._config))

    def unlock_achievement(self, achievement_id: str) -> Transition:
        return self._transition(lambda state: unlock_achievement(state, achievement_id, self._config))

    def complete_mission(
        self,
        mission_id: str,
        title: str = "",
        xp_reward: int = 0,
        coin_reward: int = 0,
    ) -> Transition:
        return self._transition(lambda state: complete_mission(
            state,
            mission_id,
            self._config,
            title=title,
            xp_reward=xp_reward,
            coin_reward=coin_reward,
        ))

    def reset_mission_counters(self, daily: bool = True, weekly: bool = False) -> Transition:
        return self._transition(lambda state: reset_mission_counters(state, daily=daily, weekly=weekly))

    def apply(self, event: CanonicalEvent) -> Transition:
        return self._transition(lambda state: apply_event(state, event, self._config))

    def mark_read(self, notification_id: str) -> Transition:
        return self._transition(lambda state: mark_notification_read(state, notification_id))

    def mark_all_read(self) -> Transition:
        return self._transition(mark_all_notifications_read)

    def acknowledge_level_up(self) -> Transition:
        return self._transition(acknowledge_level_up)

    def _transition(self, operation: Callable[[GameState], Transition]) -> Transition:
        self._ensure_open()

        with self._lock:
            previous = self._state
            transition = operation(previous)
            self._state = transition.state
            if transition.state.progression is not previous.progression:
                self._version += 1

        if transition.state is previous:
            return transition

        if transition.state.progression is not previous.progression:
            self._schedule_sync()
        self._notify_subscribers()
        return transition

    def _ensure_open(self) -> None:
        if self._closed:
            raise SessionClosedError(
                f"Session {self.session_id} is closed",
                session_id=self.session_id,
                operation="transition",
            )

    def _notify_subscribers(self) -> None:
        if not self._subscribers:
            return

        snapshot = self.snapshot()
        for callback in list(self._subscribers):
            try:
                callback(snapshot)
            except Exception as e:
                logger.error(f"Session subscriber {callback!r} failed: {e}", exc_info=True)

    # ------------------------------------------------------------------
    # Profile store synchronization
    # ------------------------------------------------------------------

    def _schedule_sync(self) -> None:
        self._sync_requested = True

        try:
            asyncio.get_running_loop()
        except RuntimeError:
            # Called off the loop thread: hand the task creation to the session loop
            if self._loop is not None and self._loop.is_running() and not self._loop.is_closed():
                self._loop.call_soon_threadsafe(self._ensure_sync_task)
            else:
                logger.debug("No running event loop, profile sync deferred")
            return

        self._ensure_sync_task()

    def _ensure_sync_task(self) -> None:
        if not self._sync_requested:
            return
        if self._sync_task is not None and not self._sync_task.done():
            return
        self._sync_task = asyncio.get_running_loop().create_task(self._sync_loop())

    async def _sync_loop(self) -> None:
        # Always pushes the latest progression, so pushes never go out of order
        while self._sync_requested:
            self._sync_requested = False
            with self._lock:
                progression = self._state.progression
                version = self._version
            try:
                await retry_with_backoff(
                    self._store.push_progress,
                    progression,
                    max_retries=self._sync_max_retries,
                    base_delay=self._sync_base_delay,
                )
            except Exception as e:
                profile_sync_failures_total.labels(operation="push_progress").inc()
                logger.warning(
                    f"Session {self.session_id}: profile sync failed, keeping local state "
                    f"({type(e).__name__}: {e})"
                )
            else:
                self._synced_version = max(self._synced_version, version)

    async def flush(self) -> None:
        """Wait for pending profile sync, starting one if a change is waiting"""
        self._ensure_sync_task()
        if self._sync_task is not None:
            await self._sync_task

    async def refresh(self) -> bool:
        """
        Re-read the profile store and rebase progression on it

        Local progress the store has not acknowledged is pushed first. The
        rebase is skipped when the store is still behind local state, or when
        a transition lands while the profile is being fetched.

        Returns:
            True if progression was rebased; False if local state was kept
        """
        self._ensure_open()
        await self.flush()
        fetch_version = self._version

        try:
            profile = await retry_with_backoff(
                self._store.get_profile,
                max_retries=self._sync_max_retries,
                base_delay=self._sync_base_delay,
            )
        except Exception as e:
            profile_sync_failures_total.labels(operation="get_profile").inc()
            logger.warning(
                f"Session {self.session_id}: profile refresh failed, keeping local state "
                f"({type(e).__name__}: {e})"
            )
            return False

        with self._lock:
            stale = self._version != fetch_version or self._synced_version != self._version
            if not stale:
                self._state = rebase_state(self._state, profile, self._config)

        if stale:
            logger.info(f"Session {self.session_id}: local progress not yet synced, refresh skipped")
            self._schedule_sync()
            return False

        logger.info(f"Session {self.session_id} refreshed from profile store: {profile.xp} XP")
        self._notify_subscribers()
        return True

    async def close(self) -> None:
        """End the session (logout). Pending sync is flushed first."""
        if self._closed:
            return

        await self.flush()
        self._closed = True
        self._subscribers.clear()
        active_sessions.dec()
        logger.info(f"Session {self.session_id} closed")

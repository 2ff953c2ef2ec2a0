"""
Event Router

Single entry point for everything that changes progression:

- Push channel: transport events (`achievement:unlocked`, `xp:gained`) are
  untrusted network input. Payloads are validated, normalized into canonical
  events and queued in a bounded inbox; anything malformed is dropped.
- Local channel: UI actions hand a canonical event to `dispatch()`, which
  applies it immediately.

The inbox is consumed one event at a time, either by `drain()` or by the
long-running `run()` task.
"""

import asyncio
import logging
from typing import Any, Optional

from pydantic import ValidationError as PydanticValidationError

from learnquest import config as settings
from learnquest.exceptions import SessionClosedError, ValidationError
from learnquest.gamification.state import Transition
from learnquest.models.events import (
    ACHIEVEMENT_UNLOCKED_EVENT,
    PAYLOAD_MODELS,
    XP_GAINED_EVENT,
    CanonicalEvent,
)
from learnquest.observability.metrics import event_inbox_depth, push_events_total
from learnquest.services.session import GameSession
from learnquest.services.transport import PushTransport

logger = logging.getLogger(__name__)


class EventRouter:
    """Normalizes push and local events into engine calls on one session"""

    def __init__(self, session: GameSession, inbox_size: int = settings.EVENT_INBOX_SIZE):
        if inbox_size < 1:
            raise ValueError(f"inbox_size must be at least 1, got {inbox_size}")

        self.session = session
        self.inbox: asyncio.Queue = asyncio.Queue(maxsize=inbox_size)
        self._transport: Optional[PushTransport] = None
        self._running = False

    # ------------------------------------------------------------------
    # Push channel
    # ------------------------------------------------------------------

    @staticmethod
    def normalize(name: str, payload: Any) -> Optional[CanonicalEvent]:
        """
        Validate a push payload and convert it to a canonical event

        Returns:
            The canonical event, or None for event names the engine ignores

        Raises:
            pydantic.ValidationError: payload is malformed or partial
        """
        model = PAYLOAD_MODELS.get(name)
        if model is None:
            return None
        return model.model_validate(payload).to_event()

    def deliver(self, name: str, payload: Any) -> bool:
        """
        Accept one pushed event

        Never raises: bad input is dropped and counted.

        Returns:
            True if the event was queued for the engine
        """
        try:
            event = self.normalize(name, payload)
        except PydanticValidationError as e:
            push_events_total.labels(event=name, outcome="malformed").inc()
            logger.warning(f"Dropping malformed '{name}' payload {payload!r}: {e.error_count()} error(s)")
            return False

        if event is None:
            push_events_total.labels(event=name, outcome="ignored").inc()
            logger.debug(f"Ignoring push event '{name}'")
            return False

        try:
            self.inbox.put_nowait(event)
        except asyncio.QueueFull:
            push_events_total.labels(event=name, outcome="dropped").inc()
            logger.warning(f"Event inbox full ({self.inbox.maxsize}), dropping '{name}'")
            return False

        push_events_total.labels(event=name, outcome="accepted").inc()
        event_inbox_depth.set(self.inbox.qsize())
        return True

    def on_achievement_unlocked(self, payload: Any) -> bool:
        return self.deliver(ACHIEVEMENT_UNLOCKED_EVENT, payload)

    def on_xp_gained(self, payload: Any) -> bool:
        return self.deliver(XP_GAINED_EVENT, payload)

    def attach(self, transport: PushTransport) -> None:
        """Subscribe the inbound hooks to a push transport"""
        if self._transport is not None:
            self.detach()

        transport.on(ACHIEVEMENT_UNLOCKED_EVENT, self.on_achievement_unlocked)
        transport.on(XP_GAINED_EVENT, self.on_xp_gained)
        self._transport = transport
        logger.info("Event router attached to push transport")

    def detach(self) -> None:
        if self._transport is None:
            return

        self._transport.off(ACHIEVEMENT_UNLOCKED_EVENT, self.on_achievement_unlocked)
        self._transport.off(XP_GAINED_EVENT, self.on_xp_gained)
        self._transport = None
        logger.info("Event router detached from push transport")

    # ------------------------------------------------------------------
    # Local channel
    # ------------------------------------------------------------------

    def dispatch(self, event: CanonicalEvent) -> Transition:
        """Apply a locally triggered canonical event right away"""
        return self.session.apply(event)

    # ------------------------------------------------------------------
    # Inbox consumption
    # ------------------------------------------------------------------

    def _apply_queued(self, event: CanonicalEvent) -> Optional[Transition]:
        try:
            return self.session.apply(event)
        except ValidationError as e:
            push_events_total.labels(event=event.kind, outcome="rejected").inc()
            logger.warning(f"Engine rejected queued {event.kind} event: {e.message}")
            return None
        finally:
            self.inbox.task_done()
            event_inbox_depth.set(self.inbox.qsize())

    def drain(self) -> int:
        """
        Apply every queued event now

        Returns:
            Number of events taken off the inbox
        """
        processed = 0
        while True:
            try:
                event = self.inbox.get_nowait()
            except asyncio.QueueEmpty:
                return processed
            if event is None:
                self.inbox.task_done()
                continue
            self._apply_queued(event)
            processed += 1

    async def run(self) -> None:
        """Consume the inbox until stop() is called or the session closes"""
        self._running = True
        logger.info("Event router started")

        try:
            while self._running:
                event = await self.inbox.get()
                if event is None:
                    self.inbox.task_done()
                    break
                try:
                    self._apply_queued(event)
                except SessionClosedError:
                    logger.info("Session closed, event router stopping")
                    break
        finally:
            self._running = False
            logger.info("Event router stopped")

    def stop(self) -> None:
        """Ask run() to exit once it has finished the current event"""
        self._running = False
        try:
            # Wake a consumer blocked on an empty inbox
            self.inbox.put_nowait(None)
        except asyncio.QueueFull:
            pass

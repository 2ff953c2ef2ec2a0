"""
Service Layer Package

Wires the pure gamification engine to the outside world:
- GameSession: per-login owner of the progression state and its read-model
- EventRouter: push/local event normalization into canonical engine events
- ProfileStore adapters: HTTP backend and in-memory mock
- PushTransport: listener registry for server-pushed events
"""

from learnquest.services.profile_store import HttpProfileStore, MockProfileStore, ProfileStore
from learnquest.services.session import GameSession, SessionSnapshot
from learnquest.services.transport import MockPushTransport, PushTransport
from learnquest.services.event_router import EventRouter

__all__ = [
    "ProfileStore",
    "HttpProfileStore",
    "MockProfileStore",
    "GameSession",
    "SessionSnapshot",
    "PushTransport",
    "MockPushTransport",
    "EventRouter",
]

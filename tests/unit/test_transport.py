"""Unit tests for push transports (learnquest/services/transport.py)"""
import asyncio
import random
import pytest
from unittest.mock import Mock

from learnquest.services.transport import MockPushTransport, PushTransport


def test_emit_calls_listeners():
    transport = PushTransport()
    first, second = Mock(), Mock()
    transport.on("xp:gained", first)
    transport.on("xp:gained", second)

    assert transport.emit("xp:gained", {"amount": 5}) == 2

    first.assert_called_once_with({"amount": 5})
    second.assert_called_once_with({"amount": 5})


def test_failing_listener_does_not_stop_delivery():
    transport = PushTransport()
    healthy = Mock()
    transport.on("xp:gained", Mock(side_effect=RuntimeError("boom")))
    transport.on("xp:gained", healthy)

    transport.emit("xp:gained", {"amount": 5})

    healthy.assert_called_once()


def test_off_removes_one_or_all():
    transport = PushTransport()
    first, second = Mock(), Mock()
    transport.on("xp:gained", first)
    transport.on("xp:gained", second)

    transport.off("xp:gained", first)
    assert transport.emit("xp:gained", {}) == 1
    first.assert_not_called()

    transport.off("xp:gained")
    assert transport.emit("xp:gained", {}) == 0


def test_mock_tick_emits_events():
    transport = MockPushTransport(achievement_ids=["first_steps"], rng=random.Random(1))
    xp, leaderboard = Mock(), Mock()
    transport.on("xp:gained", xp)
    transport.on("leaderboard:update", leaderboard)

    transport.tick()

    leaderboard.assert_called_once()
    payload = xp.call_args.args[0]
    assert 10 <= payload["amount"] <= 59
    assert payload["source"] == "mock_push"


def test_mock_tick_unlocks_achievements():
    rng = Mock()
    rng.randint.return_value = 10
    rng.random.return_value = 0.0
    rng.choice.side_effect = lambda ids: ids[0]
    transport = MockPushTransport(achievement_ids=["quiz_master"], rng=rng)
    unlocked = Mock()
    transport.on("achievement:unlocked", unlocked)

    transport.tick()

    assert unlocked.call_args.args[0]["id"] == "quiz_master"


@pytest.mark.asyncio
async def test_mock_start_and_stop():
    transport = MockPushTransport()
    received = []
    transport.on("xp:gained", received.append)

    transport.start(interval=0.01)
    assert transport.running is True
    await asyncio.sleep(0.05)
    await transport.stop()

    assert transport.running is False
    assert received

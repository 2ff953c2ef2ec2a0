"""Development entry point: one learner session driven by the mock push transport"""
import asyncio
import logging

from learnquest.config import (
    LOG_LEVEL,
    MOCK_API,
    MOCK_EVENT_INTERVAL_SECONDS,
    PROFILE_API_TIMEOUT,
    PROFILE_API_TOKEN,
    PROFILE_API_URL,
    load_game_config,
    validate_config,
)
from learnquest.gamification.messaging import get_welcome_message
from learnquest.observability.sentry_config import init_sentry, shutdown_sentry
from learnquest.services import (
    EventRouter,
    GameSession,
    HttpProfileStore,
    MockProfileStore,
    MockPushTransport,
    ProfileStore,
    SessionSnapshot,
)

# Configure logging
logging.basicConfig(
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    level=getattr(logging, LOG_LEVEL.upper(), logging.INFO)
)

logger = logging.getLogger(__name__)


def _log_snapshot(snapshot: SessionSnapshot) -> None:
    progression = snapshot.progression
    logger.info(
        f"Level {progression.level} ({snapshot.progress_to_next_level:.0f}%), "
        f"{progression.xp} XP, {progression.coins} coins, streak {progression.streak}, "
        f"{snapshot.unread_count} unread"
    )


def create_profile_store() -> ProfileStore:
    if MOCK_API:
        logger.info("Using mock profile store")
        return MockProfileStore()
    return HttpProfileStore(PROFILE_API_URL, token=PROFILE_API_TOKEN or None, timeout=PROFILE_API_TIMEOUT)


async def main() -> None:
    """Main application entry point"""
    store = None
    session = None
    transport = None
    router_task = None
    try:
        logger.info("Validating configuration...")
        validate_config()
        init_sentry()

        game_config = load_game_config()

        store = create_profile_store()
        session = await GameSession.start(store, game_config)
        session.subscribe(_log_snapshot)
        logger.info(get_welcome_message(game_config, session.state.age_group))
        _log_snapshot(session.snapshot())

        router = EventRouter(session)
        transport = MockPushTransport(achievement_ids=[a.id for a in game_config.achievements])
        router.attach(transport)
        transport.start(MOCK_EVENT_INTERVAL_SECONDS)
        router_task = asyncio.create_task(router.run())

        logger.info("Session is running. Press Ctrl+C to stop.")
        await router_task

    except (KeyboardInterrupt, asyncio.CancelledError):
        logger.info("Shutting down...")
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
    finally:
        if transport:
            await transport.stop()
            transport.clear()

        if router_task and not router_task.done():
            router_task.cancel()

        if session:
            logger.info("Closing session...")
            await session.close()

        if store:
            await store.close()

        shutdown_sentry()
        logger.info("Shutdown complete")


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()

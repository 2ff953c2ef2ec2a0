"""Sentry configuration and initialization for error tracking."""

import logging
import os
import sentry_sdk
from sentry_sdk.integrations.logging import LoggingIntegration

from learnquest.exceptions import LearnQuestError

logger = logging.getLogger(__name__)


def init_sentry() -> bool:
    """
    Initialize Sentry SDK for error tracking.

    Configures Sentry with:
    - Logging integration for breadcrumbs
    - Environment-specific configuration
    - Release tracking

    Environment variables:
        SENTRY_DSN: Sentry project DSN (required)
        SENTRY_ENVIRONMENT: Environment name (development, staging, production)
        SENTRY_TRACES_SAMPLE_RATE: Percentage of transactions to sample (0.0-1.0)
        ENABLE_SENTRY: Feature flag to enable/disable Sentry
        GIT_COMMIT_SHA: Git commit SHA for release tracking (optional)

    Returns:
        True if Sentry was initialized
    """
    from learnquest.config import (
        SENTRY_DSN,
        SENTRY_ENVIRONMENT,
        SENTRY_TRACES_SAMPLE_RATE,
        ENABLE_SENTRY,
    )

    if not ENABLE_SENTRY:
        logger.info("Sentry is disabled (ENABLE_SENTRY=false)")
        return False

    if not SENTRY_DSN:
        logger.warning("Sentry DSN not configured - error tracking disabled")
        return False

    release = os.getenv("GIT_COMMIT_SHA")
    if release:
        release = f"learnquest@{release[:7]}"
    else:
        release = "learnquest@dev"

    logging_integration = LoggingIntegration(
        level=logging.INFO,  # breadcrumbs
        event_level=logging.ERROR,
    )

    sentry_sdk.init(
        dsn=SENTRY_DSN,
        environment=SENTRY_ENVIRONMENT,
        release=release,
        integrations=[logging_integration],
        traces_sample_rate=SENTRY_TRACES_SAMPLE_RATE,
        attach_stacktrace=True,
        before_send=_before_send,
    )

    logger.info(
        f"Sentry initialized: environment={SENTRY_ENVIRONMENT}, "
        f"release={release}, traces_sample_rate={SENTRY_TRACES_SAMPLE_RATE}"
    )
    return True


def _before_send(event, hint):
    """
    Filter events before sending to Sentry.

    Invalid learner input (ValidationError and subclasses) is expected
    traffic, not a defect, so it is dropped.

    Args:
        event: The event dictionary to be sent to Sentry
        hint: Additional information about the event

    Returns:
        The event, or None to drop it
    """
    if "exc_info" in hint:
        exc_type, exc_value, tb = hint["exc_info"]
        if isinstance(exc_value, LearnQuestError) and exc_value.log_level < logging.ERROR:
            return None

    return event


def shutdown_sentry() -> None:
    """Flush pending events before the process exits."""
    client = sentry_sdk.get_client()
    if client.is_active():
        logger.info("Flushing Sentry events before shutdown...")
        client.close(timeout=2.0)
        logger.info("Sentry shutdown complete")

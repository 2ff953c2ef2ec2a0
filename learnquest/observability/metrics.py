"""
Prometheus metrics definitions for learnquest.

This module defines all metrics collected by the progression core, organized by category:
- Progression metrics: XP and coins granted, level-ups, streaks
- Achievement metrics: unlocks and idempotent replays
- Notification feed metrics: evictions
- Event router metrics: push events by outcome, inbox depth
- Session metrics: active sessions, profile sync failures

The host application decides whether and where to expose them for scraping.
"""

import logging
from prometheus_client import Counter, Gauge

logger = logging.getLogger(__name__)

# =============================================================================
# Progression Metrics
# =============================================================================

xp_granted_total = Counter(
    "learnquest_xp_granted_total",
    "Total XP granted to learners",
    ["source"],  # source: mission/achievement/streak_bonus/push/...
)

coins_granted_total = Counter(
    "learnquest_coins_granted_total",
    "Total coins granted to learners",
    ["source"],
)

level_ups_total = Counter(
    "learnquest_level_ups_total",
    "Total level-up events (one per grant, however many levels were crossed)",
)

streak_bonuses_total = Counter(
    "learnquest_streak_bonuses_total",
    "Total streak milestone bonuses awarded",
    ["streak"],
)

invalid_grants_total = Counter(
    "learnquest_invalid_grants_total",
    "Total rejected grants with non-positive or non-integer amounts",
    ["currency"],  # currency: xp/coins
)

# =============================================================================
# Achievement Metrics
# =============================================================================

achievements_unlocked_total = Counter(
    "learnquest_achievements_unlocked_total",
    "Total achievements unlocked",
    ["rarity"],
)

achievement_unlock_replays_total = Counter(
    "learnquest_achievement_unlock_replays_total",
    "Unlock requests ignored because the achievement was already unlocked or unknown",
    ["reason"],  # reason: already_unlocked/not_found
)

# =============================================================================
# Notification Feed Metrics
# =============================================================================

notifications_evicted_total = Counter(
    "learnquest_notifications_evicted_total",
    "Total notifications evicted from the bounded feed",
)

# =============================================================================
# Event Router Metrics
# =============================================================================

push_events_total = Counter(
    "learnquest_push_events_total",
    "Total push events received by the event router",
    ["event", "outcome"],  # outcome: accepted/malformed/ignored/dropped/rejected
)

event_inbox_depth = Gauge(
    "learnquest_event_inbox_depth",
    "Canonical events waiting in the router inbox",
)

# =============================================================================
# Session Metrics
# =============================================================================

active_sessions = Gauge(
    "learnquest_active_sessions",
    "Number of open learner sessions",
)

profile_sync_failures_total = Counter(
    "learnquest_profile_sync_failures_total",
    "Total failed profile store operations",
    ["operation"],  # operation: get_profile/push_progress
)

logger.debug("Prometheus metrics registered")

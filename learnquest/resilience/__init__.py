"""Resilience patterns for calls to the external profile store"""

from learnquest.resilience.retry import retry_with_backoff, with_retry, is_retryable_error

__all__ = [
    "retry_with_backoff",
    "with_retry",
    "is_retryable_error",
]

"""
Standardized exception hierarchy for learnquest
Provides rich context, consistent logging, and user-friendly error messages
"""

from datetime import datetime, timezone
from typing import Optional, Dict, Any
from uuid import uuid4
import logging

logger = logging.getLogger(__name__)


class LearnQuestError(Exception):
    """
    Base exception for all learnquest errors

    Provides:
    - Automatic timestamping
    - Request ID for tracing
    - User-friendly messages
    - Structured context
    - Automatic logging

    Example:
        raise LearnQuestError(
            message="Failed to sync progress",
            session_id="5f2c9a",
            operation="push_progress",
            context={"xp": 750}
        )
    """

    log_level = logging.ERROR

    def __init__(
        self,
        message: str,
        session_id: Optional[str] = None,
        request_id: Optional[str] = None,
        operation: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
        user_message: Optional[str] = None
    ):
        super().__init__(message)
        self.message = message
        self.session_id = session_id
        self.request_id = request_id or str(uuid4())
        self.operation = operation
        self.context = context or {}
        self.cause = cause
        self.user_message = user_message or "An error occurred. Please try again."
        self.timestamp = datetime.now(timezone.utc)

        # Auto-log on creation
        self._log_error()

    def _log_error(self) -> None:
        """Log error with full context"""
        log_data = {
            "error_type": self.__class__.__name__,
            "error_message": self.message,  # Avoid conflict with logging's 'message' field
            "request_id": self.request_id,
            "session_id": self.session_id,
            "operation": self.operation,
            "error_context": self.context,
            "timestamp": self.timestamp.isoformat()
        }

        logger.log(
            self.log_level,
            f"{self.__class__.__name__}: {self.message}",
            extra=log_data,
            exc_info=self.cause,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize exception for the UI layer"""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "user_message": self.user_message,
            "request_id": self.request_id,
            "timestamp": self.timestamp.isoformat()
        }


# ==========================================
# Validation Errors (caller input)
# ==========================================

class ValidationError(LearnQuestError):
    """
    Raised when caller input fails validation. Nothing is mutated.

    Example:
        raise ValidationError(
            message="Mission id must not be empty",
            field="mission_id",
            value=""
        )
    """

    log_level = logging.WARNING

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Optional[Any] = None,
        **kwargs
    ):
        self.field = field
        self.value = value
        super().__init__(
            message=message,
            user_message=f"Invalid {field}: {message}" if field else message,
            context={"field": field, "value": value},
            **kwargs
        )


class InvalidAmountError(ValidationError):
    """XP or coin amount is not a positive integer"""

    def __init__(self, amount: Any, source: Optional[str] = None, **kwargs):
        self.source = source
        super().__init__(
            message=f"Amount must be a positive integer, got {amount!r}",
            field="amount",
            value=amount,
            operation=kwargs.pop("operation", None) or (f"grant from {source}" if source else None),
            **kwargs
        )


# ==========================================
# Configuration Errors
# ==========================================

class ConfigurationError(LearnQuestError):
    """Game configuration or environment is invalid or missing"""

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        **kwargs
    ):
        self.config_key = config_key
        super().__init__(
            message=message,
            user_message="The game is not properly configured. Please contact support.",
            context={"config_key": config_key},
            **kwargs
        )


# ==========================================
# Session Errors
# ==========================================

class SessionClosedError(LearnQuestError):
    """Operation attempted on a session that was already closed (logout)"""

    def __init__(self, message: str = "Session is closed", **kwargs):
        super().__init__(
            message=message,
            user_message="Your session has ended. Please sign in again.",
            **kwargs
        )


# ==========================================
# External Service Errors
# ==========================================

class ExternalServiceError(LearnQuestError):
    """
    Base class for failures of external collaborators
    """

    log_level = logging.WARNING

    def __init__(
        self,
        message: str,
        service: Optional[str] = None,
        status_code: Optional[int] = None,
        **kwargs
    ):
        self.service = service
        self.status_code = status_code
        kwargs.setdefault(
            "user_message",
            f"We're having trouble connecting to {service or 'an external service'}. "
            "Your progress is kept and will sync later."
        )
        super().__init__(
            message=message,
            context={"service": service, "status_code": status_code},
            **kwargs
        )


class ProfileStoreError(ExternalServiceError):
    """Profile backend could not be read or updated"""

    def __init__(self, message: str, **kwargs):
        super().__init__(
            message=message,
            service="Profile store",
            **kwargs
        )


# ==========================================
# Helper Functions
# ==========================================

def wrap_external_exception(
    error: Exception,
    operation: str,
    session_id: Optional[str] = None,
    context: Optional[Dict[str, Any]] = None
) -> LearnQuestError:
    """
    Wrap httpx exceptions into our exception hierarchy

    Args:
        error: Original exception
        operation: What operation was being performed
        session_id: Session the call was made for, if any
        context: Additional context

    Returns:
        Appropriate LearnQuestError subclass

    Example:
        try:
            response = await client.get("/user/profile")
        except httpx.HTTPError as e:
            raise wrap_external_exception(e, operation="get_profile")
    """
    import httpx

    if isinstance(error, LearnQuestError):
        return error

    if isinstance(error, httpx.TimeoutException):
        return ProfileStoreError(
            message=f"Profile request timed out: {str(error)}",
            session_id=session_id,
            operation=operation,
            cause=error
        )
    elif isinstance(error, httpx.HTTPStatusError):
        return ProfileStoreError(
            message=f"Profile API returned error: {error.response.status_code}",
            status_code=error.response.status_code,
            session_id=session_id,
            operation=operation,
            cause=error
        )
    elif isinstance(error, httpx.HTTPError):
        return ProfileStoreError(
            message=f"Profile request failed: {str(error)}",
            session_id=session_id,
            operation=operation,
            cause=error
        )

    # Generic fallback
    return LearnQuestError(
        message=f"{operation} failed: {str(error)}",
        session_id=session_id,
        operation=operation,
        context=context,
        cause=error
    )

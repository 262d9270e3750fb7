"""
Exception Hierarchy for Mosaic Workflows

Structured errors with categorisation, recovery guidance and logging
integration. Wizard and stage failures are normally reported as values;
these classes describe them, and are raised only at the few seams where an
operation must be refused outright.
"""

import logging
from datetime import datetime
from typing import Dict, Any, Optional
from enum import Enum
from dataclasses import dataclass, field

log = logging.getLogger(__name__)


class ErrorSeverity(Enum):
    """Error severity levels, mapped onto log levels."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ErrorCategory(Enum):
    """Error categories for systematic handling."""
    INTEGRATION = "integration"
    CONCURRENCY = "concurrency"
    CONFIGURATION = "configuration"
    NAVIGATION = "navigation"
    NOT_FOUND = "not_found"


class RecoveryAction(Enum):
    """Suggested recovery actions for different error types."""
    RETRY = "retry"
    IGNORE = "ignore"
    ABORT = "abort"


class StageErrorKind(Enum):
    """Ways an asynchronous provider stage can fail."""
    TIMEOUT = "timeout"
    REJECTED = "rejected"
    INVALID_RESPONSE = "invalid_response"


@dataclass
class ErrorContext:
    """Structured error context information."""
    timestamp: datetime = field(default_factory=datetime.utcnow)
    session_id: Optional[str] = None
    module_id: Optional[str] = None
    wizard_id: Optional[str] = None
    step_id: Optional[str] = None
    operation: Optional[str] = None
    additional_data: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'timestamp': self.timestamp.isoformat(),
            'session_id': self.session_id,
            'module_id': self.module_id,
            'wizard_id': self.wizard_id,
            'step_id': self.step_id,
            'operation': self.operation,
            'additional_data': self.additional_data
        }


class MosaicError(Exception):
    """
    Base exception class for all mosaic workflow errors.

    Provides structured error information, categorisation and recovery
    guidance. Every instance logs itself once, at a level derived from its
    severity.
    """

    error_code = "MOSAIC_ERROR"

    def __init__(self,
                 message: str,
                 error_code: Optional[str] = None,
                 category: ErrorCategory = ErrorCategory.INTEGRATION,
                 severity: ErrorSeverity = ErrorSeverity.MEDIUM,
                 recovery_action: RecoveryAction = RecoveryAction.ABORT,
                 context: Optional[ErrorContext] = None,
                 cause: Optional[Exception] = None,
                 user_message: Optional[str] = None):
        """
        Initialize mosaic error.

        Args:
            message: Technical error message for developers
            error_code: Stable error code for API clients
            category: Error category for systematic handling
            severity: Error severity level
            recovery_action: Suggested recovery action
            context: Additional error context
            cause: Original exception that caused this error
            user_message: User-friendly error message
        """
        super().__init__(message)

        self.message = message
        self.error_code = error_code or self.error_code
        self.category = category
        self.severity = severity
        self.recovery_action = recovery_action
        self.context = context or ErrorContext()
        self.cause = cause
        self.user_message = user_message or self._generate_user_message()

        self._auto_log()

    def _generate_user_message(self) -> str:
        if self.category == ErrorCategory.INTEGRATION:
            return "The external service could not complete the request. Please try again."
        elif self.category == ErrorCategory.NOT_FOUND:
            return "The requested item was not found."
        elif self.category == ErrorCategory.CONFIGURATION:
            return "A configuration error was detected. Please contact support."
        else:
            return "This action is not available right now."

    def _auto_log(self):
        """Log the error based on severity."""
        log_message = f"[{self.error_code}] {self.message}"

        if self.cause:
            log_message += f" | Caused by: {self.cause!r}"

        if self.severity == ErrorSeverity.CRITICAL:
            log.critical(log_message)
        elif self.severity == ErrorSeverity.HIGH:
            log.error(log_message)
        elif self.severity == ErrorSeverity.MEDIUM:
            log.warning(log_message)
        else:
            log.info(log_message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for API responses."""
        return {
            'error': {
                'code': self.error_code,
                'message': self.user_message,
                'technical_message': self.message,
                'category': self.category.value,
                'severity': self.severity.value,
                'recovery_action': self.recovery_action.value,
                'timestamp': self.context.timestamp.isoformat(),
            }
        }

    def should_retry(self) -> bool:
        """Check if the operation may be retried by the user."""
        return self.recovery_action == RecoveryAction.RETRY

    @classmethod
    def report(cls, *args, **kwargs) -> 'MosaicError':
        """Log an error that is handled in place rather than raised."""
        return cls(*args, **kwargs)


class AsyncStageError(MosaicError):
    """A provider stage failed with a timeout, a rejection or a malformed answer."""

    error_code = "ASYNC_STAGE_FAILED"

    def __init__(self, stage: str, kind: StageErrorKind, message: str = "", **kwargs):
        super().__init__(
            message=f"Stage '{stage}' failed ({kind.value}): {message}".rstrip(': '),
            category=ErrorCategory.INTEGRATION,
            severity=ErrorSeverity.MEDIUM,
            recovery_action=RecoveryAction.RETRY,
            **kwargs
        )
        self.stage = stage
        self.kind = kind
        self.detail = message

    def to_banner(self) -> Dict[str, Any]:
        """Payload for the dismissible retry banner."""
        return {
            'stage': self.stage,
            'kind': self.kind.value,
            'message': self.detail or self.user_message,
            'retryable': True,
        }


class InvalidTransitionError(MosaicError):
    """A navigation call that the current wizard or graph state does not allow."""

    error_code = "INVALID_TRANSITION"

    def __init__(self, message: str, **kwargs):
        kwargs.setdefault('severity', ErrorSeverity.MEDIUM)
        super().__init__(
            message=message,
            category=ErrorCategory.NAVIGATION,
            recovery_action=RecoveryAction.IGNORE,
            **kwargs
        )


class StaleAsyncResultError(MosaicError):
    """A stage resolved after its wizard was aborted; the result was dropped."""

    error_code = "STALE_ASYNC_RESULT"

    def __init__(self, stage: str, generation: int, current_generation: int, **kwargs):
        super().__init__(
            message=(
                f"Dropped late result of stage '{stage}' "
                f"(generation {generation}, current {current_generation})"
            ),
            category=ErrorCategory.CONCURRENCY,
            severity=ErrorSeverity.LOW,
            recovery_action=RecoveryAction.IGNORE,
            **kwargs
        )
        self.stage = stage
        self.generation = generation
        self.current_generation = current_generation


class StageInFlightError(MosaicError):
    """A second stage run was requested while one is still pending."""

    error_code = "STAGE_IN_FLIGHT"

    def __init__(self, stage: str, **kwargs):
        super().__init__(
            message=f"Stage '{stage}' requested while another stage is still running",
            category=ErrorCategory.CONCURRENCY,
            severity=ErrorSeverity.MEDIUM,
            recovery_action=RecoveryAction.IGNORE,
            **kwargs
        )
        self.stage = stage


class CatalogError(MosaicError, ValueError):
    """The module catalog is not a valid dependency DAG."""

    error_code = "INVALID_CATALOG"

    def __init__(self, message: str, **kwargs):
        super().__init__(
            message=message,
            category=ErrorCategory.CONFIGURATION,
            severity=ErrorSeverity.HIGH,
            recovery_action=RecoveryAction.ABORT,
            **kwargs
        )


class SessionNotFoundError(MosaicError, KeyError):
    """No live mosaic session with the requested id."""

    error_code = "SESSION_NOT_FOUND"

    def __init__(self, session_id: str, **kwargs):
        super().__init__(
            message=f"Mosaic session '{session_id}' does not exist or has expired",
            category=ErrorCategory.NOT_FOUND,
            severity=ErrorSeverity.LOW,
            recovery_action=RecoveryAction.ABORT,
            **kwargs
        )
        self.session_id = session_id

    def __str__(self):
        return self.message

"""Error classes shared by the GitHunt API layers."""

import logging
import time
import uuid
from collections.abc import Sequence
from enum import Enum
from typing import Any


class ErrorSeverity(Enum):
    """Error severity levels for monitoring and alerting."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class GitHuntError(Exception):
    """
    Base exception for all GitHunt errors.

    Carries an error ID, a machine readable code, severity and retry hints,
    and logs itself on construction. ``str(error)`` is the plain message,
    which is what GraphQL clients see in the error list.
    """

    default_code: str = "ERROR"
    severity: ErrorSeverity = ErrorSeverity.MEDIUM
    retryable: bool = False

    def __init__(self, message: str, **kwargs: Any) -> None:
        super().__init__(message)
        self.message = message
        self.code = kwargs.get("code") or self.default_code
        self.details = kwargs.get("details") or {}
        self.error_id = str(uuid.uuid4())
        self.timestamp = time.time()
        self.user_message = kwargs.get("user_message") or message
        self.__cause__ = kwargs.get("cause")

        self._log_error()

    def _log_error(self) -> None:
        """Log error with structured data."""
        logger = logging.getLogger(f"githunt.errors.{self.__class__.__name__}")
        log_data = {
            "error_id": self.error_id,
            "code": self.code,
            "error_message": self.message,
            "severity": self.severity.value,
            "retryable": self.retryable,
            "details": self._sanitize_details(self.details),
        }

        if self.severity == ErrorSeverity.CRITICAL:
            logger.critical("Critical error occurred", extra=log_data)
        elif self.severity == ErrorSeverity.HIGH:
            logger.error("High severity error", extra=log_data)
        elif self.severity == ErrorSeverity.MEDIUM:
            logger.warning("Medium severity error", extra=log_data)
        else:
            logger.info("Low severity error", extra=log_data)

    def _sanitize_details(self, details: dict) -> dict:
        """Redact sensitive keys from error details."""
        sensitive_keys = {"password", "token", "secret", "credential", "authorization"}
        sanitized = {}

        for key, value in details.items():
            if any(sensitive in key.lower() for sensitive in sensitive_keys):
                sanitized[key] = "***REDACTED***"
            elif isinstance(value, dict):
                sanitized[key] = self._sanitize_details(value)
            else:
                sanitized[key] = value

        return sanitized

    def to_dict(self, include_details: bool = True) -> dict[str, Any]:
        """Serialize error for API responses and logs."""
        data: dict[str, Any] = {
            "error": self.code,
            "message": self.user_message,
            "timestamp": self.timestamp,
        }

        if include_details and self.details:
            data["details"] = self._sanitize_details(self.details)

        if self.retryable:
            data["retryable"] = True

        return data

    def __str__(self) -> str:
        return self.message


class ApplicationError(GitHuntError):
    """Base class for errors caused by the request itself."""

    default_code = "APPLICATION_ERROR"


class InfrastructureError(GitHuntError):
    """Base class for errors raised by collaborators and the broker."""

    default_code = "INFRASTRUCTURE_ERROR"
    severity = ErrorSeverity.HIGH
    retryable = True


class ValidationError(ApplicationError):
    """Invalid input or configuration value."""

    default_code = "VALIDATION_ERROR"
    severity = ErrorSeverity.LOW

    def __init__(self, message: str, field: str | None = None, **kwargs: Any) -> None:
        super().__init__(message, **kwargs)
        if field:
            self.details["field"] = field


class UnauthorizedError(ApplicationError):
    """An operation that needs an identity was called without one."""

    default_code = "UNAUTHORIZED"

    def __init__(self, message: str = "Authentication required", **kwargs: Any) -> None:
        super().__init__(message, user_message=message, **kwargs)


class NotFoundError(ApplicationError):
    """A referenced resource does not exist."""

    default_code = "NOT_FOUND"
    severity = ErrorSeverity.LOW

    def __init__(self, resource: str, identifier: Any, **kwargs: Any) -> None:
        message = f'Couldn\'t find {resource} named "{identifier}"'
        super().__init__(message, **kwargs)
        self.details.update({"resource": resource, "identifier": str(identifier)})


class UpstreamError(InfrastructureError):
    """A collaborator call failed for a reason other than a missing resource."""

    default_code = "UPSTREAM_FAILURE"

    def __init__(
        self,
        service: str,
        message: str,
        service_status_code: int | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)
        self.service = service
        self.details.update(
            {"service": service, "service_status_code": service_status_code}
        )


class ConfigurationError(InfrastructureError):
    """Configuration error."""

    default_code = "CONFIGURATION_ERROR"
    severity = ErrorSeverity.CRITICAL
    retryable = False

    def __init__(
        self, message: str, config_key: str | None = None, **kwargs: Any
    ) -> None:
        super().__init__(message, user_message="Service configuration issue", **kwargs)
        if config_key:
            self.details["config_key"] = config_key


class EventBusError(InfrastructureError):
    """Raised when the pub/sub adapter cannot publish or subscribe."""

    default_code = "EVENT_BUS_ERROR"


class SchemaCompositionError(GitHuntError):
    """The merged schema fragments do not form a valid executable schema."""

    default_code = "SCHEMA_COMPOSITION_ERROR"
    severity = ErrorSeverity.CRITICAL

    def __init__(self, errors: Sequence[str], **kwargs: Any) -> None:
        self.errors = list(errors)
        message = f"Schema composition failed with {len(self.errors)} error(s):\n" + "\n".join(
            f"  - {error}" for error in self.errors
        )
        super().__init__(message, **kwargs)
        self.details["errors"] = self.errors


__all__ = [
    "ApplicationError",
    "ConfigurationError",
    "ErrorSeverity",
    "EventBusError",
    "GitHuntError",
    "InfrastructureError",
    "NotFoundError",
    "SchemaCompositionError",
    "UnauthorizedError",
    "UpstreamError",
    "ValidationError",
]

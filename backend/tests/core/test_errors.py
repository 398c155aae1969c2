"""
Tests for the error hierarchy.
"""

import pytest

from githunt_api.core.errors import (
    ConfigurationError,
    ErrorSeverity,
    EventBusError,
    GitHuntError,
    InfrastructureError,
    NotFoundError,
    SchemaCompositionError,
    UnauthorizedError,
    UpstreamError,
    ValidationError,
)


class TestGitHuntError:
    """Test the base error."""

    def test_str_is_plain_message(self):
        error = GitHuntError("Something broke")

        assert str(error) == "Something broke"
        assert error.code == "ERROR"
        assert error.severity == ErrorSeverity.MEDIUM
        assert error.error_id

    def test_custom_code_and_details(self):
        error = GitHuntError("Bad", code="CUSTOM", details={"field": "x"})

        assert error.code == "CUSTOM"
        assert error.details == {"field": "x"}

    def test_to_dict_redacts_sensitive_details(self):
        error = GitHuntError("Bad", details={"token": "abc", "nested": {"password": "p"}})

        data = error.to_dict()

        assert data["error"] == "ERROR"
        assert data["details"]["token"] == "***REDACTED***"
        assert data["details"]["nested"]["password"] == "***REDACTED***"

    def test_to_dict_marks_retryable(self):
        data = InfrastructureError("Broker down").to_dict()

        assert data["retryable"] is True

    def test_logs_on_construction(self, caplog):
        with caplog.at_level("INFO", logger="githunt.errors"):
            EventBusError("Redis publish failed")

        assert any(
            record.name == "githunt.errors.EventBusError" for record in caplog.records
        )


class TestApplicationErrors:
    """Test request-level errors."""

    def test_unauthorized_message(self):
        error = UnauthorizedError("Must be logged in to vote.")

        assert str(error) == "Must be logged in to vote."
        assert error.code == "UNAUTHORIZED"
        assert error.user_message == "Must be logged in to vote."

    def test_unauthorized_default_message(self):
        assert str(UnauthorizedError()) == "Authentication required"

    def test_not_found_names_the_resource(self):
        error = NotFoundError("repository", "apollographql/nope")

        assert str(error) == "Couldn't find repository named \"apollographql/nope\""
        assert error.code == "NOT_FOUND"
        assert error.details["identifier"] == "apollographql/nope"

    def test_validation_error_field(self):
        error = ValidationError("Too long", field="content")

        assert error.details["field"] == "content"


class TestInfrastructureErrors:
    """Test collaborator and broker errors."""

    def test_upstream_error_records_service(self):
        error = UpstreamError("github", "GitHub returned 502", service_status_code=502)

        assert error.code == "UPSTREAM_FAILURE"
        assert error.retryable is True
        assert error.details == {"service": "github", "service_status_code": 502}

    def test_configuration_error_is_not_retryable(self):
        error = ConfigurationError("REDIS_URL is invalid", config_key="REDIS_URL")

        assert error.retryable is False
        assert error.severity == ErrorSeverity.CRITICAL
        assert error.details["config_key"] == "REDIS_URL"
        assert error.user_message == "Service configuration issue"

    @pytest.mark.parametrize("error_class", [EventBusError, UpstreamError])
    def test_infrastructure_subclasses(self, error_class):
        assert issubclass(error_class, InfrastructureError)


class TestSchemaCompositionError:
    """Test aggregated composition errors."""

    def test_lists_every_error(self):
        error = SchemaCompositionError(["first problem", "second problem"])

        assert error.errors == ["first problem", "second problem"]
        assert "2 error(s)" in str(error)
        assert "  - first problem" in str(error)
        assert "  - second problem" in str(error)
        assert error.code == "SCHEMA_COMPOSITION_ERROR"

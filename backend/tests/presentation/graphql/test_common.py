"""
Tests for helpers shared by the resolvers.
"""

from dataclasses import dataclass
from datetime import UTC, date, datetime, timedelta, timezone

import pytest
from graphql import GraphQLError

from githunt_api.core.errors import NotFoundError
from githunt_api.presentation.graphql.common import (
    format_graphql_error,
    get_field,
    to_timestamp,
)


@dataclass
class Thing:
    login: str


class TestGetField:
    """Test field access over objects and mappings."""

    def test_attribute(self):
        assert get_field(Thing(login="a"), "login") == "a"

    def test_mapping(self):
        assert get_field({"login": "a"}, "login") == "a"

    def test_missing_and_none(self):
        assert get_field({}, "login") is None
        assert get_field(Thing(login="a"), "email", "n/a") == "n/a"
        assert get_field(None, "login", "anon") == "anon"


class TestToTimestamp:
    """Test creation time conversion to epoch milliseconds."""

    def test_aware_datetime(self):
        value = datetime(2016, 5, 1, 14, 0, tzinfo=timezone(timedelta(hours=2)))

        assert to_timestamp(value) == 1462104000000.0

    def test_naive_datetime_is_utc(self):
        assert to_timestamp(datetime(2016, 5, 1, 12, 0)) == 1462104000000.0

    def test_date(self):
        assert to_timestamp(date(2016, 5, 1)) == 1462060800000.0

    def test_iso_string(self):
        assert to_timestamp("2016-05-01T12:00:00+00:00") == 1462104000000.0

    def test_number_is_already_milliseconds(self):
        assert to_timestamp(1462104000000) == 1462104000000.0

    def test_epoch(self):
        assert to_timestamp(datetime(1970, 1, 1, tzinfo=UTC)) == 0.0

    def test_none(self):
        assert to_timestamp(None) is None

    @pytest.mark.parametrize("value", [True, object()])
    def test_rejects_other_types(self, value):
        with pytest.raises(TypeError):
            to_timestamp(value)


class TestFormatGraphQLError:
    """Test response error formatting."""

    def test_adds_code_for_own_errors(self):
        error = GraphQLError(
            "Couldn't find repository named \"a/b\"",
            path=["submitRepository"],
            original_error=NotFoundError("repository", "a/b"),
        )

        formatted = format_graphql_error(error)

        assert formatted["message"] == "Couldn't find repository named \"a/b\""
        assert formatted["path"] == ["submitRepository"]
        assert formatted["extensions"] == {"code": "NOT_FOUND"}

    def test_leaves_other_errors_alone(self):
        formatted = format_graphql_error(GraphQLError("Syntax Error: Unexpected <EOF>."))

        assert formatted["message"] == "Syntax Error: Unexpected <EOF>."
        assert "extensions" not in formatted

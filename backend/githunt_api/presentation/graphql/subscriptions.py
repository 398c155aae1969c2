"""
GraphQL Subscription Infrastructure

Connects the schema's Subscription fields to the pub/sub adapter. Every
subscription registration opens its own stream on the field's topic,
filtered by a predicate built from the subscription's arguments, so two
subscribers on the same topic with different arguments see different
events.
"""

import functools
import itertools
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from inspect import isawaitable
from typing import Any

from graphql import (
    ExecutionResult,
    GraphQLError,
    GraphQLObjectType,
    GraphQLResolveInfo,
    GraphQLSchema,
    parse,
    subscribe,
    validate,
)

from githunt_api.core.errors import SchemaCompositionError
from githunt_api.core.events import EventStream, Predicate, PubSub
from githunt_api.core.logging import get_logger
from githunt_api.presentation.graphql.common import get_field
from githunt_api.presentation.graphql.root import COMMENT_ADDED

logger = get_logger(__name__)

SetupFunction = Callable[[Mapping[str, Any]], Predicate]


def comment_added_setup(args: Mapping[str, Any]) -> Predicate:
    """Only deliver comments posted on the subscribed repository."""
    repo_full_name = args["repoFullName"]

    def predicate(comment: Any) -> bool:
        return get_field(comment, "repository_name") == repo_full_name

    return predicate


DEFAULT_SETUP_FUNCTIONS: dict[str, SetupFunction] = {
    COMMENT_ADDED: comment_added_setup,
}


@dataclass
class SubscriptionRegistration:
    """One open subscription on a topic."""

    registration_id: int
    field_name: str
    arguments: dict[str, Any]
    stream: EventStream
    started_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @property
    def is_active(self) -> bool:
        return not self.stream.closed


class SubscriptionManager:
    """Binds subscription fields to pub/sub topics and tracks open registrations."""

    def __init__(
        self,
        schema: GraphQLSchema,
        pubsub: PubSub,
        setup_functions: Mapping[str, SetupFunction] | None = None,
    ):
        self.schema = schema
        self.pubsub = pubsub
        self.setup_functions = dict(
            DEFAULT_SETUP_FUNCTIONS if setup_functions is None else setup_functions
        )
        self._registrations: dict[int, SubscriptionRegistration] = {}
        self._ids = itertools.count(1)
        self._bind()

    def _bind(self) -> None:
        subscription_type = self.schema.subscription_type
        errors: list[str] = []

        for field_name, setup in self.setup_functions.items():
            graphql_field = None
            if isinstance(subscription_type, GraphQLObjectType):
                graphql_field = subscription_type.fields.get(field_name)
            if graphql_field is None:
                errors.append(
                    f'Setup function defined for unknown subscription field "{field_name}"'
                )
                continue
            graphql_field.subscribe = self._make_subscriber(field_name, setup)

        if errors:
            raise SchemaCompositionError(errors)

    def _make_subscriber(self, field_name: str, setup: SetupFunction):
        async def subscribe_field(
            _root: Any, _info: GraphQLResolveInfo, **args: Any
        ) -> EventStream:
            predicate = setup(args)
            stream = await self.pubsub.subscribe(field_name, predicate)
            self._track(field_name, args, stream)
            return stream

        return subscribe_field

    def _track(
        self, field_name: str, arguments: dict[str, Any], stream: EventStream
    ) -> None:
        registration = SubscriptionRegistration(
            registration_id=next(self._ids),
            field_name=field_name,
            arguments=arguments,
            stream=stream,
        )
        self._registrations[registration.registration_id] = registration
        stream.add_close_callback(
            functools.partial(self._untrack, registration.registration_id)
        )
        logger.info(
            "Subscription registered",
            field_name=field_name,
            registration_id=registration.registration_id,
            arguments=arguments,
        )

    def _untrack(self, registration_id: int) -> None:
        registration = self._registrations.pop(registration_id, None)
        if registration is not None:
            logger.debug(
                "Subscription unregistered",
                field_name=registration.field_name,
                registration_id=registration_id,
            )

    async def subscribe(
        self,
        query: str,
        context: Any,
        variables: dict[str, Any] | None = None,
        operation_name: str | None = None,
    ) -> Any:
        """
        Start a subscription operation.

        Returns:
            An async iterator of ExecutionResults, or an ExecutionResult
            carrying the errors when the operation cannot start
        """
        try:
            document = parse(query)
        except GraphQLError as e:
            return ExecutionResult(data=None, errors=[e])

        errors = validate(self.schema, document)
        if errors:
            return ExecutionResult(data=None, errors=errors)

        result = subscribe(
            self.schema,
            document,
            context_value=context,
            variable_values=variables,
            operation_name=operation_name,
        )
        if isawaitable(result):
            result = await result
        return result

    def active_subscriptions(self, field_name: str | None = None) -> int:
        """Number of open registrations, optionally for one field."""
        if field_name is None:
            return len(self._registrations)
        return sum(
            1
            for registration in self._registrations.values()
            if registration.field_name == field_name
        )

    def get_stats(self) -> dict[str, Any]:
        """Get subscription statistics."""
        by_field: dict[str, int] = {}
        for registration in self._registrations.values():
            by_field[registration.field_name] = by_field.get(registration.field_name, 0) + 1

        return {
            "active_subscriptions": len(self._registrations),
            "subscriptions_by_field": by_field,
            "fields": sorted(self.setup_functions),
            "open_streams": self.pubsub.subscriber_count(),
        }


__all__ = [
    "DEFAULT_SETUP_FUNCTIONS",
    "SetupFunction",
    "SubscriptionManager",
    "SubscriptionRegistration",
    "comment_added_setup",
]

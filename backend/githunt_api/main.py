"""
Application entry point.

``GitHuntApplication`` owns everything that lives for the whole process:
settings, logging, the pub/sub adapter, the GitHub client, the composed
schema and the subscription manager. A transport (HTTP, WebSocket) builds
one context per request and hands operations to ``execute`` and
``subscribe``.

Usage Example:
    app = GitHuntApplication()

    async with app.lifespan():
        context = app.build_context(user=user, entries=entries, comments=comments)
        result = await app.execute(query, context, variables)
        response = app.format_result(result)
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from graphql import ExecutionResult, graphql

from githunt_api.core.config import Settings, get_settings
from githunt_api.core.events import PubSub, create_pubsub
from githunt_api.core.logging import clear_context, configure_logging, get_logger, log_context
from githunt_api.infrastructure.github import GitHubClient, GitHubRepositories, GitHubUsers
from githunt_api.presentation.graphql.common import format_graphql_error
from githunt_api.presentation.graphql.context import GraphQLContext
from githunt_api.presentation.graphql.schema import create_schema
from githunt_api.presentation.graphql.subscriptions import (
    DEFAULT_SETUP_FUNCTIONS,
    SubscriptionManager,
)

logger = get_logger(__name__)


class GitHuntApplication:
    """The GraphQL gateway and its process-wide resources."""

    def __init__(self, settings: Settings | None = None, pubsub: PubSub | None = None):
        self.settings = settings or get_settings()
        self.pubsub = pubsub or create_pubsub(self.settings.event_bus)
        self.github = GitHubClient(self.settings.github)
        self.schema = create_schema(strict=self.settings.strict_resolver_merge)
        self.subscriptions = SubscriptionManager(
            self.schema, self.pubsub, DEFAULT_SETUP_FUNCTIONS
        )

    async def startup(self) -> None:
        """
        Configure logging and connect the pub/sub adapter.

        Raises:
            EventBusError: If the broker is unreachable
        """
        configure_logging(self.settings.log_config())
        logger.info(
            "Starting GitHunt API",
            environment=self.settings.environment.value,
            event_bus=self.settings.event_bus.mode.value,
        )
        await self.pubsub.start()

    async def shutdown(self) -> None:
        """Release process-wide resources. Never raises."""
        logger.info("Shutting down GitHunt API")
        try:
            await self.pubsub.stop()
        except Exception:
            logger.exception("Error stopping pub/sub")
        try:
            await self.github.close()
        except Exception:
            logger.exception("Error closing GitHub client")

    @asynccontextmanager
    async def lifespan(self) -> AsyncGenerator["GitHuntApplication", None]:
        """Application lifespan manager."""
        await self.startup()
        try:
            yield self
        finally:
            await self.shutdown()

    def build_context(self, user: Any = None, **collaborators: Any) -> GraphQLContext:
        """
        Build the context for one request.

        Repositories and users default to the GitHub-backed collaborators;
        the pub/sub adapter is always the application's own.
        """
        collaborators.setdefault("repositories", GitHubRepositories(self.github))
        collaborators.setdefault("users", GitHubUsers(self.github))
        return GraphQLContext(user=user, pubsub=self.pubsub, **collaborators)

    async def execute(
        self,
        query: str,
        context: GraphQLContext,
        variables: dict[str, Any] | None = None,
        operation_name: str | None = None,
    ) -> ExecutionResult:
        """Execute a query or mutation."""
        log_context(operation_name=operation_name, login=context.login)
        try:
            result = await graphql(
                self.schema,
                query,
                context_value=context,
                variable_values=variables,
                operation_name=operation_name,
            )
            if result.errors:
                logger.info(
                    "Operation completed with errors",
                    errors=[error.message for error in result.errors],
                )
            return result
        finally:
            clear_context()

    async def subscribe(
        self,
        query: str,
        context: GraphQLContext,
        variables: dict[str, Any] | None = None,
        operation_name: str | None = None,
    ) -> Any:
        """Start a subscription; see ``SubscriptionManager.subscribe``."""
        return await self.subscriptions.subscribe(query, context, variables, operation_name)

    @staticmethod
    def format_result(result: ExecutionResult) -> dict[str, Any]:
        """Shape a result as a GraphQL response body."""
        response: dict[str, Any] = {"data": result.data}
        if result.errors:
            response["errors"] = [format_graphql_error(error) for error in result.errors]
        return response


__all__ = ["GitHuntApplication"]

"""
GraphQL Context

The per-request context handed to every resolver as ``info.context``.
The transport layer authenticates the caller and supplies the data
collaborators; the application injects the process-wide pub/sub adapter.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from githunt_api.core.errors import UnauthorizedError
from githunt_api.presentation.graphql.common import get_field

if TYPE_CHECKING:
    from githunt_api.core.contracts import (
        CommentsStore,
        EntriesStore,
        RepositoriesStore,
        UsersStore,
    )
    from githunt_api.core.events import PubSub


@dataclass
class GraphQLContext:
    """Request context: the current user, data collaborators and the event bus."""

    user: Any | None = None
    entries: EntriesStore | None = None
    repositories: RepositoriesStore | None = None
    comments: CommentsStore | None = None
    users: UsersStore | None = None
    pubsub: PubSub | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None

    @property
    def login(self) -> str | None:
        """Login of the current user, or None."""
        return get_field(self.user, "login")

    def require_user(self, action: str) -> Any:
        """
        Require an authenticated user for a mutation.

        Args:
            action: What the caller tried to do, e.g. "vote"

        Returns:
            The authenticated user

        Raises:
            UnauthorizedError: If the request carries no user
        """
        if self.user is None:
            raise UnauthorizedError(f"Must be logged in to {action}.")
        return self.user


__all__ = ["GraphQLContext"]

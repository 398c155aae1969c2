"""Collaborator contracts expected on the GraphQL context.

The gateway does not own persistence. Whatever is placed on the context as
``entries``, ``repositories``, ``comments`` and ``users`` only has to satisfy
these protocols. Every method is a coroutine, and any failure it raises is
propagated to the GraphQL caller unchanged.
"""

from typing import Any, Protocol

from githunt_api.core.entities import FeedType


class EntriesStore(Protocol):
    """Entries and votes."""

    async def get_for_feed(
        self, feed_type: FeedType, offset: int | None, limit: int
    ) -> list[Any]:
        """Return a page of entries; ``offset=None`` means the store default."""

    async def get_by_repo_full_name(self, repo_full_name: str) -> Any | None:
        """Return the entry for a repository, or None."""

    async def submit_repository(self, repo_full_name: str, login: str) -> Any:
        """Create the entry for a repository, attributed to ``login``."""

    async def vote_for_entry(
        self, repo_full_name: str, vote_value: int, login: str
    ) -> Any:
        """Apply ``vote_value`` as ``login``'s vote, replacing any previous one."""

    async def have_voted_for_entry(self, repo_full_name: str, login: str) -> Any:
        """Return ``login``'s vote on the entry as ``{"vote_value": int}``."""


class RepositoriesStore(Protocol):
    """Repository metadata lookups."""

    async def get_by_full_name(self, full_name: str) -> Any:
        """Return the repository; raise if it cannot be found."""


class CommentsStore(Protocol):
    """Comments on entries."""

    async def submit_comment(
        self, repo_full_name: str, login: str, content: str
    ) -> Any:
        """Persist a comment and return its newly assigned identifier."""

    async def get_comment_by_id(self, comment_id: Any) -> Any:
        """Return the stored comment."""

    async def get_comments_by_repo_name(
        self, repo_full_name: str, limit: int | None, offset: int | None
    ) -> list[Any]:
        """Return comments on an entry, newest first."""

    async def get_comment_count(self, repo_full_name: str) -> int | None:
        """Return the number of comments on an entry."""


class UsersStore(Protocol):
    """User profile lookups."""

    async def get_by_login(self, login: str) -> Any:
        """Return the user profile for ``login``."""


__all__ = ["CommentsStore", "EntriesStore", "RepositoriesStore", "UsersStore"]

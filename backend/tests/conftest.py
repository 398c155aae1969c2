"""
Global pytest configuration and fixtures for all tests.

Provides:
- Environment isolation for settings tests
- Mock data collaborators
- A running in-memory pub/sub adapter
- Common test data
"""

import os
from datetime import UTC, datetime
from unittest.mock import AsyncMock, Mock

import pytest

from githunt_api.core.entities import Comment, Entry, Repository, User, Vote
from githunt_api.core.events import InMemoryPubSub
from githunt_api.presentation.graphql.context import GraphQLContext

SETTINGS_ENV_KEYS = (
    "APP_NAME",
    "ENVIRONMENT",
    "DEBUG",
    "LOG_LEVEL",
    "LOG_FORMAT",
    "STRICT_RESOLVER_MERGE",
    "EVENT_BUS_MODE",
    "REDIS_URL",
    "REDIS_CHANNEL_PREFIX",
    "REDIS_CONNECT_TIMEOUT",
    "REDIS_RETRY_ON_TIMEOUT",
    "SUBSCRIPTION_QUEUE_SIZE",
    "GITHUB_API_URL",
    "GITHUB_TOKEN",
    "GITHUB_TIMEOUT",
)


@pytest.fixture
def clean_env(monkeypatch):
    """Remove every settings variable for the duration of a test."""
    for key in SETTINGS_ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    yield monkeypatch
    # Values seeded from an env file bypass monkeypatch
    for key in SETTINGS_ENV_KEYS:
        os.environ.pop(key, None)


@pytest.fixture
def user():
    return User(
        login="stubailo",
        avatar_url="https://avatars.githubusercontent.com/u/1?v=3",
        html_url="https://github.com/stubailo",
    )


@pytest.fixture
def repository():
    return Repository(
        name="GitHunt-API",
        full_name="apollographql/GitHunt-API",
        html_url="https://github.com/apollographql/GitHunt-API",
        stargazers_count=42,
        description="Example API",
        open_issues_count=3,
        owner=User(login="apollographql"),
    )


@pytest.fixture
def entry():
    return Entry(
        id=1,
        repository_name="apollographql/GitHunt-API",
        posted_by="stubailo",
        created_at=datetime(2016, 5, 1, 12, 0, tzinfo=UTC),
        score=5,
        hot_score=1.5,
    )


@pytest.fixture
def comment():
    return Comment(
        id=7,
        repository_name="apollographql/GitHunt-API",
        posted_by="stubailo",
        content="Nice repository",
        created_at=datetime(2016, 5, 2, tzinfo=UTC),
    )


@pytest.fixture
def mock_entries(entry):
    entries = Mock()
    entries.get_for_feed = AsyncMock(return_value=[entry])
    entries.get_by_repo_full_name = AsyncMock(return_value=entry)
    entries.submit_repository = AsyncMock(return_value=None)
    entries.vote_for_entry = AsyncMock(return_value=None)
    entries.have_voted_for_entry = AsyncMock(return_value=Vote(vote_value=1))
    return entries


@pytest.fixture
def mock_repositories(repository):
    repositories = Mock()
    repositories.get_by_full_name = AsyncMock(return_value=repository)
    return repositories


@pytest.fixture
def mock_comments(comment):
    comments = Mock()
    comments.submit_comment = AsyncMock(return_value=comment.id)
    comments.get_comment_by_id = AsyncMock(return_value=comment)
    comments.get_comments_by_repo_name = AsyncMock(return_value=[comment])
    comments.get_comment_count = AsyncMock(return_value=1)
    return comments


@pytest.fixture
def mock_users():
    users = Mock()
    users.get_by_login = AsyncMock(side_effect=lambda login: User(login=login))
    return users


@pytest.fixture
def mock_pubsub():
    pubsub = Mock()
    pubsub.publish = AsyncMock(return_value=1)
    return pubsub


@pytest.fixture
def make_context(mock_entries, mock_repositories, mock_comments, mock_users, mock_pubsub):
    """Factory for request contexts wired to the mock collaborators."""

    def _make(user=None, **overrides):
        collaborators = {
            "entries": mock_entries,
            "repositories": mock_repositories,
            "comments": mock_comments,
            "users": mock_users,
            "pubsub": mock_pubsub,
        }
        collaborators.update(overrides)
        return GraphQLContext(user=user, **collaborators)

    return _make


@pytest.fixture
async def pubsub():
    """A started in-memory pub/sub adapter."""
    bus = InMemoryPubSub(max_queue_size=10)
    await bus.start()
    yield bus
    await bus.stop()

"""Core domain entities.

These are the shapes the persistence and GitHub collaborators hand back to
the resolvers. Collaborators may equally return plain mappings with the
same snake_case keys.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class FeedType(str, Enum):
    """Sort order of the feed."""

    HOT = "HOT"
    NEW = "NEW"
    TOP = "TOP"


class VoteType(Enum):
    """Kind of vote; the value is the signed effect applied to the score."""

    UP = 1
    DOWN = -1
    CANCEL = 0

    @property
    def effect(self) -> int:
        return self.value


@dataclass
class User:
    """Authenticated principal or GitHub account."""

    login: str
    avatar_url: str = ""
    html_url: str = ""


@dataclass
class Repository:
    """GitHub repository as returned by the GitHub API."""

    name: str
    full_name: str
    html_url: str
    stargazers_count: int = 0
    description: str | None = None
    open_issues_count: int | None = None
    owner: User | None = None


@dataclass
class Entry:
    """A submitted repository with its aggregate vote score."""

    id: int
    repository_name: str
    posted_by: str
    created_at: datetime
    score: int = 0
    hot_score: float = 0.0


@dataclass
class Comment:
    """Text attached to an entry."""

    id: int
    repository_name: str
    posted_by: str
    content: str
    created_at: datetime = field(default_factory=datetime.now)


@dataclass
class Vote:
    """The current user's vote on an entry."""

    vote_value: int = 0


__all__ = ["Comment", "Entry", "FeedType", "Repository", "User", "Vote", "VoteType"]

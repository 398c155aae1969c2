"""
Root operations: the Query, Mutation and Subscription fields of the API.

Resolvers authorize the caller, then delegate to the data collaborators
on the request context. Mutation steps run strictly in sequence and any
failure ends the chain.
"""

from typing import Any

from graphql import GraphQLResolveInfo

from githunt_api.core.entities import FeedType, VoteType
from githunt_api.core.errors import NotFoundError
from githunt_api.core.logging import get_logger
from githunt_api.presentation.graphql.common import get_field
from githunt_api.presentation.graphql.composer import SchemaFragment

logger = get_logger(__name__)

COMMENT_ADDED = "commentAdded"

FEED_LIMIT_CEILING = 10

ROOT_TYPE_DEFS = '''
"To select the sort order of the feed"
enum FeedType {
  HOT
  NEW
  TOP
}

type Query {
  "For the home page, the offset arg is optional to get a new page of the feed"
  feed(type: FeedType!, offset: Int, limit: Int): [Entry]

  "For the entry page"
  entry(repoFullName: String!): Entry

  "To display the current user on the submission page, and the navbar"
  currentUser: User
}

"Type of vote"
enum VoteType {
  UP
  DOWN
  CANCEL
}

type Mutation {
  "Submit a new repository"
  submitRepository(repoFullName: String!): Entry

  "Vote on a repository"
  vote(repoFullName: String!, type: VoteType!): Entry

  "Comment on a repository"
  submitComment(repoFullName: String!, commentContent: String!): Comment
}

type Subscription {
  "Subscription fires on every comment added"
  commentAdded(repoFullName: String!): Comment
}

schema {
  query: Query
  mutation: Mutation
  subscription: Subscription
}
'''


def clamp_feed_limit(limit: int | None) -> int:
    """Replace a missing or out-of-range page size with the ceiling."""
    if limit is None or limit < 1 or limit > FEED_LIMIT_CEILING:
        return FEED_LIMIT_CEILING
    return limit


# Query


async def resolve_feed(
    _root: Any,
    info: GraphQLResolveInfo,
    type: str,  # noqa: A002
    offset: int | None = None,
    limit: int | None = None,
) -> list[Any]:
    context = info.context
    return await context.entries.get_for_feed(
        FeedType(type), offset, clamp_feed_limit(limit)
    )


async def resolve_entry(_root: Any, info: GraphQLResolveInfo, repoFullName: str) -> Any:
    return await info.context.entries.get_by_repo_full_name(repoFullName)


def resolve_current_user(_root: Any, info: GraphQLResolveInfo) -> Any:
    return info.context.user


# Mutation


async def resolve_submit_repository(
    _root: Any, info: GraphQLResolveInfo, repoFullName: str
) -> Any:
    context = info.context
    user = context.require_user("submit a repository")

    # Any lookup failure means the repository cannot be submitted
    try:
        repository = await context.repositories.get_by_full_name(repoFullName)
    except Exception as e:
        raise NotFoundError("repository", repoFullName) from e
    if repository is None:
        raise NotFoundError("repository", repoFullName)

    await context.entries.submit_repository(repoFullName, get_field(user, "login"))
    logger.info(
        "Repository submitted",
        repo_full_name=repoFullName,
        login=get_field(user, "login"),
    )
    return await context.entries.get_by_repo_full_name(repoFullName)


async def resolve_submit_comment(
    _root: Any, info: GraphQLResolveInfo, repoFullName: str, commentContent: str
) -> Any:
    context = info.context
    user = context.require_user("submit a comment")

    comment_id = await context.comments.submit_comment(
        repoFullName, get_field(user, "login"), commentContent
    )
    comment = await context.comments.get_comment_by_id(comment_id)

    await context.pubsub.publish(COMMENT_ADDED, comment)
    logger.info("Comment submitted", repo_full_name=repoFullName, comment_id=comment_id)
    return comment


async def resolve_vote(
    _root: Any,
    info: GraphQLResolveInfo,
    repoFullName: str,
    type: str,  # noqa: A002
) -> Any:
    context = info.context
    user = context.require_user("vote")

    vote_value = VoteType[type].effect
    await context.entries.vote_for_entry(
        repoFullName, vote_value, get_field(user, "login")
    )
    return await context.entries.get_by_repo_full_name(repoFullName)


# Subscription


def resolve_comment_added(comment: Any, _info: GraphQLResolveInfo, **_args: Any) -> Any:
    # The published payload already is the comment
    return comment


ROOT_RESOLVERS = {
    "Query": {
        "feed": resolve_feed,
        "entry": resolve_entry,
        "currentUser": resolve_current_user,
    },
    "Mutation": {
        "submitRepository": resolve_submit_repository,
        "submitComment": resolve_submit_comment,
        "vote": resolve_vote,
    },
    "Subscription": {
        "commentAdded": resolve_comment_added,
    },
}


def root_fragment() -> SchemaFragment:
    """The root schema fragment; must be composed before the domain fragments."""
    return SchemaFragment(name="root", type_defs=ROOT_TYPE_DEFS, resolvers=ROOT_RESOLVERS)


__all__ = [
    "COMMENT_ADDED",
    "FEED_LIMIT_CEILING",
    "ROOT_RESOLVERS",
    "ROOT_TYPE_DEFS",
    "clamp_feed_limit",
    "root_fragment",
]

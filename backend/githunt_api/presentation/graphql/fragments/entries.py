"""
Entry, comment and vote types, backed by the SQL collaborators.

Stored rows use snake_case keys (``repository_name``, ``posted_by``,
``created_at``); the resolvers here map them onto the API field names.
"""

from typing import Any

from graphql import GraphQLResolveInfo

from githunt_api.core.entities import Vote
from githunt_api.presentation.graphql.common import get_field, to_timestamp
from githunt_api.presentation.graphql.composer import SchemaFragment

ENTRIES_TYPE_DEFS = '''
"A comment about an entry, submitted by a user"
type Comment {
  "The SQL ID of this entry"
  id: Int!

  "The GitHub user who posted the comment"
  postedBy: User!

  "A timestamp of when the comment was posted, in epoch milliseconds"
  createdAt: Float!

  "The text of the comment"
  content: String!

  "The repository which this comment is about"
  repoName: String!
}

"The current user's vote on an entry"
type Vote {
  vote_value: Int!
}

"Information about a GitHub repository submitted to GitHunt"
type Entry {
  "Information about the repository from GitHub"
  repository: Repository!

  "The GitHub user who submitted this entry"
  postedBy: User!

  "A timestamp of when the entry was submitted, in epoch milliseconds"
  createdAt: Float!

  "The score of this repository, upvotes - downvotes"
  score: Int!

  "The hot score of this repository"
  hotScore: Float!

  "Comments posted about this repository"
  comments(limit: Int, offset: Int): [Comment]!

  "The number of comments posted about this repository"
  commentCount: Int!

  "The SQL ID of this entry"
  id: Int!

  "The current user's vote on this entry, 0 when logged out or not voted"
  vote: Vote!
}
'''


def resolve_created_at(obj: Any, _info: GraphQLResolveInfo) -> float | None:
    return to_timestamp(get_field(obj, "created_at"))


async def resolve_posted_by(obj: Any, info: GraphQLResolveInfo) -> Any:
    return await info.context.users.get_by_login(get_field(obj, "posted_by"))


def resolve_comment_repo_name(comment: Any, _info: GraphQLResolveInfo) -> str:
    return get_field(comment, "repository_name")


async def resolve_entry_repository(entry: Any, info: GraphQLResolveInfo) -> Any:
    return await info.context.repositories.get_by_full_name(
        get_field(entry, "repository_name")
    )


def resolve_entry_hot_score(entry: Any, _info: GraphQLResolveInfo) -> float:
    return get_field(entry, "hot_score")


async def resolve_entry_comments(
    entry: Any,
    info: GraphQLResolveInfo,
    limit: int | None = None,
    offset: int | None = None,
) -> list[Any]:
    return await info.context.comments.get_comments_by_repo_name(
        get_field(entry, "repository_name"), limit, offset
    )


async def resolve_entry_comment_count(entry: Any, info: GraphQLResolveInfo) -> int:
    count = await info.context.comments.get_comment_count(
        get_field(entry, "repository_name")
    )
    return count or 0


async def resolve_entry_vote(entry: Any, info: GraphQLResolveInfo) -> Any:
    context = info.context
    if context.user is None:
        return Vote(vote_value=0)
    return await context.entries.have_voted_for_entry(
        get_field(entry, "repository_name"), context.login
    )


ENTRIES_RESOLVERS = {
    "Entry": {
        "createdAt": resolve_created_at,
        "repository": resolve_entry_repository,
        "postedBy": resolve_posted_by,
        "hotScore": resolve_entry_hot_score,
        "comments": resolve_entry_comments,
        "commentCount": resolve_entry_comment_count,
        "vote": resolve_entry_vote,
    },
    "Comment": {
        "createdAt": resolve_created_at,
        "postedBy": resolve_posted_by,
        "repoName": resolve_comment_repo_name,
    },
}


def entries_fragment() -> SchemaFragment:
    return SchemaFragment(
        name="entries", type_defs=ENTRIES_TYPE_DEFS, resolvers=ENTRIES_RESOLVERS
    )

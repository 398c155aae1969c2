"""GitHub types: repositories and user profiles."""

from typing import Any

from graphql import GraphQLResolveInfo

from githunt_api.presentation.graphql.common import get_field
from githunt_api.presentation.graphql.composer import SchemaFragment

GITHUB_TYPE_DEFS = '''
"A repository object from the GitHub API"
type Repository {
  "Just the name of the repository, e.g. GitHunt-API"
  name: String!

  "The full name of the repository with the username, e.g. apollostack/GitHunt-API"
  full_name: String!

  "The description of the repository"
  description: String

  "The link to the repository on GitHub"
  html_url: String!

  "The number of people who have starred this repository on GitHub"
  stargazers_count: Int!

  "The number of open issues on this repository on GitHub"
  open_issues_count: Int

  "The owner of this repository on GitHub, e.g. apollostack"
  owner: User
}

"A user object from the GitHub API"
type User {
  "The name of the user, e.g. apollostack"
  login: String!

  "The URL to a directly embeddable image for this user's avatar"
  avatar_url: String!

  "The URL of this user's GitHub page"
  html_url: String!
}
'''


async def resolve_repository_owner(
    repository: Any, info: GraphQLResolveInfo
) -> Any:
    owner = get_field(repository, "owner")
    login = get_field(owner, "login")
    if login is None:
        return None
    return await info.context.users.get_by_login(login)


GITHUB_RESOLVERS = {
    "Repository": {
        "owner": resolve_repository_owner,
    },
}


def github_fragment() -> SchemaFragment:
    return SchemaFragment(name="github", type_defs=GITHUB_TYPE_DEFS, resolvers=GITHUB_RESOLVERS)

"""
Integration tests for the composed GitHunt schema.
"""

import pytest
from graphql import GraphQLSchema, get_introspection_query, graphql, graphql_sync

from githunt_api.core.entities import FeedType
from githunt_api.presentation.graphql.schema import create_schema, schema_fragments

FEED_QUERY = """
query Feed($type: FeedType!, $offset: Int, $limit: Int) {
  feed(type: $type, offset: $offset, limit: $limit) {
    id
    score
    hotScore
    createdAt
    commentCount
    postedBy { login }
    repository {
      full_name
      stargazers_count
      owner { login }
    }
    vote { vote_value }
    comments(limit: 5) {
      id
      content
      repoName
      createdAt
      postedBy { login }
    }
  }
}
"""


@pytest.fixture(scope="module")
def schema():
    return create_schema()


class TestSchemaComposition:
    """Test main schema composition."""

    def test_create_schema(self, schema):
        """Test schema creation."""
        assert isinstance(schema, GraphQLSchema)
        assert schema.query_type.name == "Query"
        assert schema.mutation_type.name == "Mutation"
        assert schema.subscription_type.name == "Subscription"

    def test_schema_introspection(self, schema):
        """Test schema introspection works."""
        result = graphql_sync(schema, get_introspection_query())

        assert result.errors is None
        assert "__schema" in result.data

    def test_root_fields(self, schema):
        """Test root types expose the public operations."""
        assert set(schema.query_type.fields) == {"feed", "entry", "currentUser"}
        assert set(schema.mutation_type.fields) == {"submitRepository", "vote", "submitComment"}
        assert set(schema.subscription_type.fields) == {"commentAdded"}

    def test_enums(self, schema):
        """Test enum values."""
        assert set(schema.type_map["FeedType"].values) == {"HOT", "NEW", "TOP"}
        assert set(schema.type_map["VoteType"].values) == {"UP", "DOWN", "CANCEL"}

    def test_fragment_order(self):
        """Test the root fragment is composed first."""
        assert [fragment.name for fragment in schema_fragments()] == ["root", "github", "entries"]

    def test_strict_composition_has_no_conflicts(self):
        """Test the shipped fragments never override each other."""
        assert isinstance(create_schema(strict=True), GraphQLSchema)


class TestQueryExecution:
    """Test queries against mock collaborators."""

    @pytest.mark.asyncio
    async def test_feed(self, schema, make_context, mock_entries, mock_users):
        """Test the home page feed query resolves every nested field."""
        result = await graphql(
            schema,
            FEED_QUERY,
            context_value=make_context(),
            variable_values={"type": "HOT", "limit": 50},
        )

        assert result.errors is None
        mock_entries.get_for_feed.assert_awaited_once_with(FeedType.HOT, None, 10)
        mock_entries.have_voted_for_entry.assert_not_awaited()

        entry = result.data["feed"][0]
        assert entry["id"] == 1
        assert entry["score"] == 5
        assert entry["hotScore"] == 1.5
        assert entry["createdAt"] == 1462104000000.0
        assert entry["commentCount"] == 1
        assert entry["postedBy"] == {"login": "stubailo"}
        assert entry["repository"] == {
            "full_name": "apollographql/GitHunt-API",
            "stargazers_count": 42,
            "owner": {"login": "apollographql"},
        }
        assert entry["vote"] == {"vote_value": 0}
        assert entry["comments"] == [
            {
                "id": 7,
                "content": "Nice repository",
                "repoName": "apollographql/GitHunt-API",
                "createdAt": 1462147200000.0,
                "postedBy": {"login": "stubailo"},
            }
        ]

    @pytest.mark.asyncio
    async def test_feed_vote_for_current_user(self, schema, make_context, user, mock_entries):
        """Test the vote field reports the current user's vote."""
        result = await graphql(
            schema,
            "{ feed(type: TOP, limit: 3) { vote { vote_value } } }",
            context_value=make_context(user=user),
        )

        assert result.errors is None
        assert result.data == {"feed": [{"vote": {"vote_value": 1}}]}
        mock_entries.get_for_feed.assert_awaited_once_with(FeedType.TOP, None, 3)
        mock_entries.have_voted_for_entry.assert_awaited_once_with(
            "apollographql/GitHunt-API", "stubailo"
        )

    @pytest.mark.asyncio
    async def test_missing_entry_is_null(self, schema, make_context, mock_entries):
        """Test an absent entry is null, not an error."""
        mock_entries.get_by_repo_full_name.return_value = None

        result = await graphql(
            schema, '{ entry(repoFullName: "a/b") { id } }', context_value=make_context()
        )

        assert result.errors is None
        assert result.data == {"entry": None}

    @pytest.mark.asyncio
    async def test_current_user(self, schema, make_context, user):
        """Test currentUser projects the context user."""
        result = await graphql(
            schema, "{ currentUser { login html_url } }", context_value=make_context(user=user)
        )

        assert result.data == {
            "currentUser": {"login": "stubailo", "html_url": "https://github.com/stubailo"}
        }


class TestMutationExecution:
    """Test mutations against mock collaborators."""

    @pytest.mark.asyncio
    async def test_vote(self, schema, make_context, user, mock_entries):
        """Test a vote applies its effect and returns the entry."""
        result = await graphql(
            schema,
            'mutation { vote(repoFullName: "apollographql/GitHunt-API", type: DOWN) { id } }',
            context_value=make_context(user=user),
        )

        assert result.errors is None
        assert result.data == {"vote": {"id": 1}}
        mock_entries.vote_for_entry.assert_awaited_once_with(
            "apollographql/GitHunt-API", -1, "stubailo"
        )

    @pytest.mark.asyncio
    async def test_unauthorized_vote(self, schema, make_context, mock_entries):
        """Test anonymous mutations fail with a descriptive error."""
        result = await graphql(
            schema,
            'mutation { vote(repoFullName: "a/b", type: UP) { id } }',
            context_value=make_context(),
        )

        assert result.data == {"vote": None}
        assert result.errors[0].message == "Must be logged in to vote."
        assert result.errors[0].path == ["vote"]
        mock_entries.vote_for_entry.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unknown_vote_type_is_rejected(self, schema, make_context, user, mock_entries):
        """Test only UP, DOWN and CANCEL are accepted."""
        result = await graphql(
            schema,
            'mutation { vote(repoFullName: "a/b", type: SIDEWAYS) { id } }',
            context_value=make_context(user=user),
        )

        assert result.data is None
        assert "SIDEWAYS" in result.errors[0].message
        mock_entries.vote_for_entry.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_submit_repository_not_found(
        self, schema, make_context, user, mock_repositories, mock_entries
    ):
        """Test a failed lookup names the repository."""
        mock_repositories.get_by_full_name.side_effect = RuntimeError("boom")

        result = await graphql(
            schema,
            'mutation { submitRepository(repoFullName: "owner/doesnotexist") { id } }',
            context_value=make_context(user=user),
        )

        assert result.data == {"submitRepository": None}
        assert result.errors[0].message == 'Couldn\'t find repository named "owner/doesnotexist"'
        mock_entries.submit_repository.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_submit_comment(self, schema, make_context, user, mock_pubsub, comment):
        """Test a comment is returned and published."""
        result = await graphql(
            schema,
            """
            mutation {
              submitComment(repoFullName: "apollographql/GitHunt-API", commentContent: "Nice") {
                id
                postedBy { login }
              }
            }
            """,
            context_value=make_context(user=user),
        )

        assert result.errors is None
        assert result.data == {"submitComment": {"id": 7, "postedBy": {"login": "stubailo"}}}
        mock_pubsub.publish.assert_awaited_once_with("commentAdded", comment)

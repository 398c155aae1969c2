"""
GraphQL Schema

Composes the root fragment with the domain fragments into the executable
schema served by the application.
"""

from graphql import GraphQLSchema

from githunt_api.presentation.graphql.composer import SchemaFragment, compose_schema
from githunt_api.presentation.graphql.fragments import entries_fragment, github_fragment
from githunt_api.presentation.graphql.root import root_fragment


def schema_fragments() -> list[SchemaFragment]:
    """Fragments in composition order: root first."""
    return [root_fragment(), github_fragment(), entries_fragment()]


def create_schema(strict: bool = False) -> GraphQLSchema:
    """
    Create the GraphQL schema.

    Raises:
        SchemaCompositionError: If the fragments do not compose
    """
    return compose_schema(schema_fragments(), strict=strict)


__all__ = ["create_schema", "schema_fragments"]

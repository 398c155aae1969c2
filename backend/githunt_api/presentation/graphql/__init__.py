"""
GraphQL presentation layer.

Exports the schema factory, the request context and the subscription
manager.
"""

from .composer import SchemaFragment, compose_schema, merge_resolvers
from .context import GraphQLContext
from .root import COMMENT_ADDED, root_fragment
from .schema import create_schema
from .subscriptions import DEFAULT_SETUP_FUNCTIONS, SubscriptionManager

__all__ = [
    "COMMENT_ADDED",
    "DEFAULT_SETUP_FUNCTIONS",
    "GraphQLContext",
    "SchemaFragment",
    "SubscriptionManager",
    "compose_schema",
    "create_schema",
    "merge_resolvers",
    "root_fragment",
]

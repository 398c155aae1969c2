"""
Schema composition.

Merges the root schema fragment with the domain fragments into one
executable ``GraphQLSchema``:

- type definitions are concatenated in fragment order; a later fragment
  may add types or ``extend`` existing ones but may not redeclare them
- resolver maps are deep-merged type by type and field by field in
  fragment order, so on a collision the later fragment wins for that one
  field and every sibling field is kept (``strict=True`` rejects
  collisions instead)

Composition fails fast: every syntax, SDL, schema and binding error is
collected and raised together as one ``SchemaCompositionError``.
"""

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from itertools import chain
from typing import Any

from graphql import (
    DocumentNode,
    GraphQLError,
    GraphQLObjectType,
    GraphQLSchema,
    build_ast_schema,
    parse,
    validate_schema,
)
from graphql.validation.validate import validate_sdl

from githunt_api.core.errors import SchemaCompositionError
from githunt_api.core.logging import get_logger

logger = get_logger(__name__)

Resolver = Callable[..., Any]
ResolverMap = Mapping[str, Mapping[str, Resolver]]


@dataclass(frozen=True)
class SchemaFragment:
    """A partial schema: SDL text plus the resolvers for the fields it declares."""

    name: str
    type_defs: str | Sequence[str]
    resolvers: ResolverMap = field(default_factory=dict)

    @property
    def sources(self) -> tuple[str, ...]:
        if isinstance(self.type_defs, str):
            return (self.type_defs,)
        return tuple(self.type_defs)


def merge_type_defs(fragments: Sequence[SchemaFragment]) -> str:
    """Concatenate the SDL of every fragment, in order."""
    return "\n".join(chain.from_iterable(fragment.sources for fragment in fragments))


def merge_resolvers(
    *resolver_maps: ResolverMap, strict: bool = False
) -> dict[str, dict[str, Resolver]]:
    """
    Deep-merge resolver maps key by key.

    Later maps win per field. With ``strict=True`` a field defined by more
    than one map is an error instead.

    Raises:
        SchemaCompositionError: On collisions when ``strict`` is set
    """
    merged: dict[str, dict[str, Resolver]] = {}
    conflicts: list[str] = []

    for resolver_map in resolver_maps:
        for type_name, field_resolvers in resolver_map.items():
            target = merged.setdefault(type_name, {})
            for field_name, resolver in field_resolvers.items():
                if field_name in target and target[field_name] is not resolver:
                    if strict:
                        conflicts.append(
                            f'Resolver for "{type_name}.{field_name}" is defined more than once'
                        )
                        continue
                    logger.debug(
                        "Overriding resolver", type_name=type_name, field_name=field_name
                    )
                target[field_name] = resolver

    if conflicts:
        raise SchemaCompositionError(conflicts)
    return merged


def bind_resolvers(schema: GraphQLSchema, resolvers: ResolverMap) -> list[str]:
    """
    Attach resolvers to the schema's object fields.

    Returns:
        Descriptions of every resolver that could not be bound
    """
    errors: list[str] = []

    for type_name, field_resolvers in resolvers.items():
        graphql_type = schema.type_map.get(type_name)
        if graphql_type is None:
            errors.append(f'Resolvers defined for unknown type "{type_name}"')
            continue
        if not isinstance(graphql_type, GraphQLObjectType):
            errors.append(f'Cannot bind field resolvers to non-object type "{type_name}"')
            continue

        for field_name, resolver in field_resolvers.items():
            graphql_field = graphql_type.fields.get(field_name)
            if graphql_field is None:
                errors.append(
                    f'Resolver defined for unknown field "{type_name}.{field_name}"'
                )
            elif not callable(resolver):
                errors.append(f'Resolver for "{type_name}.{field_name}" is not callable')
            else:
                graphql_field.resolve = resolver

    return errors


def _describe(error: GraphQLError, fragment: str | None = None) -> str:
    description = error.message
    if error.locations:
        location = error.locations[0]
        description += f" (line {location.line}, column {location.column})"
    if fragment:
        description = f"[{fragment}] {description}"
    return description


def compose_schema(
    fragments: Sequence[SchemaFragment], strict: bool = False
) -> GraphQLSchema:
    """
    Build one executable schema from ordered fragments.

    Args:
        fragments: Root fragment first, then the domain fragments
        strict: Reject resolver collisions instead of letting the later one win

    Raises:
        SchemaCompositionError: With every error found, if any
    """
    if not fragments:
        raise SchemaCompositionError(["No schema fragments supplied"])

    resolvers = merge_resolvers(*(fragment.resolvers for fragment in fragments), strict=strict)

    definitions = []
    errors: list[str] = []
    for fragment in fragments:
        for source in fragment.sources:
            try:
                definitions.extend(parse(source).definitions)
            except GraphQLError as e:
                errors.append(_describe(e, fragment.name))
    if errors:
        raise SchemaCompositionError(errors)

    document = DocumentNode(definitions=tuple(definitions))
    errors = [_describe(error) for error in validate_sdl(document)]
    if errors:
        raise SchemaCompositionError(errors)

    try:
        schema = build_ast_schema(document, assume_valid_sdl=True)
    except (GraphQLError, TypeError) as e:
        raise SchemaCompositionError([str(e)]) from e

    errors = [_describe(error) for error in validate_schema(schema)]
    errors.extend(bind_resolvers(schema, resolvers))
    if errors:
        raise SchemaCompositionError(errors)

    logger.info(
        "Schema composed",
        fragments=[fragment.name for fragment in fragments],
        types=len(schema.type_map),
    )
    return schema


__all__ = [
    "Resolver",
    "ResolverMap",
    "SchemaFragment",
    "bind_resolvers",
    "compose_schema",
    "merge_resolvers",
    "merge_type_defs",
]

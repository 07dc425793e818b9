# Copyright 2019-present Kensho Technologies, LLC.
from typing import Mapping, Set

from graphql import GraphQLList, GraphQLNamedType, GraphQLNonNull, GraphQLType

from ..exceptions import GraphQLError


class SchemaTransformError(GraphQLError):
    """Parent of specific error classes."""


class AlreadyTransformedError(SchemaTransformError):
    """Raised if a transformer that already produced a derived schema is asked for another one.

    One transformer instance owns exactly one source schema and one derived schema for its
    lifetime. Replacing the derived schema under documents that are being translated against it
    is not allowed; create a new transformer instead.
    """


class SchemaNotTransformedError(SchemaTransformError):
    """Raised if a document is translated before the transformer produced its derived schema."""


class IdentifierFieldError(SchemaTransformError):
    """Parent of the errors raised when an identifier field cannot be renamed."""

    type_name: str
    field_name: str

    def __init__(self, type_name: str, field_name: str, message: str) -> None:
        """Record the offending type and field along with the explanation."""
        super().__init__(message)
        self.type_name = type_name
        self.field_name = field_name


class UnexpectedNullableIdentifierError(IdentifierFieldError):
    """Raised if an object type declares a nullable id field and is not known to do so.

    Identifier fields are expected to be non-null. The handful of types that predate this rule are
    listed explicitly; any other object type with a nullable id field is rejected so that the
    guarantee does not erode silently.
    """


class UnrecognizedIdentifierFieldError(IdentifierFieldError):
    """Raised if an id field matches none of the rules that decide what it should be renamed to.

    The rules look at the field's description and at two fixed lists of legacy type names. A new id
    field that fits neither must be given one of the known descriptions upstream.
    """


class IdentifierFieldCollisionError(SchemaTransformError):
    """Raised if renaming would give two fields of the same type the same name.

    For example, a type with both an "_id" field and an "internalID" field cannot be renamed,
    since "_id" is renamed to "internalID".
    """

    type_name: str
    field_name_conflicts: Mapping[str, Set[str]]

    def __init__(self, type_name: str, field_name_conflicts: Mapping[str, Set[str]]) -> None:
        """Record the type and the conflicting fields, keyed by the name they would share."""
        if not field_name_conflicts:
            raise ValueError(
                "Cannot raise IdentifierFieldCollisionError without at least one conflict."
            )
        super().__init__()
        self.type_name = type_name
        self.field_name_conflicts = field_name_conflicts

    def __str__(self) -> str:
        """Explain the collision."""
        sorted_conflicts = [
            (new_field_name, sorted(original_field_names))
            for new_field_name, original_field_names in sorted(self.field_name_conflicts.items())
        ]
        return (
            f"Renaming the identifier fields of type {self.type_name} would produce multiple "
            f"fields with the same name. The following is a list of tuples of the form "
            f"(new_field_name, original_field_names) describing the conflicts: {sorted_conflicts}"
        )


class NoFieldsAfterRenamingError(SchemaTransformError):
    """Raised if dropping identifier fields would leave a type with no fields at all.

    GraphQL requires every object and interface type to define at least one field, so the renamed
    schema could not be valid.
    """

    type_name: str
    dropped_field_names: Set[str]

    def __init__(self, type_name: str, dropped_field_names: Set[str]) -> None:
        """Record the type and the fields that were dropped from it."""
        super().__init__(
            f"Type {type_name} has no fields other than {sorted(dropped_field_names)}, which are "
            f"omitted from the renamed schema. The renamed type would have no fields."
        )
        self.type_name = type_name
        self.dropped_field_names = dropped_field_names


def rewrap_type(type_: GraphQLType, named_types: Mapping[str, GraphQLNamedType]) -> GraphQLType:
    """Return the equivalent of the given type, with its named type replaced from named_types.

    List and NonNull wrappers are rebuilt around the replacement, so that the result references
    only types that are part of the new schema.

    Args:
        type_: type to rewrap, e.g. the type of a field in the original schema
        named_types: maps type names to the named types of the new schema. Every named type
                     reachable from type_ must be present

    Returns:
        type equivalent to type_, referencing the named types of the new schema
    """
    if isinstance(type_, GraphQLNonNull):
        return GraphQLNonNull(rewrap_type(type_.of_type, named_types))
    elif isinstance(type_, GraphQLList):
        return GraphQLList(rewrap_type(type_.of_type, named_types))
    elif isinstance(type_, GraphQLNamedType):
        new_type = named_types.get(type_.name)
        if new_type is None:
            raise AssertionError(
                f"Type {type_.name} is referenced by the schema but has no counterpart in the new "
                f"schema. This is a bug."
            )
        return new_type
    else:
        raise AssertionError(f"Unexpected type {type_} of class {type(type_)}.")

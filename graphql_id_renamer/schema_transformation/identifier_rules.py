# Copyright 2019-present Kensho Technologies, LLC.
"""Decide what every identifier field of the original schema is called in the renamed schema.

The original schema uses three names for identifier fields, with irregular meanings:
- "id" is either a public, human-facing identifier (usually a slug), or an internal database
  identifier. Which of the two it is can be told apart by the field's description, or, for types
  that predate the descriptions, by the name of the type that owns the field;
- "_id" is always an internal database identifier;
- "__id" is a globally unique identifier, suitable for refetching any object.

In the renamed schema these become "gravityID", "internalID" and "id" respectively. The table
below is the only place where these rules are written down: both renaming the schema and
translating queries back to the original naming derive from it.

    original name | condition                                             | renamed to
    --------------+-------------------------------------------------------+-------------
    id            | object type, type is ID_OMITTED_TYPE_NAME             | (dropped)
    id            | object type, nullable field, type not allowlisted     | (error)
    id            | public description, or DEPRECATED_PARTNER_TYPE_NAME   | gravityID
    id            | internal description, or KAWS or Exchange type        | internalID
    id            | anything else                                         | (error)
    _id           |                                                       | internalID
    __id          |                                                       | id
"""
from enum import Enum, unique
from typing import Any, Callable, Mapping, NamedTuple, Optional

from graphql import GraphQLField, GraphQLResolveInfo, is_nullable_type

from .utils import UnexpectedNullableIdentifierError, UnrecognizedIdentifierFieldError


# Types inherited from the KAWS and Exchange services. Their id fields are internal identifiers, but
# they carry no description telling so.
# TODO: drop these lists once both services rename their id fields to internalID upstream.
KAWS_TYPE_NAMES = frozenset({"MarketingCollection", "MarketingCollectionQuery"})
EXCHANGE_TYPE_NAMES = frozenset(
    {
        "CommerceOrder",
        "CommercePartner",
        "CommerceUser",
        "CommerceLineItem",
        "CommerceFulfillment",
        "CommerceBuyOrder",
        "CommerceOffer",
        "CommerceOfferOrder",
    }
)

# Identifier fields should not be nullable. These types predate the rule.
KNOWN_TYPES_WITH_NULLABLE_ID_FIELDS = frozenset(
    {"MarketingCollectionQuery", "FeaturedLinkItem", "HomePageModulesParams", "Image"}
)

# The id field of this type is a no-op, and is omitted from the renamed schema altogether.
ID_OMITTED_TYPE_NAME = "SaleArtworkHighestBid"

# The id field of this type is a public identifier, even though it is not described as one.
DEPRECATED_PARTNER_TYPE_NAME = "DoNotUseThisPartner"

GRAVITY_ID_DESCRIPTION = "A slug ID."
INTERNAL_ID_DESCRIPTION = "A type-specific ID."

GRAVITY_ID_FIELD_NAME = "gravityID"
INTERNAL_ID_FIELD_NAME = "internalID"


@unique
class IdentifierSource(Enum):
    """Where the value of a field of the renamed schema is read from."""

    PASS_THROUGH = None  # the field was not renamed, and is resolved the way it always was
    ID = "id"
    UNDERSCORE_ID = "_id"
    DOUBLE_UNDERSCORE_ID = "__id"

    @property
    def original_field_name(self) -> str:
        """Return the name of the field of the original schema that holds the value."""
        if self is IdentifierSource.PASS_THROUGH:
            raise AssertionError(
                "Pass-through fields are not renamed, so they have no separate original name."
            )
        return self.value


class FieldRenaming(NamedTuple):
    """The name of a field in the renamed schema, and the source of its value."""

    new_field_name: str
    source: IdentifierSource


def classify_field(
    type_name: str, field_name: str, field: GraphQLField, is_object_type: bool
) -> Optional[FieldRenaming]:
    """Apply the identifier renaming rules to a single field.

    Args:
        type_name: name of the object or interface type the field belongs to
        field_name: name of the field in the original schema
        field: the field in the original schema
        is_object_type: True if the field belongs to an object type, False for an interface type.
                        Only object types have their id fields checked for nullability

    Returns:
        FieldRenaming describing the field in the renamed schema, or None if the field is to be
        omitted from the renamed schema

    Raises:
        - UnexpectedNullableIdentifierError if an object type has a nullable id field and is not
          one of KNOWN_TYPES_WITH_NULLABLE_ID_FIELDS
        - UnrecognizedIdentifierFieldError if none of the rules for id fields apply
    """
    if field_name == IdentifierSource.ID.value:
        return _classify_id_field(type_name, field_name, field, is_object_type)
    elif field_name == IdentifierSource.UNDERSCORE_ID.value:
        return FieldRenaming(INTERNAL_ID_FIELD_NAME, IdentifierSource.UNDERSCORE_ID)
    elif field_name == IdentifierSource.DOUBLE_UNDERSCORE_ID.value:
        return FieldRenaming(IdentifierSource.ID.value, IdentifierSource.DOUBLE_UNDERSCORE_ID)
    else:
        return FieldRenaming(field_name, IdentifierSource.PASS_THROUGH)


def _classify_id_field(
    type_name: str, field_name: str, field: GraphQLField, is_object_type: bool
) -> Optional[FieldRenaming]:
    """Decide between gravityID and internalID for a field named "id"."""
    if is_object_type and type_name == ID_OMITTED_TYPE_NAME:
        return None

    if (
        is_object_type
        and is_nullable_type(field.type)
        and type_name not in KNOWN_TYPES_WITH_NULLABLE_ID_FIELDS
    ):
        raise UnexpectedNullableIdentifierError(
            type_name,
            field_name,
            f"Type {type_name} has a nullable id field. Do not add new nullable id fields; if the "
            f"field must stay nullable, add the type to KNOWN_TYPES_WITH_NULLABLE_ID_FIELDS.",
        )

    if field.description == GRAVITY_ID_DESCRIPTION or type_name == DEPRECATED_PARTNER_TYPE_NAME:
        return FieldRenaming(GRAVITY_ID_FIELD_NAME, IdentifierSource.ID)
    elif (
        field.description == INTERNAL_ID_DESCRIPTION
        or type_name in KAWS_TYPE_NAMES
        or type_name in EXCHANGE_TYPE_NAMES
    ):
        return FieldRenaming(INTERNAL_ID_FIELD_NAME, IdentifierSource.ID)
    else:
        raise UnrecognizedIdentifierFieldError(
            type_name,
            field_name,
            f"Type {type_name} has an id field whose description is neither "
            f'"{GRAVITY_ID_DESCRIPTION}" nor "{INTERNAL_ID_DESCRIPTION}". Do not add new id '
            f"fields without one of these descriptions, since it is then impossible to tell "
            f"whether the field should be renamed to {GRAVITY_ID_FIELD_NAME} or "
            f"{INTERNAL_ID_FIELD_NAME}.",
        )


def make_identifier_resolver(
    source: IdentifierSource, original_resolve: Optional[Callable[..., Any]]
) -> Callable[..., Any]:
    """Return a resolver for a renamed field, producing the value of the original field.

    The original field's resolver is used when it has one. Otherwise the value is read off the
    runtime object by the original field name, the same way graphql-core's default resolver would
    have read it for the original field.

    Args:
        source: where the value of the renamed field comes from. Must not be PASS_THROUGH
        original_resolve: resolver of the field in the original schema, if any

    Returns:
        resolver function suitable for a GraphQLField
    """
    original_field_name = source.original_field_name

    if original_resolve is not None:
        return original_resolve

    def resolve_original_field(parent: Any, info: GraphQLResolveInfo, **args: Any) -> Any:
        """Read the value of the original field from the parent object."""
        if isinstance(parent, Mapping):
            value = parent.get(original_field_name)
        else:
            value = getattr(parent, original_field_name, None)
        if callable(value):
            return value(info, **args)
        return value

    return resolve_original_field

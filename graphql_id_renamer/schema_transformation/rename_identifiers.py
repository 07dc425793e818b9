# Copyright 2019-present Kensho Technologies, LLC.
"""Rebuild a schema with its identifier fields renamed.

Every object type and interface type of the original schema is rebuilt with a new set of fields,
as decided by the rules in identifier_rules. Everything else about the types is kept: their
descriptions, AST nodes, extensions, and the callbacks used to resolve abstract types.

Rebuilding a type means that every other type that references it must be rebuilt as well, since
GraphQL types reference each other directly. The rebuilding happens in two phases:
- first, every interface type is rebuilt and recorded in the interface registry;
- then, every object type is rebuilt, with its interfaces looked up in the interface registry.
Union types are rebuilt last, since their members are object types. Scalar, enum and input object
types only ever reference each other, so they are kept as they are.

The types of the fields of the rebuilt types are bound lazily, once all types have been rebuilt,
which allows types to reference each other in cycles.
"""
from collections import namedtuple
import logging
from typing import Callable, Dict, List, Mapping, Optional, Set, Tuple

from funcy import lsplit
from graphql import (
    GraphQLField,
    GraphQLInterfaceType,
    GraphQLNamedType,
    GraphQLObjectType,
    GraphQLSchema,
    GraphQLUnionType,
    is_interface_type,
    is_introspection_type,
    is_object_type,
    is_union_type,
)

from .identifier_rules import (
    FieldRenaming,
    IdentifierSource,
    classify_field,
    make_identifier_resolver,
)
from .utils import IdentifierFieldCollisionError, NoFieldsAfterRenamingError, rewrap_type


logger = logging.getLogger(__name__)


RenamedIdentifiersDescriptor = namedtuple(
    "RenamedIdentifiersDescriptor",
    (
        "schema",  # GraphQLSchema, the schema with renamed identifier fields
        "interface_registry",  # Dict[str, GraphQLInterfaceType], name to rebuilt interface type
        "reverse_field_name_map",  # Dict[str, Dict[str, str]], maps type names to dicts mapping
        # renamed field names to their original names. It contains entries solely for fields whose
        # names were changed, and only for types that have at least one such field.
        "dropped_fields",  # Dict[str, Set[str]], maps type names to the names of the fields of
        # the original schema that were omitted from the renamed schema.
    ),
)


# A field of the original schema, paired with the result of applying the renaming rules to it.
ClassifiedField = Tuple[GraphQLField, FieldRenaming]


def rename_identifiers(schema: GraphQLSchema) -> RenamedIdentifiersDescriptor:
    """Create a RenamedIdentifiersDescriptor, with the identifier fields of the schema renamed.

    Args:
        schema: the original schema. It is not modified

    Returns:
        RenamedIdentifiersDescriptor containing the renamed schema, the rebuilt interface types
        and the maps describing which fields were renamed or dropped

    Raises:
        - UnexpectedNullableIdentifierError if an object type unexpectedly has a nullable id field
        - UnrecognizedIdentifierFieldError if an id field could not be classified
        - IdentifierFieldCollisionError if renaming would produce two fields with the same name
        - NoFieldsAfterRenamingError if a type would be left with no fields
    """
    original_types = [
        named_type
        for named_type in schema.type_map.values()
        if not is_introspection_type(named_type)
    ]
    interface_types, other_types = lsplit(is_interface_type, original_types)

    # All named types of the new schema, by name. Types that are not rebuilt stay in here as they
    # are, so that the field type thunks can look up every type they need.
    new_types: Dict[str, GraphQLNamedType] = {
        named_type.name: named_type for named_type in original_types
    }
    reverse_field_name_map: Dict[str, Dict[str, str]] = {}
    dropped_fields: Dict[str, Set[str]] = {}

    # Phase 1: interfaces.
    interface_registry: Dict[str, GraphQLInterfaceType] = {}
    for interface_type in interface_types:
        classified_fields = _classify_fields(interface_type, False)
        new_interface = _build_interface_type(
            interface_type, classified_fields, new_types, interface_registry
        )
        interface_registry[new_interface.name] = new_interface
        _record_renamings(
            interface_type, classified_fields, reverse_field_name_map, dropped_fields
        )
    new_types.update(interface_registry)

    # Phase 2: object types, which reference the interfaces rebuilt in phase 1.
    for object_type in filter(is_object_type, other_types):
        classified_fields = _classify_fields(object_type, True)
        new_types[object_type.name] = _build_object_type(
            object_type, classified_fields, new_types, interface_registry
        )
        _record_renamings(object_type, classified_fields, reverse_field_name_map, dropped_fields)

    for union_type in filter(is_union_type, other_types):
        new_types[union_type.name] = _build_union_type(union_type, new_types)

    new_schema = _build_schema(schema, new_types)

    logger.info(
        "Renamed identifier fields of %d types, dropped identifier fields of %d types.",
        len(reverse_field_name_map),
        len(dropped_fields),
    )
    return RenamedIdentifiersDescriptor(
        schema=new_schema,
        interface_registry=interface_registry,
        reverse_field_name_map=reverse_field_name_map,
        dropped_fields=dropped_fields,
    )


def _classify_fields(
    type_: GraphQLNamedType, is_object: bool
) -> Dict[str, Optional[ClassifiedField]]:
    """Apply the renaming rules to every field of the type, checking for name collisions.

    Args:
        type_: object or interface type of the original schema
        is_object: True if type_ is an object type

    Returns:
        dict mapping the original field names to the field and its renaming, or None if the field
        is dropped. It is ordered like the fields of the original type

    Raises:
        - IdentifierFieldCollisionError if two fields would be renamed to the same name
        - NoFieldsAfterRenamingError if every field of the type is dropped
        - the errors raised by classify_field
    """
    classified_fields: Dict[str, Optional[ClassifiedField]] = {}
    original_field_names_by_new_name: Dict[str, Set[str]] = {}
    for field_name, field in type_.fields.items():
        renaming = classify_field(type_.name, field_name, field, is_object)
        if renaming is None:
            classified_fields[field_name] = None
            continue
        classified_fields[field_name] = (field, renaming)
        original_field_names_by_new_name.setdefault(renaming.new_field_name, set()).add(
            field_name
        )

    field_name_conflicts = {
        new_field_name: original_field_names
        for new_field_name, original_field_names in original_field_names_by_new_name.items()
        if len(original_field_names) > 1
    }
    if field_name_conflicts:
        raise IdentifierFieldCollisionError(type_.name, field_name_conflicts)
    if classified_fields and not any(classified_fields.values()):
        raise NoFieldsAfterRenamingError(type_.name, set(classified_fields))
    return classified_fields


def _record_renamings(
    type_: GraphQLNamedType,
    classified_fields: Mapping[str, Optional[ClassifiedField]],
    reverse_field_name_map: Dict[str, Dict[str, str]],
    dropped_fields: Dict[str, Set[str]],
) -> None:
    """Add the renamed and dropped fields of the type to the given maps."""
    for field_name, classified_field in classified_fields.items():
        if classified_field is None:
            logger.debug("Dropping field %s of type %s.", field_name, type_.name)
            dropped_fields.setdefault(type_.name, set()).add(field_name)
            continue
        _, renaming = classified_field
        if renaming.source is not IdentifierSource.PASS_THROUGH:
            logger.debug(
                "Renaming field %s of type %s to %s.",
                field_name,
                type_.name,
                renaming.new_field_name,
            )
            reverse_field_name_map.setdefault(type_.name, {})[
                renaming.new_field_name
            ] = renaming.source.original_field_name


def _create_field_specification(
    classified_fields: Mapping[str, Optional[ClassifiedField]],
    new_types: Mapping[str, GraphQLNamedType],
    attach_resolvers: bool,
) -> Callable[[], Dict[str, GraphQLField]]:
    """Return a function that specifies the fields of a rebuilt type.

    The fields reference other types of the new schema, which may not all have been rebuilt yet
    when this is called. Hence the fields are only created when the returned function is called,
    which graphql-core does once the schema is being assembled.
    """

    def field_specification() -> Dict[str, GraphQLField]:
        """Create the fields of the rebuilt type."""
        new_fields: Dict[str, GraphQLField] = {}
        for classified_field in classified_fields.values():
            if classified_field is None:
                continue
            field, renaming = classified_field
            if not attach_resolvers:
                resolve = None
            elif renaming.source is IdentifierSource.PASS_THROUGH:
                resolve = field.resolve
            else:
                resolve = make_identifier_resolver(renaming.source, field.resolve)
            new_fields[renaming.new_field_name] = GraphQLField(
                rewrap_type(field.type, new_types),
                args=field.args,
                resolve=resolve,
                subscribe=field.subscribe,
                description=field.description,
                deprecation_reason=field.deprecation_reason,
                extensions=field.extensions,
                ast_node=field.ast_node,
            )
        return new_fields

    return field_specification


def _create_interface_specification(
    type_: GraphQLNamedType, interface_registry: Mapping[str, GraphQLInterfaceType]
) -> Callable[[], List[GraphQLInterfaceType]]:
    """Return a function that looks up the rebuilt interfaces implemented by the type."""

    def interface_specification() -> List[GraphQLInterfaceType]:
        """Return the rebuilt interfaces implemented by the type."""
        return _get_registered_interfaces(type_, interface_registry)

    return interface_specification


def _get_registered_interfaces(
    type_: GraphQLNamedType, interface_registry: Mapping[str, GraphQLInterfaceType]
) -> List[GraphQLInterfaceType]:
    """Return the rebuilt versions of the interfaces implemented by the type."""
    new_interfaces = []
    for interface in type_.interfaces:
        new_interface = interface_registry.get(interface.name)
        if new_interface is None:
            raise AssertionError(
                f"Type {type_.name} implements interface {interface.name}, which was not found in "
                f"the interface registry. Interfaces must be rebuilt before the types that "
                f"implement them. This is a bug."
            )
        new_interfaces.append(new_interface)
    return new_interfaces


def _build_interface_type(
    interface_type: GraphQLInterfaceType,
    classified_fields: Mapping[str, Optional[ClassifiedField]],
    new_types: Mapping[str, GraphQLNamedType],
    interface_registry: Mapping[str, GraphQLInterfaceType],
) -> GraphQLInterfaceType:
    """Rebuild the interface type with renamed fields. No resolvers are attached to its fields."""
    return GraphQLInterfaceType(
        interface_type.name,
        fields=_create_field_specification(classified_fields, new_types, False),
        # Interfaces may implement other interfaces that have not been registered yet.
        interfaces=_create_interface_specification(interface_type, interface_registry),
        resolve_type=interface_type.resolve_type,
        description=interface_type.description,
        extensions=interface_type.extensions,
        ast_node=interface_type.ast_node,
        extension_ast_nodes=interface_type.extension_ast_nodes,
    )


def _build_object_type(
    object_type: GraphQLObjectType,
    classified_fields: Mapping[str, Optional[ClassifiedField]],
    new_types: Mapping[str, GraphQLNamedType],
    interface_registry: Mapping[str, GraphQLInterfaceType],
) -> GraphQLObjectType:
    """Rebuild the object type with renamed fields, implementing the rebuilt interfaces."""
    return GraphQLObjectType(
        object_type.name,
        _create_field_specification(classified_fields, new_types, True),
        interfaces=_get_registered_interfaces(object_type, interface_registry),
        is_type_of=object_type.is_type_of,
        description=object_type.description,
        extensions=object_type.extensions,
        ast_node=object_type.ast_node,
        extension_ast_nodes=object_type.extension_ast_nodes,
    )


def _build_union_type(
    union_type: GraphQLUnionType, new_types: Mapping[str, GraphQLNamedType]
) -> GraphQLUnionType:
    """Rebuild the union type so that its members are the rebuilt object types."""
    return GraphQLUnionType(
        union_type.name,
        [new_types[member_type.name] for member_type in union_type.types],
        resolve_type=union_type.resolve_type,
        description=union_type.description,
        extensions=union_type.extensions,
        ast_node=union_type.ast_node,
        extension_ast_nodes=union_type.extension_ast_nodes,
    )


def _build_schema(
    schema: GraphQLSchema, new_types: Mapping[str, GraphQLNamedType]
) -> GraphQLSchema:
    """Assemble the new schema, keeping everything but the types of the original schema."""

    def get_new_root_type(root_type: Optional[GraphQLObjectType]) -> Optional[GraphQLNamedType]:
        if root_type is None:
            return None
        return new_types[root_type.name]

    schema_arguments = schema.to_kwargs()
    schema_arguments.update(
        query=get_new_root_type(schema.query_type),
        mutation=get_new_root_type(schema.mutation_type),
        subscription=get_new_root_type(schema.subscription_type),
        types=list(new_types.values()),
    )
    return GraphQLSchema(**schema_arguments)

# Copyright 2019-present Kensho Technologies, LLC.
from typing import Any, Dict, List, Optional, Union

from graphql import (
    GraphQLCompositeType,
    TypeInfo,
    TypeInfoVisitor,
    Visitor,
    get_named_type,
    is_union_type,
    visit,
)
from graphql.language.ast import DocumentNode, FieldNode
from graphql.language.visitor import VisitorAction

from ..ast_manipulation import get_ast_field_name, get_copy_of_field_node_with_new_name
from ..exceptions import GraphQLValidationError
from .rename_identifiers import RenamedIdentifiersDescriptor


# Fields that every type may be queried for. They are never renamed, and are not declared by the
# types they are selected on.
INTROSPECTION_META_FIELD_NAMES = frozenset({"__typename", "__schema", "__type"})


def translate_identifier_query(
    ast: DocumentNode,
    renamed_identifiers_descriptor: RenamedIdentifiersDescriptor,
    preserve_response_keys: bool = False,
) -> DocumentNode:
    """Translate a query against the renamed schema into a query against the original schema.

    Every field whose name was changed when renaming the schema is given back its original name:
    "internalID" becomes "_id" or "id", "gravityID" becomes "id", and "id" becomes "__id",
    depending on which field of the original schema the field was renamed from. All other parts of
    the query, including fragments, variables and directives, are kept as they are.

    The query is not validated. It is expected to be valid against the renamed schema.

    Args:
        ast: represents a query against the renamed schema. It is not modified
        renamed_identifiers_descriptor: namedtuple including the renamed schema, and the
                                        reverse_field_name_map which maps renamed field names
                                        back to their original names for each type
        preserve_response_keys: if True, renamed fields without an alias are aliased with the name
                                they had in the query, so that executing the translated query
                                against the original schema produces the same response keys

    Returns:
        New AST representing the translated query

    Raises:
        - GraphQLValidationError if a field of the query is not declared by the type it is selected
          on, in which case the query is not valid against the renamed schema
    """
    type_info = TypeInfo(renamed_identifiers_descriptor.schema)
    visitor = TypeInfoVisitor(
        type_info,
        TranslateIdentifierQueryVisitor(
            type_info,
            renamed_identifiers_descriptor.reverse_field_name_map,
            preserve_response_keys,
        ),
    )
    return visit(ast, visitor)


def _get_type_with_selectable_fields(type_info: TypeInfo) -> Optional[GraphQLCompositeType]:
    """Return the type that declares the field currently being visited.

    While a field is being entered, TypeInfo already tracks the type of the field itself. That type
    never declares the field: leaf types have no fields at all, union types only have __typename,
    and an object or interface type returned by the field is the scope of the field's own
    selections. The field is declared by the parent type, i.e. the type it was selected on.
    """
    return get_named_type(type_info.get_parent_type())


class TranslateIdentifierQueryVisitor(Visitor):
    def __init__(
        self,
        type_info: TypeInfo,
        reverse_field_name_map: Dict[str, Dict[str, str]],
        preserve_response_keys: bool,
    ) -> None:
        """Create a visitor for translating renamed identifier fields in a query AST.

        Args:
            type_info: tracks the types of the renamed schema while the query AST is visited.
                       It must be the same TypeInfo object that wraps this visitor
            reverse_field_name_map: maps type names to dicts mapping renamed field names to their
                                    names in the original schema. Names not in the dicts are
                                    unchanged
            preserve_response_keys: if True, alias renamed fields with their renamed name
        """
        super().__init__()
        self.type_info = type_info
        self.reverse_field_name_map = reverse_field_name_map
        self.preserve_response_keys = preserve_response_keys

    def enter_field(
        self, node: FieldNode, key: Any, parent: Any, path: List[Any], ancestors: List[Any]
    ) -> Union[FieldNode, VisitorAction]:
        """Give the field its name in the original schema."""
        field_name = get_ast_field_name(node)
        if field_name in INTROSPECTION_META_FIELD_NAMES:
            return None

        current_type = _get_type_with_selectable_fields(self.type_info)
        if current_type is None:
            raise GraphQLValidationError(
                f"Could not determine the type field {field_name} is selected on. The query is not "
                f"valid against the renamed schema."
            )
        if is_union_type(current_type):
            raise GraphQLValidationError(
                f"Field {field_name} is selected on union type {current_type.name}, which does not "
                f"declare any fields other than __typename. The query is not valid against the "
                f"renamed schema."
            )
        if field_name not in current_type.fields:
            raise GraphQLValidationError(
                f"Field {field_name} is not declared by type {current_type.name}. The query is not "
                f"valid against the renamed schema."
            )

        original_field_name = self.reverse_field_name_map.get(current_type.name, {}).get(
            field_name, field_name
        )
        if original_field_name == field_name:  # Name unchanged, continue traversal
            return None
        else:  # Name changed, return new node, `visit` will make shallow copies along path
            return get_copy_of_field_node_with_new_name(
                node, original_field_name, alias_with_old_name=self.preserve_response_keys
            )

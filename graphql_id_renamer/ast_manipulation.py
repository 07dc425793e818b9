# Copyright 2019-present Kensho Technologies, LLC.
from copy import copy

from graphql.error import GraphQLSyntaxError
from graphql.language.ast import DocumentNode, FieldNode, NameNode
from graphql.language.parser import parse

from .exceptions import GraphQLParsingError


def get_ast_field_name(ast):
    """Return the field name for the given AST node."""
    return ast.name.value


def safe_parse_graphql(graphql_string: str) -> DocumentNode:
    """Return an AST representation of the given GraphQL input, reraising GraphQL library errors."""
    try:
        ast = parse(graphql_string)
    except GraphQLSyntaxError as e:
        raise GraphQLParsingError(e) from e

    return ast


def get_copy_of_field_node_with_new_name(
    node: FieldNode, new_name: str, alias_with_old_name: bool = False
) -> FieldNode:
    """Return a field node with new_name as its name and otherwise identical to the input node.

    Args:
        node: field node to make a copy of. It is not modified
        new_name: name to give to the output node
        alias_with_old_name: if True and the node has no alias, alias the copy with the old name
                             so that the response key of the selection stays the same

    Returns:
        field node with new_name as its name and otherwise identical to the input node
    """
    if not isinstance(node, FieldNode):
        raise AssertionError(
            f"Input node {node} of type {type(node).__name__} is not allowed, only FieldNode is "
            f"allowed."
        )
    node_with_new_name = copy(node)  # shallow copy is enough
    node_with_new_name.name = NameNode(value=new_name, loc=node.name.loc)
    if alias_with_old_name and node.alias is None:
        node_with_new_name.alias = NameNode(value=node.name.value, loc=node.name.loc)
    return node_with_new_name

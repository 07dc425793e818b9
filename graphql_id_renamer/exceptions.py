# Copyright 2019-present Kensho Technologies, LLC.
class GraphQLError(Exception):
    """Generic error when processing GraphQL."""


class GraphQLParsingError(GraphQLError):
    """Exception raised when the provided GraphQL string could not be parsed."""


class GraphQLValidationError(GraphQLError):
    """Exception raised when the provided GraphQL does not fit the schema it is translated against.

    Document translation does not validate documents, so this is only raised when the translation
    itself cannot make sense of a selection, e.g. a field that the enclosing type does not declare.
    """

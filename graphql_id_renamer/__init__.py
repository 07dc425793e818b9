# Copyright 2017-present Kensho Technologies, LLC.
"""Commonly-used functions and data types from this package."""
from .exceptions import (  # noqa
    GraphQLError,
    GraphQLParsingError,
    GraphQLValidationError,
)
from .global_utils import Request  # noqa
from .schema_transformation.identifier_renamer import IdentifierRenamer, transform_to_v2  # noqa
from .schema_transformation.rename_identifiers import (  # noqa
    RenamedIdentifiersDescriptor,
    rename_identifiers,
)
from .schema_transformation.translate_query import translate_identifier_query  # noqa
from .schema_transformation.utils import (  # noqa
    AlreadyTransformedError,
    IdentifierFieldCollisionError,
    NoFieldsAfterRenamingError,
    SchemaNotTransformedError,
    SchemaTransformError,
    UnexpectedNullableIdentifierError,
    UnrecognizedIdentifierFieldError,
)


__package_name__ = "graphql-id-renamer"
__version__ = "1.0.0"

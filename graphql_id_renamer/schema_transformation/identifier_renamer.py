# Copyright 2019-present Kensho Technologies, LLC.
from dataclasses import replace
import logging
from threading import Lock
from typing import Optional

from graphql import GraphQLSchema

from ..global_utils import Request
from .rename_identifiers import RenamedIdentifiersDescriptor, rename_identifiers
from .translate_query import translate_identifier_query
from .utils import AlreadyTransformedError, SchemaNotTransformedError


logger = logging.getLogger(__name__)


class IdentifierRenamer:
    """Rename identifier fields of a schema, and translate queries against it back.

    An instance is bound to a single schema: transform_schema is called once, at schema-build
    time, and its result is kept for translating every incoming request with transform_request.
    Translating requests only reads the kept result, so it is safe to do from many threads at once.
    """

    def __init__(self, preserve_response_keys: bool = False) -> None:
        """Create a renamer that has not transformed any schema yet.

        Args:
            preserve_response_keys: if True, translated requests alias every renamed field that
                                    has no alias with its name in the renamed schema, so that the
                                    response keys do not change
        """
        self.preserve_response_keys = preserve_response_keys
        self._descriptor: Optional[RenamedIdentifiersDescriptor] = None
        self._lock = Lock()

    @property
    def renamed_identifiers_descriptor(self) -> RenamedIdentifiersDescriptor:
        """Return the result of transform_schema."""
        descriptor = self._descriptor
        if descriptor is None:
            raise SchemaNotTransformedError(
                "No schema has been transformed yet. Call transform_schema first."
            )
        return descriptor

    @property
    def derived_schema(self) -> GraphQLSchema:
        """Return the schema with renamed identifier fields."""
        return self.renamed_identifiers_descriptor.schema

    def transform_schema(self, schema: GraphQLSchema) -> GraphQLSchema:
        """Return a schema just like the given one, with its identifier fields renamed.

        Args:
            schema: the original schema. It is not modified

        Returns:
            the renamed schema, which is also kept for translating requests

        Raises:
            - AlreadyTransformedError if this renamer already transformed a schema
            - the errors raised by rename_identifiers if the schema's identifier fields cannot be
              renamed
        """
        with self._lock:
            if self._descriptor is not None:
                raise AlreadyTransformedError(
                    "This renamer already transformed a schema, and a renamer can only be used for "
                    "a single schema. Create a new IdentifierRenamer instead."
                )
            descriptor = rename_identifiers(schema)
            self._descriptor = descriptor

        logger.info("Identifier renaming is ready, with %d types.", len(descriptor.schema.type_map))
        return descriptor.schema

    def transform_request(self, request: Request) -> Request:
        """Return the request, with its document translated to the naming of the original schema.

        Args:
            request: request whose document is written against the renamed schema. It is not
                     modified

        Returns:
            a new request, whose document can be executed against the original schema. All other
            attributes of the request are the same as the input's

        Raises:
            - SchemaNotTransformedError if transform_schema has not been called yet
            - GraphQLValidationError if the document selects fields the renamed schema does not have
        """
        new_document = translate_identifier_query(
            request.document,
            self.renamed_identifiers_descriptor,
            preserve_response_keys=self.preserve_response_keys,
        )
        return replace(request, document=new_document)


def transform_to_v2(schema: GraphQLSchema) -> GraphQLSchema:
    """Return the schema with its identifier fields renamed."""
    return IdentifierRenamer().transform_schema(schema)

# Copyright 2017-present Kensho Technologies, LLC.
from dataclasses import dataclass
from typing import Any, Dict, Optional, Type, TypeVar

from graphql import DocumentNode

from .ast_manipulation import safe_parse_graphql


RequestT = TypeVar("RequestT", bound="Request")


@dataclass(frozen=True)
class Request:
    """A query document together with the metadata that travels alongside it.

    Only the document is ever rewritten; the remaining attributes are opaque to this package and
    are passed through untouched.
    """

    document: DocumentNode
    variables: Optional[Dict[str, Any]] = None
    operation_name: Optional[str] = None
    extensions: Optional[Dict[str, Any]] = None

    @classmethod
    def from_query_string(
        cls: Type[RequestT],
        query_string: str,
        variables: Optional[Dict[str, Any]] = None,
        operation_name: Optional[str] = None,
        extensions: Optional[Dict[str, Any]] = None,
    ) -> RequestT:
        """Parse the query string and wrap it, together with its metadata, into a Request."""
        return cls(safe_parse_graphql(query_string), variables, operation_name, extensions)

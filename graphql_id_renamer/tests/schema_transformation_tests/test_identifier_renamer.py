# Copyright 2019-present Kensho Technologies, LLC.
from concurrent.futures import ThreadPoolExecutor
import unittest

from graphql import build_schema, parse
from graphql.language.printer import print_ast

from ...exceptions import GraphQLParsingError
from ...global_utils import Request
from ...schema_transformation.identifier_renamer import IdentifierRenamer, transform_to_v2
from ...schema_transformation.utils import (
    AlreadyTransformedError,
    SchemaNotTransformedError,
    UnrecognizedIdentifierFieldError,
)
from .example_schema import get_v1_schema


class TestIdentifierRenamer(unittest.TestCase):
    def test_transform_schema(self):
        renamer = IdentifierRenamer()
        v2_schema = renamer.transform_schema(get_v1_schema())
        self.assertIs(v2_schema, renamer.derived_schema)
        self.assertIs(v2_schema, renamer.renamed_identifiers_descriptor.schema)
        self.assertEqual(["internalID", "name"], list(v2_schema.get_type("Partner").fields))

    def test_transform_schema_twice(self):
        renamer = IdentifierRenamer()
        v2_schema = renamer.transform_schema(get_v1_schema())
        with self.assertRaises(AlreadyTransformedError):
            renamer.transform_schema(get_v1_schema())
        self.assertIs(v2_schema, renamer.derived_schema)

    def test_failed_transform_keeps_renamer_unused(self):
        renamer = IdentifierRenamer()
        with self.assertRaises(UnrecognizedIdentifierFieldError):
            renamer.transform_schema(
                build_schema("type Foo { id: ID! } type Query { foo: Foo }")
            )
        with self.assertRaises(SchemaNotTransformedError):
            renamer.derived_schema
        renamer.transform_schema(get_v1_schema())

    def test_transform_request_before_transform_schema(self):
        renamer = IdentifierRenamer()
        with self.assertRaises(SchemaNotTransformedError):
            renamer.transform_request(Request.from_query_string("{ partner { internalID } }"))

    def test_transform_request(self):
        renamer = IdentifierRenamer()
        renamer.transform_schema(get_v1_schema())
        variables = {"id": "happy-little-trees"}
        extensions = {"persistedQuery": {"version": 1}}
        request = Request(
            parse(
                "query ArtworkQuery($id: String!) { artwork(id: $id) { id internalID } }"
            ),
            variables=variables,
            operation_name="ArtworkQuery",
            extensions=extensions,
        )

        new_request = renamer.transform_request(request)

        self.assertEqual(
            print_ast(
                parse("query ArtworkQuery($id: String!) { artwork(id: $id) { __id _id } }")
            ),
            print_ast(new_request.document),
        )
        self.assertIs(variables, new_request.variables)
        self.assertEqual("ArtworkQuery", new_request.operation_name)
        self.assertIs(extensions, new_request.extensions)
        # The original request is left as it was.
        self.assertEqual(
            print_ast(
                parse("query ArtworkQuery($id: String!) { artwork(id: $id) { id internalID } }")
            ),
            print_ast(request.document),
        )

    def test_transform_request_preserving_response_keys(self):
        renamer = IdentifierRenamer(preserve_response_keys=True)
        renamer.transform_schema(get_v1_schema())
        new_request = renamer.transform_request(
            Request.from_query_string("{ order { internalID code } }")
        )
        self.assertEqual(
            print_ast(parse("{ order { internalID: id code } }")),
            print_ast(new_request.document),
        )

    def test_concurrent_requests(self):
        renamer = IdentifierRenamer()
        renamer.transform_schema(get_v1_schema())
        requests = [
            Request.from_query_string("{ artwork(id: \"x\") { id gravityID internalID } }"),
            Request.from_query_string("{ partner { internalID } }"),
            Request.from_query_string("{ deprecatedPartner { gravityID } }"),
        ] * 20
        expected_documents = [
            print_ast(parse("{ artwork(id: \"x\") { __id id _id } }")),
            print_ast(parse("{ partner { id } }")),
            print_ast(parse("{ deprecatedPartner { id } }")),
        ] * 20

        with ThreadPoolExecutor(max_workers=8) as executor:
            new_requests = list(executor.map(renamer.transform_request, requests))

        self.assertEqual(
            expected_documents, [print_ast(new_request.document) for new_request in new_requests]
        )

    def test_transform_to_v2(self):
        v2_schema = transform_to_v2(get_v1_schema())
        self.assertEqual(
            ["gravityID", "name"], list(v2_schema.get_type("DoNotUseThisPartner").fields)
        )


class TestRequest(unittest.TestCase):
    def test_from_query_string(self):
        request = Request.from_query_string("{ partner { internalID } }", {"a": 1}, "Op")
        self.assertEqual(
            print_ast(parse("{ partner { internalID } }")), print_ast(request.document)
        )
        self.assertEqual({"a": 1}, request.variables)
        self.assertEqual("Op", request.operation_name)
        self.assertIsNone(request.extensions)

    def test_from_query_string_with_extensions(self):
        extensions = {"persistedQuery": {"version": 1}}
        request = Request.from_query_string(
            "{ partner { internalID } }", operation_name="Op", extensions=extensions
        )
        self.assertIsNone(request.variables)
        self.assertEqual("Op", request.operation_name)
        self.assertIs(extensions, request.extensions)

    def test_from_invalid_query_string(self):
        with self.assertRaises(GraphQLParsingError):
            Request.from_query_string("{ partner { internalID }")

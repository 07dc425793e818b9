# Copyright 2019-present Kensho Technologies, LLC.
import unittest

from graphql import graphql_sync, parse
from graphql.language.printer import print_ast

from ...exceptions import GraphQLValidationError
from ...schema_transformation.rename_identifiers import rename_identifiers
from ...schema_transformation.translate_query import translate_identifier_query
from .example_schema import ROOT_VALUE, get_v1_schema


class TestTranslateIdentifierQuery(unittest.TestCase):
    def setUp(self):
        self.v1_schema = get_v1_schema()
        self.descriptor = rename_identifiers(self.v1_schema)

    def assert_translation(self, query_string, expected_query_string, **kwargs):
        translated_ast = translate_identifier_query(parse(query_string), self.descriptor, **kwargs)
        self.assertEqual(print_ast(parse(expected_query_string)), print_ast(translated_ast))

    def test_no_identifier_fields(self):
        query_string = """
            {
              artwork(id: "happy-little-trees") {
                title
                artist {
                  name
                }
              }
            }
        """
        self.assert_translation(query_string, query_string)

    def test_identifier_fields(self):
        self.assert_translation(
            """
            {
              artwork(id: "happy-little-trees") {
                id
                gravityID
                internalID
                images {
                  internalID
                }
              }
            }
            """,
            """
            {
              artwork(id: "happy-little-trees") {
                __id
                id
                _id
                images {
                  id
                }
              }
            }
            """,
        )

    def test_internal_id_from_underscore_id_is_never_translated_to_id(self):
        self.assert_translation(
            "{ artwork(id: \"x\") { internalID artist { internalID } } }",
            "{ artwork(id: \"x\") { _id artist { _id } } }",
        )

    def test_internal_id_from_id(self):
        self.assert_translation(
            "{ partner { internalID } order { internalID } collection { internalID } }",
            "{ partner { id } order { id } collection { id } }",
        )

    def test_gravity_id_from_deprecated_partner(self):
        self.assert_translation(
            "{ deprecatedPartner { gravityID name } }",
            "{ deprecatedPartner { id name } }",
        )

    def test_arguments_and_input_fields_are_unchanged(self):
        query_string = """
            mutation UpdateArtwork($title: String) {
              updateArtwork(input: {id: "happy-little-trees", title: $title}) {
                title
              }
            }
        """
        self.assert_translation(query_string, query_string)

    def test_aliases_and_directives_are_kept(self):
        self.assert_translation(
            """
            query ArtworkQuery($withArtist: Boolean!) {
              work: artwork(id: "x") {
                slug: gravityID
                artist @include(if: $withArtist) {
                  key: internalID @skip(if: false)
                }
              }
            }
            """,
            """
            query ArtworkQuery($withArtist: Boolean!) {
              work: artwork(id: "x") {
                slug: id
                artist @include(if: $withArtist) {
                  key: _id @skip(if: false)
                }
              }
            }
            """,
        )

    def test_fragments(self):
        self.assert_translation(
            """
            query {
              artworks {
                ...ArtworkIdentifiers
              }
            }

            fragment ArtworkIdentifiers on Artwork {
              id
              internalID
              artist {
                gravityID
              }
            }
            """,
            """
            query {
              artworks {
                ...ArtworkIdentifiers
              }
            }

            fragment ArtworkIdentifiers on Artwork {
              __id
              _id
              artist {
                id
              }
            }
            """,
        )

    def test_inline_fragments_on_union(self):
        self.assert_translation(
            """
            {
              search(term: "trees") {
                __typename
                ... on Artwork {
                  internalID
                  title
                }
                ... on Artist {
                  gravityID
                }
              }
            }
            """,
            """
            {
              search(term: "trees") {
                __typename
                ... on Artwork {
                  _id
                  title
                }
                ... on Artist {
                  id
                }
              }
            }
            """,
        )

    def test_interface_fields(self):
        self.assert_translation(
            """
            {
              artwork(id: "x") {
                ... on Node {
                  id
                }
                ... on Sellable {
                  gravityID
                  internalID
                  price
                }
              }
            }
            """,
            """
            {
              artwork(id: "x") {
                ... on Node {
                  __id
                }
                ... on Sellable {
                  id
                  _id
                  price
                }
              }
            }
            """,
        )

    def test_typename_is_never_translated(self):
        query_string = """
            {
              __typename
              artwork(id: "x") {
                __typename
                artist {
                  __typename
                }
              }
            }
        """
        self.assert_translation(query_string, query_string)

    def test_introspection_query_is_unchanged(self):
        query_string = """
            {
              __schema {
                types {
                  name
                  fields {
                    name
                  }
                }
              }
              __type(name: "Artwork") {
                name
              }
            }
        """
        self.assert_translation(query_string, query_string)

    def test_preserve_response_keys(self):
        self.assert_translation(
            """
            {
              artwork(id: "x") {
                id
                slug: gravityID
                internalID
                title
              }
            }
            """,
            """
            {
              artwork(id: "x") {
                id: __id
                slug: id
                internalID: _id
                title
              }
            }
            """,
            preserve_response_keys=True,
        )

    def test_original_unmodified(self):
        query_string = "{ artwork(id: \"x\") { id internalID artist { gravityID } } }"
        ast = parse(query_string)
        translate_identifier_query(ast, self.descriptor)
        self.assertEqual(print_ast(parse(query_string)), print_ast(ast))

    def test_undeclared_field(self):
        with self.assertRaises(GraphQLValidationError):
            translate_identifier_query(
                parse("{ artwork(id: \"x\") { _id } }"), self.descriptor
            )

        with self.assertRaises(GraphQLValidationError):
            translate_identifier_query(parse("{ nonexistent { internalID } }"), self.descriptor)

    def test_field_on_union(self):
        with self.assertRaises(GraphQLValidationError):
            translate_identifier_query(parse("{ search { internalID } }"), self.descriptor)

    def test_dropped_field(self):
        with self.assertRaises(GraphQLValidationError):
            translate_identifier_query(
                parse("{ artwork(id: \"x\") { highestBid { id } } }"), self.descriptor
            )

    def test_translated_query_returns_same_values(self):
        query_string = """
            {
              artwork(id: "happy-little-trees") {
                id
                gravityID
                internalID
                artist {
                  id
                  internalID
                }
                images {
                  internalID
                }
              }
              partner {
                internalID
              }
              order {
                internalID
              }
            }
        """
        v2_result = graphql_sync(self.descriptor.schema, query_string, root_value=ROOT_VALUE)
        self.assertIsNone(v2_result.errors)

        translated_ast = translate_identifier_query(
            parse(query_string), self.descriptor, preserve_response_keys=True
        )
        v1_result = graphql_sync(self.v1_schema, print_ast(translated_ast), root_value=ROOT_VALUE)
        self.assertIsNone(v1_result.errors)

        self.assertEqual(v2_result.data, v1_result.data)
        self.assertEqual("5e6a4d4c1c2e6f000f8a1b2c", v1_result.data["artwork"]["internalID"])

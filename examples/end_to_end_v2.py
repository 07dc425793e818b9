from graphql import build_schema, graphql_sync, print_ast

from graphql_id_renamer import IdentifierRenamer, Request


V1_SCHEMA_TEXT = """
type Artwork {
  __id: ID!

  "A slug ID."
  id: ID!

  _id: ID!
  title: String
}

type Query {
  artwork(id: String!): Artwork
}
"""

# Build the original schema. It has "__id" fields, which GraphQL reserves, so skip validating it.
v1_schema = build_schema(V1_SCHEMA_TEXT, assume_valid=True)

# Rename its identifier fields, once, when the server starts.
renamer = IdentifierRenamer(preserve_response_keys=True)
v2_schema = renamer.transform_schema(v1_schema)

# Translate every incoming request written against the renamed schema.
request = Request.from_query_string(
    """
    query ArtworkQuery($id: String!) {
        artwork(id: $id) {
            internalID
            gravityID
            title
        }
    }
    """,
    variables={"id": "happy-little-trees"},
    operation_name="ArtworkQuery",
)
v1_request = renamer.transform_request(request)

# Execute the translated request against the original schema.
result = graphql_sync(
    v1_schema,
    print_ast(v1_request.document),
    variable_values=v1_request.variables,
    operation_name=v1_request.operation_name,
    root_value={
        "artwork": lambda info, id: {
            "__id": "QXJ0d29yazpoYXBweS1saXR0bGUtdHJlZXM=",
            "id": id,
            "_id": "5e6a4d4c1c2e6f000f8a1b2c",
            "title": "Happy Little Trees",
        }
    },
)

"""GraphQL schema, resolvers and sub-query reprojection."""

from .builder import SchemaBuilder, build_schema
from .crossref import CrossRefResolver
from .reprojection import get_field_sub_query, get_sub_query, parse_selections

__all__ = [
    "SchemaBuilder",
    "build_schema",
    "CrossRefResolver",
    "get_field_sub_query",
    "get_sub_query",
    "parse_selections",
]

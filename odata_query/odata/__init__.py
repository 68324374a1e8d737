"""
odata_query.odata - Query builders and results
===============================================

- Query, CollectionQuery: fluent builders ending in an awaited fetch()
- QueryOptions, CollectionQueryOptions: method, body and conversion function
- ExpandQueryField, OrderByField: fragment descriptors
- ODataResponse, ODataCollectionResponse: immutable fetch results

"""

from odata_query.odata.options import QueryOptions, CollectionQueryOptions
from odata_query.odata.fields import ExpandQueryField, OrderByField, OrderDirection
from odata_query.odata.query import QueryBase, Query, CollectionQuery, build_url
from odata_query.odata.result import ODataResponse, ODataCollectionResponse, RequestSnapshot


def escape_odata_literal(value: str) -> str:
    """
    Escape a string value for use in OData $filter expressions.

    Examples
    --------
    >>> escape_odata_literal("O'Brien")
    "O''Brien"
    """
    return value.replace("'", "''")


__all__ = [
    "QueryOptions",
    "CollectionQueryOptions",
    "ExpandQueryField",
    "OrderByField",
    "OrderDirection",
    "QueryBase",
    "Query",
    "CollectionQuery",
    "build_url",
    "ODataResponse",
    "ODataCollectionResponse",
    "RequestSnapshot",
    "escape_odata_literal",
]

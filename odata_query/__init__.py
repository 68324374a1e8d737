"""
OData Query Builder (odata_query)
=================================

Fluent, typed query builders for OData services.

Usage
-----
>>> from odata_query import ConnectionContext, CollectionQueryOptions, OrderByField
>>>
>>> with ConnectionContext(base_url="services.odata.org/V4/TripPinService") as conn:
...     people = (
...         conn.collection("People")
...         .select("UserName,FirstName,LastName")
...         .filter("FirstName eq 'Scott'")
...         .top(10)
...         .count()
...     )
...     response = await people.fetch()
...     print(response.status_code, response.count, response.data)

Subpackages
-----------
- odata_query.core: Transport, configuration and errors
- odata_query.odata: Query builders, fragment descriptors and results

"""

__version__ = "0.1.0"

from odata_query.core import (
    ODataError,
    ODataValidationError,
    ODataTransportError,
    Transport,
    TransportConfig,
    TransportResponse,
    RequestsTransport,
    ConnectionContext,
)

from odata_query.odata import (
    QueryOptions,
    CollectionQueryOptions,
    ExpandQueryField,
    OrderByField,
    OrderDirection,
    QueryBase,
    Query,
    CollectionQuery,
    ODataResponse,
    ODataCollectionResponse,
    RequestSnapshot,
    escape_odata_literal,
)

__all__ = [
    "__version__",
    # Core
    "ODataError",
    "ODataValidationError",
    "ODataTransportError",
    "Transport",
    "TransportConfig",
    "TransportResponse",
    "RequestsTransport",
    "ConnectionContext",
    # OData
    "QueryOptions",
    "CollectionQueryOptions",
    "ExpandQueryField",
    "OrderByField",
    "OrderDirection",
    "QueryBase",
    "Query",
    "CollectionQuery",
    "ODataResponse",
    "ODataCollectionResponse",
    "RequestSnapshot",
    "escape_odata_literal",
]

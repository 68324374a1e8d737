"""
odata_query.core - Transport, configuration and errors
=======================================================

- ODataError, ODataValidationError, ODataTransportError: exception hierarchy
- Transport, TransportResponse: the interface queries send requests through
- TransportConfig, RequestsTransport: default requests-based transport
- ConnectionContext: env-driven connection manager and query factory

"""

from odata_query.core.errors import (
    ODataError,
    ODataValidationError,
    ODataTransportError,
)

from odata_query.core.session import (
    Transport,
    TransportConfig,
    TransportResponse,
    RequestsTransport,
)

from odata_query.core.connection import ConnectionContext

__all__ = [
    "ODataError",
    "ODataValidationError",
    "ODataTransportError",
    "Transport",
    "TransportConfig",
    "TransportResponse",
    "RequestsTransport",
    "ConnectionContext",
]

"""
odata_query.core.connection - High-level connection management
===============================================================

Provides a hana_ml-style ConnectionContext that holds the service host,
credentials and a shared transport, and hands out query builders.
"""

from __future__ import annotations

import os
from typing import TYPE_CHECKING, Optional, Union

from dotenv import load_dotenv

from odata_query.core.session import RequestsTransport, Transport, TransportConfig

if TYPE_CHECKING:
    from odata_query.odata.options import CollectionQueryOptions, QueryOptions
    from odata_query.odata.query import CollectionQuery, Query


class ConnectionContext:
    """
    High-level connection manager for an OData service.

    Parameters
    ----------
    base_url : str, optional
        Service host (with optional port and path prefix). Falls back to
        ODATA_BASE_URL env var.
    bearer_token : str, optional
        Bearer token for OAuth. Falls back to ODATA_BEARER_TOKEN env var.
    cookie : str, optional
        Raw Cookie header value. Falls back to ODATA_COOKIE env var.
    verify : bool, optional
        SSL verification. Falls back to ODATA_VERIFY_TLS env var.
    timeout : float, optional
        Request timeout in seconds. Falls back to ODATA_TIMEOUT env var, then 60.
    transport : Transport, optional
        Use this transport instead of building a RequestsTransport.

    Examples
    --------
    >>> with ConnectionContext(base_url="services.odata.org/V4/TripPinService") as conn:
    ...     people = conn.collection("People").top(5)
    ...     response = await people.fetch()

    >>> conn = ConnectionContext.from_env()  # reads .env, then ODATA_* vars
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        bearer_token: Optional[str] = None,
        cookie: Optional[str] = None,
        verify: Optional[bool] = None,
        timeout: Optional[float] = None,
        transport: Optional[Transport] = None,
    ) -> None:
        self._base_url = (base_url or os.environ.get("ODATA_BASE_URL", "")).strip().rstrip("/")
        self._bearer_token = bearer_token or os.environ.get("ODATA_BEARER_TOKEN") or None
        self._cookie = cookie or os.environ.get("ODATA_COOKIE") or None

        if verify is not None:
            self._verify = verify
        else:
            self._verify = os.environ.get("ODATA_VERIFY_TLS", "true").lower() != "false"

        if timeout is not None:
            self._timeout = float(timeout)
        else:
            self._timeout = float(os.environ.get("ODATA_TIMEOUT", "60"))

        if not self._base_url:
            raise ValueError(
                "Missing base_url. Set ODATA_BASE_URL environment variable "
                "or pass base_url parameter."
            )

        self._owns_transport = transport is None
        self._transport: Optional[Transport] = transport

    @classmethod
    def from_env(cls, env_file: Optional[Union[str, os.PathLike]] = None, **kwargs) -> "ConnectionContext":
        """Load a .env file (if any) and build a context from ODATA_* variables."""
        load_dotenv(env_file)
        return cls(**kwargs)

    @property
    def transport(self) -> Transport:
        """Get or create the shared transport."""
        if self._transport is None:
            self._transport = RequestsTransport(
                TransportConfig(timeout=self._timeout, verify=self._verify)
            )
        return self._transport

    def close(self) -> None:
        """Close the transport if this context created it."""
        if self._owns_transport and isinstance(self._transport, RequestsTransport):
            self._transport.close()
            self._transport = None

    def __enter__(self) -> "ConnectionContext":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def query(self, path: str, options: Optional["QueryOptions"] = None) -> "Query":
        """
        Start a single-entity query on this connection.

        Parameters
        ----------
        path : str
            Resource path relative to base_url, e.g. "People('russellwhyte')"
        options : QueryOptions, optional
            Method, body and conversion function
        """
        from odata_query.odata.query import Query
        return Query(
            self._base_url,
            path,
            options=options,
            transport=self.transport,
            cookie=self._cookie,
            bearer=self._bearer_token,
        )

    def collection(self, path: str, options: Optional["CollectionQueryOptions"] = None) -> "CollectionQuery":
        """Start a collection query on this connection."""
        from odata_query.odata.query import CollectionQuery
        return CollectionQuery(
            self._base_url,
            path,
            options=options,
            transport=self.transport,
            cookie=self._cookie,
            bearer=self._bearer_token,
        )

    @property
    def base_url(self) -> str:
        """The configured base URL."""
        return self._base_url

    @property
    def verify(self) -> bool:
        return self._verify

    @property
    def timeout(self) -> float:
        return self._timeout

"""
odata_query.odata.query - Fluent OData query builders
======================================================

Query targets a single entity, CollectionQuery an entity set. Both
accumulate fragments through chainable mutators and finish with an awaited
``fetch()`` that returns a typed response snapshot.

Mutators change the query in place and return it, so every variable bound to
the same query sees the change. A query must not be mutated from another task
while one of its fetches is in flight; each fetch reads the fragments at the
moment it is called.
"""

from __future__ import annotations

import json
import logging
import re
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Iterable, List, Optional, TypeVar, Union
from urllib.parse import quote, urlencode, urlunsplit

from odata_query.core.errors import ODataTransportError
from odata_query.core.session import Body, RequestsTransport, Transport, TransportResponse
from odata_query.odata.fields import ExpandQueryField, OrderByField
from odata_query.odata.fragments import CollectionFragments, EntityFragments
from odata_query.odata.options import CollectionQueryOptions, QueryOptions
from odata_query.odata.result import ODataCollectionResponse, ODataResponse, RequestSnapshot

logger = logging.getLogger("odata_query.query")

Q = TypeVar("Q", bound="Query")
C = TypeVar("C", bound="CollectionQuery")
QB = TypeVar("QB", bound="QueryBase")

_QUERY_SAFE = "$,'()*;=:/@"
_PATH_SAFE = "/$,'()=:@-_.~"
_SCHEME = re.compile(r"^[A-Za-z][A-Za-z0-9+.-]*://")


def build_url(base_url: str, path: str, params: Dict[str, str]) -> str:
    """
    Build an https URL from a host, a path and already assembled parameters.

    ``base_url`` may carry a port and a path prefix; any scheme it carries is
    replaced with https.

    Examples
    --------
    >>> build_url("services.odata.org/V4", "TripPinService/People", {"$top": "2"})
    'https://services.odata.org/V4/TripPinService/People?$top=2'
    """
    host = _SCHEME.sub("", base_url.strip()).rstrip("/")
    netloc, _, prefix = host.partition("/")

    full_path = ""
    if prefix:
        full_path += "/" + prefix.strip("/")
    if path:
        full_path += "/" + path.lstrip("/")

    query = urlencode(params, quote_via=quote, safe=_QUERY_SAFE)
    return urlunsplit(("https", netloc, quote(full_path, safe=_PATH_SAFE), query, ""))


def serialize_body(value: Any) -> Body:
    """Render a request body value into what the transport sends."""
    if value is None:
        return None
    if isinstance(value, (str, bytes)):
        return value
    return json.dumps(value, separators=(",", ":"))


_NOT_JSON = object()


def _decode_json(text: str) -> Any:
    try:
        return json.loads(text)
    except (ValueError, RecursionError):
        return _NOT_JSON


def _apply(convert: Callable[[Any], Any], payload: Any, url: str, status: int) -> Optional[Any]:
    try:
        return convert(payload)
    except Exception:
        logger.warning("Conversion failed for %s (status %s)", url, status, exc_info=True)
        return None


class QueryBase(ABC):
    """
    Shared capability of every buildable query: assemble parameters, fetch.

    Parameters
    ----------
    base_url : str
        Service host, optionally with port and path prefix
    path : str
        Resource path. Full URL will be ``https://{base_url}/{path}``
    transport : Transport, optional
        Sends the request. If none is given, a RequestsTransport is created on
        first fetch and owned by the query; release it with close() or by
        using the query as a context manager.
    cookie : str, optional
        Sent verbatim as the ``Cookie`` header
    bearer : str, optional
        Sent as ``Authorization: Bearer <bearer>``
    """

    def __init__(
        self,
        base_url: str,
        path: str,
        *,
        transport: Optional[Transport] = None,
        cookie: Optional[str] = None,
        bearer: Optional[str] = None,
    ) -> None:
        self.base_url = base_url
        self.path = path
        self.cookie = cookie
        self.bearer = bearer
        self._owns_transport = transport is None
        self._transport = transport

    @property
    def transport(self) -> Transport:
        if self._transport is None:
            self._transport = RequestsTransport()
        return self._transport

    def close(self) -> None:
        """Close the transport if this query created it."""
        if self._owns_transport and isinstance(self._transport, RequestsTransport):
            self._transport.close()
            self._transport = None

    def __enter__(self: QB) -> QB:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @property
    def headers(self) -> Dict[str, str]:
        value: Dict[str, str] = {}

        if self.cookie is not None:
            value["Cookie"] = self.cookie
        if self.bearer is not None:
            value["Authorization"] = f"Bearer {self.bearer}"

        value["Accept-Charset"] = "utf-8"
        value["Content-Type"] = "application/json;odata=verbose"

        return value

    @property
    def url(self) -> str:
        """The URL the next fetch would request."""
        return build_url(self.base_url, self.path, self.queries())

    @abstractmethod
    def queries(self) -> Dict[str, str]:
        """Assemble the current fragments into OData query parameters."""

    @abstractmethod
    async def fetch(self) -> Optional[ODataResponse]:
        """Send the request and wrap the parsed result."""


class Query(QueryBase):
    """
    Fluent builder for a single-entity OData request.

    Parameters
    ----------
    base_url, path, transport, cookie, bearer
        See QueryBase
    options : QueryOptions, optional
        Method, body and conversion function

    Examples
    --------
    >>> query = (
    ...     Query(base_url="services.odata.org", path="/V4/TripPinService/People('russellwhyte')",
    ...           options=QueryOptions(convert=Person.from_json))
    ...     .select("UserName,FirstName,LastName")
    ...     .expand(ExpandQueryField("Trips"))
    ... )
    >>> response = await query.fetch()
    >>> response.status_code, response.data
    """

    def __init__(
        self,
        base_url: str,
        path: str,
        *,
        options: Optional[QueryOptions] = None,
        transport: Optional[Transport] = None,
        cookie: Optional[str] = None,
        bearer: Optional[str] = None,
    ) -> None:
        super().__init__(base_url, path, transport=transport, cookie=cookie, bearer=bearer)
        self.options = options if options is not None else QueryOptions()
        self._fragments = EntityFragments()

    # ---------------- fragments ----------------

    def select(self: Q, fields: str) -> Q:
        """
        Select fields from a comma separated list, e.g. ``"oid,name,code"``.

        Raises
        ------
        ODataValidationError
            If select_all() was called before, or ``fields`` holds anything
            other than letters, digits, underscores and commas
        """
        self._fragments.add_select_csv(fields)
        return self

    def select_list(self: Q, fields: Iterable[str]) -> Q:
        """Select already split field names. Same rules as select()."""
        self._fragments.add_select(fields)
        return self

    def select_all(self: Q) -> Q:
        """Request every field (``$select=*``)."""
        self._fragments.select_all = True
        return self

    def filter(self: Q, expression: str) -> Q:
        """Add a raw ``$filter`` expression; repeating one has no effect."""
        self._fragments.add_filter(expression)
        return self

    def expand(self: Q, expand_query_field: Union[ExpandQueryField, str]) -> Q:
        if isinstance(expand_query_field, str):
            expand_query_field = ExpandQueryField(expand_query_field)
        self._fragments.add_expand(expand_query_field)
        return self

    def queries(self) -> Dict[str, str]:
        return self._fragments.to_params()

    # ---------------- fetch ----------------

    def _convert_payload(self, payload: Any) -> Any:
        return self.options.convert(payload)

    def _build_response(self, **fields: Any) -> ODataResponse:
        return ODataResponse(**fields)

    async def fetch(self) -> Optional[ODataResponse]:
        """
        Send the request and return the parsed response.

        A body that is not JSON yields ``json == {}`` and ``data is None``; a
        failing conversion yields ``data is None`` with ``json`` kept. Non-2xx
        statuses are returned untouched. Returns ``None`` only when the
        transport could not produce a response at all.
        """
        method = self.options.method
        params = self.queries()
        url = build_url(self.base_url, self.path, params)
        headers = self.headers
        body = serialize_body(self.options.request_body)

        request = RequestSnapshot(method=method, url=url, headers=headers, body=body)
        logger.debug("Dispatching %s %s", method, url)

        try:
            r: TransportResponse = await self.transport.send(method, url, headers, body)
        except ODataTransportError as exc:
            logger.warning("No response for %s %s: %s", method, url, exc.reason)
            return None

        payload = _decode_json(r.text)
        if payload is _NOT_JSON:
            logger.warning("Response body of %s (status %s) is not JSON", url, r.status_code)
            decoded: Dict[str, Any] = {}
            data = None
        else:
            decoded = payload if isinstance(payload, dict) else {}
            data = _apply(self._convert_payload, payload, url, r.status_code)

        return self._build_response(
            uri=url,
            request=request,
            response=r,
            query=self,
            json=decoded,
            data=data,
            status_code=r.status_code,
            context=decoded.get("@odata.context"),
        )


def _as_count(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.isdigit():
        return int(value)
    return None


class CollectionQuery(Query):
    """
    Fluent builder for an entity-set request with paging, count and search.

    Ordering descriptors can be added with orderby() and read back through
    ``orderings``, but they are not sent as a query parameter.

    Examples
    --------
    >>> people = (
    ...     CollectionQuery(base_url="services.odata.org", path="/V4/TripPinService/People",
    ...                     options=CollectionQueryOptions(convert=lambda v: [Person.from_json(p) for p in v]))
    ...     .select("UserName,FirstName")
    ...     .filter("FirstName eq 'Scott'")
    ...     .skip_and_top(skip=0, top=20)
    ...     .count()
    ... )
    >>> response = await people.fetch()
    >>> response.count, len(response.data)
    """

    def __init__(
        self,
        base_url: str,
        path: str,
        *,
        options: Optional[CollectionQueryOptions] = None,
        transport: Optional[Transport] = None,
        cookie: Optional[str] = None,
        bearer: Optional[str] = None,
    ) -> None:
        super().__init__(
            base_url,
            path,
            options=options if options is not None else CollectionQueryOptions(),
            transport=transport,
            cookie=cookie,
            bearer=bearer,
        )
        self._collection = CollectionFragments()

    def top(self: C, i: int) -> C:
        self._collection.set_top(i)
        return self

    def skip(self: C, i: int) -> C:
        self._collection.set_skip(i)
        return self

    def skip_and_top(self: C, *, skip: int, top: int) -> C:
        """Set ``$skip`` and ``$top`` together; nothing changes if either is negative."""
        self._collection.set_skip_and_top(skip, top)
        return self

    def count(self: C) -> C:
        self._collection.count = True
        return self

    def orderby(self: C, order_by_field: OrderByField) -> C:
        self._collection.add_orderby(order_by_field)
        return self

    def search(self: C, search_query: str) -> C:
        self._collection.search = search_query
        return self

    @property
    def orderings(self) -> List[OrderByField]:
        return self._collection.orderings()

    def queries(self) -> Dict[str, str]:
        value = super().queries()
        value.update(self._collection.to_params())
        return value

    def _convert_payload(self, payload: Any) -> Any:
        return self.options.convert(payload["value"])

    def _build_response(self, **fields: Any) -> ODataCollectionResponse:
        return ODataCollectionResponse(count=_as_count(fields["json"].get("@odata.count")), **fields)

    async def fetch(self) -> Optional[ODataCollectionResponse]:
        return await super().fetch()  # type: ignore[return-value]

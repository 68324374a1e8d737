"""
odata_query.odata.result - Fetch results
=========================================

Immutable snapshots produced once per fetch. ``data`` is ``None`` when the
body was not JSON or the conversion function failed; ``json`` is empty only
in the former case.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, Generic, Optional, Sequence, TypeVar

from odata_query.core.session import TransportResponse

if TYPE_CHECKING:
    from odata_query.odata.query import QueryBase

T = TypeVar("T")


@dataclass(frozen=True)
class RequestSnapshot:
    """The request exactly as it was handed to the transport."""
    method: str
    url: str
    headers: Dict[str, str] = field(default_factory=dict)
    body: Optional[Any] = None


@dataclass(frozen=True)
class ODataResponse(Generic[T]):
    """
    Result of a single-entity fetch.

    Attributes
    ----------
    uri : str
        Final request URL
    request : RequestSnapshot
        Echo of the outgoing request
    response : TransportResponse
        Raw status, headers and body text
    query : QueryBase
        The query that issued the request
    json : dict
        Decoded body, ``{}`` if the body was not a JSON object
    data : T or None
        Converted payload, ``None`` on decode or conversion failure
    status_code : int
        HTTP status code
    context : str or None
        The ``@odata.context`` value, if present
    """
    uri: str
    request: RequestSnapshot
    response: TransportResponse
    query: "QueryBase"
    json: Dict[str, Any]
    data: Optional[T]
    status_code: int
    context: Optional[str] = None

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


@dataclass(frozen=True)
class ODataCollectionResponse(ODataResponse[Sequence[T]]):
    """
    Result of a collection fetch.

    ``data`` holds the converted ``value`` array and ``count`` the
    ``@odata.count`` value when the service returned one.
    """
    count: Optional[int] = None

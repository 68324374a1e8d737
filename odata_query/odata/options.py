"""
odata_query.odata.options - Per-query request options
======================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Generic, List, Sequence, TypeVar

T = TypeVar("T")


def _identity(value: Any) -> Any:
    return value


def _as_tuple(values: List[Any]) -> Sequence[Any]:
    return tuple(values)


@dataclass(frozen=True)
class QueryOptions(Generic[T]):
    """
    Immutable options for a single-entity query.

    Parameters
    ----------
    method : str
        HTTP method (default: "GET")
    request_body : any
        Value sent as the request body. ``None`` sends no body, ``str`` and
        ``bytes`` are sent as-is, anything else is serialized to JSON.
    convert : callable
        Turns the decoded JSON payload into a typed value. May raise; a
        failure leaves the response's ``data`` empty.

    Examples
    --------
    >>> opts = QueryOptions(convert=lambda j: Person(**j))
    """
    method: str = "GET"
    request_body: Any = None
    convert: Callable[[Any], T] = _identity


@dataclass(frozen=True)
class CollectionQueryOptions(Generic[T]):
    """
    Immutable options for a collection query.

    ``convert`` receives the ``value`` array of the payload and returns the
    converted sequence. The default returns the raw items as a tuple.
    """
    method: str = "GET"
    request_body: Any = None
    convert: Callable[[List[Any]], Sequence[T]] = _as_tuple

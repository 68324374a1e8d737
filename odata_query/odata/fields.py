"""
odata_query.odata.fields - Query fragment descriptors
======================================================

Small hashable values describing one $expand target or one ordering.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from odata_query.odata.query import QueryBase


class OrderDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


@dataclass(frozen=True)
class ExpandQueryField:
    """
    One $expand target, optionally carrying nested query options.

    Parameters
    ----------
    field : str
        Navigation property name
    query : QueryBase, optional
        Query whose assembled parameters are applied to the expanded entity

    Examples
    --------
    >>> str(ExpandQueryField("Trips"))
    'Trips'
    >>> nested = CollectionQuery(base_url="h", path="/").select("Name").top(2)
    >>> str(ExpandQueryField("Trips", nested))
    'Trips($select=Name;$top=2)'
    """
    field: str
    query: Optional["QueryBase"] = None

    def __str__(self) -> str:
        if self.query is None:
            return self.field
        nested = self.query.queries()
        if not nested:
            return self.field
        options = ";".join(f"{key}={value}" for key, value in nested.items())
        return f"{self.field}({options})"


@dataclass(frozen=True)
class OrderByField:
    """One ordering: a field name and a direction."""
    field: str
    direction: OrderDirection = OrderDirection.ASC

    def __str__(self) -> str:
        return f"{self.field} {OrderDirection(self.direction).value}"

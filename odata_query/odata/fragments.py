"""
odata_query.odata.fragments - Accumulated query intent
=======================================================

Fragment state for entity and collection queries, and the assembly of that
state into OData query parameters. Sets are dict-backed so that they
deduplicate while keeping insertion order.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from odata_query.core.errors import ODataValidationError
from odata_query.odata.fields import ExpandQueryField, OrderByField

_SELECT_CSV = re.compile(r"[A-Za-z_0-9,]*")
_FIELD_NAME = re.compile(r"[A-Za-z_0-9]+")

SELECT_ALL_CONFLICT = "Defining fields to select when 'selectAll' is enabled is useless"


def _union(current: Dict, items: Iterable) -> None:
    for item in items:
        current.setdefault(item, None)


@dataclass
class EntityFragments:
    """$filter / $expand / $select state shared by every query."""
    filter: Dict[str, None] = field(default_factory=dict)
    expand: Dict[ExpandQueryField, None] = field(default_factory=dict)
    select: Dict[str, None] = field(default_factory=dict)
    select_all: bool = False

    def add_select_csv(self, fields: str) -> None:
        if self.select_all:
            raise ODataValidationError(SELECT_ALL_CONFLICT, "$select")
        if not isinstance(fields, str) or not _SELECT_CSV.fullmatch(fields):
            raise ODataValidationError(
                "select fields can only have letters, numbers and underscore", "$select"
            )
        self.add_select([name for name in fields.split(",") if name])

    def add_select(self, fields: Iterable[str]) -> None:
        if self.select_all:
            raise ODataValidationError(SELECT_ALL_CONFLICT, "$select")
        names = list(fields)
        for name in names:
            if not isinstance(name, str) or not _FIELD_NAME.fullmatch(name):
                raise ODataValidationError(
                    f"invalid select field {name!r}: only letters, numbers and underscore",
                    "$select",
                )
        _union(self.select, names)

    def add_filter(self, expression: str) -> None:
        _union(self.filter, [expression])

    def add_expand(self, descriptor: ExpandQueryField) -> None:
        _union(self.expand, [descriptor])

    def to_params(self) -> Dict[str, str]:
        value: Dict[str, str] = {}

        if self.filter:
            value["$filter"] = ",".join(self.filter)

        if self.expand:
            value["$expand"] = ",".join(str(e) for e in self.expand)

        if self.select_all:
            value["$select"] = "*"
        elif self.select:
            value["$select"] = ",".join(self.select)

        return value


@dataclass
class CollectionFragments:
    """Paging, counting, search and ordering state of a collection query."""
    top: Optional[int] = None
    skip: Optional[int] = None
    count: bool = False
    orderby: Dict[OrderByField, None] = field(default_factory=dict)
    search: Optional[str] = None

    @staticmethod
    def _check_non_negative(value: int, name: str) -> None:
        if isinstance(value, bool) or not isinstance(value, int):
            raise ODataValidationError(f"{name} must be an integer, got {value!r}", name)
        if value < 0:
            raise ODataValidationError(f"{name} cannot accept negative value", name)

    def set_top(self, value: int) -> None:
        self._check_non_negative(value, "$top")
        self.top = value

    def set_skip(self, value: int) -> None:
        self._check_non_negative(value, "$skip")
        self.skip = value

    def set_skip_and_top(self, skip: int, top: int) -> None:
        self._check_non_negative(skip, "$skip")
        self._check_non_negative(top, "$top")
        self.skip = skip
        self.top = top

    def add_orderby(self, descriptor: OrderByField) -> None:
        _union(self.orderby, [descriptor])

    def orderings(self) -> List[OrderByField]:
        return list(self.orderby)

    def to_params(self) -> Dict[str, str]:
        # orderby fragments never reach the wire; see orderings()
        value: Dict[str, str] = {}

        if self.top is not None:
            value["$top"] = str(self.top)

        if self.skip is not None:
            value["$skip"] = str(self.skip)

        if self.search is not None:
            value["$search"] = self.search

        if self.count:
            value["$count"] = "true"

        return value

"""
Example: Basic OData usage with odata_query
============================================

Queries the public TripPin sample service.
"""

import asyncio
from dataclasses import dataclass
from typing import Any, Dict, List

from odata_query import (
    CollectionQueryOptions,
    ConnectionContext,
    ExpandQueryField,
    QueryOptions,
    escape_odata_literal,
)

TRIPPIN = "services.odata.org/V4/TripPinService"


@dataclass
class Person:
    user_name: str
    first_name: str
    last_name: str

    @classmethod
    def from_json(cls, j: Dict[str, Any]) -> "Person":
        return cls(j["UserName"], j["FirstName"], j["LastName"])


def people(values: List[Dict[str, Any]]) -> List[Person]:
    return [Person.from_json(v) for v in values]


async def example_collection_query():
    """Paged, counted collection query."""
    with ConnectionContext(base_url=TRIPPIN) as conn:
        query = (
            conn.collection("People", CollectionQueryOptions(convert=people))
            .select("UserName,FirstName,LastName")
            .filter(f"LastName ne '{escape_odata_literal('Whyte')}'")
            .skip_and_top(skip=0, top=5)
            .count()
        )
        response = await query.fetch()
        if response is None:
            print("No response from service")
            return
        print(response.status_code, response.count, response.data)


async def example_entity_query():
    """Single entity with an expanded navigation property."""
    with ConnectionContext(base_url=TRIPPIN) as conn:
        trips = conn.collection("Trips").select("Name,Budget").top(3)
        query = (
            conn.query("People('russellwhyte')", QueryOptions(convert=Person.from_json))
            .select("UserName,FirstName,LastName")
            .expand(ExpandQueryField("Trips", trips))
        )
        response = await query.fetch()
        if response is not None and response.ok:
            print(response.data, response.json.get("Trips"))


if __name__ == "__main__":
    asyncio.run(example_collection_query())
    asyncio.run(example_entity_query())

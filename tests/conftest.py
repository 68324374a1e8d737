"""
Pytest configuration and shared fixtures.
"""

import json

import pytest
from unittest.mock import AsyncMock, Mock

from odata_query.core.session import TransportResponse


def make_response(body, status_code=200, headers=None):
    """Build a TransportResponse; dict/list bodies are JSON-encoded."""
    text = body if isinstance(body, str) else json.dumps(body)
    return TransportResponse(
        status_code=status_code,
        headers=headers or {"Content-Type": "application/json"},
        text=text,
    )


@pytest.fixture
def transport():
    """A transport whose send() is an AsyncMock returning an empty JSON object."""
    t = Mock()
    t.send = AsyncMock(return_value=make_response({}))
    return t


@pytest.fixture
def sample_entity_payload():
    """Sample OData v4 single-entity response."""
    return {
        "@odata.context": "https://services.odata.org/V4/TripPinService/$metadata#People/$entity",
        "UserName": "russellwhyte",
        "FirstName": "Russell",
        "LastName": "Whyte",
    }


@pytest.fixture
def sample_collection_payload():
    """Sample OData v4 collection response."""
    return {
        "@odata.context": "ctx",
        "@odata.count": 5,
        "value": [
            {"UserName": "russellwhyte", "FirstName": "Russell"},
            {"UserName": "scottketchum", "FirstName": "Scott"},
        ],
    }

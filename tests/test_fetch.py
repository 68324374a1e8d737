"""
Tests for the fetch pipeline of Query and CollectionQuery.
"""

import json
import logging

import pytest

from conftest import make_response
from odata_query.core.errors import ODataTransportError
from odata_query.odata.options import CollectionQueryOptions, QueryOptions
from odata_query.odata.query import CollectionQuery, Query
from odata_query.odata.result import ODataCollectionResponse, ODataResponse


def _boom(_):
    raise KeyError("UserName")


class TestEntityFetch:
    """Tests for Query.fetch()."""

    @pytest.mark.asyncio
    async def test_fetch_converts_payload(self, transport, sample_entity_payload):
        transport.send.return_value = make_response(sample_entity_payload)
        q = Query(
            base_url="services.odata.org",
            path="/V4/TripPinService/People('russellwhyte')",
            options=QueryOptions(convert=lambda j: (j["FirstName"], j["LastName"])),
            transport=transport,
        ).select("FirstName,LastName")

        response = await q.fetch()

        assert isinstance(response, ODataResponse)
        assert response.data == ("Russell", "Whyte")
        assert response.json == sample_entity_payload
        assert response.status_code == 200
        assert response.ok
        assert response.context == sample_entity_payload["@odata.context"]
        assert response.query is q
        assert response.uri == (
            "https://services.odata.org/V4/TripPinService/People('russellwhyte')"
            "?$select=FirstName,LastName"
        )

    @pytest.mark.asyncio
    async def test_fetch_sends_method_headers_and_body(self, transport):
        q = Query(
            base_url="h.example.com",
            path="/svc/Items",
            options=QueryOptions(method="POST", request_body={"Name": "x"}),
            transport=transport,
            cookie="c=1",
            bearer="tok",
        )

        response = await q.fetch()

        transport.send.assert_awaited_once()
        method, url, headers, body = transport.send.await_args.args
        assert method == "POST"
        assert url == "https://h.example.com/svc/Items"
        assert headers == {
            "Cookie": "c=1",
            "Authorization": "Bearer tok",
            "Accept-Charset": "utf-8",
            "Content-Type": "application/json;odata=verbose",
        }
        assert json.loads(body) == {"Name": "x"}
        assert response.request.method == "POST"
        assert response.request.body == body

    @pytest.mark.asyncio
    async def test_fetch_without_body(self, transport):
        await Query(base_url="h", path="/p", transport=transport).fetch()
        assert transport.send.await_args.args[3] is None

    @pytest.mark.asyncio
    async def test_string_body_sent_verbatim(self, transport):
        opts = QueryOptions(method="PATCH", request_body='{"a":1}')
        await Query(base_url="h", path="/p", options=opts, transport=transport).fetch()
        assert transport.send.await_args.args[3] == '{"a":1}'

    @pytest.mark.asyncio
    async def test_malformed_body(self, transport, caplog):
        transport.send.return_value = make_response("<html>oops</html>", status_code=502)
        q = Query(base_url="h", path="/p", transport=transport)

        with caplog.at_level(logging.WARNING, logger="odata_query.query"):
            response = await q.fetch()

        assert response is not None
        assert response.data is None
        assert response.json == {}
        assert response.status_code == 502
        assert response.context is None
        assert response.response.text == "<html>oops</html>"
        assert "not JSON" in caplog.text

    @pytest.mark.asyncio
    async def test_empty_body(self, transport):
        transport.send.return_value = make_response("", status_code=204)
        response = await Query(base_url="h", path="/p", transport=transport).fetch()
        assert response.data is None
        assert response.json == {}
        assert response.status_code == 204

    @pytest.mark.asyncio
    async def test_deeply_nested_body(self, transport):
        transport.send.return_value = make_response("[" * 100000 + "]" * 100000)

        response = await Query(base_url="h", path="/p", transport=transport).fetch()

        assert response is not None
        assert response.data is None
        assert response.json == {}
        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_null_body_is_converted(self, transport):
        transport.send.return_value = make_response("null")
        seen = []

        def convert(value):
            seen.append(value)
            return "empty"

        q = Query(base_url="h", path="/p", options=QueryOptions(convert=convert), transport=transport)
        response = await q.fetch()

        assert seen == [None]
        assert response.data == "empty"
        assert response.json == {}

    @pytest.mark.asyncio
    async def test_conversion_failure_keeps_json(self, transport, sample_entity_payload):
        transport.send.return_value = make_response(sample_entity_payload)
        q = Query(base_url="h", path="/p", options=QueryOptions(convert=_boom), transport=transport)

        response = await q.fetch()

        assert response.data is None
        assert response.json == sample_entity_payload
        assert response.context == sample_entity_payload["@odata.context"]

    @pytest.mark.asyncio
    async def test_error_status_still_decodes(self, transport):
        error = {"error": {"code": "404", "message": "Resource not found"}}
        transport.send.return_value = make_response(error, status_code=404)

        response = await Query(base_url="h", path="/p", transport=transport).fetch()

        assert response.status_code == 404
        assert not response.ok
        assert response.json == error
        assert response.data == error

    @pytest.mark.asyncio
    async def test_non_object_payload(self, transport):
        transport.send.return_value = make_response([1, 2])
        response = await Query(base_url="h", path="/p", transport=transport).fetch()
        assert response.json == {}
        assert response.data == [1, 2]

    @pytest.mark.asyncio
    async def test_transport_failure_returns_none(self, transport):
        transport.send.side_effect = ODataTransportError("GET", "https://h/p", "connection refused")
        assert await Query(base_url="h", path="/p", transport=transport).fetch() is None

    @pytest.mark.asyncio
    async def test_validation_error_raised_before_dispatch(self, transport):
        q = CollectionQuery(base_url="h", path="/p", transport=transport)
        with pytest.raises(ValueError):
            q.top(-1)
        transport.send.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_each_fetch_reads_current_state(self, transport):
        q = CollectionQuery(base_url="h", path="/p", transport=transport)

        first = await q.fetch()
        q.top(5)
        second = await q.fetch()

        assert first.uri == "https://h/p"
        assert second.uri == "https://h/p?$top=5"
        assert first is not second


class TestCollectionFetch:
    """Tests for CollectionQuery.fetch()."""

    @pytest.mark.asyncio
    async def test_fetch_collection(self, transport, sample_collection_payload):
        transport.send.return_value = make_response(sample_collection_payload)
        opts = CollectionQueryOptions(convert=lambda values: [v["UserName"] for v in values])
        q = CollectionQuery(base_url="h", path="/People", options=opts, transport=transport).count()

        response = await q.fetch()

        assert isinstance(response, ODataCollectionResponse)
        assert response.count == 5
        assert response.context == "ctx"
        assert response.data == ["russellwhyte", "scottketchum"]
        assert response.json == sample_collection_payload
        assert response.uri == "https://h/People?$count=true"

    @pytest.mark.asyncio
    async def test_default_conversion_returns_tuple(self, transport, sample_collection_payload):
        transport.send.return_value = make_response(sample_collection_payload)
        response = await CollectionQuery(base_url="h", path="/People", transport=transport).fetch()
        assert response.data == tuple(sample_collection_payload["value"])

    @pytest.mark.asyncio
    async def test_missing_value_array(self, transport):
        payload = {"@odata.context": "ctx", "@odata.count": "12"}
        transport.send.return_value = make_response(payload)

        response = await CollectionQuery(base_url="h", path="/People", transport=transport).fetch()

        assert response.data is None
        assert response.json == payload
        assert response.count == 12
        assert response.context == "ctx"

    @pytest.mark.asyncio
    async def test_malformed_collection_body(self, transport):
        transport.send.return_value = make_response("not json", status_code=500)

        response = await CollectionQuery(base_url="h", path="/People", transport=transport).fetch()

        assert response.data is None
        assert response.json == {}
        assert response.count is None
        assert response.status_code == 500

    @pytest.mark.asyncio
    async def test_response_is_frozen(self, transport, sample_collection_payload):
        transport.send.return_value = make_response(sample_collection_payload)
        response = await CollectionQuery(base_url="h", path="/People", transport=transport).fetch()
        with pytest.raises(AttributeError):
            response.count = 1

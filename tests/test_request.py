"""Tests for verso.http — Request construction, headers, and query parameters."""

from typing import Any

from verso.http.headers import Headers
from verso.http.query import QueryParams
from verso.http.request import Request


class TestCreate:
    def test_plain_values(self) -> None:
        request = Request.create(
            "get",
            "/api/products",
            headers={"X-Api-Version": "2.0"},
            query={"api-version": "1.0"},
        )
        assert request.method == "GET"
        assert request.headers.get("x-api-version") == "2.0"
        assert request.query.get("api-version") == "1.0"
        assert request.url == "/api/products?api-version=1.0"

    def test_raw_query_string(self) -> None:
        request = Request.create("GET", "/products", query="v=2&v=3")
        assert request.query["v"] == "2"
        assert request.query.get_list("v") == ["2", "3"]

    def test_equal_requests_compare_equal(self) -> None:
        assert Request.create("GET", "/a", query={"x": "1"}) == Request.create(
            "GET", "/a", query={"x": "1"}
        )

    async def test_empty_body(self) -> None:
        assert await Request.create("GET", "/a").body() == b""


class TestFromASGI:
    async def test_body_is_cached(self) -> None:
        chunks = iter(
            [
                {"type": "http.request", "body": b'{"a"', "more_body": True},
                {"type": "http.request", "body": b": 1}", "more_body": False},
            ]
        )

        async def receive() -> dict[str, Any]:
            return next(chunks)

        scope = {
            "type": "http",
            "method": "POST",
            "path": "/api/products/v2",
            "headers": [(b"content-type", b"application/json; v=2.0")],
            "query_string": b"",
        }
        request = Request.from_asgi(scope, receive)
        assert request.content_type == "application/json; v=2.0"
        assert await request.json() == {"a": 1}
        assert await request.body() == b'{"a": 1}'


class TestHeaders:
    def test_case_insensitive(self) -> None:
        headers = Headers.from_dict({"Accept": "application/json"})
        assert headers["ACCEPT"] == "application/json"
        assert "accept" in headers
        assert list(headers) == ["accept"]

    def test_missing(self) -> None:
        assert Headers().get("accept") is None


class TestQueryParams:
    def test_blank_values_kept(self) -> None:
        params = QueryParams(b"api-version=&x=1")
        assert params["api-version"] == ""
        assert len(params) == 2

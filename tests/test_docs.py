"""Tests for verso.docs — per-version OpenAPI documents and the docs index."""

import pytest
from kida import Environment

from verso import App, AppConfig
from verso.docs.openapi import build_openapi, document_title
from verso.docs.site import DocEntry, DocsSite
from verso.http.request import Request
from verso.routing.route import Binding
from verso.routing.router import Router
from verso.testing import TestClient
from verso.versioning.extract import HeaderReader, PathSegmentReader, QueryReader
from verso.versioning.registry import VersionGroup, VersionRegistry
from verso.versioning.reporter import VersionDescription
from verso.versioning.version import Version

V1 = Version(1, 0)
V2 = Version(2, 0)


def _app(config: AppConfig | None = None) -> App:
    app = App(config)
    app.group("products", prefix="/api/products", versions=["1.0", "2.0"], deprecated=["1.0"])

    @app.route("/api/products", version="1.0")
    def list_products() -> list[str]:
        """List products.

        Longer description that is not part of the summary.
        """
        return ["value1", "value2"]

    @app.route("/api/products/{id:int}", methods=["GET", "DELETE"], version="2.0")
    def product(id: int) -> str:
        return "value"

    return app


class TestDocumentTitle:
    def test_current(self) -> None:
        title = document_title("Api Versioning", VersionDescription("", V2))
        assert title == "Api Versioning - v2.0"

    def test_deprecated(self) -> None:
        title = document_title("Api Versioning", VersionDescription("", V1, deprecated=True))
        assert title == "Api Versioning - v1.0 - DEPRECATED"


class TestBuildOpenAPI:
    def test_one_document_per_version(self) -> None:
        app = _app()
        assert app.docs is not None
        assert app.docs.names == ("v1", "v2")

    def test_info(self) -> None:
        doc = _app().openapi("v1")
        assert doc["openapi"] == "3.0.3"
        assert doc["info"]["version"] == "1.0"
        assert doc["info"]["title"] == "Api Versioning - v1.0 - DEPRECATED"
        assert doc["info"]["description"] == "Versioned web API - v1.0"

    def test_only_own_version_bindings(self) -> None:
        app = _app()
        assert list(app.openapi("v1")["paths"]) == ["/api/products/v1"]
        assert list(app.openapi("v2")["paths"]) == ["/api/products/v2/{id}"]

    def test_operations(self) -> None:
        item = _app().openapi("v2")["paths"]["/api/products/v2/{id}"]
        assert set(item) == {"get", "delete"}
        parameters = item["get"]["parameters"]
        assert parameters == [
            {"name": "id", "in": "path", "required": True, "schema": {"type": "integer"}}
        ]
        assert item["get"]["tags"] == ["products"]

    def test_summary_and_response_schema(self) -> None:
        operation = _app().openapi("v1")["paths"]["/api/products/v1"]["get"]
        assert operation["summary"] == "List products."
        schema = operation["responses"]["200"]["content"]["application/json"]["schema"]
        assert schema == {"type": "array", "items": {"type": "string"}}

    def test_query_reader_documents_parameter(self) -> None:
        doc = _app(AppConfig(extraction_strategy="query")).openapi("v2")
        operation = doc["paths"]["/api/products/{id}"]["get"]
        version_param = operation["parameters"][-1]
        assert version_param["name"] == "api-version"
        assert version_param["in"] == "query"
        assert version_param["schema"]["default"] == "2.0"
        assert version_param["required"] is False

    def test_unknown_document(self) -> None:
        with pytest.raises(KeyError):
            _app().openapi("v3")

    def test_disabled(self) -> None:
        app = _app(AppConfig(docs_enabled=False))
        assert app.docs is None
        with pytest.raises(RuntimeError, match="disabled"):
            app.openapi("v1")


class TestDocumentedPath:
    def _document(self, reader: object, position: int | None = None) -> dict:
        registry = VersionRegistry()
        registry.add(VersionGroup.create("products", [V1], prefix="/api"))
        registry.compile()
        router = Router()
        router.add(Binding("/api/products", lambda: None, frozenset({"GET"}), V1, group="products"))
        return build_openapi(
            VersionDescription("", V1),
            router.bindings,
            registry=registry,
            reader=reader,  # type: ignore[arg-type]
            version_required=True,
        )

    def test_segment_after_group_prefix(self) -> None:
        assert list(self._document(PathSegmentReader())["paths"]) == ["/api/v1/products"]

    def test_fixed_position(self) -> None:
        doc = self._document(PathSegmentReader(position=0))
        assert list(doc["paths"]) == ["/v1/api/products"]

    def test_header_reader(self) -> None:
        doc = self._document(HeaderReader())
        parameter = doc["paths"]["/api/products"]["get"]["parameters"][0]
        assert parameter["in"] == "header"
        assert parameter["required"] is True

    def test_query_reader(self) -> None:
        doc = self._document(QueryReader("v"))
        assert doc["paths"]["/api/products"]["get"]["parameters"][0]["name"] == "v"


class TestServedDocs:
    async def test_openapi_json(self) -> None:
        async with TestClient(_app()) as client:
            response = await client.get("/openapi/v2.json")
            assert response.status == 200
            assert response.content_type.startswith("application/json")
            assert response.json_body()["info"]["version"] == "2.0"

    async def test_unknown_document_is_404(self) -> None:
        async with TestClient(_app()) as client:
            response = await client.get("/openapi/v7.json")
            assert response.status == 404
            assert response.json_body()["error"]["code"] == "RouteUnknown"

    async def test_index(self) -> None:
        async with TestClient(_app()) as client:
            response = await client.get("/docs")
            assert response.status == 200
            assert response.content_type.startswith("text/html")
            assert 'href="/openapi/v1.json"' in response.text
            assert 'href="/openapi/v2.json"' in response.text
            assert "V1 - DEPRECATED" in response.text

    async def test_docs_bypass_version_headers(self) -> None:
        async with TestClient(_app()) as client:
            response = await client.get("/docs")
            assert response.header("api-supported-versions") is None

    async def test_post_to_docs_is_routed_normally(self) -> None:
        async with TestClient(_app()) as client:
            response = await client.post("/docs")
            assert response.status == 404

    async def test_custom_paths(self) -> None:
        config = AppConfig(docs_path="/swagger", openapi_path="/swagger/specs")
        async with TestClient(_app(config)) as client:
            assert (await client.get("/swagger")).status == 200
            assert (await client.get("/swagger/specs/v1.json")).status == 200


class TestIndexRendering:
    def _entries(self) -> list[DocEntry]:
        return [
            DocEntry("v1", "1.0", True, "/openapi/v1.json", "V1 - DEPRECATED", "Shop - v1.0"),
            DocEntry("v2", "2.0", False, "/openapi/v2.json", "V2", "Shop - v2.0"),
        ]

    def _index(self, site: DocsSite) -> str:
        response = site.respond(Request.create("GET", "/docs"))
        assert response is not None
        return response.text

    def test_bare_environment_by_default(self) -> None:
        html = self._index(DocsSite({}, self._entries(), title="Shop"))
        assert "<title>Shop</title>" in html
        assert html.count('class="deprecated"') == 1

    def test_supplied_environment_renders_same_index(self) -> None:
        entries = self._entries()
        default = self._index(DocsSite({}, entries, title="Shop"))
        supplied = self._index(DocsSite({}, entries, title="Shop", kida_env=Environment()))
        assert supplied == default

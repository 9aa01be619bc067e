"""Tests for verso.routing.router — compiled, version-aware route table."""

import pytest

from verso.errors import ConfigurationError, DuplicateBinding, NotFound, RouteUnknown
from verso.routing.route import Binding
from verso.routing.router import Router, parse_path, path_shape
from verso.versioning.version import Version

V1 = Version(1, 0)
V2 = Version(2, 0)


def _list_v1() -> str:
    return "v1"


def _list_v2() -> str:
    return "v2"


def _binding(
    path: str,
    version: Version = V1,
    handler: object = _list_v1,
    methods: frozenset[str] | None = None,
) -> Binding:
    return Binding(
        path=path,
        handler=handler,  # type: ignore[arg-type]
        methods=methods or frozenset({"GET"}),
        version=version,
    )


class TestParsePath:
    def test_static(self) -> None:
        segments = parse_path("/api/products")
        assert [s.value for s in segments] == ["api", "products"]
        assert not any(s.is_param for s in segments)

    def test_typed_param(self) -> None:
        segments = parse_path("/products/{id:int}")
        assert segments[1].is_param is True
        assert segments[1].param_name == "id"
        assert segments[1].param_type == "int"

    def test_untyped_param_is_str(self) -> None:
        assert parse_path("/products/{slug}")[1].param_type == "str"

    def test_root(self) -> None:
        assert parse_path("/") == []

    def test_rejects_angle_bracket_param(self) -> None:
        with pytest.raises(ConfigurationError, match="<param>"):
            parse_path("/products/<id>")

    def test_rejects_unknown_converter(self) -> None:
        with pytest.raises(ConfigurationError, match="Unknown path converter"):
            parse_path("/products/{id:uuid}")

    def test_shape_erases_names(self) -> None:
        assert path_shape("/products/{id:int}") == path_shape("/products/{pid:int}")
        assert path_shape("/products/{id:int}") != path_shape("/products/{id}")


class TestLookup:
    def test_exact_version(self) -> None:
        r = Router()
        r.add(_binding("/api/products", V1, _list_v1))
        r.add(_binding("/api/products", V2, _list_v2))
        r.compile()

        assert r.lookup("GET", "/api/products", V1).binding.handler is _list_v1
        assert r.lookup("GET", "/api/products", V2).binding.handler is _list_v2

    def test_path_params(self) -> None:
        r = Router()
        r.add(_binding("/api/products/{id:int}"))
        r.compile()

        match = r.lookup("GET", "/api/products/42", V1)
        assert match.path_params == {"id": "42"}

    def test_static_beats_param(self) -> None:
        r = Router()
        r.add(_binding("/products/{id}", handler=_list_v1))
        r.add(_binding("/products/featured", handler=_list_v2))
        r.compile()

        assert r.lookup("GET", "/products/featured", V1).binding.handler is _list_v2
        assert r.lookup("GET", "/products/other", V1).binding.handler is _list_v1

    def test_int_converter_rejects_text(self) -> None:
        r = Router()
        r.add(_binding("/products/{id:int}"))
        r.compile()

        with pytest.raises(RouteUnknown):
            r.lookup("GET", "/products/abc", V1)

    def test_catch_all(self) -> None:
        r = Router()
        r.add(_binding("/files/{rest:path}"))
        r.compile()

        assert r.lookup("GET", "/files/a/b/c.txt", V1).path_params == {"rest": "a/b/c.txt"}

    def test_unknown_path(self) -> None:
        r = Router()
        r.add(_binding("/api/products"))
        r.compile()

        with pytest.raises(RouteUnknown):
            r.lookup("GET", "/api/orders", V1)

    def test_method_mismatch_is_route_unknown(self) -> None:
        r = Router()
        r.add(_binding("/api/products", V1))
        r.compile()

        with pytest.raises(RouteUnknown) as exc_info:
            r.lookup("PUT", "/api/products", V1)
        assert not isinstance(exc_info.value, NotFound)
        assert "GET" in exc_info.value.detail

    def test_version_mismatch_is_not_found(self) -> None:
        r = Router()
        r.add(_binding("/api/products", V1))
        r.compile()

        with pytest.raises(NotFound) as exc_info:
            r.lookup("GET", "/api/products", V2)
        assert exc_info.value.supported == (V1,)
        assert exc_info.value.requested == V2
        assert exc_info.value.status == 404

    def test_no_fallback_to_nearest_version(self) -> None:
        r = Router()
        r.add(_binding("/api/products", Version(1, 0)))
        r.add(_binding("/api/products", Version(3, 0)))
        r.compile()

        with pytest.raises(NotFound):
            r.lookup("GET", "/api/products", Version(2, 0))

    def test_versions_for(self) -> None:
        r = Router()
        r.add(_binding("/api/products", V2))
        r.add(_binding("/api/products", V1))
        r.compile()

        assert r.versions_for("GET", "/api/products") == (V1, V2)
        assert r.versions_for("PUT", "/api/products") == ()
        assert r.versions_for("GET", "/nowhere") == ()

    def test_sibling_converters_version_falls_through(self) -> None:
        r = Router()
        r.add(_binding("/p/{id:int}", V1, handler=_list_v1))
        r.add(_binding("/p/{id}", V2, handler=_list_v2))
        r.compile()

        match = r.lookup("GET", "/p/5", V2)
        assert match.binding.handler is _list_v2
        assert match.path_params == {"id": "5"}
        assert r.lookup("GET", "/p/5", V1).binding.handler is _list_v1
        assert r.versions_for("GET", "/p/5") == (V1, V2)

    def test_sibling_converters_method_falls_through(self) -> None:
        r = Router()
        r.add(_binding("/p/{id:int}", V1, handler=_list_v1))
        r.add(_binding("/p/{id}", V1, handler=_list_v2, methods=frozenset({"PUT"})))
        r.compile()

        assert r.lookup("PUT", "/p/5", V1).binding.handler is _list_v2
        assert r.lookup("GET", "/p/5", V1).binding.handler is _list_v1

    def test_not_found_lists_versions_of_every_matching_template(self) -> None:
        r = Router()
        r.add(_binding("/p/{id:int}", V1))
        r.add(_binding("/p/{id}", V2))
        r.compile()

        with pytest.raises(NotFound) as exc_info:
            r.lookup("GET", "/p/5", Version(3, 0))
        assert exc_info.value.supported == (V1, V2)

    def test_method_mismatch_across_templates_lists_all_methods(self) -> None:
        r = Router()
        r.add(_binding("/p/{id:int}", V1))
        r.add(_binding("/p/{id}", V1, methods=frozenset({"PUT"})))
        r.compile()

        with pytest.raises(RouteUnknown) as exc_info:
            r.lookup("DELETE", "/p/5", V1)
        assert not isinstance(exc_info.value, NotFound)
        assert "GET, PUT" in exc_info.value.detail

class TestRegistration:
    def test_duplicate_triple(self) -> None:
        r = Router()
        r.add(_binding("/api/products", V1))
        with pytest.raises(DuplicateBinding) as exc_info:
            r.add(_binding("/api/products", V1, _list_v2))
        assert exc_info.value.version == V1
        assert exc_info.value.method == "GET"

    def test_duplicate_detected_across_param_names(self) -> None:
        r = Router()
        r.add(_binding("/products/{id:int}"))
        with pytest.raises(DuplicateBinding):
            r.add(_binding("/products/{pid:int}"))

    def test_duplicate_is_configuration_error(self) -> None:
        r = Router()
        r.add(_binding("/api/products"))
        with pytest.raises(ConfigurationError):
            r.add(_binding("/api/products"))

    def test_partial_overlap_registers_nothing(self) -> None:
        r = Router()
        r.add(_binding("/api/products", methods=frozenset({"GET"})))
        with pytest.raises(DuplicateBinding):
            r.add(_binding("/api/products", methods=frozenset({"GET", "POST"}), handler=_list_v2))
        r.compile()
        with pytest.raises(RouteUnknown):
            r.lookup("POST", "/api/products", V1)

    def test_same_path_different_method_or_version(self) -> None:
        r = Router()
        r.add(_binding("/api/products", V1))
        r.add(_binding("/api/products", V2))
        r.add(_binding("/api/products", V1, methods=frozenset({"POST"})))
        assert len(r.bindings) == 3

    def test_add_after_compile(self) -> None:
        r = Router()
        r.compile()
        with pytest.raises(RuntimeError, match="after compilation"):
            r.add(_binding("/api/products"))

    def test_add_attaches_segments(self) -> None:
        r = Router()
        stored = r.add(_binding("/products/{id:int}"))
        assert stored.param_names == ("id",)

"""Tests for verso.cli — argument parsing and the introspection commands."""

import json
import sys
import types
from collections.abc import Iterator

import pytest

from verso import App, AppConfig
from verso.cli import main
from verso.cli._resolve import resolve_app
from verso.server.launch import LaunchPlan


def _build_app() -> App:
    app = App(AppConfig(docs_title="Shop"))
    app.group("products", prefix="/api/products", versions=["1.0", "2.0"], deprecated=["1.0"])

    @app.route("/api/products", version="1.0")
    def list_v1():
        return []

    @app.route("/api/products", methods=["POST"], version="2.0", name="create")
    def create_v2():
        return None

    return app


def _broken_app() -> App:
    app = App()

    @app.route("/items", version="2 .0")
    def items():
        return []

    return app


@pytest.fixture
def app_module() -> Iterator[str]:
    module = types.ModuleType("verso_cli_fixture")
    module.app = _build_app()  # type: ignore[attr-defined]
    module.broken = _broken_app()  # type: ignore[attr-defined]
    module.factory = _build_app  # type: ignore[attr-defined]
    module.not_an_app = 42  # type: ignore[attr-defined]
    sys.modules[module.__name__] = module
    yield module.__name__
    del sys.modules[module.__name__]


class TestCLIHelp:
    @pytest.mark.parametrize("command", [[], ["run"], ["routes"], ["versions"], ["openapi"]])
    def test_help_exits_zero(self, command: list[str]) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main([*command, "--help"])
        assert exc_info.value.code == 0

    def test_no_command_prints_help(self, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main([])
        assert exc_info.value.code == 0
        assert "verso" in capsys.readouterr().out

    @pytest.mark.parametrize("command", ["run", "routes", "versions"])
    def test_missing_app(self, command: str) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main([command])
        assert exc_info.value.code == 2


class TestResolveApp:
    def test_module_attribute(self, app_module: str) -> None:
        assert isinstance(resolve_app(f"{app_module}:app"), App)

    def test_default_attribute(self, app_module: str) -> None:
        assert isinstance(resolve_app(app_module), App)

    def test_factory(self, app_module: str) -> None:
        assert isinstance(resolve_app(f"{app_module}:factory"), App)

    def test_not_an_app(self, app_module: str) -> None:
        with pytest.raises(TypeError, match="not a verso.App"):
            resolve_app(f"{app_module}:not_an_app")


class TestRoutes:
    def test_table(self, app_module: str, capsys: pytest.CaptureFixture[str]) -> None:
        main(["routes", app_module])
        lines = capsys.readouterr().out.splitlines()
        assert lines[0].split() == ["VERSION", "METHOD", "PATH", "GROUP", "HANDLER"]
        assert lines[2].split() == ["1.0", "GET", "/api/products", "products", "list_v1"]
        assert lines[3].split()[:4] == ["2.0", "POST", "/api/products", "products"]
        assert "(create)" in lines[3]

    def test_configuration_error_exits_one(
        self, app_module: str, capsys: pytest.CaptureFixture[str]
    ) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["routes", f"{app_module}:broken"])
        assert exc_info.value.code == 1
        assert "2 .0" in capsys.readouterr().err

    def test_unknown_module_exits_one(self) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["routes", "no_such_module_for_verso:app"])
        assert exc_info.value.code == 1


class TestVersions:
    def test_text(self, app_module: str, capsys: pytest.CaptureFixture[str]) -> None:
        main(["versions", app_module])
        lines = capsys.readouterr().out.splitlines()
        assert lines == ["products  1.0  DEPRECATED", "products  2.0"]

    def test_json(self, app_module: str, capsys: pytest.CaptureFixture[str]) -> None:
        main(["versions", app_module, "--json"])
        payload = json.loads(capsys.readouterr().out)
        assert payload == [
            {"group": "products", "version": "1.0", "deprecated": True},
            {"group": "products", "version": "2.0", "deprecated": False},
        ]


class TestOpenAPI:
    def test_document(self, app_module: str, capsys: pytest.CaptureFixture[str]) -> None:
        main(["openapi", app_module, "v2"])
        document = json.loads(capsys.readouterr().out)
        assert document["info"]["title"] == "Shop - v2.0"
        assert list(document["paths"]) == ["/api/products/v2"]

    def test_unknown_document(self, app_module: str, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["openapi", app_module, "v9"])
        assert exc_info.value.code == 1
        assert "available: v1, v2" in capsys.readouterr().err


class TestRun:
    def test_configuration_error_stops_before_serving(
        self, app_module: str, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        started: list[object] = []
        monkeypatch.setattr(
            "verso.server.launch.serve",
            lambda app, plan: started.append(plan),
        )
        with pytest.raises(SystemExit) as exc_info:
            main(["run", f"{app_module}:broken"])
        assert exc_info.value.code == 1
        assert started == []

    def test_production_server_receives_settings(
        self, app_module: str, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        plans: list[LaunchPlan] = []

        def fake_serve(app: App, plan: LaunchPlan) -> None:
            plans.append(plan)

        monkeypatch.setattr("verso.server.launch.serve", fake_serve)
        main(["run", app_module, "--port", "9001", "--workers", "2", "--log-level", "debug"])
        assert plans == [
            LaunchPlan(
                host="127.0.0.1",
                port=9001,
                dev=False,
                workers=2,
                log_level="debug",
                app_path=app_module,
            )
        ]

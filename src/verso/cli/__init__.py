"""Verso CLI — dev server and introspection of versioned routes.

Entry point registered as ``verso`` in ``pyproject.toml``::

    [project.scripts]
    verso = "verso.cli:main"
"""

import argparse
import sys


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for the ``verso`` command."""
    parser = argparse.ArgumentParser(
        prog="verso",
        description="Verso — version-aware request routing for web APIs.",
    )
    subparsers = parser.add_subparsers(dest="command")

    # -- verso run --------------------------------------------------------
    run_parser = subparsers.add_parser("run", help="Start dev or production server")
    run_parser.add_argument("app", help="Import string (e.g. myapp:app)")
    run_parser.add_argument("--host", default=None, help="Bind host address")
    run_parser.add_argument("--port", type=int, default=None, help="Bind port number")
    run_parser.add_argument(
        "--production",
        action="store_true",
        help="Run in production mode (multi-worker)",
    )
    run_parser.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Worker count (0=auto-detect, production only)",
    )
    run_parser.add_argument(
        "--log-level",
        default=None,
        choices=["debug", "info", "warning", "error", "critical"],
        help="Log level (defaults to the app config)",
    )

    # -- verso routes -----------------------------------------------------
    routes_parser = subparsers.add_parser("routes", help="List bindings per version")
    routes_parser.add_argument("app", help="Import string (e.g. myapp:app)")

    # -- verso versions ---------------------------------------------------
    versions_parser = subparsers.add_parser("versions", help="Print the capability manifest")
    versions_parser.add_argument("app", help="Import string (e.g. myapp:app)")
    versions_parser.add_argument(
        "--json",
        action="store_true",
        help="Emit the manifest as JSON",
    )

    # -- verso openapi ----------------------------------------------------
    openapi_parser = subparsers.add_parser("openapi", help="Print a version's OpenAPI document")
    openapi_parser.add_argument("app", help="Import string (e.g. myapp:app)")
    openapi_parser.add_argument("name", help="Document name (e.g. v1, v2)")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    if args.command == "run":
        from verso.cli._run import run_server

        run_server(args)
    elif args.command == "routes":
        from verso.cli._routes import run_routes

        run_routes(args)
    elif args.command == "versions":
        from verso.cli._versions import run_versions

        run_versions(args)
    elif args.command == "openapi":
        from verso.cli._openapi import run_openapi

        run_openapi(args)

"""``verso run`` — development or production server command."""

import argparse
import logging

from verso.cli._resolve import load_frozen_app


def run_server(args: argparse.Namespace) -> None:
    """Start the verso server (dev or production mode).

    The app is compiled before the server starts, so duplicate bindings
    and malformed version literals exit with status 1 instead of
    surfacing on the first request.
    """
    from verso.server.launch import plan_launch, serve

    app = load_frozen_app(args.app)
    plan = plan_launch(
        app,
        host=args.host,
        port=args.port,
        production=args.production,
        workers=args.workers,
        log_level=args.log_level,
        app_path=args.app,
    )

    logging.basicConfig(
        level=plan.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    serve(app, plan)

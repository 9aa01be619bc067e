"""Server launch — maps AppConfig onto a pounce server.

Dev mode runs a single reloading worker. Production mode runs several
workers that share the app's frozen routing tables. Either way the
served versions are logged before the socket is bound.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from verso.app import App

logger = logging.getLogger("verso.server")


@dataclass(frozen=True, slots=True)
class LaunchPlan:
    """Resolved server settings: explicit overrides win over AppConfig."""

    host: str
    port: int
    dev: bool
    workers: int = 0  # 0 = auto-detect from CPU count
    log_level: str = "info"
    app_path: str | None = None  # "module:attribute", reimported on reload


def plan_launch(
    app: App,
    *,
    host: str | None = None,
    port: int | None = None,
    production: bool = False,
    workers: int | None = None,
    log_level: str | None = None,
    app_path: str | None = None,
) -> LaunchPlan:
    """Combine command-line overrides with the app's configuration."""
    config = app.config
    dev = config.debug and not production
    if dev:
        workers = 1
    elif workers is None:
        workers = config.workers
    return LaunchPlan(
        host=host or config.host,
        port=port or config.port,
        dev=dev,
        workers=workers,
        log_level=log_level or config.log_level,
        app_path=app_path,
    )


def version_banner(app: App) -> list[str]:
    """One line per served (group, version), e.g. ``products 1.0 (default, deprecated)``."""
    lines = []
    for entry in app.describe():
        flags = [
            name
            for name, on in (("default", entry.default), ("deprecated", entry.deprecated))
            if on
        ]
        suffix = f" ({', '.join(flags)})" if flags else ""
        lines.append(f"{entry.group} {entry.version}{suffix}")
    return lines


def serve(app: App, plan: LaunchPlan) -> None:
    """Start pounce with *plan*. Blocks until the server stops."""
    from pounce.config import ServerConfig
    from pounce.server import Server

    for line in version_banner(app):
        logger.info("serving %s", line)

    if plan.dev:
        server_config = ServerConfig(
            host=plan.host,
            port=plan.port,
            workers=1,
            reload=True,
            reload_include=app.config.reload_include,
            reload_dirs=app.config.reload_dirs,
        )
        Server(server_config, app, app_path=plan.app_path).run()
        return

    server_config = ServerConfig(
        host=plan.host,
        port=plan.port,
        workers=plan.workers,
        log_level=plan.log_level,
    )
    Server(server_config, app).run()

"""``verso routes`` — list bindings with their group and version."""

import argparse

from verso.cli._resolve import load_frozen_app


def run_routes(args: argparse.Namespace) -> None:
    """Print a table of VERSION, METHOD, PATH, GROUP and HANDLER."""
    app = load_frozen_app(args.app)

    bindings = sorted(
        app.router.bindings,
        key=lambda b: (b.group, b.version, b.path, sorted(b.methods)),
    )
    if not bindings:
        print("No routes registered.")
        return

    rows: list[tuple[str, str, str, str, str]] = []
    for binding in bindings:
        handler_name = getattr(binding.handler, "__name__", str(binding.handler))
        if binding.name:
            handler_name = f"{handler_name} ({binding.name})"
        rows.append(
            (
                str(binding.version),
                ", ".join(sorted(binding.methods)),
                binding.path,
                binding.group,
                handler_name,
            )
        )

    headers = ("VERSION", "METHOD", "PATH", "GROUP", "HANDLER")
    widths = [max(len(headers[i]), *(len(r[i]) for r in rows)) for i in range(4)]
    fmt = "  ".join(f"{{:<{w}}}" for w in widths) + "  {}"
    print(fmt.format(*headers))
    print("-" * min(sum(widths) + 8 + max(len(r[4]) for r in rows), 80))
    for row in rows:
        print(fmt.format(*row))

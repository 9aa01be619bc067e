"""``verso versions`` — print the capability manifest."""

import argparse
import json

from verso.cli._resolve import load_frozen_app


def run_versions(args: argparse.Namespace) -> None:
    """Print one line per (group, version), flagging deprecated versions."""
    app = load_frozen_app(args.app)
    manifest = list(app.describe())

    if args.json:
        payload = [
            {"group": d.group, "version": str(d.version), "deprecated": d.deprecated}
            for d in manifest
        ]
        print(json.dumps(payload, indent=2))
        return

    width = max((len(d.group) for d in manifest), default=5)
    for description in manifest:
        marker = "  DEPRECATED" if description.deprecated else ""
        print(f"{description.group:<{width}}  {description.version}{marker}")

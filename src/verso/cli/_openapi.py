"""``verso openapi`` — print one version's OpenAPI document."""

import argparse
import json
import sys

from verso.cli._resolve import load_frozen_app


def run_openapi(args: argparse.Namespace) -> None:
    """Print the document named ``args.name`` (``v1``, ``v2``) as JSON."""
    app = load_frozen_app(args.app)
    docs = app.docs
    if docs is None:
        print("Error: API documents are disabled for this app.", file=sys.stderr)
        raise SystemExit(1)

    try:
        document = docs.document(args.name)
    except KeyError as exc:
        available = ", ".join(docs.names) or "none"
        print(f"Error: no document named {args.name!r} (available: {available})", file=sys.stderr)
        raise SystemExit(1) from exc

    print(json.dumps(document, indent=2))

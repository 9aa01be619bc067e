"""Served API documentation — OpenAPI JSON per version plus an HTML index.

Documents are built once when the app freezes; serving them is a dict
lookup. The index page is rendered with kida.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from kida import Environment

from verso.docs.openapi import build_openapi, document_title
from verso.errors import RouteUnknown
from verso.http.response import Response

if TYPE_CHECKING:
    from verso.config import AppConfig
    from verso.http.request import Request
    from verso.routing.router import Router
    from verso.versioning.extract import VersionReader
    from verso.versioning.registry import VersionRegistry
    from verso.versioning.reporter import CapabilityReporter

INDEX_TEMPLATE = """\
<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="utf-8">
  <title>{{ title }}</title>
</head>
<body>
  <h1>{{ title }}</h1>
  <ul class="api-versions">
  {% for doc in documents %}
    <li data-version="{{ doc.version }}">
      <a href="{{ doc.url }}">{{ doc.label }}</a>
      {% if doc.deprecated %}<strong class="deprecated">DEPRECATED</strong>{% end %}
      <span class="doc-title">{{ doc.title }}</span>
    </li>
  {% end %}
  </ul>
</body>
</html>
"""


def _minimal_kida_env() -> Environment:
    """Create a bare kida Environment for the inline index template."""
    return Environment()


@dataclass(frozen=True, slots=True)
class DocEntry:
    """One line of the documentation index."""

    name: str
    version: str
    deprecated: bool
    url: str
    label: str
    title: str


class DocsSite:
    """OpenAPI documents keyed by group name (``v1``, ``v2``).

    Usage::

        site = DocsSite.build(config, reporter, router, registry, reader)
        site.document("v2")["info"]["version"]  # "2.0"
    """

    __slots__ = ("_documents", "_entries", "_index_html", "docs_path", "openapi_path")

    def __init__(
        self,
        documents: dict[str, dict[str, Any]],
        entries: list[DocEntry],
        *,
        title: str,
        docs_path: str = "/docs",
        openapi_path: str = "/openapi",
        kida_env: Environment | None = None,
    ) -> None:
        self._documents = documents
        self._entries = entries
        self.docs_path = "/" + docs_path.strip("/")
        self.openapi_path = "/" + openapi_path.strip("/")
        env = kida_env or _minimal_kida_env()
        template = env.from_string(INDEX_TEMPLATE)
        self._index_html: str = template.render({"title": title, "documents": entries})

    @classmethod
    def build(
        cls,
        config: AppConfig,
        reporter: CapabilityReporter,
        router: Router,
        registry: VersionRegistry,
        reader: VersionReader,
    ) -> DocsSite:
        """Build every version's document from the frozen app state."""
        documents: dict[str, dict[str, Any]] = {}
        entries: list[DocEntry] = []
        openapi_path = "/" + config.openapi_path.strip("/")

        for description in reporter.describe().versions():
            name = description.group_name
            documents[name] = build_openapi(
                description,
                router.bindings,
                registry=registry,
                reader=reader,
                title=config.docs_title,
                summary=config.docs_description,
                version_required=not config.assume_default_when_unspecified,
            )
            entries.append(
                DocEntry(
                    name=name,
                    version=str(description.version),
                    deprecated=description.deprecated,
                    url=f"{openapi_path}/{name}.json",
                    label=name.upper() + (" - DEPRECATED" if description.deprecated else ""),
                    title=document_title(config.docs_title, description),
                )
            )

        return cls(
            documents,
            entries,
            title=config.docs_title,
            docs_path=config.docs_path,
            openapi_path=config.openapi_path,
        )

    @property
    def names(self) -> tuple[str, ...]:
        """Document names in version order."""
        return tuple(self._documents)

    @property
    def entries(self) -> tuple[DocEntry, ...]:
        """Index entries in version order."""
        return tuple(self._entries)

    def document(self, name: str) -> dict[str, Any]:
        """Return the OpenAPI document called *name*.

        Raises ``KeyError`` for unknown names.
        """
        return self._documents[name]

    def respond(self, request: Request) -> Response | None:
        """Serve a documentation request, or return None if *request* isn't one.

        Raises ``RouteUnknown`` for an unknown document name.
        """
        if request.method not in ("GET", "HEAD"):
            return None

        path = "/" + request.path.strip("/")
        if path == self.docs_path:
            return Response(body=self._index_html, content_type="text/html; charset=utf-8")

        prefix = self.openapi_path + "/"
        if path.startswith(prefix) and path.endswith(".json"):
            name = path[len(prefix) : -len(".json")]
            if name not in self._documents:
                raise RouteUnknown(f"No API document named {name!r}")
            return Response.json(self._documents[name])

        return None

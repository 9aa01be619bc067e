"""OpenAPI document generation — one document per API version.

Consumes the capability manifest and the frozen route table. Each
document lists only the bindings of its version; how the version
appears in the documented request depends on the active reader (a path
segment, a query parameter, or a header).
"""

from __future__ import annotations

import inspect
import types
from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING, Any, Union, get_args, get_origin

from verso.http.response import Response
from verso.versioning.extract import (
    CompositeReader,
    HeaderReader,
    PathSegmentReader,
    QueryReader,
    VersionReader,
)

if TYPE_CHECKING:
    from verso.routing.route import Binding
    from verso.versioning.registry import VersionRegistry
    from verso.versioning.reporter import VersionDescription
    from verso.versioning.version import Version

OPENAPI_VERSION = "3.0.3"

# Python type → JSON Schema type
_TYPE_MAP: dict[type, str] = {
    str: "string",
    int: "integer",
    float: "number",
    bool: "boolean",
}

# Path converter → JSON Schema type
_CONVERTER_MAP: dict[str, str] = {
    "str": "string",
    "int": "integer",
    "float": "number",
    "path": "string",
}


def document_title(title: str, description: VersionDescription) -> str:
    """``"Api Versioning - v1.0"``, with a marker for deprecated versions."""
    text = f"{title} - v{description.version}"
    if description.deprecated:
        text += " - DEPRECATED"
    return text


def build_openapi(
    description: VersionDescription,
    bindings: Iterable[Binding],
    *,
    registry: VersionRegistry,
    reader: VersionReader,
    title: str = "Api Versioning",
    summary: str = "Versioned web API",
    version_required: bool = False,
) -> dict[str, Any]:
    """Build the OpenAPI document for one version.

    Args:
        description: The manifest entry being documented.
        bindings: All bindings of the route table; filtered to this version.
        registry: Used to find each binding's group prefix.
        reader: Decides how the version is carried in documented requests.
        title: Base title; the version (and deprecation) is appended.
        summary: Base description; the version is appended.
        version_required: Mark query/header version parameters as required.
    """
    version = description.version
    paths: dict[str, dict[str, Any]] = {}

    for binding in bindings:
        if binding.version != version:
            continue
        if description.group and binding.group != description.group:
            continue

        prefix = registry.get(binding.group).prefix if binding.group in registry else ""
        path = _documented_path(binding, prefix, reader, version)
        item = paths.setdefault(path, {})
        for method in sorted(binding.methods):
            item[method.lower()] = _operation(binding, method, reader, version, version_required)

    info: dict[str, Any] = {
        "title": document_title(title, description),
        "version": str(version),
        "description": f"{summary} - v{version}",
    }
    return {
        "openapi": OPENAPI_VERSION,
        "info": info,
        "paths": dict(sorted(paths.items())),
    }


def _primary(reader: VersionReader) -> VersionReader:
    if isinstance(reader, CompositeReader):
        return reader.readers[0]
    return reader


def _documented_path(
    binding: Binding,
    prefix: str,
    reader: VersionReader,
    version: Version,
) -> str:
    """Template path as a client calls it, version substituted for path readers."""
    primary = _primary(reader)
    parts = [f"{{{s.param_name}}}" if s.is_param else s.value for s in binding.segments]
    if not isinstance(primary, PathSegmentReader):
        return "/" + "/".join(parts)

    segment = f"{primary.prefix}{version.group_name[1:]}"
    if primary.position is not None:
        index = primary.position
    else:
        index = len([p for p in prefix.split("/") if p])
    parts.insert(min(index, len(parts)), segment)
    return "/" + "/".join(parts)


def _operation(
    binding: Binding,
    method: str,
    reader: VersionReader,
    version: Version,
    version_required: bool,
) -> dict[str, Any]:
    handler = binding.handler
    name = getattr(handler, "__name__", "handler")
    operation: dict[str, Any] = {
        "operationId": f"{name}_{method.lower()}_{version.group_name}".replace(".", "_"),
        "tags": [binding.group] if binding.group else [],
        "parameters": _parameters(binding, reader, version, version_required),
        "responses": {"200": _response(handler)},
    }
    doc = inspect.getdoc(handler)
    if doc:
        operation["summary"] = doc.splitlines()[0]
    return operation


def _parameters(
    binding: Binding,
    reader: VersionReader,
    version: Version,
    version_required: bool,
) -> list[dict[str, Any]]:
    params: list[dict[str, Any]] = [
        {
            "name": seg.param_name,
            "in": "path",
            "required": True,
            "schema": {"type": _CONVERTER_MAP.get(seg.param_type, "string")},
        }
        for seg in binding.segments
        if seg.is_param
    ]

    primary = _primary(reader)
    location = None
    if isinstance(primary, QueryReader):
        location = "query"
    elif isinstance(primary, HeaderReader):
        location = "header"
    if location is not None:
        params.append(
            {
                "name": primary.name,
                "in": location,
                "required": version_required,
                "schema": {"type": "string", "default": str(version)},
            }
        )
    return params


def _response(handler: Callable[..., Any]) -> dict[str, Any]:
    """Success response, with a schema when the return type is annotated."""
    try:
        annotation = inspect.signature(handler, eval_str=True).return_annotation
    except (NameError, TypeError, ValueError):
        annotation = inspect.Signature.empty
    if annotation in (inspect.Signature.empty, None, Response):
        return {"description": "Success"}
    schema = _type_to_schema(annotation)
    media = "text/plain" if schema == {"type": "string"} else "application/json"
    return {"description": "Success", "content": {media: {"schema": schema}}}


def _type_to_schema(annotation: Any) -> dict[str, Any]:
    """Convert a Python type annotation to a JSON Schema fragment."""
    if annotation in _TYPE_MAP:
        return {"type": _TYPE_MAP[annotation]}

    origin = get_origin(annotation)
    if origin is Union or origin is types.UnionType:
        non_none = [a for a in get_args(annotation) if a is not type(None)]
        if len(non_none) == 1:
            return _type_to_schema(non_none[0])
        return {"type": "string"}

    if origin in (list, tuple) or annotation in (list, tuple):
        args = get_args(annotation)
        if args and args[0] in _TYPE_MAP:
            return {"type": "array", "items": {"type": _TYPE_MAP[args[0]]}}
        return {"type": "array"}

    if origin is dict or annotation is dict:
        return {"type": "object"}

    return {"type": "string"}

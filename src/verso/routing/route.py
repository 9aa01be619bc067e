"""Binding and RouteMatch frozen dataclasses."""

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from verso.versioning.version import Version


@dataclass(frozen=True, slots=True)
class PathSegment:
    """A parsed segment of a route path.

    Static:  ``/users``  (is_param=False)
    Param:   ``/{id}``   (is_param=True, param_name="id")
    Typed:   ``/{id:int}`` (is_param=True, param_name="id", param_type="int")
    """

    value: str
    is_param: bool = False
    param_name: str | None = None
    param_type: str = "str"

    @property
    def shape(self) -> str:
        """The segment with its parameter name erased: ``{:int}``, ``users``."""
        if self.is_param:
            return f"{{:{self.param_type}}}"
        return self.value


@dataclass(frozen=True, slots=True)
class Binding:
    """A frozen (path template, methods, version) -> handler binding.

    Created during app setup, compiled into the router at freeze time.
    ``group`` names the version group the binding belongs to.
    """

    path: str
    handler: Callable[..., Any]
    methods: frozenset[str]
    version: Version
    group: str = ""
    name: str | None = None
    segments: tuple[PathSegment, ...] = field(default=(), compare=False, repr=False)

    @property
    def param_names(self) -> tuple[str, ...]:
        return tuple(s.param_name or "" for s in self.segments if s.is_param)


@dataclass(frozen=True, slots=True)
class RouteMatch:
    """Result of a successful route lookup."""

    binding: Binding
    path_params: dict[str, str]

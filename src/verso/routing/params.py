"""Path parameter converters.

Built-in converters for route path segments like ``{id:int}``. The
pattern decides whether a segment matches; the type converts the captured
string before it reaches the handler.
"""


# (regex_pattern, python_type) for each supported converter
CONVERTERS: dict[str, tuple[str, type]] = {
    "str": (r"[^/]+", str),
    "int": (r"\d+", int),
    "float": (r"\d+(?:\.\d+)?", float),
    "path": (r".+", str),
}


def convert_param(value: str, param_type: str) -> str | int | float:
    """Convert a captured path parameter string to the target type.

    Raises ``ValueError`` if the string cannot be converted.
    Raises ``KeyError`` if *param_type* is not a registered converter.
    """
    _, target_type = CONVERTERS[param_type]
    return target_type(value)


def typed_params(segments: tuple, path_params: dict[str, str]) -> dict[str, object]:
    """Convert every captured parameter by its declared converter.

    *segments* are the binding's parsed ``PathSegment`` objects.
    """
    types = {s.param_name: s.param_type for s in segments if s.is_param}
    return {
        name: convert_param(value, types.get(name, "str"))
        for name, value in path_params.items()
    }

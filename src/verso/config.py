"""Application configuration.

AppConfig is a frozen dataclass — immutable after creation, IDE-autocompletable,
no string-key dict lookups.
"""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Application configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = AppConfig(extraction_strategy="query", assume_default_when_unspecified=False)

    A tuple of strategies composes readers with first-match-wins precedence::

        AppConfig(extraction_strategy=("path-segment", "header"))
    """

    # Server
    host: str = "127.0.0.1"
    port: int = 8000
    debug: bool = False

    # Reload (development mode, requires debug=True)
    reload_include: tuple[str, ...] = ()  # Extra extensions to watch (e.g. ".toml")
    reload_dirs: tuple[str, ...] = ()  # Extra directories to watch alongside cwd

    # Production
    workers: int = 0  # 0 = auto-detect from CPU count
    log_level: str = "info"

    # Version extraction: "path-segment" | "query" | "header" | "media-type"
    extraction_strategy: str | tuple[str, ...] = "path-segment"
    # Path prefix ("v"), query key ("api-version"), header ("X-Api-Version"),
    # or media type parameter ("v"). None = the strategy's default.
    parameter_name: str | None = None
    # Path-segment only: fixed segment index of the version (None = scan)
    version_position: int | None = None

    # Version resolution
    default_version: str = "1.0"  # Used by groups that don't name a default
    assume_default_when_unspecified: bool = True

    # Response headers: api-supported-versions / api-deprecated-versions
    report_api_versions: bool = True
    # Response header: Deprecation: true (when the resolved version is deprecated)
    report_deprecated: bool = True

    # API documents
    docs_enabled: bool = True
    docs_path: str = "/docs"
    openapi_path: str = "/openapi"
    docs_title: str = "Api Versioning"
    docs_description: str = "Versioned web API"

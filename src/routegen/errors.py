"""routegen exception hierarchy.

Every failure of a derivation is a build-time failure: library code raises one
of these and the CLI reports it and exits non-zero.
"""

from __future__ import annotations

from typing import Optional

from routegen.domain.declarations import SourceLocation


class RouteGenError(Exception):
    """Base for all routegen errors."""

    def __init__(self, message: str, location: Optional[SourceLocation] = None) -> None:
        super().__init__(message)
        self.message = message
        self.location = location

    def __str__(self) -> str:
        if self.location is None:
            return self.message
        return f"{self.location}: {self.message}"


class ConfigurationError(RouteGenError):
    """Raised when ``[tool.routegen]`` cannot be loaded or validated."""


class InvalidDeclaration(RouteGenError):  # noqa: N818
    """The declaration file is not valid Python or not a valid route set."""


class EmptyEnumeration(RouteGenError):  # noqa: N818
    """A route set declares no variants."""


class MalformedAnnotation(RouteGenError):  # noqa: N818
    """A route annotation does not read ``method, "url/template"``."""


class ArityMismatch(RouteGenError):  # noqa: N818
    """Placeholder count differs from the field count of a positional variant."""


class InvalidPlaceholder(RouteGenError):  # noqa: N818
    """A placeholder name cannot be bound to a field: not an identifier, or repeated."""


class UnsupportedShape(RouteGenError):  # noqa: N818
    """A variant uses named fields."""


class MissingRoute(RouteGenError):  # noqa: N818
    """A variant has no route annotation while every variant must be routed."""


class DuplicateRoute(RouteGenError):  # noqa: N818
    """A variant carries more than one route annotation."""


class GeneratedCodeError(RouteGenError):
    """The rendered module does not compile."""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import cached_property
from typing import Literal, Optional

from routegen.core.placeholders import extract_placeholders

ShapeKind = Literal["unit", "positional", "named"]


@dataclass(frozen=True)
class SourceLocation:
    file_path: str
    line: int
    column: int = 0

    def __str__(self) -> str:
        # columns are 0-based in ast, editors count from 1
        return f"{self.file_path}:{self.line}:{self.column + 1}"


@dataclass(frozen=True)
class Shape:
    """Data carried by a variant.

    ``fields`` holds the source text of each field: type expressions for a
    positional shape, attribute names for a named one.
    """

    kind: ShapeKind
    fields: tuple[str, ...] = ()

    @classmethod
    def unit(cls) -> "Shape":
        return cls(kind="unit")

    @classmethod
    def positional(cls, *types: str) -> "Shape":
        return cls(kind="positional", fields=tuple(types))

    @classmethod
    def named(cls, *names: str) -> "Shape":
        return cls(kind="named", fields=tuple(names))


@dataclass(frozen=True)
class RouteAnnotation:
    """Raw route annotation as found on a variant, before parsing.

    ``text`` is the argument text between the call parentheses, or None when
    the marker was used without a call.
    """

    text: Optional[str]
    location: Optional[SourceLocation] = None


@dataclass(frozen=True)
class RouteSpec:
    method: str
    url_template: str
    location: Optional[SourceLocation] = None

    @cached_property
    def placeholders(self) -> tuple[str, ...]:
        return tuple(extract_placeholders(self.url_template))


@dataclass(frozen=True)
class Variant:
    name: str
    shape: Shape
    annotations: tuple[RouteAnnotation, ...] = ()
    docstring: Optional[str] = None
    location: Optional[SourceLocation] = None


@dataclass(frozen=True)
class TargetType:
    name: str
    variants: tuple[Variant, ...] = ()
    docstring: Optional[str] = None
    location: Optional[SourceLocation] = None
    # 1-based inclusive line span of the class, decorators included
    start_line: int = 0
    end_line: int = 0


@dataclass(frozen=True)
class DispatchBranch:
    """One ``if isinstance(...)`` arm of a generated resolver."""

    variant_name: str
    lines: tuple[str, ...] = field(default_factory=tuple)

    def render(self, indent: str = "    ") -> str:
        return "\n".join(indent + line if line else line for line in self.lines)

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, Field

from routegen.orchestrator.derive import DerivedRouteSet


class RouteEntry(BaseModel):
    variant: str
    shape: Literal["unit", "positional"]
    fields: list[str] = Field(default_factory=list)
    method: Optional[str] = None
    url_template: Optional[str] = None
    placeholders: list[str] = Field(default_factory=list)
    line: int = 0


class RouteSetReport(BaseModel):
    name: str
    file_path: str = ""
    line: int = 0
    routes: list[RouteEntry] = Field(default_factory=list)
    unrouted: list[str] = Field(default_factory=list)


def report_route_set(derived: DerivedRouteSet) -> RouteSetReport:
    specs = {r.variant.name: r.spec for r in derived.routed}
    entries: list[RouteEntry] = []

    # declaration order, routed or not
    for v in derived.target.variants:
        spec = specs.get(v.name)
        entries.append(
            RouteEntry(
                variant=v.name,
                shape=v.shape.kind,
                fields=list(v.shape.fields),
                method=spec.method if spec else None,
                url_template=spec.url_template if spec else None,
                placeholders=list(spec.placeholders) if spec else [],
                line=v.location.line if v.location else 0,
            )
        )

    location = derived.target.location
    return RouteSetReport(
        name=derived.target.name,
        file_path=location.file_path if location else "",
        line=location.line if location else 0,
        routes=entries,
        unrouted=[v.name for v in derived.unrouted],
    )

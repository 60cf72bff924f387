"""
Generator configuration.

Read from the ``[tool.routegen]`` table of a project's pyproject.toml:

    [tool.routegen]
    method_type = "HttpMethod"
    require_all_routed = true
"""

from __future__ import annotations

import tomllib
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, ValidationError

from routegen.errors import ConfigurationError


class RouteGenConfig(BaseModel):
    """Options shared by every derivation of a build."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    # decorator marking a class as a route set: @routes
    derive_marker: str = "routes"
    # decorator carrying a variant's route: @route(Get, "/x")
    route_attribute: str = "route"
    # name the generated code uses for the method enumeration
    method_type: str = "Method"
    declaration_suffix: str = ".routes.py"

    # fail instead of leaving unannotated variants without a branch
    require_all_routed: bool = False
    # fail instead of keeping the first of several route annotations
    reject_duplicate_routes: bool = False
    # compile() the rendered module before writing it
    verify_output: bool = True


def load_config(pyproject: Optional[Path] = None, **overrides: Any) -> RouteGenConfig:
    """
    Load configuration from `pyproject` (missing file or table -> defaults).
    Keyword overrides whose value is None are ignored.
    """
    data: dict[str, Any] = {}

    if pyproject is not None and pyproject.exists():
        try:
            with open(pyproject, "rb") as f:
                document = tomllib.load(f)
        except tomllib.TOMLDecodeError as exc:
            raise ConfigurationError(f"{pyproject}: {exc}") from exc
        data.update(document.get("tool", {}).get("routegen", {}))

    data.update({k: v for k, v in overrides.items() if v is not None})

    try:
        return RouteGenConfig(**data)
    except ValidationError as exc:
        raise ConfigurationError(f"invalid [tool.routegen] configuration:\n{exc}") from exc


def find_pyproject(start: Path) -> Optional[Path]:
    """Closest pyproject.toml at or above `start`."""
    start = start.resolve()
    for directory in (start, *start.parents):
        candidate = directory / "pyproject.toml"
        if candidate.is_file():
            return candidate
    return None

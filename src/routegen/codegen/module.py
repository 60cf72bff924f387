from __future__ import annotations

import os
import textwrap
from typing import Iterable, Optional

from routegen.config import RouteGenConfig
from routegen.domain.declarations import Variant
from routegen.extractors.declarations import DeclarationModule
from routegen.orchestrator.derive import DerivedRouteSet

RUNTIME_MODULE = "routegen.runtime"
_INDENT = "    "


def generated_header(file_path: str) -> str:
    return f"# Code generated by routegen from {os.path.basename(file_path)}. DO NOT EDIT.\n"


def render_module(
    declaration: DeclarationModule,
    derived: Iterable[DerivedRouteSet],
    config: Optional[RouteGenConfig] = None,
) -> str:
    """
    Splice rendered route sets into the declaration text.

    Each declared class (decorators included) is replaced in place; the rest
    of the file is kept verbatim. The runtime import goes right after the
    last import above the first route set.
    """
    config = config or RouteGenConfig()
    derived = sorted(derived, key=lambda d: d.target.start_line)

    lines = declaration.source.splitlines(keepends=True)
    runtime_names: set[str] = set()

    # bottom-up so earlier line numbers stay valid
    for d in reversed(derived):
        block = render_route_set(d, method_type=config.method_type)
        lines[d.target.start_line - 1 : d.target.end_line] = [block]
        runtime_names.update(_runtime_names(d))

    if derived:
        names = ", ".join(sorted(runtime_names))
        anchor = declaration.import_anchor_line
        if anchor and not lines[anchor - 1].endswith("\n"):
            lines[anchor - 1] += "\n"
        lines.insert(anchor, f"from {RUNTIME_MODULE} import {names}\n")

    return generated_header(declaration.file_path) + "".join(lines)


def render_route_set(derived: DerivedRouteSet, method_type: str = "Method") -> str:
    target = derived.target
    parts: list[str] = []

    body: list[str] = []
    if target.docstring is not None:
        body.append(_docstring(target.docstring))
        body.append("")
    body.append("__slots__ = ()")
    body.append("")
    body.append(derived.resolver.rstrip("\n"))

    parts.append(f"class {target.name}(RouteSet):\n" + _indent_block(body))

    for variant in target.variants:
        parts.append(_render_variant(target.name, variant))

    return "\n\n\n".join(parts) + "\n"


def _render_variant(target_name: str, variant: Variant) -> str:
    class_name = f"_{target_name}_{variant.name}"
    body: list[str] = []
    if variant.docstring is not None:
        body.append(_docstring(variant.docstring))
        body.append("")
    body.append("__slots__ = ()")

    if variant.shape.kind == "unit":
        base = "UnitVariant"
    else:
        base = "TupleVariant"
        params = [f"_{i}: {t}" for i, t in enumerate(variant.shape.fields)]
        values = [f"_{i}" for i in range(len(params))]
        packed = f"({values[0]},)" if len(values) == 1 else f"({', '.join(values)})"
        body.append("")
        body.append(f"def __new__({', '.join(['cls', *params])}):")
        body.append(f"    return tuple.__new__(cls, {packed})")

    return (
        f'@{target_name}.variant("{variant.name}")\n'
        f"class {class_name}({target_name}, {base}):\n" + _indent_block(body)
    )


def _runtime_names(derived: DerivedRouteSet) -> set[str]:
    names = {"RouteSet"}
    for v in derived.target.variants:
        names.add("UnitVariant" if v.shape.kind == "unit" else "TupleVariant")
    return names


def _docstring(text: str) -> str:
    if '"""' in text or "\\" in text or text.endswith('"'):
        return repr(text)
    if "\n" not in text:
        return f'"""{text}"""'
    return f'"""{text}\n"""'


def _indent_block(lines: list[str]) -> str:
    text = "\n".join(lines)
    return textwrap.indent(text, _INDENT) + "\n"

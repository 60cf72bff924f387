from __future__ import annotations

import keyword
import logging

from routegen.core.placeholders import PLACEHOLDER
from routegen.domain.declarations import DispatchBranch, RouteSpec, Variant
from routegen.errors import ArityMismatch, InvalidPlaceholder, UnsupportedShape

logger = logging.getLogger(__name__)


def synthesize_arm(
    target_name: str,
    variant: Variant,
    spec: RouteSpec,
    method_type: str = "Method",
) -> DispatchBranch:
    """
    Build the dispatch branch of one routed variant.

    Unit variants return the template untouched. Positional variants bind
    their fields, in declared order, to the template's placeholders; the URL
    is rebuilt from the literal segments and the fields' textual form, so no
    brace outside a placeholder is ever interpreted.
    """
    kind = variant.shape.kind
    if kind == "unit":
        return _unit_arm(target_name, variant, spec, method_type)
    if kind == "positional":
        return _positional_arm(target_name, variant, spec, method_type)

    raise UnsupportedShape(
        f"variant {target_name}.{variant.name} uses named fields; "
        "only unit and positional (tuple[...]) variants are supported",
        variant.location,
    )


def _unit_arm(
    target_name: str, variant: Variant, spec: RouteSpec, method_type: str
) -> DispatchBranch:
    method = f"{method_type}.{spec.method}"
    return DispatchBranch(
        variant_name=variant.name,
        lines=(
            f"if isinstance(self, {target_name}.{variant.name}):",
            f"    return ({method}, {spec.url_template!r})",
        ),
    )


def _positional_arm(
    target_name: str, variant: Variant, spec: RouteSpec, method_type: str
) -> DispatchBranch:
    names = list(spec.placeholders)
    fields = variant.shape.fields

    if len(names) != len(fields):
        raise ArityMismatch(
            f"variant {target_name}.{variant.name} has {len(fields)} field(s) but "
            f"route {spec.url_template!r} has {len(names)} placeholder(s); "
            "they must match one to one",
            spec.location or variant.location,
        )

    _check_binding_names(target_name, variant, spec, names)

    logger.debug(
        "arm %s.%s binds %s",
        target_name,
        variant.name,
        ", ".join(f"{n}: {t}" for n, t in zip(names, fields)) or "nothing",
    )

    method = f"{method_type}.{spec.method}"
    return DispatchBranch(
        variant_name=variant.name,
        lines=(
            f"if isinstance(self, {target_name}.{variant.name}):",
            f"    return ({method}, {_url_expression(spec.url_template)})",
        ),
    )


def _check_binding_names(
    target_name: str, variant: Variant, spec: RouteSpec, names: list[str]
) -> None:
    # substitution is by name: every placeholder must be a distinct identifier
    location = spec.location or variant.location
    for i, name in enumerate(names):
        if not name.isidentifier() or keyword.iskeyword(name):
            raise InvalidPlaceholder(
                f"variant {target_name}.{variant.name}: placeholder {{{name}}} in "
                f"{spec.url_template!r} is not a valid field name",
                location,
            )
        if name in names[:i]:
            raise InvalidPlaceholder(
                f"variant {target_name}.{variant.name}: placeholder {{{name}}} appears "
                f"more than once in {spec.url_template!r}",
                location,
            )


def _url_expression(template: str) -> str:
    """
    "/users/{id}/posts/{post}" ->
      '/users/' + format(self[0], '') + '/posts/' + format(self[1], '')
    Literal segments are copied verbatim, braces included.
    """
    parts: list[str] = []
    pos = 0
    for i, m in enumerate(PLACEHOLDER.finditer(template)):
        if m.start() > pos:
            parts.append(repr(template[pos : m.start()]))
        parts.append(f"format(self[{i}], '')")
        pos = m.end()
    if pos < len(template) or not parts:
        parts.append(repr(template[pos:]))
    return " + ".join(parts)

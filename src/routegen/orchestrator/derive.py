from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from routegen.config import RouteGenConfig
from routegen.core.annotation import parse_route_annotation
from routegen.core.arms import synthesize_arm
from routegen.domain.declarations import DispatchBranch, RouteSpec, TargetType, Variant
from routegen.errors import (
    DuplicateRoute,
    EmptyEnumeration,
    MalformedAnnotation,
    MissingRoute,
    UnsupportedShape,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RoutedVariant:
    variant: Variant
    spec: RouteSpec
    branch: DispatchBranch


@dataclass(frozen=True)
class DerivedRouteSet:
    target: TargetType
    routed: tuple[RoutedVariant, ...]
    unrouted: tuple[Variant, ...]
    resolver: str  # source text of the resolve method, unindented


def derive_route_set(target: TargetType, config: Optional[RouteGenConfig] = None) -> DerivedRouteSet:
    """
    Derive the resolver of one route set.

    Linear, fail-fast pass:
      1. reject an empty route set
      2. pick the first route annotation of each variant and parse it
      3. synthesize one branch per routed variant
      4. assemble the branches into `resolve`
    Nothing is produced when any step fails.
    """
    config = config or RouteGenConfig()

    if not target.variants:
        raise EmptyEnumeration(
            f"cannot derive routes for {target.name}: it declares no variants",
            target.location,
        )

    routed: list[RoutedVariant] = []
    unrouted: list[Variant] = []

    for variant in target.variants:
        if variant.shape.kind == "named":
            raise UnsupportedShape(
                f"variant {target.name}.{variant.name} uses named fields; "
                "only unit and positional (tuple[...]) variants are supported",
                variant.location,
            )

        spec = _select_route(target, variant, config)
        if spec is None:
            unrouted.append(variant)
            continue

        branch = synthesize_arm(target.name, variant, spec, method_type=config.method_type)
        routed.append(RoutedVariant(variant=variant, spec=spec, branch=branch))

    if unrouted:
        names = ", ".join(v.name for v in unrouted)
        if config.require_all_routed:
            raise MissingRoute(
                f"{target.name}: variant(s) without a route annotation: {names}",
                unrouted[0].location,
            )
        logger.warning(
            "%s: no route for %s; resolve() raises UnroutedVariantError for them",
            target.name,
            names,
        )

    resolver = assemble_resolver(target.name, [r.branch for r in routed], config.method_type)
    logger.debug("derived %s: %d branch(es)", target.name, len(routed))

    return DerivedRouteSet(
        target=target,
        routed=tuple(routed),
        unrouted=tuple(unrouted),
        resolver=resolver,
    )


def derive_resolver(target: TargetType, config: Optional[RouteGenConfig] = None) -> str:
    return derive_route_set(target, config).resolver


def assemble_resolver(target_name: str, branches: list[DispatchBranch], method_type: str = "Method") -> str:
    lines = [f"def resolve(self) -> tuple[{method_type}, str]:"]
    for branch in branches:
        lines.append(branch.render())
    lines.append("    raise self.unrouted()")
    return "\n".join(lines) + "\n"


def _select_route(target: TargetType, variant: Variant, config: RouteGenConfig) -> Optional[RouteSpec]:
    if not variant.annotations:
        return None

    first, *rest = variant.annotations
    if rest:
        if config.reject_duplicate_routes:
            raise DuplicateRoute(
                f"variant {target.name}.{variant.name} has {len(variant.annotations)} "
                f"@{config.route_attribute} annotations; only one is allowed",
                rest[0].location,
            )
        logger.warning(
            "%s.%s: %d extra @%s annotation(s) ignored, first one wins",
            target.name,
            variant.name,
            len(rest),
            config.route_attribute,
        )

    if first.text is None:
        raise MalformedAnnotation(
            f'@{config.route_attribute} needs arguments: @{config.route_attribute}(Method, "/url")',
            first.location,
        )
    return parse_route_annotation(first.text, first.location)

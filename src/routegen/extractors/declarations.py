from __future__ import annotations

import ast
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional

from routegen.config import RouteGenConfig
from routegen.domain.declarations import (
    RouteAnnotation,
    Shape,
    SourceLocation,
    TargetType,
    Variant,
)
from routegen.errors import InvalidDeclaration

_TUPLE_NAMES = {"tuple", "Tuple"}
_NAMED_BASES = {"NamedTuple", "TypedDict"}
# attributes of routegen.runtime.RouteSet a variant must not shadow
_RESERVED_NAMES = {"resolve", "unrouted", "variant"}


@dataclass(frozen=True)
class DeclarationModule:
    file_path: str
    source: str
    targets: tuple[TargetType, ...]
    # end line of the last module-level import above the first route set, or
    # of the module docstring when there is none (0: top of file)
    import_anchor_line: int = 0


def read_declarations(
    source: str,
    filename: str = "<routes>",
    config: Optional[RouteGenConfig] = None,
) -> DeclarationModule:
    """
    Parse a declaration file and describe its route sets:
      @routes
      class Api:
          @route(Get, "/users/{id}")
          class GetUser(tuple[int]): ...
    Uses ast only; does not import/execute code.
    """
    config = config or RouteGenConfig()
    try:
        tree = ast.parse(source, filename=filename)
    except SyntaxError as exc:
        raise InvalidDeclaration(
            f"invalid syntax: {exc.msg}",
            SourceLocation(filename, exc.lineno or 1, max((exc.offset or 1) - 1, 0)),
        ) from exc

    targets: list[TargetType] = []
    for node in tree.body:
        if isinstance(node, ast.ClassDef) and _has_marker(node.decorator_list, config.derive_marker):
            targets.append(_read_target(node, source, filename, config))

    return DeclarationModule(
        file_path=filename,
        source=source,
        targets=tuple(targets),
        import_anchor_line=_import_anchor(tree, targets),
    )


def read_declaration_file(path: Path, config: Optional[RouteGenConfig] = None) -> DeclarationModule:
    source = path.read_text(encoding="utf-8")
    return read_declarations(source, filename=str(path), config=config)


def _read_target(
    node: ast.ClassDef, source: str, filename: str, config: RouteGenConfig
) -> TargetType:
    location = _location(filename, node)

    if node.bases or node.keywords:
        raise InvalidDeclaration(
            f"route set {node.name} must not declare bases or keywords", location
        )

    variants: list[Variant] = []
    for stmt in _body_without_docstring(node):
        if isinstance(stmt, ast.ClassDef):
            if any(v.name == stmt.name for v in variants):
                raise InvalidDeclaration(
                    f"route set {node.name} declares variant {stmt.name} twice",
                    _location(filename, stmt),
                )
            variants.append(_read_variant(stmt, source, filename, config))
        elif not _is_filler(stmt):
            raise InvalidDeclaration(
                f"route set {node.name} may only contain variant classes",
                _location(filename, stmt),
            )

    start_line = min([d.lineno for d in node.decorator_list] + [node.lineno])
    return TargetType(
        name=node.name,
        variants=tuple(variants),
        docstring=ast.get_docstring(node),
        location=location,
        start_line=start_line,
        end_line=node.end_lineno or node.lineno,
    )


def _read_variant(
    node: ast.ClassDef, source: str, filename: str, config: RouteGenConfig
) -> Variant:
    location = _location(filename, node)
    if node.name in _RESERVED_NAMES or node.name.startswith("__"):
        raise InvalidDeclaration(
            f"variant name {node.name!r} clashes with a generated attribute", location
        )
    annotations = tuple(
        _read_annotation(dec, source, filename)
        for dec in node.decorator_list
        if _decorator_name(dec) == config.route_attribute
    )
    return Variant(
        name=node.name,
        shape=_read_shape(node, filename),
        annotations=annotations,
        docstring=ast.get_docstring(node),
        location=location,
    )


def _read_shape(node: ast.ClassDef, filename: str) -> Shape:
    location = _location(filename, node)

    named = [
        ast.unparse(stmt.target)
        for stmt in node.body
        if isinstance(stmt, ast.AnnAssign)
    ]
    base_names = [_name_of_expr(b) for b in node.bases]
    if named or any(b in _NAMED_BASES for b in base_names):
        return Shape.named(*named)

    if node.keywords:
        raise InvalidDeclaration(f"variant {node.name} must not declare keywords", location)
    for stmt in _body_without_docstring(node):
        if not _is_filler(stmt):
            raise InvalidDeclaration(
                f"variant {node.name} may only contain a docstring",
                _location(filename, stmt),
            )
    if not node.bases:
        return Shape.unit()
    if len(node.bases) > 1:
        raise InvalidDeclaration(
            f"variant {node.name} must have at most one base, tuple[...]", location
        )

    base = node.bases[0]
    if not (isinstance(base, ast.Subscript) and _name_of_expr(base.value) in _TUPLE_NAMES):
        raise InvalidDeclaration(
            f"variant {node.name}: unsupported base {ast.unparse(base)!r}, "
            "use tuple[...] for positional fields",
            location,
        )

    # tuple[int] / tuple[int, str] / tuple[()]
    elts = base.slice.elts if isinstance(base.slice, ast.Tuple) else [base.slice]
    if any(isinstance(e, ast.Constant) and e.value is Ellipsis for e in elts):
        raise InvalidDeclaration(
            f"variant {node.name}: variable-length tuple[...] is not a fixed field list",
            location,
        )
    return Shape.positional(*(ast.unparse(e) for e in elts))


def _read_annotation(dec: ast.expr, source: str, filename: str) -> RouteAnnotation:
    location = _location(filename, dec)
    if not isinstance(dec, ast.Call):
        return RouteAnnotation(text=None, location=location)

    segment = ast.get_source_segment(source, dec)
    func = ast.get_source_segment(source, dec.func)
    if segment is None or func is None:
        # source positions missing; fall back to the unparsed arguments
        args = [ast.unparse(a) for a in dec.args]
        args += [ast.unparse(k) for k in dec.keywords]
        return RouteAnnotation(text=", ".join(args), location=location)

    # "route(Get, '/x')" -> "Get, '/x'"
    inner = segment[len(func):].strip()
    return RouteAnnotation(text=inner[1:-1], location=location)


def _has_marker(decorators: Iterable[ast.expr], marker: str) -> bool:
    return any(_decorator_name(d) == marker for d in decorators)


def _decorator_name(dec: ast.expr) -> Optional[str]:
    # @routes, @routegen.routes, @route(...), @markers.route(...)
    if isinstance(dec, ast.Call):
        dec = dec.func
    if isinstance(dec, ast.Name):
        return dec.id
    if isinstance(dec, ast.Attribute):
        return dec.attr
    return None


def _name_of_expr(node: ast.AST) -> str:
    if isinstance(node, ast.Name):
        return node.id
    if isinstance(node, ast.Attribute):
        return node.attr
    if isinstance(node, ast.Subscript):
        return _name_of_expr(node.value)
    return node.__class__.__name__


def _body_without_docstring(node: ast.ClassDef) -> list[ast.stmt]:
    body = list(node.body)
    if ast.get_docstring(node, clean=False) is not None:
        body = body[1:]
    return body


def _is_filler(stmt: ast.stmt) -> bool:
    if isinstance(stmt, ast.Pass):
        return True
    return (
        isinstance(stmt, ast.Expr)
        and isinstance(stmt.value, ast.Constant)
        and stmt.value.value is Ellipsis
    )


def _import_anchor(tree: ast.Module, targets: list[TargetType]) -> int:
    first_target = min((t.start_line for t in targets), default=None)
    anchor = 0

    body = tree.body
    if body and isinstance(body[0], ast.Expr) and isinstance(body[0].value, ast.Constant):
        if isinstance(body[0].value.value, str):
            anchor = body[0].end_lineno or body[0].lineno

    for stmt in body:
        if first_target is not None and stmt.lineno >= first_target:
            break
        if isinstance(stmt, (ast.Import, ast.ImportFrom)):
            anchor = stmt.end_lineno or stmt.lineno
    return anchor


def _location(filename: str, node: ast.AST) -> SourceLocation:
    return SourceLocation(
        file_path=filename,
        line=getattr(node, "lineno", 1) or 1,
        column=getattr(node, "col_offset", 0) or 0,
    )

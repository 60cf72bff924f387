from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from routegen.codegen.module import render_module
from routegen.config import RouteGenConfig
from routegen.errors import GeneratedCodeError
from routegen.extractors.declarations import DeclarationModule, read_declaration_file
from routegen.orchestrator.derive import DerivedRouteSet, derive_route_set
from routegen.repo.scanner import scan_declaration_files

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GenerateResult:
    source_path: Path
    output_path: Path
    route_sets: list[DerivedRouteSet]
    text: str
    written: bool  # False when output was unchanged or write=False


@dataclass(frozen=True)
class BuildResult:
    root: Path
    files_scanned: int
    results: list[GenerateResult]

    @property
    def written_files(self) -> int:
        return sum(1 for r in self.results if r.written)

    @property
    def route_count(self) -> int:
        return sum(len(d.routed) for r in self.results for d in r.route_sets)


def output_path_for(path: Path, config: Optional[RouteGenConfig] = None) -> Path:
    """
    api.routes.py -> api.py
    api.py        -> api_routes.py
    """
    config = config or RouteGenConfig()
    suffix = config.declaration_suffix
    if suffix and path.name.endswith(suffix) and len(path.name) > len(suffix):
        return path.with_name(path.name[: -len(suffix)] + ".py")
    return path.with_name(f"{path.stem}_routes.py")


def derive_module(declaration: DeclarationModule, config: RouteGenConfig) -> list[DerivedRouteSet]:
    # each route set is derived on its own; the first failure aborts the file
    return [derive_route_set(t, config) for t in declaration.targets]


def generate_source(
    declaration: DeclarationModule, config: Optional[RouteGenConfig] = None
) -> tuple[list[DerivedRouteSet], str]:
    """Derive every route set of `declaration` and render the output module."""
    config = config or RouteGenConfig()
    derived = derive_module(declaration, config)
    text = render_module(declaration, derived, config)
    if config.verify_output:
        verify_generated(text, declaration.file_path)
    return derived, text


def verify_generated(text: str, file_path: str) -> None:
    """compile() the generated module; nothing is executed."""
    try:
        compile(text, file_path, "exec", dont_inherit=True)
    except SyntaxError as exc:
        raise GeneratedCodeError(
            f"module generated from {file_path} does not compile: {exc.msg} "
            f"(generated line {exc.lineno}: {(exc.text or '').strip()!r})"
        ) from exc


def generate_file(
    path: Path,
    config: Optional[RouteGenConfig] = None,
    out: Optional[Path] = None,
    write: bool = True,
) -> GenerateResult:
    config = config or RouteGenConfig()
    path = path.resolve()
    out_path = (out or output_path_for(path, config)).resolve()

    declaration = read_declaration_file(path, config)
    if not declaration.targets:
        logger.warning("%s: no @%s classes found", path, config.derive_marker)

    derived, text = generate_source(declaration, config)

    written = False
    if write:
        previous = out_path.read_text(encoding="utf-8") if out_path.exists() else None
        if previous != text:
            out_path.parent.mkdir(parents=True, exist_ok=True)
            out_path.write_text(text, encoding="utf-8")
            written = True
            logger.debug("wrote %s", out_path)
        else:
            logger.debug("unchanged %s", out_path)

    return GenerateResult(
        source_path=path,
        output_path=out_path,
        route_sets=derived,
        text=text,
        written=written,
    )


def run_build(
    root: Path,
    config: Optional[RouteGenConfig] = None,
    max_files: Optional[int] = None,
) -> BuildResult:
    config = config or RouteGenConfig()
    root = root.resolve()

    files = scan_declaration_files(root, suffix=config.declaration_suffix, max_files=max_files)
    logger.info("found %d declaration file(s) under %s", len(files), root)

    results = [generate_file(Path(p), config) for p in files]
    return BuildResult(root=root, files_scanned=len(files), results=results)

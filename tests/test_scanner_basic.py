from pathlib import Path

from routegen.repo.scanner import scan_declaration_files


def touch(p: Path) -> None:
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text("", encoding="utf-8")


def test_scan_declaration_files_sorted_and_pruned(tmp_path: Path):
    touch(tmp_path / "b.routes.py")
    touch(tmp_path / "a.routes.py")
    touch(tmp_path / "pkg" / "c.routes.py")
    touch(tmp_path / "pkg" / "c.py")
    touch(tmp_path / "__pycache__" / "x.routes.py")
    touch(tmp_path / "node_modules" / "y.routes.py")
    touch(tmp_path / "routegen.egg-info" / "z.routes.py")

    files = scan_declaration_files(tmp_path)
    rel = [Path(p).relative_to(tmp_path.resolve()).as_posix() for p in files]
    assert rel == ["a.routes.py", "b.routes.py", "pkg/c.routes.py"]


def test_scan_declaration_files_max_files_and_suffix(tmp_path: Path):
    touch(tmp_path / "a.routes.py")
    touch(tmp_path / "b.routes.py")
    touch(tmp_path / "c.decl.py")

    assert len(scan_declaration_files(tmp_path, max_files=1)) == 1
    files = scan_declaration_files(tmp_path, suffix=".decl.py")
    assert [Path(p).name for p in files] == ["c.decl.py"]

from __future__ import annotations

import os
from pathlib import Path

from routegen.repo.ignore import should_ignore_dir


def scan_declaration_files(
    root: Path, suffix: str = ".routes.py", max_files: int | None = None
) -> list[str]:
    """
    Return absolute paths (as strings) of declaration files under root.
    Directories and files are visited in sorted order so builds are stable.
    """
    out: list[str] = []
    for dirpath, dirs, files in os.walk(root):
        dir_p = Path(dirpath)

        # prune ignored dirs; sort in place so os.walk descends deterministically
        dirs[:] = sorted(d for d in dirs if not should_ignore_dir(dir_p / d))

        for f in sorted(files):
            if f.endswith(suffix):
                out.append(str((dir_p / f).resolve()))
                if max_files is not None and len(out) >= max_files:
                    return out
    return out

from __future__ import annotations

from dataclasses import dataclass
import os
import sys
from pathlib import Path
from typing import Dict, Optional


@dataclass(frozen=True)
class SourceLocation:
    file_path: Optional[Path] = None
    yaml_path: Optional[str] = None
    line: Optional[int] = None  # 1-based
    column: Optional[int] = None  # 1-based


def lookup_source(source_map: Optional[Dict[str, Dict[str, int]]], yaml_path: Optional[str]) -> SourceLocation:
    if not source_map or yaml_path is None:
        return SourceLocation(yaml_path=yaml_path)

    entry = source_map.get(yaml_path)
    if not entry:
        return SourceLocation(yaml_path=yaml_path)

    return SourceLocation(
        yaml_path=yaml_path,
        line=entry.get("line"),
        column=entry.get("column"),
    )


def capture_location(depth: int = 1) -> SourceLocation:
    """Return the file and line of the frame ``depth`` levels above the caller.

    ``depth=0`` is the function calling ``capture_location`` itself, ``depth=1``
    its caller, and so on. A depth beyond the top of the stack yields an empty
    location.
    """
    try:
        frame = sys._getframe(depth + 1)
    except ValueError:
        return SourceLocation()

    return SourceLocation(file_path=Path(frame.f_code.co_filename), line=frame.f_lineno)


def _infer_source_root() -> Optional[Path]:
    env_root = os.environ.get("SCHEMA_COVERAGE_SOURCE_ROOT")
    if env_root:
        return Path(env_root)
    return Path.cwd()


def _format_file_path(path: Path) -> str:
    root = _infer_source_root()
    if not root:
        return str(path)

    try:
        return str(path.resolve().relative_to(root.resolve()))
    except ValueError:
        return str(path)


def format_source(loc: Optional[SourceLocation]) -> str:
    if not loc:
        return ""

    parts = []
    if loc.file_path is not None:
        file_path = _format_file_path(loc.file_path)
        if loc.line is not None and loc.column is not None:
            parts.append(f"source= {file_path}:{loc.line}:{loc.column} ")
        elif loc.line is not None:
            parts.append(f"source= {file_path}:{loc.line} ")
        else:
            parts.append(f"source= {file_path} ")

    if loc.yaml_path:
        parts.append(f"yaml_path={loc.yaml_path}")

    if not parts:
        return ""

    return " (" + " ".join(parts) + ")"

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional

SourceMap = Dict[str, Dict[str, int]]


@dataclass(frozen=True)
class SourceLocation:
    file_path: Optional[Path] = None
    pointer: Optional[str] = None
    line: Optional[int] = None  # 1-based
    column: Optional[int] = None  # 1-based


def lookup_source(source_map: Optional[SourceMap], pointer: Optional[str]) -> SourceLocation:
    """Find the location of *pointer*, falling back to its closest ancestor.

    Missing object members (e.g. an unmet ``required``) have no node of
    their own, so the enclosing object's location is the best available.
    """
    if not source_map or pointer is None:
        return SourceLocation(pointer=pointer)

    candidate = pointer
    while True:
        entry = source_map.get(candidate)
        if entry:
            return SourceLocation(pointer=pointer, line=entry.get("line"), column=entry.get("column"))
        if not candidate:
            return SourceLocation(pointer=pointer)
        candidate = candidate.rsplit("/", 1)[0]


def source_for_document(file_path: Optional[Path], source_map: Optional[SourceMap], pointer: Optional[str]) -> SourceLocation:
    loc = lookup_source(source_map, pointer)
    return SourceLocation(file_path=file_path, pointer=loc.pointer, line=loc.line, column=loc.column)


def _format_file_path(path: Path) -> str:
    root = os.environ.get("PG_JSONSCHEMA_SOURCE_ROOT")
    if root and path.is_relative_to(root):
        return str(path.relative_to(root))
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

    if loc.pointer:
        parts.append(f"pointer={loc.pointer}")

    if not parts:
        return ""

    return " (" + " ".join(parts) + ")"

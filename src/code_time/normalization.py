"""Utilities to normalize file names and languages reported by hosts."""

from __future__ import annotations

from pathlib import PurePath
from typing import Optional

from .models import UNKNOWN, FileDescriptor

_LANGUAGES_BY_SUFFIX: dict[str, str] = {
    ".py": "python",
    ".pyi": "python",
    ".js": "javascript",
    ".mjs": "javascript",
    ".cjs": "javascript",
    ".jsx": "javascriptreact",
    ".ts": "typescript",
    ".tsx": "typescriptreact",
    ".json": "json",
    ".md": "markdown",
    ".rst": "restructuredtext",
    ".html": "html",
    ".htm": "html",
    ".css": "css",
    ".scss": "scss",
    ".go": "go",
    ".rs": "rust",
    ".java": "java",
    ".kt": "kotlin",
    ".c": "c",
    ".h": "c",
    ".cpp": "cpp",
    ".cc": "cpp",
    ".hpp": "cpp",
    ".cs": "csharp",
    ".rb": "ruby",
    ".php": "php",
    ".sh": "shellscript",
    ".bash": "shellscript",
    ".sql": "sql",
    ".toml": "toml",
    ".yaml": "yaml",
    ".yml": "yaml",
    ".xml": "xml",
    ".txt": "plaintext",
}

_LANGUAGES_BY_NAME: dict[str, str] = {
    "Dockerfile": "dockerfile",
    "Makefile": "makefile",
}


def file_key(file_name: Optional[str]) -> str:
    """Reduce a path to the basename used as the per-file bucket key."""
    if not file_name:
        return UNKNOWN
    key = file_name.replace("\\", "/").split("/")[-1]
    return key or UNKNOWN


def guess_language(path: str | PurePath) -> Optional[str]:
    pure = PurePath(path)
    by_name = _LANGUAGES_BY_NAME.get(pure.name)
    if by_name:
        return by_name
    return _LANGUAGES_BY_SUFFIX.get(pure.suffix.lower())


def describe_file(path: str | PurePath, language: Optional[str] = None) -> FileDescriptor:
    """Build the event payload for ``path``, guessing the language if absent."""
    return FileDescriptor(name=str(path), language=language or guess_language(path))

from __future__ import annotations

import os
from collections.abc import Iterator
from pathlib import Path

from storage_validator.errors import TraversalError

_SEPARATORS = tuple(sep for sep in (os.sep, os.altsep) if sep)


def normalize_path(path: str | Path) -> str:
    text = os.fspath(path)
    stripped = text.rstrip("".join(_SEPARATORS))
    # A bare separator is the filesystem root, keep it.
    if not stripped and text:
        return text[0]
    return stripped


def is_eligible(
    path: str | Path,
    root: str | Path,
    manifest_dir: str | Path,
    manifest_file: str | Path,
    *,
    is_dir: bool,
) -> bool:
    """Return True when a traversal entry should be checksummed.

    Only non-directory entries qualify. The root itself and the reserved
    manifest directory/file never do. Comparison is an exact string match on
    normalized paths.
    """

    if is_dir:
        return False

    candidate = normalize_path(path)
    if not candidate:
        return False

    reserved = {normalize_path(root), normalize_path(manifest_dir), normalize_path(manifest_file)}
    return candidate not in reserved


def iter_eligible_files(
    root: str | Path,
    manifest_dir: str | Path,
    manifest_file: str | Path,
) -> Iterator[Path]:
    """Yield eligible files under ``root`` in lexical depth-first order.

    Entries of each directory are visited sorted by name with files and
    subdirectories interleaved. The manifest directory is never entered and
    directory symlinks are not followed.
    """

    root_s = normalize_path(root)
    manifest_dir_s = normalize_path(manifest_dir)
    manifest_file_s = normalize_path(manifest_file)

    def _listing(directory: str) -> Iterator[os.DirEntry[str]]:
        try:
            with os.scandir(directory) as it:
                return iter(sorted(it, key=lambda e: e.name))
        except OSError as exc:
            raise TraversalError(directory, exc.strerror or str(exc)) from exc

    # One pending listing per open directory level; depth is not limited by recursion.
    stack = [_listing(root_s)]
    while stack:
        entry = next(stack[-1], None)
        if entry is None:
            stack.pop()
            continue

        try:
            entry_is_dir = entry.is_dir(follow_symlinks=False)
        except OSError as exc:
            raise TraversalError(entry.path, exc.strerror or str(exc)) from exc

        if entry_is_dir:
            if normalize_path(entry.path) != manifest_dir_s:
                stack.append(_listing(entry.path))
            continue

        if is_eligible(entry.path, root_s, manifest_dir_s, manifest_file_s, is_dir=False):
            yield Path(entry.path)


def relative_manifest_path(path: str | Path, root: str | Path) -> str:
    """Strip the root prefix (plus separator) and use ``/`` separators."""

    return Path(path).relative_to(Path(root)).as_posix()


__all__ = ["is_eligible", "iter_eligible_files", "normalize_path", "relative_manifest_path"]

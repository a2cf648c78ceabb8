from __future__ import annotations

import hashlib
from pathlib import Path

HELLO_SHA256 = hashlib.sha256(b"hello").hexdigest()
WORLD_SHA256 = hashlib.sha256(b"world").hexdigest()


def make_sample_tree(root: Path) -> Path:
    """Create the two-file tree used across engine tests.

    Layout::

        a.txt      "hello"
        sub/b.txt  "world"
    """

    root.mkdir(parents=True, exist_ok=True)
    (root / "a.txt").write_bytes(b"hello")
    (root / "sub").mkdir(exist_ok=True)
    (root / "sub" / "b.txt").write_bytes(b"world")
    return root


def write_files(root: Path, files: dict[str, bytes]) -> None:
    for rel, content in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)

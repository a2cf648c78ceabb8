from __future__ import annotations

import hashlib
from pathlib import Path

from storage_validator.errors import FileAccessError

CHUNK_SIZE = 1024 * 1024
DIGEST_HEX_LENGTH = hashlib.sha256().digest_size * 2


def sha256_file(path: str | Path) -> str:
    file_path = Path(path)
    digest = hashlib.sha256()
    try:
        with file_path.open("rb") as f:
            for chunk in iter(lambda: f.read(CHUNK_SIZE), b""):
                digest.update(chunk)
    except OSError as exc:
        raise FileAccessError(file_path, exc.strerror or str(exc)) from exc
    return digest.hexdigest()


__all__ = ["CHUNK_SIZE", "DIGEST_HEX_LENGTH", "sha256_file"]

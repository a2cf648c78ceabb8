"""Checksum manifest core: hashing, path filtering, codec and engine.

Everything here is synchronous and filesystem-only; process concerns
(argument parsing, logging handlers, exit codes) live in the parent package.
"""

from storage_validator.manifest.codec import ManifestRecord
from storage_validator.manifest.engine import (
    MANIFEST_DIR_NAME,
    MANIFEST_FILE_NAME,
    ManifestEngine,
    ValidationResult,
)

__all__ = [
    "MANIFEST_DIR_NAME",
    "MANIFEST_FILE_NAME",
    "ManifestEngine",
    "ManifestRecord",
    "ValidationResult",
]

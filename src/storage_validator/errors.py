from __future__ import annotations

from pathlib import Path


class StorageValidatorError(Exception):
    """Base class for every failure surfaced by storage_validator."""


class ConfigurationError(StorageValidatorError):
    pass


class SourceDirectoryMissing(StorageValidatorError):
    def __init__(self, directory: str | Path) -> None:
        self.directory = Path(directory)
        super().__init__(f"source directory {self.directory} doesn't exist")


class ManifestDirectoryCreateError(StorageValidatorError):
    def __init__(self, directory: str | Path, reason: str) -> None:
        self.directory = Path(directory)
        super().__init__(f"failed to create manifest directory {self.directory}: {reason}")


class AlreadyInitialized(StorageValidatorError):
    def __init__(self, root: str | Path) -> None:
        self.root = Path(root)
        super().__init__(
            f"directory {self.root} has already been initialized, "
            "use reset mode to reset storage validator state"
        )


class NotInitialized(StorageValidatorError):
    def __init__(self, root: str | Path) -> None:
        self.root = Path(root)
        super().__init__(f"directory {self.root} has not been initialized, use init mode first")


class TraversalError(StorageValidatorError):
    def __init__(self, path: str | Path, reason: str) -> None:
        self.path = Path(path)
        super().__init__(f"failed to get contents of {self.path}: {reason}")


class FileAccessError(StorageValidatorError):
    def __init__(self, path: str | Path, reason: str) -> None:
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"failed to read file {self.path}: {reason}")


class ChecksumError(StorageValidatorError):
    def __init__(self, path: str | Path, reason: str) -> None:
        self.path = Path(path)
        super().__init__(f"failed to get checksum for file {self.path}: {reason}")


class ManifestEncodeError(StorageValidatorError):
    def __init__(self, rel_path: str, reason: str) -> None:
        self.rel_path = rel_path
        super().__init__(f"cannot record {rel_path!r} in manifest: {reason}")


class ManifestAccessError(StorageValidatorError):
    def __init__(self, path: str | Path, reason: str) -> None:
        self.path = Path(path)
        super().__init__(f"failed to access manifest file {self.path}: {reason}")


class CorruptManifest(StorageValidatorError):
    """The manifest could not be decoded.

    ``line_number`` is 1-based. ``line`` is the offending text with its
    terminator stripped, or None when the compressed stream itself is damaged.
    """

    def __init__(
        self,
        path: str | Path,
        line_number: int,
        line: str | None = None,
        reason: str | None = None,
    ) -> None:
        self.path = Path(path)
        self.line_number = line_number
        self.line = line
        detail = reason if reason is not None else repr(line)
        super().__init__(f"corrupted data file {self.path}, line {line_number}: {detail}")


class MissingFile(StorageValidatorError):
    def __init__(self, rel_path: str) -> None:
        self.rel_path = rel_path
        super().__init__(f"file {rel_path} doesn't exist")


class ChecksumMismatch(StorageValidatorError):
    def __init__(self, rel_path: str, expected: str, actual: str) -> None:
        self.rel_path = rel_path
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"checksum mismatch for file {rel_path}: expected={expected} actual={actual}"
        )


class ResetError(StorageValidatorError):
    def __init__(self, directory: str | Path, reason: str) -> None:
        self.directory = Path(directory)
        super().__init__(f"failed to remove manifest directory {self.directory}: {reason}")


__all__ = [
    "AlreadyInitialized",
    "ChecksumError",
    "ChecksumMismatch",
    "ConfigurationError",
    "CorruptManifest",
    "FileAccessError",
    "ManifestAccessError",
    "ManifestDirectoryCreateError",
    "ManifestEncodeError",
    "MissingFile",
    "NotInitialized",
    "ResetError",
    "SourceDirectoryMissing",
    "StorageValidatorError",
    "TraversalError",
]

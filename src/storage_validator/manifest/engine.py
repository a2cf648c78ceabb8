"""Manifest engine: initialize, validate and reset a root directory.

A single engine instance is bound to one root. Operations are synchronous
and assume no other process touches the same root concurrently.
"""

from __future__ import annotations

import logging
import os
import shutil
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path

from storage_validator.config import ValidatorConfig
from storage_validator.errors import (
    AlreadyInitialized,
    ChecksumError,
    ChecksumMismatch,
    CorruptManifest,
    FileAccessError,
    ManifestAccessError,
    ManifestDirectoryCreateError,
    MissingFile,
    NotInitialized,
    ResetError,
    SourceDirectoryMissing,
)
from storage_validator.manifest.codec import (
    ManifestRecord,
    count_records,
    read_records,
    write_records,
)
from storage_validator.manifest.hash_utils import sha256_file
from storage_validator.manifest.path_filter import iter_eligible_files, relative_manifest_path
from storage_validator.manifest.progress import ProgressReporter

MANIFEST_DIR_NAME = ".storage-validator"
MANIFEST_FILE_NAME = "data"
PARTIAL_SUFFIX = ".partial"

_log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ValidationResult:
    ok: bool
    checked: int
    errors: list[str]


class ManifestEngine:
    def __init__(self, root: str | Path, *, logger: logging.Logger | None = None) -> None:
        self._log = logger or _log

        root_path = Path(os.path.abspath(os.fspath(root)))
        if not root_path.is_dir():
            raise SourceDirectoryMissing(root_path)

        self.root = root_path
        self.manifest_dir = root_path / MANIFEST_DIR_NAME
        self.manifest_file = self.manifest_dir / MANIFEST_FILE_NAME

        self._ensure_manifest_dir()
        self.manifest_exists = self.manifest_file.exists()

    @classmethod
    def from_config(
        cls,
        config: ValidatorConfig,
        *,
        logger: logging.Logger | None = None,
    ) -> ManifestEngine:
        return cls(config.directory, logger=logger)

    def _ensure_manifest_dir(self) -> None:
        try:
            self.manifest_dir.mkdir(exist_ok=True)
        except OSError as exc:
            raise ManifestDirectoryCreateError(self.manifest_dir, exc.strerror or str(exc)) from exc

    def _eligible_files(self) -> Iterator[Path]:
        return iter_eligible_files(self.root, self.manifest_dir, self.manifest_file)

    def _require_manifest(self) -> None:
        if not self.manifest_exists:
            raise NotInitialized(self.root)

    def _checksum_records(self, progress: ProgressReporter) -> Iterator[ManifestRecord]:
        for path in self._eligible_files():
            try:
                digest = sha256_file(path)
            except FileAccessError as exc:
                raise ChecksumError(path, exc.reason) from exc

            yield ManifestRecord(rel_path=relative_manifest_path(path, self.root), digest=digest)
            progress.advance()

    def initialize(self) -> int:
        """Checksum every eligible file and write the manifest.

        Returns the number of records written. The manifest is first written
        to a sibling ``.partial`` file and moved into place only once the
        compressed stream is complete, so a failed run leaves no manifest.
        """

        if self.manifest_exists or self.manifest_file.exists():
            raise AlreadyInitialized(self.root)

        self._ensure_manifest_dir()

        total = sum(1 for _ in self._eligible_files())
        self._log.info("processing %d files", total)

        progress = ProgressReporter(total, self._log)
        partial = self.manifest_file.with_name(MANIFEST_FILE_NAME + PARTIAL_SUFFIX)
        try:
            written = write_records(partial, self._checksum_records(progress))
            try:
                os.replace(partial, self.manifest_file)
            except OSError as exc:
                raise ManifestAccessError(self.manifest_file, exc.strerror or str(exc)) from exc
        except Exception:
            partial.unlink(missing_ok=True)
            raise

        self.manifest_exists = True
        progress.finish()
        return written

    def count_records(self) -> int:
        self._require_manifest()
        return count_records(self.manifest_file)

    def _resolve(self, record: ManifestRecord) -> Path:
        full_path = Path(os.path.normpath(f"{self.root}/{record.rel_path}"))
        try:
            full_path.relative_to(self.root)
        except ValueError:
            raise CorruptManifest(
                self.manifest_file,
                record.line_number,
                f"{record.rel_path}:{record.digest}",
                reason=f"record {record.rel_path!r} escapes {self.root}",
            ) from None
        return full_path

    def _check_record(self, record: ManifestRecord) -> None:
        full_path = self._resolve(record)

        try:
            present = full_path.exists()
        except OSError as exc:
            raise FileAccessError(full_path, exc.strerror or str(exc)) from exc
        if not present:
            raise MissingFile(record.rel_path)

        try:
            actual = sha256_file(full_path)
        except FileAccessError as exc:
            raise ChecksumError(full_path, exc.reason) from exc

        if actual != record.digest:
            raise ChecksumMismatch(record.rel_path, record.digest, actual)

    def validate(self) -> int:
        """Check the tree against the manifest, stopping at the first problem.

        Returns the number of files checked. Files present in the tree but
        absent from the manifest are not reported.
        """

        self._require_manifest()

        total = count_records(self.manifest_file)
        self._log.info("validating %d files", total)

        progress = ProgressReporter(total, self._log)
        checked = 0
        with read_records(self.manifest_file) as records:
            for record in records:
                self._check_record(record)
                checked += 1
                progress.advance()

        progress.finish()
        return checked

    def validate_all(self) -> ValidationResult:
        """Like validate(), but keep going and collect every file-level problem.

        A corrupt manifest still aborts, since later records cannot be trusted.
        """

        self._require_manifest()

        total = count_records(self.manifest_file)
        self._log.info("validating %d files", total)

        progress = ProgressReporter(total, self._log)
        errors: list[str] = []
        checked = 0
        with read_records(self.manifest_file) as records:
            for record in records:
                try:
                    self._check_record(record)
                except (MissingFile, ChecksumMismatch, ChecksumError, FileAccessError) as exc:
                    self._log.debug("validation issue: %s", exc)
                    errors.append(str(exc))
                checked += 1
                progress.advance()

        progress.finish()
        return ValidationResult(ok=not errors, checked=checked, errors=errors)

    def reset(self, *, strict: bool = False) -> None:
        """Remove the manifest directory and everything in it.

        Missing directories are fine. By default removal is best-effort and
        failures are only logged; ``strict=True`` raises ResetError instead.
        """

        if strict:
            try:
                shutil.rmtree(self.manifest_dir)
            except FileNotFoundError:
                pass
            except OSError as exc:
                self.manifest_exists = self.manifest_file.exists()
                raise ResetError(self.manifest_dir, exc.strerror or str(exc)) from exc
        else:
            shutil.rmtree(self.manifest_dir, ignore_errors=True)
            if self.manifest_dir.exists():
                self._log.warning("could not fully remove %s", self.manifest_dir)

        self.manifest_exists = self.manifest_file.exists()


__all__ = [
    "MANIFEST_DIR_NAME",
    "MANIFEST_FILE_NAME",
    "ManifestEngine",
    "ValidationResult",
]

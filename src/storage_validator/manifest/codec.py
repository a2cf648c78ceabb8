"""On-disk manifest encoding.

The manifest is a gzip stream whose payload is UTF-8 text with one record per
line::

    <relative-path>:<hex-digest>\\n

The digest is fixed-length hex and never contains ``:``, so a path that does
contain ``:`` is recovered by splitting on the *last* colon of the line.
Reading and writing are both streaming; neither side holds more than one
record in memory.
"""

from __future__ import annotations

import gzip
import zlib
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import IO

from storage_validator.errors import CorruptManifest, ManifestAccessError, ManifestEncodeError

FIELD_SEPARATOR = ":"
RECORD_TERMINATOR = "\n"
# File names that are not valid UTF-8 reach Python as lone surrogates;
# surrogateescape writes and reads them back as the original bytes.
ENCODING = "utf-8"
ENCODING_ERRORS = "surrogateescape"

_DECODE_ERRORS = (gzip.BadGzipFile, EOFError, zlib.error, UnicodeDecodeError)


@dataclass(frozen=True, slots=True)
class ManifestRecord:
    rel_path: str
    digest: str
    # 1-based position in the manifest; 0 for records not read from disk.
    line_number: int = field(default=0, compare=False)


def encode_record(record: ManifestRecord) -> str:
    if "\n" in record.rel_path or "\r" in record.rel_path:
        raise ManifestEncodeError(record.rel_path, "line breaks in paths are not supported")
    if FIELD_SEPARATOR in record.digest:
        raise ManifestEncodeError(record.rel_path, f"digest contains {FIELD_SEPARATOR!r}")
    return f"{record.rel_path}{FIELD_SEPARATOR}{record.digest}{RECORD_TERMINATOR}"


def decode_line(line: str, line_number: int, source: str | Path) -> ManifestRecord:
    text = line[:-1] if line.endswith(RECORD_TERMINATOR) else line
    if text.endswith("\r"):
        text = text[:-1]

    fields = text.split(FIELD_SEPARATOR)
    if len(fields) < 2:
        raise CorruptManifest(source, line_number, text)

    return ManifestRecord(
        rel_path=FIELD_SEPARATOR.join(fields[:-1]),
        digest=fields[-1],
        line_number=line_number,
    )


def _open_text(path: Path, mode: str) -> IO[str]:
    return gzip.open(path, mode, encoding=ENCODING, errors=ENCODING_ERRORS, newline=RECORD_TERMINATOR)


def write_records(path: str | Path, records: Iterable[ManifestRecord]) -> int:
    """Stream ``records`` into a new gzip manifest at ``path``.

    Returns the number of records written. The compressor is flushed and the
    file closed on every exit path; exceptions raised while producing records
    propagate unchanged.
    """

    manifest_path = Path(path)
    written = 0
    try:
        with _open_text(manifest_path, "wt") as handle:
            for record in records:
                line = encode_record(record)
                try:
                    handle.write(line)
                except UnicodeEncodeError as exc:
                    raise ManifestEncodeError(record.rel_path, exc.reason) from exc
                written += 1
    except OSError as exc:
        raise ManifestAccessError(manifest_path, exc.strerror or str(exc)) from exc
    return written


def _iter_lines(handle: IO[str], source: Path) -> Iterator[tuple[int, str]]:
    line_number = 0
    try:
        for raw in handle:
            line_number += 1
            yield line_number, raw
    except _DECODE_ERRORS as exc:
        raise CorruptManifest(
            source,
            line_number + 1,
            reason=f"{exc.__class__.__name__}: {exc}",
        ) from exc
    except OSError as exc:
        raise ManifestAccessError(source, exc.strerror or str(exc)) from exc


@contextmanager
def _open_manifest(path: str | Path) -> Iterator[tuple[IO[str], Path]]:
    manifest_path = Path(path)
    try:
        handle = _open_text(manifest_path, "rt")
    except OSError as exc:
        raise ManifestAccessError(manifest_path, exc.strerror or str(exc)) from exc
    with handle:
        yield handle, manifest_path


@contextmanager
def read_records(path: str | Path) -> Iterator[Iterator[ManifestRecord]]:
    """Open the manifest and yield a lazy iterator over its records.

    The decompression stream is released when the ``with`` block exits,
    whether or not the iterator was exhausted.
    """

    with _open_manifest(path) as (handle, manifest_path):
        yield (
            decode_line(raw, line_number, manifest_path)
            for line_number, raw in _iter_lines(handle, manifest_path)
        )


def count_records(path: str | Path) -> int:
    with _open_manifest(path) as (handle, manifest_path):
        total = 0
        for _ in _iter_lines(handle, manifest_path):
            total += 1
    return total


__all__ = [
    "FIELD_SEPARATOR",
    "ManifestRecord",
    "RECORD_TERMINATOR",
    "count_records",
    "decode_line",
    "encode_record",
    "read_records",
    "write_records",
]

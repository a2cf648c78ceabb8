from __future__ import annotations

import gzip
from pathlib import Path

import pytest

from storage_validator.errors import CorruptManifest, ManifestAccessError, ManifestEncodeError
from storage_validator.manifest.codec import (
    ManifestRecord,
    count_records,
    decode_line,
    encode_record,
    read_records,
    write_records,
)
from tests.fixtures import HELLO_SHA256, WORLD_SHA256


def _write_raw(path: Path, payload: str) -> None:
    with gzip.open(path, "wt", encoding="utf-8", newline="\n") as f:
        f.write(payload)


def test_encode_record_format() -> None:
    record = ManifestRecord("sub/b.txt", WORLD_SHA256)
    assert encode_record(record) == f"sub/b.txt:{WORLD_SHA256}\n"


def test_encode_record_rejects_line_breaks_in_path() -> None:
    with pytest.raises(ManifestEncodeError):
        encode_record(ManifestRecord("bad\nname", HELLO_SHA256))


def test_decode_line_keeps_colons_in_path() -> None:
    record = decode_line(f"dir:with:colons/file.txt:{HELLO_SHA256}\n", 3, "manifest")
    assert record == ManifestRecord("dir:with:colons/file.txt", HELLO_SHA256)


def test_decode_line_tolerates_crlf() -> None:
    assert decode_line(f"a.txt:{HELLO_SHA256}\r\n", 1, "m").digest == HELLO_SHA256


def test_decode_line_without_separator_is_corrupt() -> None:
    with pytest.raises(CorruptManifest) as excinfo:
        decode_line("no-separator-here\n", 7, "/tmp/manifest")

    err = excinfo.value
    assert err.line_number == 7
    assert err.line == "no-separator-here"
    assert "line 7" in str(err)


def test_write_then_read_preserves_records_and_order(tmp_path: Path) -> None:
    records = [
        ManifestRecord("z.txt", WORLD_SHA256),
        ManifestRecord("a.txt", HELLO_SHA256),
        ManifestRecord("dir:x/y:z.bin", "0" * 64),
        ManifestRecord("unicodé/файл.txt", "f" * 64),
    ]
    manifest = tmp_path / "data"

    assert write_records(manifest, iter(records)) == len(records)

    with read_records(manifest) as decoded:
        assert list(decoded) == records
    assert count_records(manifest) == len(records)


def test_manifest_is_gzip_of_plain_lines(tmp_path: Path) -> None:
    manifest = tmp_path / "data"
    write_records(manifest, [ManifestRecord("a.txt", HELLO_SHA256)])

    with gzip.open(manifest, "rb") as f:
        assert f.read() == f"a.txt:{HELLO_SHA256}\n".encode()


def test_empty_manifest_has_zero_records(tmp_path: Path) -> None:
    manifest = tmp_path / "data"
    assert write_records(manifest, []) == 0

    assert count_records(manifest) == 0
    with read_records(manifest) as decoded:
        assert list(decoded) == []


def test_write_records_closes_stream_when_producer_fails(tmp_path: Path) -> None:
    manifest = tmp_path / "data"

    def produce():
        yield ManifestRecord("a.txt", HELLO_SHA256)
        raise RuntimeError("boom")

    with pytest.raises(RuntimeError, match="boom"):
        write_records(manifest, produce())

    # The gzip trailer was written on close, so the partial stream still decodes.
    with read_records(manifest) as decoded:
        assert list(decoded) == [ManifestRecord("a.txt", HELLO_SHA256)]


def test_read_records_reports_corrupt_line_number(tmp_path: Path) -> None:
    manifest = tmp_path / "data"
    _write_raw(manifest, f"a.txt:{HELLO_SHA256}\ngarbage\nb.txt:{WORLD_SHA256}\n")

    with read_records(manifest) as decoded:
        first = next(decoded)
        assert first.rel_path == "a.txt"
        with pytest.raises(CorruptManifest) as excinfo:
            next(decoded)

    assert excinfo.value.line_number == 2
    assert excinfo.value.path == manifest


def test_count_records_does_not_validate_lines(tmp_path: Path) -> None:
    manifest = tmp_path / "data"
    _write_raw(manifest, "one\ntwo\nthree\n")

    assert count_records(manifest) == 3


def test_non_gzip_manifest_is_corrupt(tmp_path: Path) -> None:
    manifest = tmp_path / "data"
    manifest.write_bytes(b"plain text, not gzip\n")

    with pytest.raises(CorruptManifest):
        count_records(manifest)


def test_truncated_manifest_is_corrupt(tmp_path: Path) -> None:
    manifest = tmp_path / "data"
    write_records(manifest, (ManifestRecord(f"f{i}.txt", HELLO_SHA256) for i in range(200)))
    raw = manifest.read_bytes()
    manifest.write_bytes(raw[: len(raw) // 2])

    with pytest.raises(CorruptManifest):
        count_records(manifest)


def test_missing_manifest_raises_access_error(tmp_path: Path) -> None:
    with pytest.raises(ManifestAccessError):
        count_records(tmp_path / "absent")


def test_non_utf8_path_bytes_round_trip(tmp_path: Path) -> None:
    # How os.fsdecode presents the bytes caf\xe9/men\xfc.txt on a UTF-8 system.
    rel_path = "caf\udce9/men\udcfc.txt"
    manifest = tmp_path / "data"

    write_records(manifest, [ManifestRecord(rel_path, HELLO_SHA256)])

    with gzip.open(manifest, "rb") as f:
        assert f.read() == b"caf\xe9/men\xfc.txt:" + HELLO_SHA256.encode() + b"\n"
    with read_records(manifest) as decoded:
        assert [r.rel_path for r in decoded] == [rel_path]


def test_unencodable_path_raises_encode_error(tmp_path: Path) -> None:
    # A high surrogate cannot come from a file name and has no byte form.
    with pytest.raises(ManifestEncodeError):
        write_records(tmp_path / "data", [ManifestRecord("bad\ud800.txt", HELLO_SHA256)])


def test_decoded_records_carry_line_numbers(tmp_path: Path) -> None:
    manifest = tmp_path / "data"
    write_records(
        manifest,
        [ManifestRecord("a.txt", HELLO_SHA256), ManifestRecord("b.txt", WORLD_SHA256)],
    )

    with read_records(manifest) as decoded:
        assert [r.line_number for r in decoded] == [1, 2]

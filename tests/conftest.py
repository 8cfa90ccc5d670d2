from __future__ import annotations

import io
import struct
import zipfile
from pathlib import Path
from typing import Dict, Iterable

import pytest

from rpmerger.logging_utils import set_quiet

CORRUPT_MARKER = b"CORRUPTED-PAYLOAD"
CENTRAL_SIGNATURE = b"PK\x01\x02"
UNKNOWN_METHOD = 99
ENCRYPTED_FLAG = 0x1


def make_zip(
    files: Dict[str, bytes],
    directories: Iterable[str] = (),
    compression: int = zipfile.ZIP_DEFLATED,
) -> bytes:
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", compression=compression) as archive:
        for directory in directories:
            archive.writestr(directory.rstrip("/") + "/", b"")
        for path, content in files.items():
            archive.writestr(path, content)
    return buffer.getvalue()


def make_zip_with_corrupt_entry(files: Dict[str, bytes], corrupt_path: str) -> bytes:
    """Stored archive whose ``corrupt_path`` member fails its CRC check on read."""

    payload = CORRUPT_MARKER + b"-0123456789"
    data = make_zip({**files, corrupt_path: payload}, compression=zipfile.ZIP_STORED)
    assert data.count(CORRUPT_MARKER) == 1
    return data.replace(CORRUPT_MARKER, b"X" * len(CORRUPT_MARKER))


def _entry_offsets(data: bytes, path: str) -> tuple[int, int]:
    """Offsets of the local and central directory headers of ``path``."""

    with zipfile.ZipFile(io.BytesIO(data)) as archive:
        local = archive.getinfo(path).header_offset
    name = path.encode("utf-8")
    central = data.find(CENTRAL_SIGNATURE)
    while central != -1:
        name_len = struct.unpack_from("<H", data, central + 28)[0]
        if data[central + 46 : central + 46 + name_len] == name:
            return local, central
        central = data.find(CENTRAL_SIGNATURE, central + 4)
    raise AssertionError(f"{path} missing from central directory")


def _patch_header_field(data: bytes, path: str, local_field: int, central_field: int, update) -> bytes:
    local, central = _entry_offsets(data, path)
    patched = bytearray(data)
    for offset in (local + local_field, central + central_field):
        current = struct.unpack_from("<H", patched, offset)[0]
        struct.pack_into("<H", patched, offset, update(current))
    return bytes(patched)


def make_zip_with_broken_deflate(files: Dict[str, bytes], broken_path: str) -> bytes:
    """Deflated archive whose ``broken_path`` member holds an invalid deflate stream."""

    data = make_zip({**files, broken_path: b"grass block texture " * 40})
    with zipfile.ZipFile(io.BytesIO(data)) as archive:
        info = archive.getinfo(broken_path)
    name_len, extra_len = struct.unpack_from("<HH", data, info.header_offset + 26)
    start = info.header_offset + 30 + name_len + extra_len
    # 0xff opens a block of the reserved type 3
    return data[:start] + b"\xff" * info.compress_size + data[start + info.compress_size :]


def make_zip_with_unknown_method(files: Dict[str, bytes], broken_path: str) -> bytes:
    """Archive whose ``broken_path`` member claims compression method 99."""

    data = make_zip({**files, broken_path: b"payload"})
    return _patch_header_field(data, broken_path, 8, 10, lambda _method: UNKNOWN_METHOD)


def make_zip_with_encrypted_entry(files: Dict[str, bytes], broken_path: str) -> bytes:
    """Archive whose ``broken_path`` member has the encryption flag set."""

    data = make_zip({**files, broken_path: b"payload"})
    return _patch_header_field(data, broken_path, 6, 8, lambda flags: flags | ENCRYPTED_FLAG)


def read_zip(data: bytes) -> Dict[str, bytes]:
    with zipfile.ZipFile(io.BytesIO(data)) as archive:
        return {name: archive.read(name) for name in archive.namelist()}


@pytest.fixture
def pack_a() -> bytes:
    return make_zip(
        {
            "pack.mcmeta": b'{"pack": {"pack_format": 6, "description": "A"}}',
            "pack.png": b"old-icon-a",
            "assets/minecraft/textures/a.png": b"bytesA1",
            "assets/minecraft/models/x.json": b"bytesX",
        },
        directories=["assets/", "assets/minecraft/"],
    )


@pytest.fixture
def pack_b() -> bytes:
    return make_zip(
        {
            "pack.mcmeta": b'{"pack": {"pack_format": 8, "description": "B"}}',
            "assets/minecraft/textures/a.png": b"bytesA2",
            "assets/minecraft/sounds/y.ogg": b"bytesY",
        }
    )


@pytest.fixture
def write_pack(tmp_path: Path):
    def _write(name: str, data: bytes) -> Path:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        return path

    return _write


@pytest.fixture(autouse=True)
def _loud_logging():
    yield
    set_quiet(False)

"""Tests for output file handling."""

import io
from pathlib import Path

import pytest

from wifi_qr.errors import FileExists, IOFailure
from wifi_qr.models import ImageFormat
from wifi_qr.writer import resolve_output_path, write_image, write_stream


def test_write_new_file(tmp_path):
    path = write_image(b"data", tmp_path / "out" / "qr.svg")
    assert path.read_bytes() == b"data"


def test_existing_file_without_overwrite(tmp_path):
    path = tmp_path / "qr.svg"
    path.write_bytes(b"old")
    with pytest.raises(FileExists) as exc:
        write_image(b"new", path)
    assert exc.value.path == path
    assert path.read_bytes() == b"old"


def test_existing_file_with_overwrite(tmp_path):
    path = tmp_path / "qr.svg"
    path.write_bytes(b"old")
    write_image(b"new", path, overwrite=True)
    assert path.read_bytes() == b"new"


def test_write_into_directory_path_fails(tmp_path):
    with pytest.raises(IOFailure):
        write_image(b"data", tmp_path, overwrite=True)


def test_resolve_output_path_adds_extension():
    assert resolve_output_path("guest", ImageFormat.PNG) == Path("guest.png")
    assert resolve_output_path(Path("dir/guest"), ImageFormat.SVG) == Path("dir/guest.svg")


def test_resolve_output_path_keeps_extension():
    assert resolve_output_path("guest.svg", ImageFormat.SVG) == Path("guest.svg")
    assert resolve_output_path("guest.img", ImageFormat.PNG) == Path("guest.img")


def test_write_stream():
    buffer = io.BytesIO()
    write_stream(b"<svg/>", buffer)
    assert buffer.getvalue() == b"<svg/>"


def test_failed_overwrite_keeps_old_file(tmp_path, monkeypatch):
    path = tmp_path / "qr.svg"
    path.write_bytes(b"old")

    def fail(src, dst):
        raise OSError("disk full")

    monkeypatch.setattr("wifi_qr.writer.os.replace", fail)
    with pytest.raises(IOFailure, match="disk full"):
        write_image(b"new", path, overwrite=True)
    assert path.read_bytes() == b"old"
    assert list(tmp_path.iterdir()) == [path]

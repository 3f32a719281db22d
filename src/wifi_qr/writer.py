"""Output file handling."""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import BinaryIO

from .errors import FileExists, IOFailure
from .models import ImageFormat

logger = logging.getLogger(__name__)


def resolve_output_path(path: str | Path, fmt: ImageFormat) -> Path:
    """Append the format's extension when the path has none."""
    p = Path(path)
    if not p.suffix:
        p = p.with_suffix(fmt.extension)
    elif p.suffix.lower() != fmt.extension:
        logger.warning("Output %s has a different extension than the %s format", p, fmt.value)
    return p


def _replace(data: bytes, p: Path) -> None:
    """Write to a sibling temp file, then move it over ``p``."""
    fd, tmp = tempfile.mkstemp(dir=p.parent, prefix=f".{p.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
        os.replace(tmp, p)
    except BaseException:
        os.unlink(tmp)
        raise


def write_image(data: bytes, path: str | Path, overwrite: bool = False) -> Path:
    """Write rendered image bytes to ``path``.

    An existing file is only replaced when ``overwrite`` is set; otherwise
    :class:`FileExists` is raised and the file is left untouched.
    """
    p = Path(path)
    if p.exists() and not overwrite:
        raise FileExists(p)

    try:
        p.parent.mkdir(parents=True, exist_ok=True)
        if overwrite:
            _replace(data, p)
        else:
            # "x" fails if the file appeared since the check above
            with open(p, "xb") as f:
                f.write(data)
    except FileExistsError:
        raise FileExists(p) from None
    except OSError as e:
        raise IOFailure(f"Failed to write image to {p}: {e}") from e

    logger.info("Saved %d bytes to %s", len(data), p)
    return p


def write_stream(data: bytes, stream: BinaryIO) -> None:
    """Write rendered image bytes to an open binary stream."""
    try:
        stream.write(data)
        stream.flush()
    except OSError as e:
        raise IOFailure(f"Failed to write image to output stream: {e}") from e

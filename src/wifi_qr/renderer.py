"""QR encoding and image rendering on top of the qrcode library."""

from __future__ import annotations

import io
import logging
import xml.etree.ElementTree as ET

import qrcode
import qrcode.image.svg
from PIL import Image
from qrcode.exceptions import DataOverflowError

from .errors import EncodingFailure, UnsupportedFormat
from .models import ErrorCorrection, ImageFormat, Settings

logger = logging.getLogger(__name__)

SVG_NAMESPACE = "http://www.w3.org/2000/svg"
MIN_RECOMMENDED_SIZE = 256

ERROR_CORRECTION = {
    ErrorCorrection.L: qrcode.constants.ERROR_CORRECT_L,
    ErrorCorrection.M: qrcode.constants.ERROR_CORRECT_M,
    ErrorCorrection.Q: qrcode.constants.ERROR_CORRECT_Q,
    ErrorCorrection.H: qrcode.constants.ERROR_CORRECT_H,
}


def encode(
    payload: str,
    error_correction: ErrorCorrection = ErrorCorrection.H,
    border: int = 4,
) -> qrcode.QRCode:
    """Encode the payload into a fitted QR symbol."""
    qr = qrcode.QRCode(
        version=None,  # smallest version that fits
        error_correction=ERROR_CORRECTION[error_correction],
        box_size=10,
        border=border,
    )
    qr.add_data(payload)
    try:
        qr.make(fit=True)
    except (DataOverflowError, ValueError) as e:
        # qrcode 8 reports an overflow as an out-of-range version
        raise EncodingFailure(
            f"Payload of {len(payload)} characters is too large for a QR code "
            f"at error correction level {error_correction.value}"
        ) from e
    logger.info(
        "Encoded QR version %d (%dx%d modules, level %s)",
        qr.version,
        qr.modules_count,
        qr.modules_count,
        error_correction.value,
    )
    return qr


def _svg_factory(foreground: str, background: str) -> type:
    """SVG path image class filled with the given colors."""
    base = qrcode.image.svg.SvgPathFillImage
    style = dict(base.QR_PATH_STYLE, fill=foreground)
    return type("ColoredSvgPathImage", (base,), {"background": background, "QR_PATH_STYLE": style})


def render_svg(qr: qrcode.QRCode, size: int, foreground: str, background: str) -> bytes:
    img = qr.make_image(image_factory=_svg_factory(foreground, background))

    # qrcode sizes SVGs in millimetres; rescale the root to pixels.
    ET.register_namespace("", SVG_NAMESPACE)
    root = ET.fromstring(img.to_string())
    root.set("width", str(size))
    root.set("height", str(size))
    return ET.tostring(root, encoding="utf-8", xml_declaration=True)


def render_png(qr: qrcode.QRCode, size: int, foreground: str, background: str) -> bytes:
    qr.box_size = max(1, size // (qr.modules_count + 2 * qr.border))
    img = qr.make_image(fill_color=foreground, back_color=background)
    pil = img.get_image().convert("RGB")
    if pil.size != (size, size):
        pil = pil.resize((size, size), resample=Image.Resampling.NEAREST)

    buffer = io.BytesIO()
    pil.save(buffer, format="PNG")
    return buffer.getvalue()


def render(payload: str, settings: Settings) -> bytes:
    """Encode ``payload`` and render it in the configured format."""
    fmt = settings.format
    if not isinstance(fmt, ImageFormat):
        raise UnsupportedFormat(fmt)
    if settings.size < MIN_RECOMMENDED_SIZE:
        logger.warning(
            "Image size is %dx%d, lower than %d; the QR code may look cropped or blurry.",
            settings.size,
            settings.size,
            MIN_RECOMMENDED_SIZE,
        )

    qr = encode(payload, settings.error_correction, settings.border)
    if fmt is ImageFormat.SVG:
        data = render_svg(qr, settings.size, settings.foreground, settings.background)
    else:
        data = render_png(qr, settings.size, settings.foreground, settings.background)
    logger.info("Rendered %s image (%d bytes)", fmt.value.upper(), len(data))
    return data

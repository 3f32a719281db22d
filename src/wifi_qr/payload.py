"""Wi-Fi QR payload formatting and parsing.

Payloads follow the de-facto ``WIFI:`` URI scheme understood by phone
camera apps::

    WIFI:T:<WPA|WEP|>;S:<ssid>;P:<password>;H:true;;

Within the SSID and password the characters ``\\ ; , "`` are escaped with a
backslash.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from .errors import PayloadError
from .models import Encryption, Settings

logger = logging.getLogger(__name__)

PREFIX = "WIFI:"
_SPECIAL = re.compile(r'([\\;,"])')
_ESCAPED = re.compile(r"\\(.)", re.DOTALL)


def escape(value: str) -> str:
    """Backslash-escape the characters reserved by the payload syntax."""
    return _SPECIAL.sub(r"\\\1", value)


def unescape(value: str) -> str:
    """Reverse :func:`escape`."""
    return _ESCAPED.sub(r"\1", value)


def build_payload(settings: Settings) -> str:
    """Format the Wi-Fi QR payload for the given settings."""
    parts = [PREFIX, f"T:{settings.encryption.payload_token};", f"S:{escape(settings.ssid)};"]
    if settings.encryption.requires_password and settings.password is not None:
        parts.append(f"P:{escape(settings.password)};")
    if settings.hidden:
        parts.append("H:true;")
    parts.append(";")
    payload = "".join(parts)
    logger.debug(
        "Built payload for SSID %r (%s, %d chars)",
        settings.ssid,
        settings.encryption.value,
        len(payload),
    )
    return payload


@dataclass(frozen=True)
class WifiCredentials:
    """Fields recovered from a payload."""

    ssid: str
    encryption: Encryption
    password: str | None = None
    hidden: bool = False


def _split_fields(body: str) -> list[str]:
    """Split on unescaped semicolons; escapes are kept for unescape()."""
    fields: list[str] = []
    current: list[str] = []
    i = 0
    while i < len(body):
        ch = body[i]
        if ch == "\\" and i + 1 < len(body):
            current.append(body[i : i + 2])
            i += 2
            continue
        if ch == ";":
            fields.append("".join(current))
            current = []
        else:
            current.append(ch)
        i += 1
    if current:
        raise PayloadError("Payload is not terminated with ';;'")
    return fields


def _parse_encryption(token: str) -> Encryption:
    token = token.upper()
    if token in ("", "NOPASS"):
        return Encryption.NONE
    if token == "WEP":
        return Encryption.WEP
    if token.startswith("WPA"):
        return Encryption.WPA
    raise PayloadError(f"Unknown encryption type '{token}' in payload")


def parse_payload(text: str) -> WifiCredentials:
    """Parse a Wi-Fi QR payload back into its fields."""
    if not text.startswith(PREFIX):
        raise PayloadError(f"Payload must start with '{PREFIX}'")
    fields = _split_fields(text[len(PREFIX) :])
    if not fields or fields[-1] != "":
        raise PayloadError("Payload is not terminated with ';;'")

    values: dict[str, str] = {}
    for field in fields[:-1]:
        key, sep, value = field.partition(":")
        if not sep:
            raise PayloadError(f"Malformed payload field '{field}'")
        if key not in ("T", "S", "P", "H"):
            logger.debug("Ignoring unknown payload field %s", key)
            continue
        values[key] = value

    if "S" not in values:
        raise PayloadError("Payload has no SSID field")

    password = values.get("P")
    return WifiCredentials(
        ssid=unescape(values["S"]),
        encryption=_parse_encryption(values.get("T", "")),
        password=None if password is None else unescape(password),
        hidden=values.get("H", "").lower() == "true",
    )

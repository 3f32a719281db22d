"""Error kinds raised by the generation pipeline."""

from __future__ import annotations


class WifiQrError(Exception):
    """Base class for all fatal generation errors."""


class MissingRequiredField(WifiQrError):
    """A required setting (the SSID) is absent after merging."""


class MissingPassword(WifiQrError):
    """A password is required but no source provided one."""


class FileExists(WifiQrError):
    """The output path is occupied and overwriting is not allowed."""

    def __init__(self, path) -> None:
        super().__init__(f"File already exists: {path} (use --overwrite to replace it)")
        self.path = path


class IOFailure(WifiQrError):
    """Reading or writing a file failed."""


class EncodingFailure(WifiQrError):
    """The payload could not be encoded, usually because it is too large."""


class UnsupportedFormat(WifiQrError):
    """Unknown output format token."""

    def __init__(self, token) -> None:
        super().__init__(f"Unsupported image format: '{token}'")
        self.token = token


class ConfigError(WifiQrError):
    """The config file or a setting value is invalid."""


class PayloadError(WifiQrError):
    """Text is not a well-formed Wi-Fi QR payload."""

"""Data models for Wi-Fi credentials and QR rendering settings."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from .errors import ConfigError, MissingPassword, MissingRequiredField, UnsupportedFormat

HEX_COLOR = re.compile(r"^#(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")


class Encryption(str, Enum):
    WPA = "wpa"
    WEP = "wep"
    NONE = "none"

    @property
    def payload_token(self) -> str:
        """Token written after ``T:`` in the payload."""
        return "" if self is Encryption.NONE else self.value.upper()

    @property
    def requires_password(self) -> bool:
        return self is not Encryption.NONE

    @classmethod
    def parse(cls, token: str | Encryption) -> Encryption:
        if isinstance(token, cls):
            return token
        try:
            return cls(str(token).strip().lower())
        except ValueError:
            raise ConfigError(
                f"Unknown encryption '{token}' (expected one of: wpa, wep, none)"
            ) from None


class ImageFormat(str, Enum):
    SVG = "svg"
    PNG = "png"

    @property
    def extension(self) -> str:
        return f".{self.value}"

    @classmethod
    def parse(cls, token: str | ImageFormat) -> ImageFormat:
        if isinstance(token, cls):
            return token
        try:
            return cls(str(token).strip().lower())
        except ValueError:
            raise UnsupportedFormat(token) from None


class ErrorCorrection(str, Enum):
    L = "L"
    M = "M"
    Q = "Q"
    H = "H"

    @classmethod
    def parse(cls, token: str | ErrorCorrection) -> ErrorCorrection:
        if isinstance(token, cls):
            return token
        try:
            return cls(str(token).strip().upper())
        except ValueError:
            raise ConfigError(
                f"Unknown error correction level '{token}' (expected L, M, Q or H)"
            ) from None


@dataclass
class Settings:
    """Effective settings for one generation run."""

    ssid: str
    encryption: Encryption = Encryption.WPA
    password: str | None = None
    output: Path | None = None
    size: int = 512
    format: ImageFormat = ImageFormat.SVG
    foreground: str = "#000000"
    background: str = "#ffffff"
    overwrite: bool = False
    verbose: bool = False
    hidden: bool = False
    error_correction: ErrorCorrection = ErrorCorrection.H
    border: int = 4

    def validate(self) -> None:
        """Check the invariants, raising the matching error kind."""
        if not self.ssid:
            raise MissingRequiredField(
                "SSID is required: pass --ssid or set wifi.ssid in the config file"
            )
        if self.encryption.requires_password and not self.password:
            raise MissingPassword(
                f"A password is required for {self.encryption.payload_token} networks"
            )
        if self.size < 1:
            raise ConfigError(f"Size must be a positive number of pixels, got {self.size}")
        if self.border < 0:
            raise ConfigError(f"Border must not be negative, got {self.border}")
        for name in ("foreground", "background"):
            value = getattr(self, name)
            if not HEX_COLOR.match(value):
                raise ConfigError(f"Invalid {name} color '{value}' (expected #rgb or #rrggbb)")

    def __repr__(self) -> str:
        masked = None if self.password is None else "***"
        return (
            f"Settings(ssid={self.ssid!r}, encryption={self.encryption.value}, "
            f"password={masked}, output={self.output}, size={self.size}, "
            f"format={self.format.value}, foreground={self.foreground}, "
            f"background={self.background}, overwrite={self.overwrite}, "
            f"hidden={self.hidden}, error_correction={self.error_correction.value}, "
            f"border={self.border})"
        )

"""Wi-Fi credential QR code generator."""

__version__ = "0.3.0"

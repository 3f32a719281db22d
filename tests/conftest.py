"""Shared test fixtures."""

import pytest
import yaml

from wifi_qr.models import Encryption, Settings


@pytest.fixture(autouse=True)
def default_config(tmp_path, monkeypatch):
    """Point the per-user config file at a temporary location."""
    path = tmp_path / "app" / "config.yaml"
    monkeypatch.setattr("wifi_qr.config.default_config_path", lambda: path)
    monkeypatch.setattr("wifi_qr.cli.default_config_path", lambda: path)
    return path


@pytest.fixture
def write_config(tmp_path):
    """Write a YAML config file and return its path."""

    def _write(data, name="config.yaml"):
        path = tmp_path / name
        path.write_text(yaml.safe_dump(data))
        return path

    return _write


@pytest.fixture
def settings():
    return Settings(ssid="MyNetwork", encryption=Encryption.WPA, password="Secret;1")

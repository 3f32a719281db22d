"""Configuration file handling and settings resolution."""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, fields, replace
from pathlib import Path
from typing import Any, Callable

import click
import yaml

from .errors import ConfigError, IOFailure, MissingPassword, MissingRequiredField
from .models import Encryption, ErrorCorrection, ImageFormat, Settings

logger = logging.getLogger(__name__)

APP_NAME = "wifi-qr"
STDIN = "-"

# Config file layout: section -> keys stored in it.
SECTIONS: dict[str, tuple[str, ...]] = {
    "wifi": ("ssid", "encryption", "password", "password_file", "hidden"),
    "qrcode": ("size", "format", "error_correction", "border", "output", "overwrite"),
    "colors": ("foreground", "background"),
}

DEFAULTS: dict[str, Any] = {
    "encryption": Encryption.WPA,
    "size": 512,
    "format": ImageFormat.SVG,
    "foreground": "#000000",
    "background": "#ffffff",
    "overwrite": False,
    "hidden": False,
    "error_correction": ErrorCorrection.H,
    "border": 4,
}


def default_config_path() -> Path:
    """Per-user config file location."""
    return Path(click.get_app_dir(APP_NAME)) / "config.yaml"


def is_stdin(path: str | Path | None) -> bool:
    """True when ``path`` is ``-``, meaning standard input."""
    return path is not None and str(path) == STDIN


@dataclass
class ConfigFile:
    """Values read from a YAML config file. ``None`` means unset."""

    ssid: str | None = None
    encryption: str | None = None
    password: str | None = None
    password_file: str | None = None
    hidden: bool | None = None
    size: int | None = None
    format: str | None = None
    error_correction: str | None = None
    border: int | None = None
    output: str | None = None
    overwrite: bool | None = None
    foreground: str | None = None
    background: str | None = None

    @classmethod
    def load(cls, path: str | Path | None = None, required: bool = False) -> ConfigFile:
        """Load configuration from a YAML file.

        A missing file yields an empty config unless ``required`` is set.
        A path of ``-`` reads the document from standard input.
        """
        if is_stdin(path):
            p = "<stdin>"
            try:
                data = yaml.safe_load(click.get_text_stream("stdin")) or {}
            except OSError as e:
                raise IOFailure(f"Failed to read config from standard input: {e}") from e
            except yaml.YAMLError as e:
                raise ConfigError(f"Failed to parse config from standard input: {e}") from e
            return cls._from_data(data, p)

        p = Path(path) if path is not None else default_config_path()
        if not p.exists():
            if required:
                raise IOFailure(f"Config file not found: {p}")
            logger.debug("No config file at %s, using defaults", p)
            return cls()

        try:
            with open(p, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except OSError as e:
            raise IOFailure(f"Failed to read config file {p}: {e}") from e
        except yaml.YAMLError as e:
            raise ConfigError(f"Failed to parse config file {p}: {e}") from e
        return cls._from_data(data, p)

    @classmethod
    def _from_data(cls, data: Any, p: str | Path) -> ConfigFile:
        if not isinstance(data, dict):
            raise ConfigError(f"Config {p} must contain a mapping of sections")

        values: dict[str, Any] = {}
        for section, keys in SECTIONS.items():
            body = data.get(section)
            if body is None:
                continue
            if not isinstance(body, dict):
                raise ConfigError(f"Section '{section}' in {p} must be a mapping")
            for key, value in body.items():
                if key not in keys:
                    logger.debug("Ignoring unknown key %s.%s in %s", section, key, p)
                    continue
                values[key] = value
        for section in data:
            if section not in SECTIONS:
                logger.debug("Ignoring unknown section %s in %s", section, p)

        logger.info("Loaded configuration from %s", p)
        return cls(**values)

    def to_dict(self) -> dict[str, dict[str, Any]]:
        """Nested section mapping with unset values left out."""
        flat = asdict(self)
        data: dict[str, dict[str, Any]] = {}
        for section, keys in SECTIONS.items():
            body = {key: flat[key] for key in keys if flat[key] is not None}
            if body:
                data[section] = body
        return data

    def save(self, path: str | Path) -> None:
        """Save configuration to a YAML file."""
        p = Path(path)
        try:
            p.parent.mkdir(parents=True, exist_ok=True)
            with open(p, "w", encoding="utf-8") as f:
                yaml.safe_dump(self.to_dict(), f, default_flow_style=False, sort_keys=False)
        except OSError as e:
            raise IOFailure(f"Failed to save settings to {p}: {e}") from e

    def merged(self, values: dict[str, Any]) -> ConfigFile:
        """Copy with the non-``None`` entries of ``values`` applied."""
        known = {f.name for f in fields(self)}
        updates = {
            key: _plain(value)
            for key, value in values.items()
            if key in known and value is not None
        }
        return replace(self, **updates)


def _plain(value: Any) -> Any:
    """Convert enums and paths to YAML-friendly scalars."""
    if isinstance(value, (Encryption, ImageFormat, ErrorCorrection)):
        return value.value
    if isinstance(value, Path):
        return str(value)
    return value


def save_settings(path: str | Path, values: dict[str, Any]) -> ConfigFile:
    """Merge ``values`` into the config file at ``path`` and write it back."""
    if is_stdin(path):
        raise ConfigError("Settings cannot be saved to standard input; pass a config file path")
    config = ConfigFile.load(path).merged(values)
    config.save(path)
    logger.info("Settings saved to %s", path)
    return config


def read_password_file(path: str | Path) -> str:
    """Read a password from the first line of a file."""
    p = Path(path).expanduser()
    try:
        text = p.read_text(encoding="utf-8")
    except OSError as e:
        raise IOFailure(f"Failed to read password file {p}: {e}") from e
    password = text.splitlines()[0] if text else ""
    if not password:
        raise MissingPassword(f"Password file {p} is empty")
    logger.debug("Password read from %s", p)
    return password


def read_password_stdin() -> str:
    """Prompt for the password, or read one line when stdin is piped."""
    stream = click.get_text_stream("stdin")
    if stream.isatty():
        return click.prompt("Wi-Fi password", hide_input=True, err=True)
    line = stream.readline()
    password = line.rstrip("\r\n")
    if not password:
        raise MissingPassword("No password given and none could be read from standard input")
    logger.debug("Password read from standard input")
    return password


def stdin_consumed() -> str:
    """Password reader used once the config was read from standard input."""
    raise MissingPassword(
        "No password given; standard input held the config, "
        "so pass --password, --password-file or set wifi.password"
    )


def _pick(name: str, cli: dict[str, Any], config: ConfigFile) -> Any:
    value = cli.get(name)
    if value is not None:
        return value
    value = getattr(config, name, None)
    if value is not None:
        return value
    return DEFAULTS.get(name)


def _as_int(name: str, value: Any) -> int:
    if isinstance(value, bool):
        raise ConfigError(f"{name} must be an integer, got {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ConfigError(f"{name} must be an integer, got {value!r}") from None


def _as_bool(name: str, value: Any) -> bool:
    if not isinstance(value, bool):
        raise ConfigError(f"{name} must be true or false, got {value!r}")
    return value


def resolve_password(
    cli: dict[str, Any],
    config: ConfigFile,
    read_stdin: Callable[[], str] = read_password_stdin,
) -> str:
    """Find the password: CLI, config, password file, then stdin."""
    if cli.get("password"):
        return cli["password"]
    if config.password:
        logger.debug("Using password from config file")
        return str(config.password)
    path = cli.get("password_file") or config.password_file
    if path:
        return read_password_file(path)
    return read_stdin()


def resolve_settings(
    cli: dict[str, Any],
    config: ConfigFile,
    read_stdin: Callable[[], str] = read_password_stdin,
) -> Settings:
    """Merge CLI values over config-file values over defaults.

    ``cli`` maps setting names to values, with ``None`` for flags that were
    not given on the command line.
    """
    ssid = _pick("ssid", cli, config)
    if ssid is None or str(ssid) == "":
        raise MissingRequiredField(
            "SSID is required: pass --ssid or set wifi.ssid in the config file"
        )

    encryption = Encryption.parse(_pick("encryption", cli, config))
    output = _pick("output", cli, config)

    settings = Settings(
        ssid=str(ssid),
        encryption=encryption,
        output=Path(output).expanduser() if output else None,
        size=_as_int("size", _pick("size", cli, config)),
        format=ImageFormat.parse(_pick("format", cli, config)),
        foreground=str(_pick("foreground", cli, config)),
        background=str(_pick("background", cli, config)),
        overwrite=_as_bool("overwrite", _pick("overwrite", cli, config)),
        verbose=bool(cli.get("verbose")),
        hidden=_as_bool("hidden", _pick("hidden", cli, config)),
        error_correction=ErrorCorrection.parse(_pick("error_correction", cli, config)),
        border=_as_int("border", _pick("border", cli, config)),
    )
    if encryption.requires_password:
        settings.password = resolve_password(cli, config, read_stdin)

    settings.validate()
    logger.debug("Resolved %r", settings)
    return settings

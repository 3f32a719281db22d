"""Click CLI for the Wi-Fi QR code generator."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from pathlib import Path

import click
from click.core import ParameterSource

from . import __version__
from .config import (
    DEFAULTS,
    ConfigFile,
    default_config_path,
    is_stdin,
    read_password_stdin,
    resolve_settings,
    save_settings,
    stdin_consumed,
)
from .errors import ConfigError, WifiQrError
from .models import HEX_COLOR, Encryption, ErrorCorrection, ImageFormat
from .payload import build_payload
from .renderer import render
from .writer import resolve_output_path, write_image, write_stream

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

_PATH = click.Path(dir_okay=False, path_type=Path)

_SETTINGS_OPTIONS = [
    click.option("--ssid", "-s", help="Network name (SSID)"),
    click.option(
        "--encryption",
        "-e",
        type=click.Choice([e.value for e in Encryption], case_sensitive=False),
        default=DEFAULTS["encryption"].value,
        show_default=True,
        help="Encryption type",
    ),
    click.option("--password", help="Network password (visible in the process list)"),
    click.option("--password-file", type=_PATH, help="Read the password from this file"),
    click.option("--output", "-o", type=_PATH, help="Output image path (default: stdout)"),
    click.option(
        "--size",
        type=click.IntRange(min=1),
        default=DEFAULTS["size"],
        show_default=True,
        help="Image width and height in pixels",
    ),
    click.option(
        "--format",
        metavar="[svg|png]",
        default=DEFAULTS["format"].value,
        show_default=True,
        help="Output image format",
    ),
    click.option(
        "--foreground", default=DEFAULTS["foreground"], show_default=True, help="Module color"
    ),
    click.option(
        "--background", default=DEFAULTS["background"], show_default=True, help="Background color"
    ),
    click.option(
        "--error-correction",
        type=click.Choice([e.value for e in ErrorCorrection], case_sensitive=False),
        default=DEFAULTS["error_correction"].value,
        show_default=True,
        help="QR error correction level",
    ),
    click.option(
        "--border",
        type=click.IntRange(min=0),
        default=DEFAULTS["border"],
        show_default=True,
        help="Quiet zone width in modules",
    ),
    click.option(
        "--hidden/--visible", default=DEFAULTS["hidden"], help="Mark the network as hidden"
    ),
    click.option(
        "--overwrite/--no-overwrite",
        default=DEFAULTS["overwrite"],
        help="Replace the output file if it exists",
    ),
    click.option("--config", "-c", type=_PATH, help="Config file path (- for stdin)"),
    click.option("--verbose", "-v", is_flag=True, help="Enable debug logging"),
]


def settings_options(f):
    """Attach the shared Wi-Fi and rendering options to a command."""
    for option in reversed(_SETTINGS_OPTIONS):
        f = option(f)
    return f


@contextmanager
def reported_errors():
    """Turn pipeline errors into click errors (message + exit status 1)."""
    try:
        yield
    except WifiQrError as e:
        logger.debug("Command failed", exc_info=True)
        raise click.ClickException(str(e)) from e


def _given(ctx: click.Context, params: dict) -> dict:
    """Keep only the options set on the command line or via the environment."""
    explicit = (ParameterSource.COMMANDLINE, ParameterSource.ENVIRONMENT)
    return {
        name: value
        for name, value in params.items()
        if ctx.get_parameter_source(name) in explicit
    }


def _command_globals(ctx: click.Context, params: dict) -> Path | None:
    """Apply subcommand-level --verbose and return the effective config path."""
    verbose = params.pop("verbose")
    config_path = params.pop("config") or ctx.obj.get("config_path")
    if verbose and not ctx.obj.get("verbose"):
        logging.getLogger().setLevel(logging.DEBUG)
        ctx.obj["verbose"] = True
    return config_path


@click.group()
@click.version_option(__version__, prog_name="wifi-qr")
@click.option("--config", "-c", type=_PATH, help="Config file path (- for stdin)")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def main(ctx, config, verbose):
    """Turn Wi-Fi network credentials into a scannable QR code."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format=LOG_FORMAT,
    )
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config
    ctx.obj["verbose"] = verbose


@main.command()
@settings_options
@click.option("--print-payload", is_flag=True, help="Print the payload text instead of an image")
@click.pass_context
def generate(ctx, print_payload, **params):
    """Generate a QR code image from Wi-Fi credentials."""
    config_path = _command_globals(ctx, params)
    cli_values = _given(ctx, params)
    cli_values["verbose"] = ctx.obj["verbose"]

    with reported_errors():
        config = ConfigFile.load(config_path, required=config_path is not None)
        read_stdin = stdin_consumed if is_stdin(config_path) else read_password_stdin
        settings = resolve_settings(cli_values, config, read_stdin)
        payload = build_payload(settings)
        if print_payload:
            click.echo(payload)
            return

        data = render(payload, settings)
        if settings.output is None:
            write_stream(data, click.get_binary_stream("stdout"))
            return

        path = resolve_output_path(settings.output, settings.format)
        write_image(data, path, overwrite=settings.overwrite)

    click.echo(f"QR code saved to {path}")


def _check_values(values: dict) -> None:
    if "format" in values:
        values["format"] = ImageFormat.parse(values["format"])
    for name in ("foreground", "background"):
        if name in values and not HEX_COLOR.match(values[name]):
            raise ConfigError(f"Invalid {name} color '{values[name]}' (expected #rgb or #rrggbb)")
    if "ssid" in values and not values["ssid"]:
        raise ConfigError("SSID must not be empty")


@main.command("save-settings")
@settings_options
@click.pass_context
def save_settings_command(ctx, **params):
    """Save frequently used settings to the config file."""
    config_path = _command_globals(ctx, params) or default_config_path()
    values = _given(ctx, params)
    if not values:
        raise click.UsageError("Nothing to save: pass at least one setting option.")
    if "password" in values:
        click.echo("Warning: the password is stored in plain text.", err=True)

    with reported_errors():
        _check_values(values)
        save_settings(config_path, values)

    click.echo(f"Settings saved to {config_path}")


if __name__ == "__main__":
    main()

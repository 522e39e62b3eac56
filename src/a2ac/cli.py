"""a2ac CLI entrypoint."""

from __future__ import annotations

import sys
from pathlib import Path

import click

from a2ac import __version__
from a2ac.cli_commands._output import configure_logging, print_error
from a2ac.config import ConfigError, Settings, split_urls
from a2ac.utils.telemetry import configure_telemetry


@click.group()
@click.version_option(version=__version__, prog_name="a2ac")
@click.option(
    "--endpoints",
    default=None,
    help="Comma-separated agent URLs (overrides A2A_ENDPOINT_URLS).",
)
@click.option(
    "--endpoints-file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="YAML or JSON file listing agent endpoints.",
)
@click.option("--timeout", type=float, default=None, help="HTTP timeout in seconds.")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
@click.option("--trace", is_flag=True, help="Print OpenTelemetry spans to stderr.")
@click.option(
    "--otlp-endpoint",
    envvar="A2A_OTLP_ENDPOINT",
    default=None,
    help="Export spans to this OTLP/gRPC collector.",
)
@click.pass_context
def main(
    ctx: click.Context,
    endpoints: str | None,
    endpoints_file: Path | None,
    timeout: float | None,
    verbose: bool,
    trace: bool,
    otlp_endpoint: str | None,
) -> None:
    """Talk to remote A2A agents from the command line."""
    configure_logging(verbose=verbose)
    if trace or otlp_endpoint:
        try:
            configure_telemetry(
                export_to_console=trace,
                console_stream=sys.stderr,
                otlp_endpoint=otlp_endpoint,
            )
        except ImportError as exc:
            print_error(str(exc))
            sys.exit(1)
    try:
        settings = Settings.from_env()
    except ConfigError as exc:
        print_error(str(exc))
        sys.exit(1)

    overrides: dict[str, object] = {}
    if endpoints is not None:
        overrides["endpoint_urls"] = split_urls(endpoints)
    if endpoints_file is not None:
        overrides["endpoints_file"] = endpoints_file
    if timeout is not None:
        overrides["timeout"] = timeout
    ctx.obj = settings.model_copy(update=overrides)


# Register subcommands
from a2ac.cli_commands import register_commands  # noqa: E402

register_commands(main)

if __name__ == "__main__":
    main()

"""CLI adapter for ``appcat_runtime`` built on ``lib_cli_exit_tools``.

Purpose
-------
Expose the merge-and-synthesis engine on the command line so service authors
can render a function request, preview merged chart values, or scaffold
example inputs without a cluster.

Contents
--------
* :data:`CLICK_CONTEXT_SETTINGS` – shared Click settings ensuring ``-h`` works.
* :func:`cli` – root command wiring traceback handling and verbose logging.
* :func:`cli_info` – prints distribution metadata.
* :func:`cli_render` – runs :func:`appcat_runtime.core.run_function` on a
  request document.
* :func:`cli_merge` – prints the merged chart values for a service config and
  a user spec.
* :func:`cli_password` – prints a freshly generated secret value.
* :func:`cli_generate_examples` – writes example inputs.
* :func:`main` – entry point used by ``console_scripts`` registration.

System Role
-----------
The CLI lives in the outermost layer. It loads documents through the file
loader adapters, calls the composition root, and lets ``lib_cli_exit_tools``
turn exceptions into exit codes.
"""

from __future__ import annotations

import json
import logging
import sys
from importlib import metadata
from pathlib import Path
from typing import Any, Final, Optional, Sequence

import lib_cli_exit_tools
import rich_click as click
import yaml

from .adapters.file_loaders.structured import load_document
from .adapters.secrets.default import generate_password
from .application.merge import merge_configs
from .core import load_settings, run_function
from .domain.models import ServiceConfig
from .examples import generate_examples as _generate_examples
from .observability import get_logger

CLICK_CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}
_TRACEBACK_SUMMARY_LIMIT: Final[int] = 500
_TRACEBACK_VERBOSE_LIMIT: Final[int] = 10_000

OUTPUT_FORMATS: Final[tuple[str, ...]] = ("json", "yaml")


def _resolve_version() -> str:
    """Return the installed package version, ``"0.0.0"`` when metadata is missing."""

    try:
        return metadata.version("appcat-runtime")
    except metadata.PackageNotFoundError:
        return "0.0.0"


@click.group(
    help="Merge service defaults with user specs and synthesize Helm releases and connection secrets",
    context_settings=CLICK_CONTEXT_SETTINGS,
    invoke_without_command=False,
)
@click.version_option(
    version=_resolve_version(),
    prog_name="appcat-runtime",
    message="appcat-runtime version %(version)s",
)
@click.option(
    "--traceback/--no-traceback",
    is_flag=True,
    default=False,
    help="Show full Python traceback on errors",
)
@click.option(
    "--verbose",
    is_flag=True,
    default=False,
    help="Log structured engine events to stderr",
)
@click.pass_context
def cli(ctx: click.Context, traceback: bool, verbose: bool) -> None:
    """Root command configuring traceback handling and logging for all subcommands.

    Side Effects
        Mutates ``lib_cli_exit_tools.config.traceback`` and
        ``lib_cli_exit_tools.config.traceback_force_color``; attaches a stderr
        handler to the package logger when ``--verbose`` is given.
    """

    ctx.ensure_object(dict)
    ctx.obj["traceback"] = traceback
    lib_cli_exit_tools.config.traceback = traceback
    lib_cli_exit_tools.config.traceback_force_color = traceback
    if verbose:
        _enable_verbose_logging()


@cli.command("info", context_settings=CLICK_CONTEXT_SETTINGS)
def cli_info() -> None:
    """Print basic distribution metadata so users can confirm installation."""

    try:
        meta = metadata.metadata("appcat-runtime")
    except metadata.PackageNotFoundError:
        click.echo("appcat-runtime (metadata unavailable)")
        return
    click.echo(f"Info for {meta.get('Name', 'appcat-runtime')}:")
    click.echo(f"  Version         : {meta.get('Version', _resolve_version())}")
    click.echo(f"  Requires-Python : {meta.get('Requires-Python', '>=3.11')}")
    summary = meta.get("Summary")
    if summary:
        click.echo(f"  Summary         : {summary}")


@cli.command("render", context_settings=CLICK_CONTEXT_SETTINGS)
@click.option(
    "--request",
    "request_path",
    type=click.Path(path_type=Path, exists=True, file_okay=True, dir_okay=False, readable=True),
    required=True,
    help="Function request document (YAML, JSON, or TOML)",
)
@click.option(
    "--format",
    "output_format",
    type=click.Choice(OUTPUT_FORMATS, case_sensitive=False),
    default="json",
    show_default=True,
    help="Output format of the response",
)
@click.option(
    "--indent",
    type=int,
    default=None,
    help="Pretty-print JSON output with the provided indent size",
)
def cli_render(request_path: Path, output_format: str, indent: Optional[int]) -> None:
    """Run a function request and print the response.

    Settings are read from ``APPCAT_RUNTIME_*`` environment variables.
    """

    request = load_document(request_path)
    response = run_function(request, settings=load_settings())
    click.echo(_dump(response, output_format.lower(), indent))


@cli.command("merge", context_settings=CLICK_CONTEXT_SETTINGS)
@click.option(
    "--service-config",
    "service_config_path",
    type=click.Path(path_type=Path, exists=True, file_okay=True, dir_okay=False, readable=True),
    required=True,
    help="Service configuration document",
)
@click.option(
    "--spec",
    "spec_path",
    type=click.Path(path_type=Path, exists=True, file_okay=True, dir_okay=False, readable=True),
    default=None,
    help="User spec document (defaults to an empty spec)",
)
@click.option(
    "--format",
    "output_format",
    type=click.Choice(OUTPUT_FORMATS, case_sensitive=False),
    default="json",
    show_default=True,
    help="Output format of the merged values",
)
@click.option(
    "--indent",
    type=int,
    default=None,
    help="Pretty-print JSON output with the provided indent size",
)
def cli_merge(
    service_config_path: Path,
    spec_path: Optional[Path],
    output_format: str,
    indent: Optional[int],
) -> None:
    """Print the chart values produced by merging a user spec into service defaults."""

    config = ServiceConfig.from_mapping(load_document(service_config_path))
    user_spec = load_document(spec_path) if spec_path is not None else {}
    settings = load_settings()
    merged = merge_configs(config, user_spec, sentinel=settings.path_sentinel or None)
    click.echo(_dump(merged.values or {}, output_format.lower(), indent))


@cli.command("password", context_settings=CLICK_CONTEXT_SETTINGS)
@click.option(
    "--length",
    type=click.IntRange(min=1),
    default=None,
    help="Number of characters (defaults to the configured password length)",
)
def cli_password(length: Optional[int]) -> None:
    """Print a freshly generated secret value."""

    click.echo(generate_password(length or load_settings().password_length))


@cli.command("generate-examples", context_settings=CLICK_CONTEXT_SETTINGS)
@click.option(
    "--destination",
    type=click.Path(path_type=Path, file_okay=False, dir_okay=True, resolve_path=True),
    required=True,
    help="Directory that will receive the example files",
)
@click.option("--instance", default="test-redis", show_default=True, help="Name of the example instance")
@click.option("--namespace", default="default", show_default=True, help="Namespace of the example instance")
@click.option(
    "--force/--no-force",
    default=False,
    help="Overwrite existing example files if set",
    show_default=True,
)
def cli_generate_examples(destination: Path, instance: str, namespace: str, force: bool) -> None:
    """Write an example redis service config and function request under *destination*."""

    created = _generate_examples(destination, instance=instance, namespace=namespace, force=force)
    click.echo(json.dumps([str(path) for path in created], indent=2))


def _dump(payload: Any, output_format: str, indent: Optional[int]) -> str:
    """Serialise *payload* as JSON or YAML."""

    if output_format == "yaml":
        return yaml.safe_dump(payload, sort_keys=False).rstrip("\n")
    return json.dumps(payload, indent=indent, separators=(",", ":") if indent is None else None, ensure_ascii=False)


def _enable_verbose_logging() -> None:
    """Attach a stderr handler that renders the structured context of each event."""

    logger = get_logger()
    if any(getattr(handler, "_appcat_verbose", False) for handler in logger.handlers):
        return
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(levelname)s %(message)s %(context)s"))
    handler._appcat_verbose = True  # type: ignore[attr-defined]
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)


def main(argv: Optional[Sequence[str]] = None, *, restore_traceback: bool = True) -> int:
    """Execute the CLI with shared exit handling and return the exit code."""

    previous_traceback = getattr(lib_cli_exit_tools.config, "traceback", False)
    previous_force_color = getattr(lib_cli_exit_tools.config, "traceback_force_color", False)
    try:
        try:
            return lib_cli_exit_tools.run_cli(
                cli,
                argv=list(argv) if argv is not None else None,
                prog_name="appcat-runtime",
            )
        except BaseException as exc:  # noqa: BLE001 - funnel through shared printers
            lib_cli_exit_tools.print_exception_message(
                trace_back=lib_cli_exit_tools.config.traceback,
                length_limit=(
                    _TRACEBACK_VERBOSE_LIMIT if lib_cli_exit_tools.config.traceback else _TRACEBACK_SUMMARY_LIMIT
                ),
            )
            return lib_cli_exit_tools.get_system_exit_code(exc)
    finally:
        if restore_traceback:
            lib_cli_exit_tools.config.traceback = previous_traceback
            lib_cli_exit_tools.config.traceback_force_color = previous_force_color


if __name__ == "__main__":  # pragma: no cover - exercised via console entry point
    raise SystemExit(main(sys.argv[1:]))

"""
npm-two-stage installer — CLI entrypoint.

Usage:
    npm-two-stage install [NPM_PATH]
    npm-two-stage uninstall [NPM_PATH]
    npm-two-stage status [NPM_PATH]
    python -m n2s_installer --help
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click

from n2s_installer import __version__
from n2s_installer.core.config.loader import ConfigError, load_profile
from n2s_installer.core.models.errors import ExitCode, OperationError
from n2s_installer.core.models.profile import PatchProfile
from n2s_installer.core.observability.logging_config import level_from_flags, setup_from_env
from n2s_installer.core.observability.progress import CallbackSink, LoggingSink, ProgressSink

PROG_NAME = "npm-two-stage"

ADVICE_TO_UNINSTALL = f"""
   The remains of a previous installation of npm-two-stage were found.
   This complicates the current installation, so it will be aborted.
   The best action to take now is to run '{PROG_NAME} uninstall' using the
   same npm-two-stage version as when the previous installation was run."""

HELP_ADDENDUM = (
    "NPM_PATH is the path to the target npm installation (the directory "
    "holding its package.json). When it is omitted, the commands act on "
    "the globally active npm, located with 'npm root -g'."
)


@click.group(epilog=HELP_ADDENDUM)
@click.version_option(version=__version__, prog_name=PROG_NAME)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging.")
@click.option("--quiet", "-q", is_flag=True, help="Only log errors.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False, dir_okay=False),
    default=None,
    help="Alternate patch profile YAML (default: the packaged profile).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
) -> None:
    """Install, remove, or inspect npm-two-stage on an npm installation."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = Path(config_path) if config_path else None

    # ── Logging setup (once, at process start) ──────────────────
    setup_from_env(level_from_flags(debug=debug, verbose=verbose, quiet=quiet))


# ── Helpers ─────────────────────────────────────────────────────


def _load_profile(ctx: click.Context) -> PatchProfile:
    try:
        return load_profile(ctx.obj.get("config_path"))
    except ConfigError as e:
        click.echo(f"ERROR: {e}", err=True)
        sys.exit(1)


def _console_sink(silent: bool) -> ProgressSink:
    if silent:
        return LoggingSink()
    return CallbackSink(lambda msg: click.echo("   " + msg))


def _fail(err: OperationError, as_json: bool) -> None:
    if as_json:
        click.echo(json.dumps(err.to_dict(), indent=2))
    else:
        click.echo(f"ERROR: {err.message}", err=True)
    sys.exit(int(err.exit_code or 1))


# ── Commands ────────────────────────────────────────────────────


@cli.command()
@click.argument("npm_path", required=False)
@click.option("--silent", "-s", is_flag=True, help="No console output unless error.")
@click.option(
    "--source",
    "source_dir",
    envvar="N2S_SOURCE_DIR",
    type=click.Path(file_okay=False),
    default=None,
    help="npm-two-stage source tree holding the replacement files.",
)
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def install(
    ctx: click.Context,
    npm_path: str | None,
    silent: bool,
    source_dir: str | None,
    as_json: bool,
) -> None:
    """Install npm-two-stage over npm at given path or live location."""
    from n2s_installer.core.use_cases.install import run_install

    profile = _load_profile(ctx)
    quiet = silent or as_json
    if not quiet:
        click.echo()

    try:
        result = run_install(
            npm_path,
            profile=profile,
            source_dir=source_dir,
            sink=_console_sink(quiet),
        )
    except OperationError as e:
        if not quiet and e.exit_code == ExitCode.LEFTOVERS_DETECTED:
            click.echo(ADVICE_TO_UNINSTALL, err=True)
        _fail(e, as_json)
        return

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
    elif not silent:
        click.echo(f"\n   Installation of {profile.product} was successful.\n")


@cli.command()
@click.argument("npm_path", required=False)
@click.option("--silent", "-s", is_flag=True, help="No console output unless error.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def uninstall(ctx: click.Context, npm_path: str | None, silent: bool, as_json: bool) -> None:
    """Remove all traces of npm-two-stage from npm at given path or live location."""
    from n2s_installer.core.use_cases.uninstall import run_uninstall

    profile = _load_profile(ctx)
    quiet = silent or as_json
    if not quiet:
        click.echo()

    try:
        result = run_uninstall(npm_path, profile=profile, sink=_console_sink(quiet))
    except OperationError as e:
        _fail(e, as_json)
        return

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
    elif not silent:
        click.echo(f"\n   Removal of {profile.product} was successful.\n")


@cli.command()
@click.argument("npm_path", required=False)
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def status(ctx: click.Context, npm_path: str | None, as_json: bool) -> None:
    """Report the condition of npm-two-stage artifacts at given path or live location."""
    from n2s_installer.core.use_cases.status import get_status

    profile = _load_profile(ctx)
    if not as_json:
        click.echo()

    try:
        report = get_status(npm_path, profile=profile, sink=_console_sink(as_json))
    except OperationError as e:
        _fail(e, as_json)
        return

    if as_json:
        click.echo(json.dumps(report.to_dict(), indent=2))
    else:
        click.echo()


cli.add_command(install, "i")
cli.add_command(uninstall, "un")


def main() -> None:
    cli(prog_name=PROG_NAME)


if __name__ == "__main__":
    main()

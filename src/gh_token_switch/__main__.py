"""CLI entry point for gh-token-switch."""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path

import click

from gh_token_switch import __version__
from gh_token_switch.config import APP_NAME, MetadataStore, validate_alias
from gh_token_switch.exceptions import (
    ConfigCorrupt,
    InvalidAliasSyntax,
    TokenSwitchError,
)
from gh_token_switch.gh import GhCli
from gh_token_switch.notify import Notifier
from gh_token_switch.registry import ProfileRegistry
from gh_token_switch.secret_store import KeyringSecretStore
from gh_token_switch.switch import SwitchEngine


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _fail(message: str) -> None:
    click.echo(f"error: {message}", err=True)
    sys.exit(1)


def _registry(ctx: click.Context) -> ProfileRegistry:
    return ctx.obj["registry"]


def _engine(ctx: click.Context) -> SwitchEngine:
    """Build the switch engine, honouring test overrides in ctx.obj."""
    registry = _registry(ctx)
    tool = ctx.obj.get("tool") or GhCli()
    notifier = ctx.obj.get("notifier") or Notifier(registry.profiles.notifications)
    return SwitchEngine(registry, tool, notifier)


def _read_token(alias: str) -> str:
    stdin = click.get_text_stream("stdin")
    if stdin.isatty():
        return click.prompt(
            f"GitHub token for '{alias}'", hide_input=True, show_default=False
        )
    return stdin.read()


def _run_use(ctx: click.Context, alias: str | None) -> None:
    try:
        result = _engine(ctx).use(alias)
    except TokenSwitchError as e:
        _fail(str(e))
    click.echo(result.alias)


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name=APP_NAME)
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Path to config.toml. Defaults to $GH_TOKEN_SWITCH_CONFIG or the "
    "per-user config directory.",
)
@click.option("--verbose", "-v", is_flag=True, default=False, help="Debug logging.")
@click.pass_context
def cli(ctx: click.Context, config_path: Path | None, verbose: bool) -> None:
    """Switch GitHub auth tokens by profile.

    When invoked without a subcommand, cycles to the next stored alias
    (same as `use` with no alias).
    """
    ctx.ensure_object(dict)
    _configure_logging(verbose)

    secrets = ctx.obj.get("secrets") or KeyringSecretStore()
    try:
        ctx.obj["registry"] = ProfileRegistry(MetadataStore(config_path), secrets)
    except ConfigCorrupt as e:
        _fail(
            f"{e}\nFix or remove {e.path} and re-run; "
            "tokens in the keychain are not affected."
        )

    if ctx.invoked_subcommand is None:
        _run_use(ctx, None)


@cli.command(name="set")
@click.argument("alias")
@click.pass_context
def set_token(ctx: click.Context, alias: str) -> None:
    """Store or update the token for ALIAS (reads stdin when piped)."""
    try:
        validate_alias(alias)
    except InvalidAliasSyntax as e:
        _fail(str(e))
    token = _read_token(alias)
    try:
        _registry(ctx).set(alias, token)
    except TokenSwitchError as e:
        _fail(str(e))
    click.echo(f"stored token for alias '{alias}'")


@cli.command()
@click.argument("alias", required=False)
@click.pass_context
def use(ctx: click.Context, alias: str | None) -> None:
    """Switch to ALIAS, or cycle to the next alias when omitted."""
    _run_use(ctx, alias)


@cli.command()
@click.pass_context
def current(ctx: click.Context) -> None:
    """Show the alias whose token gh is currently using."""
    try:
        alias = _engine(ctx).current()
    except TokenSwitchError as e:
        _fail(str(e))
    click.echo(alias or "unknown")


@cli.command(name="list")
@click.option("--json", "as_json", is_flag=True, default=False, help="Emit JSON.")
@click.pass_context
def list_aliases(ctx: click.Context, as_json: bool) -> None:
    """List profile aliases in cycling order."""
    registry = _registry(ctx)
    if as_json:
        payload = {
            "aliases": registry.list(),
            "last_used_alias": registry.profiles.last_used_alias,
        }
        click.echo(json.dumps(payload, indent=2))
        return
    for alias in registry.list():
        click.echo(alias)


@cli.command()
@click.argument("old")
@click.argument("new")
@click.pass_context
def rename(ctx: click.Context, old: str, new: str) -> None:
    """Rename alias OLD to NEW in the keychain and config."""
    try:
        _registry(ctx).rename(old, new)
    except TokenSwitchError as e:
        _fail(str(e))
    click.echo(f"renamed '{old}' -> '{new}'")


@cli.command()
@click.argument("alias")
@click.pass_context
def delete(ctx: click.Context, alias: str) -> None:
    """Delete ALIAS from the keychain and config."""
    try:
        _registry(ctx).delete(alias)
    except TokenSwitchError as e:
        _fail(str(e))
    click.echo(f"deleted '{alias}'")


def main() -> None:
    """Entry point."""
    cli()


if __name__ == "__main__":
    main()

"""Root Typer application for the Vector CLI."""

from __future__ import annotations

import logging
import sys
from typing import Optional

import click
import typer
from typer.core import TyperGroup

from vector_cli import __version__
from vector_cli.commands import (
    account,
    auth,
    db,
    deploy,
    env,
    event,
    mcp,
    php,
    site,
    ssl,
    waf,
    webhook,
)
from vector_cli.config import AppState, get_state
from vector_cli.errors import VectorError
from vector_cli.output import print_error

log = logging.getLogger(__name__)

FORMAT_FLAGS = {"json": "Output JSON instead of tables.", "no_json": "Output tables instead of JSON."}


def _format_flag(ctx: click.Context, param: click.Parameter, value: bool) -> None:
    if not value:
        return
    root = ctx.find_root()
    state = get_state(ctx)
    root.obj = state.with_flags(**{f"{param.name}_flag": True})


def _add_format_flags(command: click.Command) -> None:
    """Accept ``--json``/``--no-json`` after any leaf command as well as before it."""
    if isinstance(command, click.Group):
        for sub in command.commands.values():
            _add_format_flags(sub)
        return
    existing = {param.name for param in command.params}
    for name, help_text in FORMAT_FLAGS.items():
        if name in existing:
            continue
        command.params.append(
            click.Option(
                [f"--{name.replace('_', '-')}", name],
                is_flag=True,
                expose_value=False,
                callback=_format_flag,
                help=help_text,
            )
        )


class VectorGroup(TyperGroup):
    """Root command group; the single place where errors become exit codes."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        for command in self.commands.values():
            _add_format_flags(command)

    def invoke(self, ctx: click.Context):
        try:
            return super().invoke(ctx)
        except VectorError as exc:
            log.debug("command failed with %s", type(exc).__name__)
            print_error(str(exc))
            raise typer.Exit(exc.exit_code) from exc


app = typer.Typer(
    name="vector",
    cls=VectorGroup,
    help="CLI for Vector Pro API.",
    no_args_is_help=True,
    pretty_exceptions_enable=False,
)

app.add_typer(auth.app, name="auth", help="Manage authentication.")
app.add_typer(site.app, name="site", help="Manage sites.")
app.add_typer(env.app, name="env", help="Manage environments.")
app.add_typer(deploy.app, name="deploy", help="Manage deployments.")
app.add_typer(ssl.app, name="ssl", help="Manage SSL certificates.")
app.add_typer(db.app, name="db", help="Import and export site databases.")
app.add_typer(waf.app, name="waf", help="Manage web application firewall rules.")
app.add_typer(account.app, name="account", help="Manage account SSH keys, API keys and secrets.")
app.add_typer(event.app, name="event", help="Browse account events.")
app.add_typer(webhook.app, name="webhook", help="Manage webhooks.")
app.add_typer(mcp.app, name="mcp", help="Configure the Vector MCP server for Claude Desktop.")
app.command(name="php-versions")(php.php_versions)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"vector {__version__}")
        raise typer.Exit()


def _configure_logging(debug: bool) -> None:
    if debug:
        logging.basicConfig(format="%(levelname)s %(name)s: %(message)s", stream=sys.stderr)
        logging.getLogger("vector_cli").setLevel(logging.DEBUG)


@app.callback()
def root(
    ctx: typer.Context,
    json_output: bool = typer.Option(False, "--json", help="Output JSON instead of tables."),
    no_json: bool = typer.Option(False, "--no-json", help="Output tables instead of JSON (default when TTY)."),
    debug: bool = typer.Option(False, "--debug", help="Log HTTP requests to stderr."),
    version: Optional[bool] = typer.Option(
        None, "--version", callback=_version_callback, is_eager=True, help="Show version and exit."
    ),
) -> None:
    """CLI for Vector Pro API."""
    _configure_logging(debug)
    ctx.obj = AppState.from_flags(json_output, no_json)


def main() -> None:
    app()


if __name__ == "__main__":
    main()

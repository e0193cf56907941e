"""Authentication commands."""

from __future__ import annotations

import sys
from typing import Optional

import typer

from vector_common import API_PREFIX, ENV_API_KEY, UserResponse

from vector_cli.config import (
    NOT_LOGGED_IN,
    clear_credentials,
    get_api_key,
    get_format,
    load_config,
    load_credentials,
    save_credentials,
)
from vector_cli.errors import ConfigError, OtherError
from vector_cli.output import OutputFormat, data_of, print_json, print_key_value, print_message, text
from vector_cli.services.api_client import ApiClient

app = typer.Typer(no_args_is_help=True)

USER_PATH = f"{API_PREFIX}/user"


def _read_token() -> str:
    """Prompt on a terminal, otherwise read one line from stdin."""
    if sys.stdin.isatty():
        return typer.prompt("API Token", hide_input=True, err=True)
    try:
        return sys.stdin.readline().strip()
    except OSError as exc:
        raise ConfigError(f"Failed to read from stdin: {exc}") from exc


@app.command()
def login(
    ctx: typer.Context,
    token: Optional[str] = typer.Option(
        None, "--token", envvar=ENV_API_KEY, help="API token (reads from stdin if not provided)."
    ),
) -> None:
    """Log in with an API token."""
    fmt = get_format(ctx)
    api_token = token if token is not None else _read_token()
    if not api_token:
        raise ConfigError("Token cannot be empty")

    config = load_config()
    with ApiClient(config.api_url) as client:
        client.set_token(api_token)
        response = client.get(USER_PATH)

    creds = load_credentials()
    creds.api_key = api_token
    save_credentials(creds)

    if fmt is OutputFormat.JSON:
        print_json(response)
        return
    print_message("Successfully authenticated.")
    email = text(data_of(response), "email")
    if email:
        print_message(f"Logged in as: {email}")


@app.command()
def logout(ctx: typer.Context) -> None:
    """Log out and clear stored credentials."""
    fmt = get_format(ctx)
    creds = load_credentials()

    if creds.api_key is None:
        if fmt is OutputFormat.JSON:
            print_json({"message": "Not logged in"})
        else:
            print_message("Not logged in.")
        return

    clear_credentials(creds)
    if fmt is OutputFormat.JSON:
        print_json({"message": "Logged out successfully"})
    else:
        print_message("Logged out successfully.")


@app.command()
def status(ctx: typer.Context) -> None:
    """Check authentication status."""
    fmt = get_format(ctx)
    config = load_config()
    token = get_api_key(load_credentials())

    if not token:
        if fmt is OutputFormat.JSON:
            print_json({"authenticated": False, "message": "Not logged in"})
        else:
            print_message(NOT_LOGGED_IN)
        return

    with ApiClient(config.api_url, token) as client:
        response = client.get(USER_PATH)
    try:
        user = UserResponse.model_validate(response).data
    except ValueError as exc:
        raise OtherError(f"JSON parse error: {exc}") from exc

    if fmt is OutputFormat.JSON:
        print_json(
            {
                "authenticated": True,
                "user": {"id": user.id, "name": user.name, "email": user.email},
            }
        )
    else:
        print_key_value(
            [
                ("Status", "Authenticated"),
                ("Name", user.name),
                ("Email", user.email),
            ]
        )

"""Account-level commands: summary, SSH keys, API keys and global secrets."""

from __future__ import annotations

from typing import Any, List, Optional

import typer

from vector_common import API_PREFIX, DEFAULT_PAGE, DEFAULT_PER_PAGE

from vector_cli.config import get_client, get_format
from vector_cli.output import (
    OutputFormat,
    data_of,
    field,
    flag,
    format_bool,
    format_list,
    format_option,
    number,
    print_json,
    print_key_value,
    print_message,
    render_action,
    render_detail,
    render_list,
)
from vector_cli.services.api_client import compact

app = typer.Typer(no_args_is_help=True)
ssh_key_app = typer.Typer(no_args_is_help=True)
api_key_app = typer.Typer(no_args_is_help=True)
secret_app = typer.Typer(no_args_is_help=True)
app.add_typer(ssh_key_app, name="ssh-key", help="Manage account SSH keys.")
app.add_typer(api_key_app, name="api-key", help="Manage API keys.")
app.add_typer(secret_app, name="secret", help="Manage global secrets.")

SSH_KEYS = f"{API_PREFIX}/ssh-keys"
API_KEYS = f"{API_PREFIX}/api-keys"
GLOBAL_SECRETS = f"{API_PREFIX}/global-secrets"


def _section(data: Any, key: str) -> Any:
    return data.get(key) if isinstance(data, dict) else None


@app.command()
def show(ctx: typer.Context) -> None:
    """Show the account summary."""
    with get_client() as client:
        response = client.get(f"{API_PREFIX}/account")

    def pairs(data: Any) -> list[tuple[str, str]]:
        owner = _section(data, "owner")
        account = _section(data, "account")
        sites = _section(data, "sites")
        envs = _section(data, "environments")
        return [
            ("Owner Name", field(owner, "name")),
            ("Owner Email", field(owner, "email")),
            ("Account Name", field(account, "name")),
            ("Company", field(account, "company")),
            ("Total Sites", format_option(number(sites, "total"))),
            ("Active Sites", format_option(number(_section(sites, "by_status"), "active"))),
            ("Total Environments", format_option(number(envs, "total"))),
            ("Active Environments", format_option(number(_section(envs, "by_status"), "active"))),
        ]

    render_detail(response, get_format(ctx), pairs)


# ---------------------------------------------------------------------------
# SSH keys
# ---------------------------------------------------------------------------


@ssh_key_app.command(name="list")
def ssh_key_list(
    ctx: typer.Context,
    page: int = typer.Option(DEFAULT_PAGE, help="Page number."),
    per_page: int = typer.Option(DEFAULT_PER_PAGE, help="Items per page."),
) -> None:
    """List account SSH keys."""
    with get_client() as client:
        response = client.get(SSH_KEYS, {"page": page, "per_page": per_page})
    render_list(
        response,
        get_format(ctx),
        headers=["ID", "Name", "Fingerprint", "Created"],
        row=lambda k: [field(k, "id"), field(k, "name"), field(k, "fingerprint"), field(k, "created_at")],
        empty="No SSH keys found.",
    )


@ssh_key_app.command(name="show")
def ssh_key_show(ctx: typer.Context, key_id: str = typer.Argument(..., help="SSH key ID.")) -> None:
    """Show an account SSH key."""
    with get_client() as client:
        response = client.get(f"{SSH_KEYS}/{key_id}")
    render_detail(
        response,
        get_format(ctx),
        lambda k: [
            ("ID", field(k, "id")),
            ("Name", field(k, "name")),
            ("Fingerprint", field(k, "fingerprint")),
            ("Public Key Preview", field(k, "public_key_preview")),
            ("Account Default", format_option(flag(k, "is_account_default"))),
            ("Created", field(k, "created_at")),
        ],
    )


@ssh_key_app.command(name="create")
def ssh_key_create(
    ctx: typer.Context,
    name: str = typer.Option(..., "--name", help="Key name."),
    public_key: str = typer.Option(..., "--public-key", help="OpenSSH public key."),
) -> None:
    """Add an SSH key to the account."""
    with get_client() as client:
        response = client.post(SSH_KEYS, {"name": name, "public_key": public_key})
    render_action(
        response,
        get_format(ctx),
        lambda k: f"SSH key created: {field(k, 'name')} ({field(k, 'id')})",
    )


@ssh_key_app.command(name="delete")
def ssh_key_delete(ctx: typer.Context, key_id: str = typer.Argument(..., help="SSH key ID.")) -> None:
    """Delete an account SSH key."""
    with get_client() as client:
        response = client.delete(f"{SSH_KEYS}/{key_id}")
    render_action(response, get_format(ctx), "SSH key deleted successfully.")


# ---------------------------------------------------------------------------
# API keys
# ---------------------------------------------------------------------------


@api_key_app.command(name="list")
def api_key_list(
    ctx: typer.Context,
    page: int = typer.Option(DEFAULT_PAGE, help="Page number."),
    per_page: int = typer.Option(DEFAULT_PER_PAGE, help="Items per page."),
) -> None:
    """List API keys."""
    with get_client() as client:
        response = client.get(API_KEYS, {"page": page, "per_page": per_page})
    render_list(
        response,
        get_format(ctx),
        headers=["ID", "Name", "Abilities", "Last Used", "Expires"],
        row=lambda k: [
            format_option(number(k, "id")),
            field(k, "name"),
            format_list(_section(k, "abilities")),
            field(k, "last_used_at"),
            field(k, "expires_at"),
        ],
        empty="No API keys found.",
    )


@api_key_app.command(name="create")
def api_key_create(
    ctx: typer.Context,
    name: str = typer.Option(..., "--name", help="Key name."),
    abilities: Optional[List[str]] = typer.Option(None, "--abilities", help="Ability to grant (repeatable)."),
    expires_at: Optional[str] = typer.Option(None, "--expires-at", help="Expiry timestamp."),
) -> None:
    """Create an API key. The token is only shown once."""
    with get_client() as client:
        response = client.post(API_KEYS, compact(name=name, abilities=abilities, expires_at=expires_at))

    if get_format(ctx) is OutputFormat.JSON:
        print_json(response)
        return
    data = data_of(response)
    print_key_value(
        [
            ("Name", field(data, "name")),
            ("Token", field(data, "token")),
            ("Abilities", format_list(_section(data, "abilities"))),
            ("Expires", field(data, "expires_at")),
        ]
    )
    print_message("\nSave this token - it won't be shown again!")


@api_key_app.command(name="delete")
def api_key_delete(ctx: typer.Context, token_id: str = typer.Argument(..., help="API key ID.")) -> None:
    """Delete an API key."""
    with get_client() as client:
        response = client.delete(f"{API_KEYS}/{token_id}")
    render_action(response, get_format(ctx), "API key deleted successfully.")


# ---------------------------------------------------------------------------
# Secrets (also used by ``vector env secret``)
# ---------------------------------------------------------------------------


def _is_secret(secret: Any) -> str:
    value = flag(secret, "is_secret")
    return format_bool(True if value is None else value)


def secret_row(secret: Any) -> list[str]:
    return [
        field(secret, "id"),
        field(secret, "key"),
        _is_secret(secret),
        field(secret, "value"),
        field(secret, "created_at"),
    ]


def secret_pairs(secret: Any) -> list[tuple[str, str]]:
    return [
        ("ID", field(secret, "id")),
        ("Key", field(secret, "key")),
        ("Secret", _is_secret(secret)),
        ("Value", field(secret, "value")),
        ("Created", field(secret, "created_at")),
        ("Updated", field(secret, "updated_at")),
    ]


def secret_body(key: str | None, value: str | None, no_secret: bool) -> dict[str, Any]:
    """``is_secret`` is only sent to turn secrecy off."""
    return compact(key=key, value=value, is_secret=False if no_secret else None)


def secret_created(secret: Any) -> str:
    return f"Secret created: {field(secret, 'key')} ({field(secret, 'id')})"


@secret_app.command(name="list")
def secret_list(
    ctx: typer.Context,
    page: int = typer.Option(DEFAULT_PAGE, help="Page number."),
    per_page: int = typer.Option(DEFAULT_PER_PAGE, help="Items per page."),
) -> None:
    """List global secrets."""
    with get_client() as client:
        response = client.get(GLOBAL_SECRETS, {"page": page, "per_page": per_page})
    render_list(
        response,
        get_format(ctx),
        headers=["ID", "Key", "Secret", "Value", "Created"],
        row=secret_row,
        empty="No global secrets found.",
    )


@secret_app.command(name="show")
def secret_show(ctx: typer.Context, secret_id: str = typer.Argument(..., help="Secret ID.")) -> None:
    """Show a global secret."""
    with get_client() as client:
        response = client.get(f"{GLOBAL_SECRETS}/{secret_id}")
    render_detail(response, get_format(ctx), secret_pairs)


@secret_app.command(name="create")
def secret_create(
    ctx: typer.Context,
    key: str = typer.Option(..., "--key", help="Secret key."),
    value: str = typer.Option(..., "--value", help="Secret value."),
    no_secret: bool = typer.Option(False, "--no-secret", help="Store as a plain environment variable."),
) -> None:
    """Create a global secret."""
    with get_client() as client:
        response = client.post(GLOBAL_SECRETS, secret_body(key, value, no_secret))
    render_action(response, get_format(ctx), secret_created)


@secret_app.command(name="update")
def secret_update(
    ctx: typer.Context,
    secret_id: str = typer.Argument(..., help="Secret ID."),
    key: Optional[str] = typer.Option(None, "--key", help="New key."),
    value: Optional[str] = typer.Option(None, "--value", help="New value."),
    no_secret: bool = typer.Option(False, "--no-secret", help="Store as a plain environment variable."),
) -> None:
    """Update a global secret."""
    with get_client() as client:
        response = client.put(f"{GLOBAL_SECRETS}/{secret_id}", secret_body(key, value, no_secret))
    render_action(response, get_format(ctx), "Secret updated successfully.")


@secret_app.command(name="delete")
def secret_delete(ctx: typer.Context, secret_id: str = typer.Argument(..., help="Secret ID.")) -> None:
    """Delete a global secret."""
    with get_client() as client:
        response = client.delete(f"{GLOBAL_SECRETS}/{secret_id}")
    render_action(response, get_format(ctx), "Secret deleted successfully.")

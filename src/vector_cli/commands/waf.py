"""Web application firewall commands.

WAF collections are returned whole; none of the list endpoints paginate.
"""

from __future__ import annotations

from typing import Any, List, Optional

import typer

from vector_common import API_PREFIX

from vector_cli.config import get_client, get_format
from vector_cli.output import (
    field,
    format_list,
    format_option,
    number,
    render_action,
    render_detail,
    render_list,
    text,
)
from vector_cli.services.api_client import compact

app = typer.Typer(no_args_is_help=True)
rate_limit_app = typer.Typer(no_args_is_help=True)
blocked_ip_app = typer.Typer(no_args_is_help=True)
app.add_typer(rate_limit_app, name="rate-limit", help="Manage rate limit rules.")
app.add_typer(blocked_ip_app, name="blocked-ip", help="Manage blocked IP addresses.")

SITES = f"{API_PREFIX}/sites"


def _waf(site_id: str, collection: str) -> str:
    return f"{SITES}/{site_id}/waf/{collection}"


# ---------------------------------------------------------------------------
# Rate limits
# ---------------------------------------------------------------------------


def _configuration(rule: Any) -> Any:
    return rule.get("configuration") if isinstance(rule, dict) else None


def _rate_limit_row(rule: Any) -> list[str]:
    config = _configuration(rule)
    return [
        format_option(number(rule, "id")),
        field(rule, "name"),
        f"{number(config, 'request_count') or 0}/{number(config, 'timeframe') or 0}s",
        f"{number(config, 'block_time') or 0}s",
    ]


def _rate_limit_pairs(rule: Any) -> list[tuple[str, str]]:
    config = _configuration(rule)
    return [
        ("ID", format_option(number(rule, "id"))),
        ("Name", field(rule, "name")),
        ("Description", field(rule, "description")),
        ("Request Count", format_option(number(config, "request_count"))),
        ("Timeframe (s)", format_option(number(config, "timeframe"))),
        ("Block Time (s)", format_option(number(config, "block_time"))),
        ("Value", field(config, "value")),
        ("Operator", field(config, "operator")),
        ("Variables", format_list(config.get("variables") if isinstance(config, dict) else None)),
        ("Transformations", format_list(config.get("transformations") if isinstance(config, dict) else None)),
    ]


@rate_limit_app.command(name="list")
def rate_limit_list(ctx: typer.Context, site_id: str = typer.Argument(..., help="Site ID.")) -> None:
    """List rate limit rules."""
    with get_client() as client:
        response = client.get(_waf(site_id, "rate-limits"))
    render_list(
        response,
        get_format(ctx),
        headers=["ID", "Name", "Requests/Time", "Block Time"],
        row=_rate_limit_row,
        empty="No rate limit rules found.",
        paginated=False,
    )


@rate_limit_app.command(name="show")
def rate_limit_show(
    ctx: typer.Context,
    site_id: str = typer.Argument(..., help="Site ID."),
    rule_id: str = typer.Argument(..., help="Rule ID."),
) -> None:
    """Show a rate limit rule."""
    with get_client() as client:
        response = client.get(f"{_waf(site_id, 'rate-limits')}/{rule_id}")
    render_detail(response, get_format(ctx), _rate_limit_pairs)


@rate_limit_app.command(name="create")
def rate_limit_create(
    ctx: typer.Context,
    site_id: str = typer.Argument(..., help="Site ID."),
    name: str = typer.Option(..., "--name", help="Rule name."),
    request_count: int = typer.Option(..., "--request-count", min=0, help="Requests allowed per timeframe."),
    timeframe: int = typer.Option(..., "--timeframe", min=0, help="Timeframe in seconds."),
    block_time: int = typer.Option(..., "--block-time", min=0, help="Block duration in seconds."),
    description: Optional[str] = typer.Option(None, "--description", help="Rule description."),
    value: Optional[str] = typer.Option(None, "--value", help="Match value."),
    operator: Optional[str] = typer.Option(None, "--operator", help="Match operator."),
    variables: Optional[List[str]] = typer.Option(None, "--variables", help="Request variable to inspect (repeatable)."),
    transformations: Optional[List[str]] = typer.Option(
        None, "--transformations", help="Transformation to apply (repeatable)."
    ),
) -> None:
    """Create a rate limit rule."""
    body = compact(
        name=name,
        request_count=request_count,
        timeframe=timeframe,
        block_time=block_time,
        description=description,
        value=value,
        operator=operator,
        variables=variables,
        transformations=transformations,
    )
    with get_client() as client:
        response = client.post(_waf(site_id, "rate-limits"), body)
    render_action(
        response,
        get_format(ctx),
        lambda r: f"Rate limit created: {field(r, 'name')} (ID: {format_option(number(r, 'id'))})",
    )


@rate_limit_app.command(name="update")
def rate_limit_update(
    ctx: typer.Context,
    site_id: str = typer.Argument(..., help="Site ID."),
    rule_id: str = typer.Argument(..., help="Rule ID."),
    name: Optional[str] = typer.Option(None, "--name", help="Rule name."),
    description: Optional[str] = typer.Option(None, "--description", help="Rule description."),
    request_count: Optional[int] = typer.Option(None, "--request-count", min=0, help="Requests per timeframe."),
    timeframe: Optional[int] = typer.Option(None, "--timeframe", min=0, help="Timeframe in seconds."),
    block_time: Optional[int] = typer.Option(None, "--block-time", min=0, help="Block duration in seconds."),
    value: Optional[str] = typer.Option(None, "--value", help="Match value."),
    operator: Optional[str] = typer.Option(None, "--operator", help="Match operator."),
    variables: Optional[List[str]] = typer.Option(None, "--variables", help="Request variable to inspect (repeatable)."),
    transformations: Optional[List[str]] = typer.Option(
        None, "--transformations", help="Transformation to apply (repeatable)."
    ),
) -> None:
    """Update a rate limit rule."""
    body = compact(
        name=name,
        description=description,
        request_count=request_count,
        timeframe=timeframe,
        block_time=block_time,
        value=value,
        operator=operator,
        variables=variables,
        transformations=transformations,
    )
    with get_client() as client:
        response = client.put(f"{_waf(site_id, 'rate-limits')}/{rule_id}", body)
    render_action(response, get_format(ctx), "Rate limit updated successfully.")


@rate_limit_app.command(name="delete")
def rate_limit_delete(
    ctx: typer.Context,
    site_id: str = typer.Argument(..., help="Site ID."),
    rule_id: str = typer.Argument(..., help="Rule ID."),
) -> None:
    """Delete a rate limit rule."""
    with get_client() as client:
        response = client.delete(f"{_waf(site_id, 'rate-limits')}/{rule_id}")
    render_action(response, get_format(ctx), "Rate limit deleted successfully.")


# ---------------------------------------------------------------------------
# Blocked IPs
# ---------------------------------------------------------------------------


@blocked_ip_app.command(name="list")
def blocked_ip_list(ctx: typer.Context, site_id: str = typer.Argument(..., help="Site ID.")) -> None:
    """List blocked IP addresses."""
    with get_client() as client:
        response = client.get(_waf(site_id, "blocked-ips"))
    render_list(
        response,
        get_format(ctx),
        headers=["IP"],
        row=lambda entry: [field(entry, "ip")],
        empty="No blocked IPs found.",
        paginated=False,
    )


@blocked_ip_app.command(name="add")
def blocked_ip_add(
    ctx: typer.Context,
    site_id: str = typer.Argument(..., help="Site ID."),
    ip: str = typer.Argument(..., help="IP address to block."),
) -> None:
    """Block an IP address."""
    with get_client() as client:
        response = client.post(_waf(site_id, "blocked-ips"), {"ip": ip})
    render_action(response, get_format(ctx), f"IP {ip} added to blocklist.")


@blocked_ip_app.command(name="remove")
def blocked_ip_remove(
    ctx: typer.Context,
    site_id: str = typer.Argument(..., help="Site ID."),
    ip: str = typer.Argument(..., help="IP address to unblock."),
) -> None:
    """Unblock an IP address."""
    with get_client() as client:
        response = client.delete(f"{_waf(site_id, 'blocked-ips')}/{ip}")
    render_action(response, get_format(ctx), f"IP {ip} removed from blocklist.")


# ---------------------------------------------------------------------------
# Referrers
# ---------------------------------------------------------------------------


def _referrer_app(collection: str, list_name: str, empty: str) -> typer.Typer:
    """Build the list/add/remove group for one referrer collection."""
    referrer_app = typer.Typer(no_args_is_help=True)

    @referrer_app.command(name="list")
    def referrer_list(ctx: typer.Context, site_id: str = typer.Argument(..., help="Site ID.")) -> None:
        """List referrer hostnames."""
        with get_client() as client:
            response = client.get(_waf(site_id, collection))
        render_list(
            response,
            get_format(ctx),
            headers=["Hostname"],
            row=lambda entry: [format_option(text(entry, "hostname"))],
            empty=empty,
            paginated=False,
        )

    @referrer_app.command(name="add")
    def referrer_add(
        ctx: typer.Context,
        site_id: str = typer.Argument(..., help="Site ID."),
        hostname: str = typer.Argument(..., help="Referrer hostname."),
    ) -> None:
        """Add a referrer hostname."""
        with get_client() as client:
            response = client.post(_waf(site_id, collection), {"hostname": hostname})
        render_action(response, get_format(ctx), f"Referrer {hostname} added to {list_name}.")

    @referrer_app.command(name="remove")
    def referrer_remove(
        ctx: typer.Context,
        site_id: str = typer.Argument(..., help="Site ID."),
        hostname: str = typer.Argument(..., help="Referrer hostname."),
    ) -> None:
        """Remove a referrer hostname."""
        with get_client() as client:
            response = client.delete(f"{_waf(site_id, collection)}/{hostname}")
        render_action(response, get_format(ctx), f"Referrer {hostname} removed from {list_name}.")

    return referrer_app


app.add_typer(
    _referrer_app("blocked-referrers", "blocklist", "No blocked referrers found."),
    name="blocked-referrer",
    help="Manage blocked referrers.",
)
app.add_typer(
    _referrer_app("allowed-referrers", "allowlist", "No allowed referrers found."),
    name="allowed-referrer",
    help="Manage allowed referrers.",
)

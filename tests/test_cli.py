"""End-to-end command tests through the Typer app."""

from __future__ import annotations

import json
import logging

from vector_cli import __version__
from vector_cli.cli import app
from vector_cli.config import load_credentials

P = "/api/v1/vector"

USER = {"data": {"id": 7, "name": "Ada", "email": "ada@example.com"}}


def key_values(stdout: str) -> dict[str, str]:
    pairs = (line.split(":", 1) for line in stdout.splitlines() if ":" in line)
    return {key: value.strip() for key, value in pairs}


# ---------------------------------------------------------------------------
# Root app
# ---------------------------------------------------------------------------


class TestRoot:
    def test_help_lists_groups(self, runner):
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        for group in ("auth", "site", "env", "deploy", "ssl", "db", "waf", "account", "mcp", "php-versions"):
            assert group in result.stdout
        assert "CLI for Vector Pro API" in result.stdout

    def test_version(self, runner):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert result.stdout.strip() == f"vector {__version__}"

    def test_site_help(self, runner):
        result = runner.invoke(app, ["site", "--help"])
        assert result.exit_code == 0
        for command in ("list", "show", "create", "delete", "suspend", "purge-cache", "logs", "ssh-key"):
            assert command in result.stdout


# ---------------------------------------------------------------------------
# Error boundary
# ---------------------------------------------------------------------------


class TestErrorBoundary:
    def test_not_logged_in_exits_2(self, runner, api):
        result = runner.invoke(app, ["site", "list"])
        assert result.exit_code == 2
        assert result.stdout == ""
        assert result.stderr.strip() == (
            "Error: Authentication failed: Not logged in. Run 'vector auth login' to authenticate."
        )
        assert api.requests == []

    def test_not_found_exits_4(self, runner, api, logged_in):
        api.add("GET", f"{P}/sites/nope", {"message": "Site not found"}, status=404)
        result = runner.invoke(app, ["site", "show", "nope"])
        assert result.exit_code == 4
        assert "Error: Not found: Site not found" in result.stderr

    def test_validation_exits_3(self, runner, api, logged_in):
        api.add(
            "POST",
            f"{P}/sites",
            {"message": "invalid", "errors": {"dev_php_version": ["The selected dev php version is invalid."]}},
            status=422,
        )
        result = runner.invoke(app, ["site", "create", "--customer-id", "c1", "--dev-php-version", "5.6"])
        assert result.exit_code == 3
        assert "Validation failed: dev_php_version: The selected dev php version is invalid." in result.stderr

    def test_server_error_exits_5(self, runner, api, logged_in):
        api.add("GET", f"{P}/sites", "upstream timeout", status=504)
        result = runner.invoke(app, ["site", "list"])
        assert result.exit_code == 5
        assert "Error: Server error: upstream timeout" in result.stderr

    def test_forbidden_exits_2(self, runner, api, logged_in):
        api.add("GET", f"{P}/account", {"message": "This action is unauthorized."}, status=403)
        result = runner.invoke(app, ["account", "show"])
        assert result.exit_code == 2
        assert "Access denied: This action is unauthorized." in result.stderr

    def test_unreadable_credentials_exit_1(self, runner, config_dir):
        config_dir.mkdir(parents=True)
        (config_dir / "credentials.json").write_bytes(b'{"api_key": "\xff\xfe"}')
        result = runner.invoke(app, ["--json", "auth", "status"])
        assert result.exit_code == 1
        assert "Error: Configuration error: Failed to read credentials" in result.stderr

    def test_token_never_logged(self, runner, api, logged_in, caplog):
        caplog.set_level(logging.DEBUG, logger="vector_cli")
        api.add("GET", f"{P}/sites", SITES_PAGE)
        api.add("GET", f"{P}/sites/nope", {"message": "Site not found"}, status=404)
        runner.invoke(app, ["site", "list"])
        result = runner.invoke(app, ["site", "show", "nope"])
        assert result.exit_code == 4
        assert any("command failed" in record.getMessage() for record in caplog.records)
        assert any("/sites/nope" in record.getMessage() for record in caplog.records)
        for record in caplog.records:
            assert logged_in not in record.getMessage()


# ---------------------------------------------------------------------------
# auth
# ---------------------------------------------------------------------------


class TestAuth:
    def test_status_not_logged_in_json(self, runner):
        result = runner.invoke(app, ["--json", "auth", "status"])
        assert result.exit_code == 0
        assert json.loads(result.stdout) == {"authenticated": False, "message": "Not logged in"}

    def test_status_not_logged_in_table(self, runner):
        result = runner.invoke(app, ["--no-json", "auth", "status"])
        assert result.exit_code == 0
        assert "vector auth login" in result.stdout

    def test_status_logged_in(self, runner, api, logged_in):
        api.add("GET", f"{P}/user", USER)
        result = runner.invoke(app, ["--json", "auth", "status"])
        assert result.exit_code == 0
        assert json.loads(result.stdout) == {
            "authenticated": True,
            "user": {"id": 7, "name": "Ada", "email": "ada@example.com"},
        }
        assert api.last.headers["authorization"] == f"Bearer {logged_in}"

    def test_status_table(self, runner, api, logged_in):
        api.add("GET", f"{P}/user", USER)
        result = runner.invoke(app, ["--no-json", "auth", "status"])
        assert result.stdout.splitlines() == [
            "Status: Authenticated",
            "Name:   Ada",
            "Email:  ada@example.com",
        ]

    def test_status_bad_user_payload(self, runner, api, logged_in):
        api.add("GET", f"{P}/user", {"data": {"id": "x"}})
        result = runner.invoke(app, ["auth", "status"])
        assert result.exit_code == 1
        assert "JSON parse error" in result.stderr

    def test_login_with_token(self, runner, api):
        api.add("GET", f"{P}/user", USER)
        result = runner.invoke(app, ["--no-json", "auth", "login", "--token", "new-token"])
        assert result.exit_code == 0
        assert "Successfully authenticated." in result.stdout
        assert "Logged in as: ada@example.com" in result.stdout
        assert api.last.headers["authorization"] == "Bearer new-token"
        assert load_credentials().api_key == "new-token"

    def test_login_from_stdin(self, runner, api):
        api.add("GET", f"{P}/user", USER)
        result = runner.invoke(app, ["--json", "auth", "login"], input="piped-token\n")
        assert result.exit_code == 0
        assert load_credentials().api_key == "piped-token"

    def test_login_rejected_token_not_saved(self, runner, api):
        api.add("GET", f"{P}/user", {"message": "Unauthenticated."}, status=401)
        result = runner.invoke(app, ["auth", "login", "--token", "bad"])
        assert result.exit_code == 2
        assert load_credentials().api_key is None

    def test_login_empty_token(self, runner, api):
        result = runner.invoke(app, ["auth", "login"], input="\n")
        assert result.exit_code == 1
        assert "Token cannot be empty" in result.stderr
        assert api.requests == []

    def test_logout(self, runner, api):
        api.add("GET", f"{P}/user", USER)
        runner.invoke(app, ["auth", "login", "--token", "t"])
        result = runner.invoke(app, ["--json", "auth", "logout"])
        assert json.loads(result.stdout) == {"message": "Logged out successfully"}
        assert load_credentials().api_key is None

    def test_logout_when_not_logged_in(self, runner):
        result = runner.invoke(app, ["--no-json", "auth", "logout"])
        assert result.exit_code == 0
        assert result.stdout.strip() == "Not logged in."


# ---------------------------------------------------------------------------
# Output negotiation
# ---------------------------------------------------------------------------


SITES_PAGE = {
    "data": [
        {"id": "site-1", "status": "active", "your_customer_id": "cust-1", "dev_domain": "one.vector.dev"},
        {"id": "site-2", "status": "pending", "your_customer_id": None, "dev_domain": "two.vector.dev"},
    ],
    "meta": {"current_page": 1, "last_page": 3, "total": 32},
}


class TestOutputModes:
    def test_default_is_json_when_piped(self, runner, api, logged_in):
        api.add("GET", f"{P}/sites", SITES_PAGE)
        result = runner.invoke(app, ["site", "list"])
        assert result.exit_code == 0
        assert json.loads(result.stdout) == SITES_PAGE

    def test_json_beats_no_json(self, runner, api, logged_in):
        api.add("GET", f"{P}/sites", SITES_PAGE)
        result = runner.invoke(app, ["--json", "--no-json", "site", "list"])
        assert json.loads(result.stdout) == SITES_PAGE

    def test_table_with_pagination(self, runner, api, logged_in):
        api.add("GET", f"{P}/sites", SITES_PAGE)
        result = runner.invoke(app, ["--no-json", "site", "list", "--page", "1", "--per-page", "2"])
        assert result.exit_code == 0
        assert "Customer ID" in result.stdout
        assert "one.vector.dev" in result.stdout
        assert "Page 1 of 3 (32 total)" in result.stdout
        assert api.last.url.params["per_page"] == "2"

    def test_default_pagination_query(self, runner, api, logged_in):
        api.add("GET", f"{P}/sites", SITES_PAGE)
        runner.invoke(app, ["site", "list"])
        assert api.last.url.params["page"] == "1"
        assert api.last.url.params["per_page"] == "15"

    def test_empty_list(self, runner, api, logged_in):
        api.add("GET", f"{P}/sites", {"data": [], "meta": {"current_page": 1, "last_page": 1, "total": 0}})
        result = runner.invoke(app, ["--no-json", "site", "list"])
        assert result.stdout.strip() == "No sites found."

    def test_invalid_list_shape(self, runner, api, logged_in):
        api.add("GET", f"{P}/sites", {"data": {"id": "x"}})
        result = runner.invoke(app, ["--no-json", "site", "list"])
        assert result.exit_code == 1
        assert "Invalid response format" in result.stderr

    def test_json_after_command(self, runner):
        result = runner.invoke(app, ["auth", "status", "--json"])
        assert result.exit_code == 0
        assert json.loads(result.stdout) == {"authenticated": False, "message": "Not logged in"}

    def test_no_json_after_command(self, runner, api, logged_in):
        api.add("GET", f"{P}/sites", SITES_PAGE)
        result = runner.invoke(app, ["site", "list", "--no-json"])
        assert result.exit_code == 0
        assert "Page 1 of 3 (32 total)" in result.stdout

    def test_no_json_after_nested_command(self, runner, api, logged_in):
        api.add("GET", f"{P}/sites/site-1/waf/blocked-ips", {"data": []})
        result = runner.invoke(app, ["waf", "blocked-ip", "list", "site-1", "--no-json"])
        assert result.exit_code == 0
        assert result.stdout.strip() == "No blocked IPs found."

    def test_root_json_beats_trailing_no_json(self, runner, api, logged_in):
        api.add("GET", f"{P}/sites", SITES_PAGE)
        result = runner.invoke(app, ["--json", "site", "list", "--no-json"])
        assert json.loads(result.stdout) == SITES_PAGE

    def test_trailing_json_beats_root_no_json(self, runner, api, logged_in):
        api.add("GET", f"{P}/sites", SITES_PAGE)
        result = runner.invoke(app, ["--no-json", "site", "list", "--json"])
        assert json.loads(result.stdout) == SITES_PAGE

    def test_flag_on_top_level_command(self, runner, api, logged_in):
        api.add("GET", f"{P}/php-versions", {"data": ["8.2", "8.3"]})
        result = runner.invoke(app, ["php-versions", "--no-json"])
        assert result.exit_code == 0
        assert "8.3" in result.stdout
        assert "[" not in result.stdout


# ---------------------------------------------------------------------------
# Resource commands
# ---------------------------------------------------------------------------


class TestSite:
    def test_show(self, runner, api, logged_in):
        api.add(
            "GET",
            f"{P}/sites/site-1",
            {"data": {"id": "site-1", "status": "active", "tags": ["prod", "eu"], "dev_php_version": "8.3"}},
        )
        result = runner.invoke(app, ["--no-json", "site", "show", "site-1"])
        fields = key_values(result.stdout)
        assert result.stdout.startswith("ID:")
        assert fields["ID"] == "site-1"
        assert fields["Tags"] == "prod, eu"
        assert fields["Dev DB Host"] == "-"

    def test_create_body(self, runner, api, logged_in):
        api.add("POST", f"{P}/sites", {"data": {"id": "site-9", "status": "pending"}})
        result = runner.invoke(
            app,
            ["--no-json", "site", "create", "--customer-id", "c9", "--dev-php-version", "8.3", "--tags", "a", "--tags", "b"],
        )
        assert result.stdout.strip() == "Site created: site-9 (pending)"
        assert api.last_json() == {"your_customer_id": "c9", "dev_php_version": "8.3", "tags": ["a", "b"]}

    def test_update_omits_missing_fields(self, runner, api, logged_in):
        api.add("PUT", f"{P}/sites/site-1", {"data": {}})
        runner.invoke(app, ["site", "update", "site-1", "--customer-id", "c2"])
        assert api.last_json() == {"your_customer_id": "c2"}

    def test_delete_aborted(self, runner, api, logged_in):
        result = runner.invoke(app, ["--no-json", "site", "delete", "site-1"], input="n\n")
        assert result.exit_code == 0
        assert "Aborted." in result.stdout
        assert api.requests == []

    def test_delete_forced(self, runner, api, logged_in):
        api.add("DELETE", f"{P}/sites/site-1", {"data": {}})
        result = runner.invoke(app, ["--no-json", "site", "delete", "site-1", "--force"])
        assert result.stdout.strip() == "Site deleted successfully."

    def test_suspend_sends_no_body(self, runner, api, logged_in):
        api.add("PUT", f"{P}/sites/site-1/suspend", {"data": {}})
        result = runner.invoke(app, ["--no-json", "site", "suspend", "site-1"])
        assert result.stdout.strip() == "Site suspension initiated."
        assert api.last_json() == {}

    def test_reset_sftp_password(self, runner, api, logged_in):
        api.add(
            "POST",
            f"{P}/sites/site-1/sftp/reset-password",
            {"data": {"dev_sftp": {"hostname": "sftp.vector.dev", "port": 22, "username": "u1", "password": "pw"}}},
        )
        result = runner.invoke(app, ["--no-json", "site", "reset-sftp-password", "site-1"])
        assert result.stdout.splitlines() == [
            "Hostname: sftp.vector.dev",
            "Port:     22",
            "Username: u1",
            "Password: pw",
        ]

    def test_logs(self, runner, api, logged_in):
        api.add(
            "GET",
            f"{P}/sites/site-1/logs",
            {
                "data": {
                    "logs": {"tables": [{"rows": [["2024-01-01T00:00:00Z", "hello", "info"], [None, "skip-null"]]}]},
                    "has_more": True,
                    "cursor": "abc",
                }
            },
        )
        result = runner.invoke(app, ["--no-json", "site", "logs", "site-1", "--level", "error"])
        assert result.exit_code == 0
        assert result.stdout.splitlines() == ["2024-01-01T00:00:00Z | hello | info", "skip-null"]
        assert "Use --cursor abc to continue." in result.stderr
        assert api.last.url.params["level"] == "error"
        assert "cursor" not in api.last.url.params

    def test_logs_empty(self, runner, api, logged_in):
        api.add("GET", f"{P}/sites/site-1/logs", {"data": {}})
        result = runner.invoke(app, ["--no-json", "site", "logs", "site-1"])
        assert result.stdout.strip() == "No logs available."


class TestEnv:
    def test_create_body(self, runner, api, logged_in):
        api.add("POST", f"{P}/sites/site-1/environments", {"data": {"id": "env-1", "name": "staging"}})
        result = runner.invoke(
            app,
            [
                "--no-json", "env", "create", "site-1",
                "--name", "staging", "--custom-domain", "staging.example.com", "--php-version", "8.3",
            ],
        )
        assert result.stdout.strip() == "Environment created: staging (env-1)"
        assert api.last_json() == {
            "name": "staging",
            "custom_domain": "staging.example.com",
            "php_version": "8.3",
            "is_production": False,
        }

    def test_secret_create_no_secret(self, runner, api, logged_in):
        api.add("POST", f"{P}/environments/env-1/secrets", {"data": {"id": "sec-1", "key": "APP_ENV"}})
        result = runner.invoke(
            app,
            ["--no-json", "env", "secret", "create", "env-1", "--key", "APP_ENV", "--value", "prod", "--no-secret"],
        )
        assert result.stdout.strip() == "Secret created: APP_ENV (sec-1)"
        assert api.last_json() == {"key": "APP_ENV", "value": "prod", "is_secret": False}

    def test_secret_list_defaults_to_secret(self, runner, api, logged_in):
        api.add("GET", f"{P}/environments/env-1/secrets", {"data": [{"id": "s1", "key": "K"}]})
        result = runner.invoke(app, ["--no-json", "env", "secret", "list", "env-1"])
        assert "Yes" in result.stdout


class TestDeploy:
    def test_show_prints_streams(self, runner, api, logged_in):
        api.add(
            "GET",
            f"{P}/deployments/dep-1",
            {"data": {"id": "dep-1", "status": "failed", "stdout": "building", "stderr": ""}},
        )
        result = runner.invoke(app, ["--no-json", "deploy", "show", "dep-1"])
        assert "--- stdout ---\nbuilding" in result.stdout
        assert "--- stderr ---" not in result.stdout

    def test_trigger(self, runner, api, logged_in):
        api.add("POST", f"{P}/environments/env-1/deployments", {"data": {"id": "dep-2", "status": "queued"}})
        result = runner.invoke(app, ["--no-json", "deploy", "trigger", "env-1", "--include-database"])
        assert result.stdout.strip() == "Deployment initiated: dep-2 (queued)"
        assert api.last_json() == {"include_database": True}


class TestSsl:
    def test_nudge_prints_api_message(self, runner, api, logged_in):
        api.add("POST", f"{P}/environments/env-1/ssl/nudge", {"message": "Provisioning restarted."})
        result = runner.invoke(app, ["--no-json", "ssl", "nudge", "env-1", "--retry"])
        assert result.stdout.strip() == "Provisioning restarted."
        assert api.last_json() == {"retry": True}

    def test_nudge_default_message(self, runner, api, logged_in):
        api.add("POST", f"{P}/environments/env-1/ssl/nudge", {"data": {}})
        result = runner.invoke(app, ["--no-json", "ssl", "nudge", "env-1"])
        assert result.stdout.strip() == "SSL provisioning nudge sent."
        assert api.last_json() == {}


class TestWaf:
    def test_rate_limit_list(self, runner, api, logged_in):
        api.add(
            "GET",
            f"{P}/sites/site-1/waf/rate-limits",
            {"data": [{"id": 12, "name": "login", "configuration": {"request_count": 10, "timeframe": 60, "block_time": 300}}]},
        )
        result = runner.invoke(app, ["--no-json", "waf", "rate-limit", "list", "site-1"])
        assert "10/60s" in result.stdout
        assert "300s" in result.stdout
        assert "12" in result.stdout

    def test_allowed_referrer_add(self, runner, api, logged_in):
        api.add("POST", f"{P}/sites/site-1/waf/allowed-referrers", {"data": {}})
        result = runner.invoke(app, ["--no-json", "waf", "allowed-referrer", "add", "site-1", "example.com"])
        assert result.stdout.strip() == "Referrer example.com added to allowlist."
        assert api.last_json() == {"hostname": "example.com"}

    def test_blocked_ip_remove(self, runner, api, logged_in):
        api.add("DELETE", f"{P}/sites/site-1/waf/blocked-ips/10.0.0.1", {"data": {}})
        result = runner.invoke(app, ["--no-json", "waf", "blocked-ip", "remove", "site-1", "10.0.0.1"])
        assert result.stdout.strip() == "IP 10.0.0.1 removed from blocklist."


class TestAccount:
    def test_show(self, runner, api, logged_in):
        api.add(
            "GET",
            f"{P}/account",
            {
                "data": {
                    "owner": {"name": "Ada", "email": "ada@example.com"},
                    "account": {"name": "Acme", "company": None},
                    "sites": {"total": 4, "by_status": {"active": 3}},
                    "environments": {"total": 9, "by_status": {}},
                }
            },
        )
        result = runner.invoke(app, ["--no-json", "account", "show"])
        fields = key_values(result.stdout)
        assert fields["Company"] == "-"
        assert fields["Active Sites"] == "3"
        assert fields["Active Environments"] == "-"

    def test_api_key_create_warns(self, runner, api, logged_in):
        api.add("POST", f"{P}/api-keys", {"data": {"name": "ci", "token": "secret-token", "abilities": ["read"]}})
        result = runner.invoke(app, ["--no-json", "account", "api-key", "create", "--name", "ci"])
        assert key_values(result.stdout)["Token"] == "secret-token"
        assert "Save this token - it won't be shown again!" in result.stdout


class TestEvent:
    def test_actor_and_resource(self, runner, api, logged_in):
        api.add(
            "GET",
            f"{P}/events",
            {
                "data": [
                    {"id": "e1", "event": "site.created", "actor": {"token_name": "ci"}, "resource": {"type": "site", "id": "s1"}},
                    {"id": "e2", "event": "site.deleted", "actor": {"ip": "10.0.0.9"}, "resource": {"type": "site"}},
                    {"id": "e3", "event": "login", "actor": None, "resource": None},
                ]
            },
        )
        result = runner.invoke(app, ["--no-json", "event", "list", "--event", "site.created"])
        assert result.exit_code == 0
        assert "site:s1" in result.stdout
        assert "10.0.0.9" in result.stdout
        assert api.last.url.params["event"] == "site.created"
        assert "from" not in api.last.url.params


class TestWebhook:
    def test_update_disabled(self, runner, api, logged_in):
        api.add("PUT", f"{P}/webhooks/wh-1", {"data": {}})
        result = runner.invoke(app, ["--no-json", "webhook", "update", "wh-1", "--disabled"])
        assert result.stdout.strip() == "Webhook updated successfully."
        assert api.last_json() == {"enabled": False}

    def test_create_events(self, runner, api, logged_in):
        api.add("POST", f"{P}/webhooks", {"data": {"id": "wh-2", "name": "hooks"}})
        runner.invoke(
            app,
            ["webhook", "create", "--name", "hooks", "--url", "https://h.test", "--events", "site.created", "--events", "site.deleted"],
        )
        assert api.last_json() == {
            "name": "hooks",
            "url": "https://h.test",
            "events": ["site.created", "site.deleted"],
        }


class TestPhpVersions:
    def test_table(self, runner, api, logged_in):
        api.add("GET", f"{P}/php-versions", {"data": ["8.2", "8.3"]})
        result = runner.invoke(app, ["--no-json", "php-versions"])
        assert result.exit_code == 0
        assert "Version" in result.stdout
        assert "8.3" in result.stdout

    def test_empty(self, runner, api, logged_in):
        api.add("GET", f"{P}/php-versions", {"data": []})
        result = runner.invoke(app, ["--no-json", "php-versions"])
        assert result.stdout.strip() == "No PHP versions available."

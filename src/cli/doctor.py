"""Doctor command for environment diagnostics."""

from __future__ import annotations

import asyncio

import typer
from rich.console import Console
from rich.table import Table

from adapters.github_api import GitHubAPIError, GitHubClient
from adapters.http_client import build_async_client, build_github_client
from core.config import AppSettings, write_user_env_vars

app = typer.Typer(no_args_is_help=True, help="Environment diagnostics and configuration checks.")

_console = Console()


async def _check_http(url: str, settings: AppSettings) -> tuple[bool, str]:
    try:
        async with build_async_client(settings) as client:
            response = await client.head(url)
        return True, f"HTTP {response.status_code}"
    except Exception as exc:
        return False, str(exc) or type(exc).__name__


async def _check_github(settings: AppSettings) -> tuple[bool, str]:
    try:
        async with build_github_client(settings) as http:
            user = await GitHubClient(http).get_authenticated_user()
    except GitHubAPIError as exc:
        return False, str(exc)
    login = user.get("login", "?")
    if settings.github_username and settings.github_username != login:
        return False, f"Token belongs to {login}, configured username is {settings.github_username}"
    return True, f"Authenticated as {login}"


@app.command()
def run() -> None:
    """Run baseline diagnostics and show recommended fixes."""

    settings = AppSettings()

    table = Table(title="registry-cleanup Doctor")
    table.add_column("Check", style="bright_green", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Details", style="dim")

    # Config
    table.add_row("Registry URL", "OK", settings.registry_url)
    table.add_row("Upstream", "OK", f"{settings.upstream_owner}/{settings.upstream_repo}@{settings.base_branch}")
    table.add_row(
        "Policies",
        "OK",
        f"tls_mismatch_suppressed={settings.suppress_tls_hostname_mismatch} "
        f"skip_mx_ns={settings.skip_delegated_services} branch={settings.branch_strategy.value}",
    )
    table.add_row(
        "Skip lists",
        "OK",
        f"{len(settings.domain_skip_list)} domains, {len(settings.owner_skip_list)} owners",
    )

    # Connectivity (best-effort)
    ok_http, detail_http = asyncio.run(_check_http(settings.registry_url, settings))
    table.add_row("Registry reachable", "OK" if ok_http else "FAIL", detail_http)

    if settings.github_token:
        ok_gh, detail_gh = asyncio.run(_check_github(settings))
        table.add_row("GitHub token", "OK" if ok_gh else "FAIL", detail_gh)
    else:
        table.add_row("GitHub token", "MISSING", "Only `scan --dry-run` will work")

    _console.print(table)


@app.command(name="setup-github")
def setup_github() -> None:
    """Interactive GitHub setup (stores config in the user config .env)."""

    username = typer.prompt("GitHub username").strip()
    token = typer.prompt("GitHub token", hide_input=True, confirmation_prompt=False).strip()

    if not username or not token:
        raise typer.BadParameter("username and token are required")

    env_path = write_user_env_vars(
        {
            "REGISTRY_CLEANUP_GITHUB_USERNAME": username,
            "REGISTRY_CLEANUP_GITHUB_TOKEN": token,
        }
    )

    _console.print(f"[green]Saved GitHub config to:[/green] {env_path}")

"""VolunteerHub CLI — inspect conversations and notifications from a terminal.

Usage:
    volunteerhub login alice@example.org             # Prints an access token
    volunteerhub conversations                       # Who have I talked to?
    volunteerhub messages <user-uuid>                # Chat history with a user
    volunteerhub notifications                       # Latest notifications + unread count
    volunteerhub read 42                             # Mark notification 42 read
    volunteerhub read-all                            # Mark everything read
    volunteerhub serve                               # Run the API server
"""

from __future__ import annotations

import asyncio
import json
import os
import sys
from typing import Optional

import click
import httpx

from volunteerhub import __version__

# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------

DEFAULT_API_URL = "http://localhost:8080"


def _api_url() -> str:
    return os.environ.get("VOLUNTEERHUB_API_URL", DEFAULT_API_URL).rstrip("/")


def _client(token: Optional[str] = None) -> httpx.AsyncClient:
    """Build an async HTTP client pointed at the VolunteerHub backend."""
    headers = {"Authorization": f"Bearer {token}"} if token else {}
    return httpx.AsyncClient(base_url=_api_url(), headers=headers, timeout=30.0)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _run(coro):
    return asyncio.run(coro)


def _require_token(token: Optional[str]) -> str:
    tok = token or os.environ.get("VOLUNTEERHUB_TOKEN")
    if not tok:
        click.secho(
            "Error: --token required (or set VOLUNTEERHUB_TOKEN env var)",
            fg="red",
            err=True,
        )
        sys.exit(1)
    return tok


def _check(r: httpx.Response) -> dict:
    """Return the JSON body, or print the API error and exit."""
    if r.status_code >= 400:
        try:
            detail = r.json().get("detail", r.text)
        except ValueError:
            detail = r.text
        click.secho(f"Error {r.status_code}: {detail}", fg="red", err=True)
        sys.exit(1)
    return r.json()


def _print_table(rows: list[dict], columns: list[tuple[str, str, int]]):
    """Print a simple ASCII table.

    columns: list of (header, dict_key, width)
    """
    header = "  ".join(h.ljust(w) for h, _, w in columns)
    click.secho(header, bold=True)
    click.echo("-" * len(header))
    for row in rows:
        line = "  ".join(str(row.get(k, "—"))[:w].ljust(w) for _, k, w in columns)
        click.echo(line)


token_option = click.option(
    "--token", "-t", help="Access token (or set VOLUNTEERHUB_TOKEN)"
)
json_option = click.option("--json", "as_json", is_flag=True, help="Print raw JSON")


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(version=__version__, prog_name="volunteerhub")
def main():
    """VolunteerHub — messages and notifications from the command line."""


@main.command()
@click.argument("email")
@click.password_option("--password", "-p", confirmation_prompt=False)
def login(email: str, password: str):
    """Log in and print an access token (export it as VOLUNTEERHUB_TOKEN)."""
    async def _impl():
        async with _client() as c:
            body = _check(await c.post(
                "/api/v1/auth/login", json={"email": email, "password": password}
            ))
        click.echo(body["accessToken"])

    _run(_impl())


@main.command()
@token_option
@json_option
def conversations(token: Optional[str], as_json: bool):
    """List everyone you have exchanged messages with."""
    tok = _require_token(token)

    async def _impl():
        async with _client(tok) as c:
            body = _check(await c.get("/api/v1/messages/conversations"))
        if as_json:
            click.echo(json.dumps(body, indent=2))
            return
        rows = body["conversations"]
        if not rows:
            click.echo("No conversations yet.")
            return
        _print_table(rows, [("ID", "id", 36), ("Name", "name", 24), ("Role", "role", 10)])

    _run(_impl())


@main.command()
@click.argument("other_user_id")
@click.option("--limit", "-n", default=100, show_default=True, help="Most recent N messages")
@token_option
@json_option
def messages(other_user_id: str, limit: int, token: Optional[str], as_json: bool):
    """Show the chat history with OTHER_USER_ID (oldest first)."""
    tok = _require_token(token)

    async def _impl():
        async with _client(tok) as c:
            body = _check(await c.get(
                f"/api/v1/messages/{other_user_id}", params={"limit": limit}
            ))
        if as_json:
            click.echo(json.dumps(body, indent=2))
            return
        for m in body["messages"]:
            stamp = m["createdAt"][:19].replace("T", " ")
            click.echo(f"[{stamp}] ", nl=False)
            click.secho(f"{m['senderId']['name']}: ", bold=True, nl=False)
            click.echo(m["content"])

    _run(_impl())


@main.command()
@click.option("--unread", is_flag=True, help="Only show unread notifications")
@token_option
@json_option
def notifications(unread: bool, token: Optional[str], as_json: bool):
    """Latest notifications and the unread count."""
    tok = _require_token(token)

    async def _impl():
        async with _client(tok) as c:
            body = _check(await c.get("/api/v1/notifications"))
        if as_json:
            click.echo(json.dumps(body, indent=2))
            return
        rows = body["notifications"]
        if unread:
            rows = [n for n in rows if not n["read"]]
        click.secho(f"{body['unreadCount']} unread", fg="yellow" if body["unreadCount"] else "green")
        for n in rows:
            marker = " " if n["read"] else "*"
            click.echo(f" {marker} #{n['id']:<6} {n['content']}  ({n['link']})")

    _run(_impl())


@main.command()
@click.argument("notification_id", type=int)
@token_option
def read(notification_id: int, token: Optional[str]):
    """Mark one notification as read."""
    tok = _require_token(token)

    async def _impl():
        async with _client(tok) as c:
            body = _check(await c.put(f"/api/v1/notifications/{notification_id}/read"))
        click.secho(body["message"], fg="green")

    _run(_impl())


@main.command("read-all")
@token_option
def read_all(token: Optional[str]):
    """Mark all notifications as read."""
    tok = _require_token(token)

    async def _impl():
        async with _client(tok) as c:
            body = _check(await c.put("/api/v1/notifications/read-all"))
        click.secho(f"{body['message']} ({body['updated']} updated)", fg="green")

    _run(_impl())


@main.command()
def serve():
    """Run the API + WebSocket server (uvicorn)."""
    from volunteerhub.main import run

    run()


if __name__ == "__main__":
    main()

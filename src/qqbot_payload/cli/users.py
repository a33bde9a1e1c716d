"""CLI: qqbot users list|get|stats|record"""

import json
from datetime import datetime
from typing import Optional

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from qqbot_payload.errors import StoreError

console = Console()


def _store():
    from qqbot_payload.cli.main import _store
    return _store()


def _call(method, *args):
    try:
        return method(*args)
    except StoreError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        raise SystemExit(1)


@click.group()
def users():
    """Known-user directory."""


@users.command("list")
@click.option("--type", "user_type", type=click.Choice(["c2c", "group", "channel"]), default=None)
@click.option("--account", "account_id", default=None)
@click.option("--limit", default=None, type=int)
@click.option("--json-output", "--json", is_flag=True)
def users_list(user_type: Optional[str], account_id: Optional[str], limit: Optional[int], json_output: bool):
    """List users who have interacted with the bot."""
    known = _call(_store().list, user_type, account_id, limit)
    if json_output:
        click.echo(json.dumps({"total": len(known), "users": [u.model_dump() for u in known]}, indent=2))
        return
    if not known:
        console.print("[yellow]No known users.[/yellow]")
        return
    table = Table(title=f"Known users ({len(known)})")
    table.add_column("Type")
    table.add_column("OpenID", style="bold")
    table.add_column("Nickname")
    table.add_column("Last interaction")
    for u in known:
        last = datetime.fromtimestamp(u.last_interaction_at / 1000).strftime("%Y-%m-%d %H:%M:%S")
        table.add_row(u.type, u.openid, u.nickname or "-", last)
    console.print(table)


@users.command("stats")
@click.option("--account", "account_id", default=None)
def users_stats(account_id: Optional[str]):
    """Show known-user counts per type."""
    stats = _call(_store().stats, account_id)
    console.print(f"Total: {stats.total}")
    console.print(f"  c2c: {stats.c2c}")
    console.print(f"  group: {stats.group}")
    console.print(f"  channel: {stats.channel}")


@users.command("record")
@click.argument("openid")
@click.option("--type", "user_type", type=click.Choice(["c2c", "group", "channel"]), default="c2c")
@click.option("--account", "account_id", default="default")
@click.option("--nickname", default=None)
def users_record(openid: str, user_type: str, account_id: str, nickname: Optional[str]):
    """Record an interaction so the target can receive proactive messages."""
    user = _call(_store().record, openid, user_type, account_id, nickname)
    console.print(f"[green]Recorded[/green] {user.type} {user.openid} ({user.interaction_count} interactions)")


@users.command("get")
@click.argument("openid")
@click.option("--type", "user_type", type=click.Choice(["c2c", "group", "channel"]), default="c2c")
@click.option("--account", "account_id", default="default")
def users_get(openid: str, user_type: str, account_id: str):
    """Show one known user as JSON."""
    user = _call(_store().get, user_type, openid, account_id)
    if user is None:
        console.print(f"[yellow]User {escape(openid)} not found.[/yellow]")
        raise SystemExit(1)
    click.echo(json.dumps(user.model_dump(), indent=2, ensure_ascii=False))

"""CLI: qqbot parse, qqbot cron encode|decode"""

import json
from typing import Optional

import click
from rich.console import Console
from rich.markup import escape

from qqbot_payload.codec import decode_deferred, encode_for_deferred, parse
from qqbot_payload.models.outcome import Invalid, NotAPayload, NotDeferred
from qqbot_payload.models.payload import CronReminderPayload

console = Console()


def _read_input(text: str) -> str:
    from qqbot_payload.cli.main import _read_input
    return _read_input(text)


def _dump(model) -> str:
    return json.dumps(model.model_dump(by_alias=True, exclude_none=True), ensure_ascii=False, indent=2)


@click.command("parse")
@click.argument("text")
@click.option("--json-output", "--json", is_flag=True)
def parse_cmd(text: str, json_output: bool):
    """Parse AI output. Use - to read from stdin."""
    outcome = parse(_read_input(text))
    if json_output:
        click.echo(_dump(outcome))
    elif isinstance(outcome, NotAPayload):
        console.print("[dim]Plain text, no payload.[/dim]")
    elif isinstance(outcome, Invalid):
        console.print(f"[red]Invalid payload:[/red] {escape(outcome.reason)}")
    else:
        console.print(f"[green]{escape(str(outcome.payload.type))} payload[/green]")
        console.print_json(_dump(outcome.payload))
    if isinstance(outcome, Invalid):
        raise SystemExit(1)


@click.group()
def cron():
    """Deferred reminder envelopes."""


@cron.command("encode")
@click.option("--content", required=True, help="Reminder text")
@click.option("--to", "address", required=True, help="Target openid")
@click.option("--type", "target_type", type=click.Choice(["c2c", "group"]), default="c2c")
@click.option("--reply-to", default=None, help="Original message id")
def cron_encode(content: str, address: str, target_type: str, reply_to: Optional[str]):
    """Build a QQBOT_CRON: envelope for a scheduler."""
    payload = CronReminderPayload(
        content=content, target_type=target_type, target_address=address, original_message_id=reply_to,
    )
    click.echo(encode_for_deferred(payload))


@cron.command("decode")
@click.argument("message")
def cron_decode(message: str):
    """Decode a QQBOT_CRON: envelope. Use - to read from stdin."""
    outcome = decode_deferred(_read_input(message))
    if isinstance(outcome, NotDeferred):
        console.print("[yellow]Not a deferred envelope.[/yellow]")
        raise SystemExit(1)
    if isinstance(outcome, Invalid):
        console.print(f"[red]Invalid envelope:[/red] {escape(outcome.reason)}")
        raise SystemExit(1)
    click.echo(_dump(outcome.payload))

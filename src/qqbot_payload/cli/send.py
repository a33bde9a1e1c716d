"""CLI: qqbot send"""

import click
from rich.console import Console
from rich.markup import escape

from qqbot_payload.delivery import PayloadDispatcher, ProactiveSender
from qqbot_payload.models.delivery import Target

console = Console()


def _run(coro):
    from qqbot_payload.cli.main import _run
    return _run(coro)


@click.command("send")
@click.option("--to", "address", required=True, help="Target user or group openid")
@click.option("--text", required=True, help="Message text, may carry a QQBOT_PAYLOAD:/QQBOT_CRON: payload")
@click.option("--type", "target_type", type=click.Choice(["c2c", "group"]), default="c2c")
@click.option("--account", "account_id", default="default")
def send_cmd(address: str, text: str, target_type: str, account_id: str):
    """Send a proactive message to a known user or group."""
    from qqbot_payload.cli.main import _account, _read_input, _settings, _store

    text = _read_input(text)
    settings = _settings()
    sender = ProactiveSender(_account(account_id), _store(), settings)
    dispatcher = PayloadDispatcher(sender, max_payload_chars=settings.max_payload_chars)
    target = Target(type=target_type, address=address, account_id=account_id)

    async def _send():
        try:
            with console.status("Sending..."):
                return await dispatcher.handle_deferred(text, target)
        finally:
            await sender.close()

    result = _run(_send())
    if result.status == "sent":
        for d in result.deliveries:
            console.print(f"[green]Sent[/green] id={d.message_id} at {d.timestamp}")
        return
    color = "yellow" if result.status == "unsupported" else "red"
    console.print(f"[{color}]{result.status}:[/{color}] {escape(result.reason or '')}")
    raise SystemExit(1)

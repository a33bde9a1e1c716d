"""
QQBot payload CLI — `qqbot` command.

Commands:
  qqbot parse <text>          Inspect AI output for a structured payload
  qqbot cron encode|decode    Wrap / unwrap deferred reminder envelopes
  qqbot send                  Proactive message (plain text or payload)
  qqbot users <cmd>           Known-user directory
"""

import asyncio
import logging

try:
    import click
    from rich.console import Console
    from rich.logging import RichHandler
except ImportError:
    raise SystemExit("CLI requires extras: pip install qqbot-payload[cli]")

from qqbot_payload import __version__
from qqbot_payload.config import load_account, load_settings
from qqbot_payload.directory import KnownUsersStore
from qqbot_payload.errors import ConfigError
from qqbot_payload.models.account import QQBotAccount, Settings

console = Console()


def _settings() -> Settings:
    try:
        return load_settings()
    except ConfigError as e:
        console.print(f"[red]{e}[/red]")
        raise SystemExit(1)


def _account(account_id: str) -> QQBotAccount:
    try:
        return load_account(account_id)
    except ConfigError as e:
        console.print(f"[red]{e}[/red]")
        raise SystemExit(1)


def _store() -> KnownUsersStore:
    return KnownUsersStore(_settings().data_dir)


def _read_input(text: str) -> str:
    """Read ``-`` from stdin and enforce the payload size limit."""
    if text == "-":
        text = click.get_text_stream("stdin").read()
    limit = _settings().max_payload_chars
    if len(text) > limit:
        console.print(f"[red]Input exceeds {limit} characters.[/red]")
        raise SystemExit(1)
    return text


def _run(coro):
    return asyncio.run(coro)


@click.group()
@click.version_option(__version__)
@click.option("-v", "--verbose", is_flag=True, help="Log to stderr")
def main(verbose: bool):
    """QQBot payload CLI — structured AI output for QQ Bot delivery."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG, format="%(message)s",
            handlers=[RichHandler(console=Console(stderr=True))],
        )


# Register subcommands from separate modules
from qqbot_payload.cli.payload import cron, parse_cmd  # noqa: E402
from qqbot_payload.cli.send import send_cmd  # noqa: E402
from qqbot_payload.cli.users import users  # noqa: E402

main.add_command(parse_cmd)
main.add_command(cron)
main.add_command(send_cmd)
main.add_command(users)


if __name__ == "__main__":
    main()

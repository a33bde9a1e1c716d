"""
Account and runtime configuration.

Accounts come from the gateway config file (``channels.qqbot``), with
``QQBOT_APP_ID`` / ``QQBOT_CLIENT_SECRET`` as fallback credentials.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Optional

from qqbot_payload.errors import ConfigError
from qqbot_payload.models.account import QQBotAccount, Settings

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = Path.home() / "clawd" / "config.json"
DEFAULT_DATA_DIR = Path.home() / ".qqbot"


def config_path() -> Path:
    env = os.environ.get("QQBOT_CONFIG")
    return Path(env).expanduser() if env else DEFAULT_CONFIG_FILE


def load_config(path: Optional[Path] = None) -> dict[str, Any]:
    """Read the config file. A missing file is an empty config."""
    path = path or config_path()
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return {}
    except json.JSONDecodeError as e:
        raise ConfigError(f"Failed to read config {path}: {e}")


def _account(
    account_id: str,
    entry: dict[str, Any],
    fallback: dict[str, Any],
) -> QQBotAccount:
    env_app_id = os.environ.get("QQBOT_APP_ID")
    env_secret = os.environ.get("QQBOT_CLIENT_SECRET")
    app_id = entry.get("appId") or fallback.get("appId") or env_app_id
    secret = entry.get("clientSecret") or fallback.get("clientSecret") or env_secret
    if not app_id or not secret:
        raise ConfigError(f"Account {account_id} has no appId/clientSecret configured")
    enabled = entry.get("enabled")
    return QQBotAccount(
        account_id=account_id,
        app_id=str(app_id),
        client_secret=str(secret),
        enabled=True if enabled is None else bool(enabled),
        secret_source="config" if (entry.get("clientSecret") or fallback.get("clientSecret")) else "env",
    )


def load_account(account_id: str = "default", path: Optional[Path] = None) -> QQBotAccount:
    """Resolve one account: account entry > top-level qqbot section > env."""
    qqbot = (load_config(path).get("channels") or {}).get("qqbot")
    if not qqbot:
        logger.debug("No channels.qqbot section, using environment credentials")
        return _account(account_id, {}, {})
    if account_id == "default":
        return _account(account_id, qqbot, {})
    entry = (qqbot.get("accounts") or {}).get(account_id)
    if entry is None:
        raise ConfigError(f"Account {account_id} does not exist")
    return _account(account_id, entry, qqbot)


def load_settings(data_dir: Optional[str] = None) -> Settings:
    env_max = os.environ.get("QQBOT_MAX_PAYLOAD_CHARS")
    settings: dict[str, Any] = {
        "data_dir": data_dir or os.environ.get("QQBOT_DATA_DIR") or str(DEFAULT_DATA_DIR),
    }
    if env_max:
        try:
            settings["max_payload_chars"] = int(env_max)
        except ValueError:
            raise ConfigError(f"QQBOT_MAX_PAYLOAD_CHARS must be an integer, got {env_max!r}")
    if os.environ.get("QQBOT_API_BASE_URL"):
        settings["api_base_url"] = os.environ["QQBOT_API_BASE_URL"]
    return Settings(**settings)

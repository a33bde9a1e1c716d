"""
Account configuration models.
"""

from typing import Literal

from pydantic import BaseModel

DEFAULT_API_BASE_URL = "https://api.sgroup.qq.com"
DEFAULT_TOKEN_URL = "https://bots.qq.com/app/getAppAccessToken"


class QQBotAccount(BaseModel):
    account_id: str = "default"
    app_id: str
    client_secret: str
    enabled: bool = True
    secret_source: Literal["config", "env"] = "config"


class Settings(BaseModel):
    data_dir: str
    max_payload_chars: int = 65536
    api_base_url: str = DEFAULT_API_BASE_URL
    token_url: str = DEFAULT_TOKEN_URL
    http_timeout: float = 30.0

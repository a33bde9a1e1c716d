"""
REST client for the QQ Bot OpenAPI — token handshake, messages, media upload.
"""

import time
from typing import Any, Optional

import httpx

from qqbot_payload.errors import AuthError, DeliveryError
from qqbot_payload.models.account import DEFAULT_API_BASE_URL, DEFAULT_TOKEN_URL

# msg_type values
MSG_TYPE_TEXT = 0
MSG_TYPE_MEDIA = 7

# file_type values for rich media upload
FILE_TYPES = {"image": 1, "video": 2, "audio": 3}

TOKEN_REFRESH_MARGIN_S = 60.0


def _target_path(target_type: str, openid: str) -> str:
    if target_type == "group":
        return f"/v2/groups/{openid}"
    return f"/v2/users/{openid}"


def _json_object(resp: httpx.Response) -> Optional[dict[str, Any]]:
    try:
        data = resp.json()
    except ValueError:
        return None
    return data if isinstance(data, dict) else None


class HttpClient:
    def __init__(
        self,
        app_id: str,
        client_secret: str,
        base_url: str = DEFAULT_API_BASE_URL,
        token_url: str = DEFAULT_TOKEN_URL,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._app_id = app_id
        self._client_secret = client_secret
        self._token_url = token_url
        self._token: Optional[str] = None
        self._token_expires_at = 0.0
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            headers={"User-Agent": "qqbot-payload/0.1.0", "Accept": "application/json"},
            timeout=timeout,
            transport=transport,
        )

    async def get_access_token(self) -> str:
        """App access token, cached until shortly before it expires."""
        if self._token and time.monotonic() < self._token_expires_at:
            return self._token
        try:
            resp = await self._client.post(
                self._token_url, json={"appId": self._app_id, "clientSecret": self._client_secret},
            )
        except httpx.HTTPError as e:
            raise AuthError(f"Failed to request access token: {e}")
        if resp.status_code >= 400:
            raise AuthError(f"HTTP {resp.status_code}: {resp.text[:200]}")
        data = _json_object(resp)
        if data is None:
            raise AuthError(f"Token response is not a JSON object: {resp.text[:200]}")
        token = data.get("access_token")
        if not token:
            raise AuthError(f"Token response has no access_token: {resp.text[:200]}")
        try:
            expires_in = float(data.get("expires_in", 7200))
        except (TypeError, ValueError):
            raise AuthError(f"Token response has a bad expires_in: {data.get('expires_in')!r}")
        self._token = token
        self._token_expires_at = time.monotonic() + max(expires_in - TOKEN_REFRESH_MARGIN_S, 0.0)
        return token

    async def post(self, path: str, body: Optional[dict[str, Any]] = None) -> dict[str, Any]:
        token = await self.get_access_token()
        try:
            resp = await self._client.post(path, json=body, headers={"Authorization": f"QQBot {token}"})
        except httpx.HTTPError as e:
            raise DeliveryError(f"Request to {path} failed: {e}")
        if resp.status_code >= 400:
            raise DeliveryError(
                f"HTTP {resp.status_code}: {resp.text[:200]}",
                code="http_error",
                details={"status": resp.status_code, "path": path},
            )
        data = _json_object(resp)
        if data is None:
            raise DeliveryError(
                f"Response from {path} is not a JSON object: {resp.text[:200]}",
                code="bad_response",
                details={"status": resp.status_code, "path": path},
            )
        return data

    async def send_text(
        self, target_type: str, openid: str, content: str, msg_id: Optional[str] = None,
    ) -> dict[str, Any]:
        body: dict[str, Any] = {"content": content, "msg_type": MSG_TYPE_TEXT}
        if msg_id:
            body["msg_id"] = msg_id
        return await self.post(f"{_target_path(target_type, openid)}/messages", body)

    async def upload_media(
        self,
        target_type: str,
        openid: str,
        media_type: str,
        url: Optional[str] = None,
        file_data: Optional[str] = None,
    ) -> dict[str, Any]:
        """Upload rich media; pass either a public ``url`` or base64 ``file_data``."""
        body: dict[str, Any] = {"file_type": FILE_TYPES[media_type], "srv_send_msg": False}
        if url:
            body["url"] = url
        else:
            body["file_data"] = file_data
        return await self.post(f"{_target_path(target_type, openid)}/files", body)

    async def send_media(
        self, target_type: str, openid: str, file_info: str, msg_id: Optional[str] = None,
    ) -> dict[str, Any]:
        body: dict[str, Any] = {"content": " ", "msg_type": MSG_TYPE_MEDIA, "media": {"file_info": file_info}}
        if msg_id:
            body["msg_id"] = msg_id
        return await self.post(f"{_target_path(target_type, openid)}/messages", body)

    async def close(self) -> None:
        await self._client.aclose()

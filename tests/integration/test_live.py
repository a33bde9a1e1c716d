"""
Live tests against the QQ Bot OpenAPI.

Requires environment variables:
  QQBOT_APP_ID, QQBOT_CLIENT_SECRET  — bot credentials
  QQBOT_TEST_OPENID                  — a c2c openid that has messaged the bot

Run: QQBOT_INTEGRATION=1 pytest tests/integration/ -v
"""

import os

import pytest

from qqbot_payload.transport.http import HttpClient

SKIP = not os.environ.get("QQBOT_INTEGRATION")
APP_ID = os.environ.get("QQBOT_APP_ID", "")
CLIENT_SECRET = os.environ.get("QQBOT_CLIENT_SECRET", "")
OPENID = os.environ.get("QQBOT_TEST_OPENID", "")

pytestmark = pytest.mark.skipif(SKIP, reason="QQBOT_INTEGRATION not set")


class TestLive:
    @pytest.mark.asyncio
    async def test_access_token(self):
        client = HttpClient(APP_ID, CLIENT_SECRET)
        try:
            assert await client.get_access_token()
        finally:
            await client.close()

    @pytest.mark.asyncio
    async def test_send_text(self):
        client = HttpClient(APP_ID, CLIENT_SECRET)
        try:
            resp = await client.send_text("c2c", OPENID, "qqbot-payload live test")
            assert resp.get("id")
        finally:
            await client.close()

"""
Delivery — proactive sending and routing of parsed AI output.

ProactiveSender talks to the platform; PayloadDispatcher decides what to
send for each piece of AI output. Malformed payloads are reported as
``invalid`` and never reach the platform.
"""

import asyncio
import base64
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Optional, Protocol

from qqbot_payload.codec import (
    CRON_PREFIX,
    PAYLOAD_PREFIX,
    classify,
    decode_deferred,
    encode_for_deferred,
    parse,
)
from qqbot_payload.directory import KnownUsersStore
from qqbot_payload.errors import QQBotError, StoreError
from qqbot_payload.models.account import QQBotAccount, Settings
from qqbot_payload.models.delivery import DeliveryResult, DispatchResult, Target
from qqbot_payload.models.outcome import Invalid, NotAPayload, NotDeferred
from qqbot_payload.models.payload import CronReminderPayload, MediaPayload, Payload, PayloadClass
from qqbot_payload.transport.http import HttpClient

logger = logging.getLogger(__name__)


class Scheduler(Protocol):
    """Stores an envelope and hands it back to ``handle_deferred`` at ``fire_at``."""

    async def schedule(self, envelope: str, fire_at: datetime) -> Any: ...


class ProactiveSender:
    def __init__(
        self,
        account: QQBotAccount,
        store: KnownUsersStore,
        settings: Settings,
        http: Optional[HttpClient] = None,
    ):
        self._account = account
        self._store = store
        self._http = http or HttpClient(
            account.app_id,
            account.client_secret,
            base_url=settings.api_base_url,
            token_url=settings.token_url,
            timeout=settings.http_timeout,
        )

    async def _check_target(self, target: Target) -> Optional[DeliveryResult]:
        if not self._account.enabled:
            return DeliveryResult(success=False, error=f"Account {self._account.account_id} is disabled")
        try:
            known = await asyncio.to_thread(self._store.is_known, target.type, target.address, target.account_id)
        except StoreError as e:
            logger.error("Known-users lookup failed: %s", e)
            return DeliveryResult(success=False, error=str(e))
        if not known:
            return DeliveryResult(
                success=False,
                error=f"{target.type} target {target.address} has never interacted with the bot",
            )
        return None

    @staticmethod
    def _sent(resp: dict[str, Any]) -> DeliveryResult:
        ts = resp.get("timestamp")
        return DeliveryResult(
            success=True,
            message_id=resp.get("id"),
            timestamp=str(ts) if ts is not None else None,
        )

    async def send_text(self, target: Target, content: str) -> DeliveryResult:
        rejected = await self._check_target(target)
        if rejected:
            return rejected
        try:
            resp = await self._http.send_text(target.type, target.address, content, msg_id=target.reply_to)
        except QQBotError as e:
            logger.error("Sending text to %s %s failed: %s", target.type, target.address, e)
            return DeliveryResult(success=False, error=str(e))
        return self._sent(resp)

    async def send_media(self, target: Target, payload: MediaPayload) -> DeliveryResult:
        rejected = await self._check_target(target)
        if rejected:
            return rejected
        try:
            if payload.source == "url":
                uploaded = await self._http.upload_media(
                    target.type, target.address, payload.media_type, url=payload.path,
                )
            else:
                raw = await asyncio.to_thread(Path(payload.path).expanduser().read_bytes)
                data = base64.b64encode(raw).decode("ascii")
                uploaded = await self._http.upload_media(
                    target.type, target.address, payload.media_type, file_data=data,
                )
            file_info = uploaded.get("file_info")
            if not file_info:
                return DeliveryResult(success=False, error="Media upload returned no file_info")
            resp = await self._http.send_media(target.type, target.address, file_info, msg_id=target.reply_to)
        except OSError as e:
            logger.error("Reading media file %s failed: %s", payload.path, e)
            return DeliveryResult(success=False, error=f"Cannot read media file: {e}")
        except QQBotError as e:
            logger.error("Sending %s to %s %s failed: %s", payload.media_type, target.type, target.address, e)
            return DeliveryResult(success=False, error=str(e))
        return self._sent(resp)

    async def close(self) -> None:
        await self._http.close()


class PayloadDispatcher:
    def __init__(self, sender: ProactiveSender, max_payload_chars: int = 65536):
        self._sender = sender
        self._max_payload_chars = max_payload_chars

    def _oversized(self, text: str, prefix: str) -> Optional[DispatchResult]:
        if len(text) > self._max_payload_chars and text.lstrip().startswith(prefix):
            reason = f"payload exceeds {self._max_payload_chars} characters"
            logger.warning("Rejected payload: %s", reason)
            return DispatchResult(status="invalid", reason=reason)
        return None

    @staticmethod
    def _invalid(outcome: Invalid) -> DispatchResult:
        logger.warning("Invalid payload in AI output: %s", outcome.reason)
        return DispatchResult(status="invalid", reason=outcome.reason)

    @staticmethod
    def _result(deliveries: list[DeliveryResult]) -> DispatchResult:
        failed = [d for d in deliveries if not d.success]
        if failed:
            return DispatchResult(status="failed", reason=failed[0].error, deliveries=deliveries)
        return DispatchResult(status="sent", deliveries=deliveries)

    async def handle(self, text: str, target: Target) -> DispatchResult:
        """Deliver one piece of AI output to the conversation ``target``."""
        oversized = self._oversized(text, PAYLOAD_PREFIX)
        if oversized:
            return oversized
        outcome = parse(text)
        if isinstance(outcome, NotAPayload):
            return self._result([await self._sender.send_text(target, outcome.text)])
        if isinstance(outcome, Invalid):
            return self._invalid(outcome)
        return await self.deliver(outcome.payload, target)

    async def handle_deferred(self, message: str, target: Target) -> DispatchResult:
        """Deliver a message handed back by the scheduler."""
        oversized = self._oversized(message, CRON_PREFIX)
        if oversized:
            return oversized
        outcome = decode_deferred(message)
        if isinstance(outcome, NotDeferred):
            return await self.handle(message, target)
        if isinstance(outcome, Invalid):
            return self._invalid(outcome)
        return await self.deliver(outcome.payload, target, deferred=True)

    async def deliver(self, payload: Payload, target: Target, deferred: bool = False) -> DispatchResult:
        """Send a validated payload.

        An immediate reminder replies to its originalMessageId when set. A
        deferred one goes out proactively: passive-reply ids expire long
        before a scheduled job fires.
        """
        kind = classify(payload)
        if kind is PayloadClass.CRON_REMINDER:
            assert isinstance(payload, CronReminderPayload)
            reminder_target = Target(
                type=payload.target_type,
                address=payload.target_address,
                account_id=target.account_id,
                reply_to=None if deferred else payload.original_message_id,
            )
            return self._result([await self._sender.send_text(reminder_target, payload.content)])
        if kind is PayloadClass.MEDIA:
            assert isinstance(payload, MediaPayload)
            deliveries = [await self._sender.send_media(target, payload)]
            if deliveries[0].success and payload.caption:
                deliveries.append(await self._sender.send_text(target, payload.caption))
            return self._result(deliveries)
        if kind is PayloadClass.UNKNOWN:
            logger.info("Skipping payload of unsupported type %s", payload.type)
            return DispatchResult(status="unsupported", reason=f"unsupported payload type {payload.type}")
        raise AssertionError(f"Unhandled payload class: {kind}")

    async def schedule_reminder(
        self, payload: CronReminderPayload, fire_at: datetime, scheduler: Scheduler,
    ) -> str:
        """Wrap ``payload`` and hand it to the scheduler. Returns the envelope."""
        envelope = encode_for_deferred(payload)
        await scheduler.schedule(envelope, fire_at)
        logger.info("Scheduled reminder for %s %s at %s", payload.target_type, payload.target_address, fire_at.isoformat())
        return envelope

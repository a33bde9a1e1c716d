"""
qqbot-payload — structured payloads in AI output for QQ Bot delivery.

Detects ``QQBOT_PAYLOAD:`` media/reminder instructions in model output and
wraps reminders as ``QQBOT_CRON:`` envelopes for deferred delivery.
"""

from qqbot_payload.codec import (
    CRON_PREFIX,
    PAYLOAD_PREFIX,
    classify,
    decode_deferred,
    encode_for_deferred,
    format_payload,
    parse,
)
from qqbot_payload.errors import QQBotError, PayloadError, ConfigError, AuthError, DeliveryError, StoreError
from qqbot_payload.models.payload import (
    CronReminderPayload,
    MediaPayload,
    UnknownPayload,
    PayloadClass,
)
from qqbot_payload.models.outcome import NotAPayload, NotDeferred, Invalid, Valid

__version__ = "0.1.0"
__all__ = [
    "PAYLOAD_PREFIX",
    "CRON_PREFIX",
    "parse",
    "format_payload",
    "encode_for_deferred",
    "decode_deferred",
    "classify",
    "QQBotError",
    "PayloadError",
    "ConfigError",
    "AuthError",
    "DeliveryError",
    "StoreError",
    "CronReminderPayload",
    "MediaPayload",
    "UnknownPayload",
    "PayloadClass",
    "NotAPayload",
    "NotDeferred",
    "Invalid",
    "Valid",
]

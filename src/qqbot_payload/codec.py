"""
Payload codec — detection, parsing and validation of structured AI output.

Two wire forms share one payload model:

- ``QQBOT_PAYLOAD:<json>`` — immediate payloads written by the AI.
- ``QQBOT_CRON:<base64>`` — a cron_reminder wrapped for storage by a
  scheduler and decoded again when the job fires.

Nothing here raises on malformed input; failures come back as ``Invalid``.
"""

import base64
import json
from typing import Any

from pydantic import ValidationError

from qqbot_payload.errors import PayloadError
from qqbot_payload.models.outcome import (
    DeferredOutcome,
    Invalid,
    NotAPayload,
    NotDeferred,
    ParseOutcome,
    Valid,
)
from qqbot_payload.models.payload import (
    CronReminderPayload,
    MediaPayload,
    Payload,
    PayloadClass,
    UnknownPayload,
)

PAYLOAD_PREFIX = "QQBOT_PAYLOAD:"
CRON_PREFIX = "QQBOT_CRON:"

_REQUIRED_FIELDS = {
    "cron_reminder": ("content", "targetType", "targetAddress"),
    "media": ("mediaType", "source", "path"),
}
_MODELS = {
    "cron_reminder": CronReminderPayload,
    "media": MediaPayload,
}


def _discriminator(data: Any) -> Any:
    if not isinstance(data, dict):
        return None
    return data.get("type") or data.get("kind")


def _has_required(data: dict[str, Any], kind: str) -> bool:
    return all(data.get(name) for name in _REQUIRED_FIELDS[kind])


def _describe(exc: ValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(part) for part in err['loc']) or 'payload'}: {err['msg']}"
        for err in exc.errors()
    )


def _build(data: dict[str, Any], kind: Any) -> Payload:
    fields = {key: value for key, value in data.items() if key != "kind"}
    fields["type"] = kind
    model = _MODELS.get(kind, UnknownPayload) if isinstance(kind, str) else UnknownPayload
    return model.model_validate(fields)


def parse(raw_text: str) -> ParseOutcome:
    """Interpret one piece of AI output.

    Text that does not start with ``QQBOT_PAYLOAD:`` (after trimming) is
    returned untouched as ``NotAPayload``. Unknown payload kinds are
    accepted so that newer generators can talk to older consumers.
    """
    trimmed = raw_text.strip()
    if not trimmed.startswith(PAYLOAD_PREFIX):
        return NotAPayload(text=raw_text)

    body = trimmed[len(PAYLOAD_PREFIX):].strip()
    if not body:
        return Invalid(reason="payload content is empty")

    try:
        data = json.loads(body)
    except (ValueError, RecursionError) as e:
        return Invalid(reason=f"JSON parse failed: {e}")

    kind = _discriminator(data)
    if not kind:
        return Invalid(reason="payload missing type field")

    if kind == "cron_reminder" and not _has_required(data, kind):
        return Invalid(reason="cron_reminder payload missing required fields (content, targetType, targetAddress)")
    if kind == "media" and not _has_required(data, kind):
        return Invalid(reason="media payload missing required fields (mediaType, source, path)")

    try:
        return Valid(payload=_build(data, kind))
    except ValidationError as e:
        return Invalid(reason=f"{kind} payload has invalid fields: {_describe(e)}")


def format_payload(payload: Payload) -> str:
    """Render a payload in the immediate ``QQBOT_PAYLOAD:`` form."""
    return PAYLOAD_PREFIX + _canonical_json(payload)


def _canonical_json(payload: Payload) -> str:
    return json.dumps(
        payload.model_dump(by_alias=True, exclude_none=True),
        ensure_ascii=False,
        separators=(",", ":"),
    )


def encode_for_deferred(payload: CronReminderPayload) -> str:
    """Wrap a reminder as ``QQBOT_CRON:<base64>`` for a scheduler to store.

    Only cron_reminder payloads have a deferred form.
    """
    if not isinstance(payload, CronReminderPayload):
        kind = getattr(payload, "type", type(payload).__name__)
        raise PayloadError(f"only cron_reminder payloads can be deferred, got {kind}")
    encoded = base64.b64encode(_canonical_json(payload).encode("utf-8")).decode("ascii")
    return CRON_PREFIX + encoded


def decode_deferred(message: str) -> DeferredOutcome:
    """Recover the reminder from a message handed back by the scheduler."""
    trimmed = message.strip()
    if not trimmed.startswith(CRON_PREFIX):
        return NotDeferred()

    body = trimmed[len(CRON_PREFIX):]
    if not body:
        return Invalid(reason="deferred payload content is empty")

    try:
        data = json.loads(base64.b64decode(body, validate=True).decode("utf-8"))
    except (ValueError, RecursionError) as e:
        # binascii.Error, UnicodeDecodeError and JSONDecodeError are all ValueErrors
        return Invalid(reason=f"deferred payload decode failed: {e}")

    kind = _discriminator(data)
    if kind != "cron_reminder":
        return Invalid(reason=f"expected type cron_reminder, got {kind}")
    if not _has_required(data, kind):
        return Invalid(reason="deferred payload missing required fields")

    try:
        return Valid(payload=_build(data, kind))
    except ValidationError as e:
        return Invalid(reason=f"deferred payload has invalid fields: {_describe(e)}")


def classify(payload: Payload) -> PayloadClass:
    """Route an already-validated payload. Fields are not checked again."""
    if isinstance(payload, CronReminderPayload):
        return PayloadClass.CRON_REMINDER
    if isinstance(payload, MediaPayload):
        return PayloadClass.MEDIA
    return PayloadClass.UNKNOWN

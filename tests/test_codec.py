"""Payload codec: parse, deferred envelopes, classify."""

import base64
import json

import pytest

from qqbot_payload import (
    CRON_PREFIX,
    CronReminderPayload,
    Invalid,
    MediaPayload,
    NotAPayload,
    NotDeferred,
    PayloadClass,
    PayloadError,
    UnknownPayload,
    Valid,
    classify,
    decode_deferred,
    encode_for_deferred,
    format_payload,
    parse,
)


def _envelope(obj) -> str:
    return CRON_PREFIX + base64.b64encode(json.dumps(obj).encode("utf-8")).decode("ascii")


class TestParse:
    def test_plain_text_passes_through_untrimmed(self):
        text = "  just chatting \n"
        outcome = parse(text)
        assert isinstance(outcome, NotAPayload)
        assert outcome.text == text

    def test_marker_must_lead(self):
        text = 'see QQBOT_PAYLOAD:{"type":"media"}'
        assert parse(text) == NotAPayload(text=text)

    def test_media_payload_with_newline_after_marker(self):
        outcome = parse(
            'QQBOT_PAYLOAD:\n{"kind":"media","mediaType":"image","source":"url","path":"https://x/y.png"}'
        )
        assert isinstance(outcome, Valid)
        assert outcome.payload == MediaPayload(media_type="image", source="url", path="https://x/y.png")
        assert outcome.payload.type == "media"
        assert outcome.payload.caption is None

    def test_type_key_is_the_primary_discriminator(self):
        outcome = parse(
            '  QQBOT_PAYLOAD: {"type":"cron_reminder","content":"喝水时间到！",'
            '"targetType":"c2c","targetAddress":"user_openid_xxx","originalMessageId":"m1"}  '
        )
        assert isinstance(outcome, Valid)
        payload = outcome.payload
        assert isinstance(payload, CronReminderPayload)
        assert payload.content == "喝水时间到！"
        assert payload.target_type == "c2c"
        assert payload.target_address == "user_openid_xxx"
        assert payload.original_message_id == "m1"

    def test_empty_content(self):
        assert parse("QQBOT_PAYLOAD:   ") == Invalid(reason="payload content is empty")

    def test_bad_json_keeps_decoder_message(self):
        outcome = parse("QQBOT_PAYLOAD:{not json")
        assert isinstance(outcome, Invalid)
        assert outcome.reason.startswith("JSON parse failed: ")
        assert "line 1" in outcome.reason

    @pytest.mark.parametrize("body", ['{"content":"x"}', '{"type":""}', "[1, 2]", '"media"'])
    def test_missing_discriminator(self, body):
        assert parse("QQBOT_PAYLOAD:" + body) == Invalid(reason="payload missing type field")

    def test_cron_reminder_missing_fields(self):
        outcome = parse('QQBOT_PAYLOAD:{"kind":"cron_reminder","content":"x"}')
        assert outcome == Invalid(
            reason="cron_reminder payload missing required fields (content, targetType, targetAddress)"
        )

    def test_empty_string_counts_as_missing(self):
        outcome = parse(
            'QQBOT_PAYLOAD:{"type":"cron_reminder","content":"x","targetType":"group","targetAddress":""}'
        )
        assert isinstance(outcome, Invalid)
        assert "missing required fields" in outcome.reason

    def test_media_missing_fields(self):
        outcome = parse('QQBOT_PAYLOAD:{"type":"media","mediaType":"image","source":"url"}')
        assert outcome == Invalid(reason="media payload missing required fields (mediaType, source, path)")

    def test_out_of_range_field_value(self):
        outcome = parse(
            'QQBOT_PAYLOAD:{"type":"cron_reminder","content":"x","targetType":"channel","targetAddress":"a"}'
        )
        assert isinstance(outcome, Invalid)
        assert outcome.reason.startswith("cron_reminder payload has invalid fields: targetType")

    def test_unknown_kind_is_accepted(self):
        outcome = parse('QQBOT_PAYLOAD:{"type":"poll","question":"lunch?"}')
        assert isinstance(outcome, Valid)
        assert isinstance(outcome.payload, UnknownPayload)
        assert outcome.payload.type == "poll"
        assert outcome.payload.model_extra == {"question": "lunch?"}

    @pytest.mark.parametrize("kind", [5, True, ["a"]])
    def test_non_string_kind_is_accepted(self, kind):
        outcome = parse("QQBOT_PAYLOAD:" + json.dumps({"type": kind, "extra": 1}))
        assert isinstance(outcome, Valid)
        assert isinstance(outcome.payload, UnknownPayload)
        assert outcome.payload.type == kind
        assert classify(outcome.payload) is PayloadClass.UNKNOWN

    def test_idempotent(self):
        text = 'QQBOT_PAYLOAD:{"type":"media","mediaType":"video","source":"file","path":"/tmp/a.mp4"}'
        assert parse(text) == parse(text)

    def test_format_payload_parses_back(self):
        payload = MediaPayload(media_type="audio", source="file", path="/tmp/a.silk", caption="listen")
        assert parse(format_payload(payload)) == Valid(payload=payload)


class TestDeferred:
    def test_round_trip(self):
        payload = CronReminderPayload(
            content="喝水时间到！", target_type="group", target_address="group_openid", original_message_id="m9",
        )
        envelope = encode_for_deferred(payload)
        assert envelope.startswith(CRON_PREFIX)
        assert decode_deferred(envelope) == Valid(payload=payload)

    def test_canonical_json(self):
        payload = CronReminderPayload(content="hi", target_type="c2c", target_address="u1")
        body = base64.b64decode(encode_for_deferred(payload)[len(CRON_PREFIX):]).decode("utf-8")
        assert body == '{"type":"cron_reminder","content":"hi","targetType":"c2c","targetAddress":"u1"}'

    def test_surrounding_whitespace_is_ignored(self):
        payload = CronReminderPayload(content="hi", target_type="c2c", target_address="u1")
        assert decode_deferred(f"\n  {encode_for_deferred(payload)}  ") == Valid(payload=payload)

    def test_not_deferred(self):
        assert decode_deferred("remind me later") == NotDeferred()
        assert decode_deferred("QQBOT_PAYLOAD:{}") == NotDeferred()

    def test_empty_content(self):
        assert decode_deferred(" QQBOT_CRON: ") == Invalid(reason="deferred payload content is empty")

    def test_not_base64(self):
        outcome = decode_deferred("QQBOT_CRON:!!!not-base64!!!")
        assert isinstance(outcome, Invalid)
        assert outcome.reason.startswith("deferred payload decode failed: ")

    def test_not_utf8(self):
        outcome = decode_deferred(CRON_PREFIX + base64.b64encode(b"\xff\xfe\xfd").decode("ascii"))
        assert isinstance(outcome, Invalid)
        assert outcome.reason.startswith("deferred payload decode failed: ")

    def test_not_json(self):
        outcome = decode_deferred(CRON_PREFIX + base64.b64encode(b"hello").decode("ascii"))
        assert isinstance(outcome, Invalid)
        assert outcome.reason.startswith("deferred payload decode failed: ")

    def test_type_mismatch(self):
        outcome = decode_deferred(
            _envelope({"kind": "media", "mediaType": "image", "source": "url", "path": "https://x/y.png"})
        )
        assert outcome == Invalid(reason="expected type cron_reminder, got media")

    def test_missing_fields(self):
        outcome = decode_deferred(_envelope({"type": "cron_reminder", "content": "x", "targetType": "c2c"}))
        assert outcome == Invalid(reason="deferred payload missing required fields")

    def test_only_reminders_can_be_deferred(self):
        with pytest.raises(PayloadError):
            encode_for_deferred(MediaPayload(media_type="image", source="url", path="https://x/y.png"))


class TestClassify:
    def test_known_variants(self):
        reminder = CronReminderPayload(content="x", target_type="c2c", target_address="u")
        media = MediaPayload(media_type="image", source="url", path="https://x/y.png")
        assert classify(reminder) is PayloadClass.CRON_REMINDER
        assert classify(media) is PayloadClass.MEDIA

    def test_unknown_variant(self):
        assert classify(UnknownPayload(type="poll")) is PayloadClass.UNKNOWN

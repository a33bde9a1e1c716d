"""Basic unit tests for the qqbot-payload package."""

from qqbot_payload import (
    CRON_PREFIX,
    PAYLOAD_PREFIX,
    AuthError,
    ConfigError,
    DeliveryError,
    PayloadError,
    QQBotError,
    StoreError,
    parse,
    decode_deferred,
    encode_for_deferred,
    __version__,
)


def test_version():
    assert __version__ == "0.1.0"


def test_public_exports():
    assert parse is not None
    assert encode_for_deferred is not None
    assert decode_deferred is not None


def test_error_hierarchy():
    assert issubclass(PayloadError, QQBotError)
    assert issubclass(ConfigError, QQBotError)
    assert issubclass(AuthError, QQBotError)
    assert issubclass(DeliveryError, QQBotError)
    assert issubclass(StoreError, QQBotError)


def test_error_attributes():
    err = QQBotError(code="test_code", message="something broke")
    assert err.code == "test_code"
    assert str(err) == "something broke"
    assert err.details is None

    err_with_details = DeliveryError("bad target", details={"status": 400})
    assert err_with_details.code == "delivery_error"
    assert err_with_details.details == {"status": 400}


def test_prefix_constants():
    assert PAYLOAD_PREFIX == "QQBOT_PAYLOAD:"
    assert CRON_PREFIX == "QQBOT_CRON:"

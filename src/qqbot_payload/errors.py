"""
QQBot error types.

Malformed payload text never raises; these cover programming errors,
configuration problems and delivery failures.
"""

from typing import Any, Optional


class QQBotError(Exception):
    def __init__(self, code: str, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.code = code
        self.details = details


class PayloadError(QQBotError):
    def __init__(self, message: str, code: str = "payload_error"):
        super().__init__(code, message)


class ConfigError(QQBotError):
    def __init__(self, message: str, code: str = "config_error"):
        super().__init__(code, message)


class AuthError(QQBotError):
    def __init__(self, message: str, code: str = "auth_error"):
        super().__init__(code, message)


class DeliveryError(QQBotError):
    def __init__(self, message: str, code: str = "delivery_error", details: Optional[dict[str, Any]] = None):
        super().__init__(code, message, details)


class StoreError(QQBotError):
    def __init__(self, message: str, code: str = "store_error"):
        super().__init__(code, message)

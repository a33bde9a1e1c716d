"""
Delivery models — target descriptors and send results.
"""

from typing import Literal, Optional

from pydantic import BaseModel

from qqbot_payload.models.payload import TargetType


class Target(BaseModel):
    """Where a message goes: a private chat (c2c) or a group."""
    type: TargetType = "c2c"
    address: str
    account_id: str = "default"
    reply_to: Optional[str] = None  # msg_id of the message being answered


class DeliveryResult(BaseModel):
    success: bool
    message_id: Optional[str] = None
    timestamp: Optional[str] = None
    error: Optional[str] = None


class DispatchResult(BaseModel):
    """What the dispatcher did with one piece of AI output.

    ``invalid`` means the payload text was malformed; ``failed`` means the
    platform rejected or never received the delivery.
    """
    status: Literal["sent", "invalid", "failed", "unsupported"]
    reason: Optional[str] = None
    deliveries: list[DeliveryResult] = []

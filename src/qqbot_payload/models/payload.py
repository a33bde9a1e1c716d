"""
Structured payload variants carried in AI output.

Wire keys are camelCase; attributes are snake_case with aliases.
"""

from enum import Enum
from typing import Any, Literal, Optional, Union

from pydantic import BaseModel, Field

TargetType = Literal["c2c", "group"]
MediaType = Literal["image", "audio", "video"]
MediaSource = Literal["url", "file"]


class PayloadClass(str, Enum):
    CRON_REMINDER = "cron_reminder"
    MEDIA = "media"
    UNKNOWN = "unknown"


class CronReminderPayload(BaseModel):
    """A reminder to deliver ``content`` to a target, usually at a later time."""
    type: Literal["cron_reminder"] = "cron_reminder"
    content: str
    target_type: TargetType = Field(alias="targetType")
    target_address: str = Field(alias="targetAddress")
    original_message_id: Optional[str] = Field(default=None, alias="originalMessageId")

    model_config = {"populate_by_name": True, "frozen": True}


class MediaPayload(BaseModel):
    """An instruction to send an image, audio clip or video."""
    type: Literal["media"] = "media"
    media_type: MediaType = Field(alias="mediaType")
    source: MediaSource
    path: str
    caption: Optional[str] = None

    model_config = {"populate_by_name": True, "frozen": True}


class UnknownPayload(BaseModel):
    """A payload whose kind this consumer does not know; fields are kept as sent."""
    type: Any  # any truthy discriminator, kept as sent

    model_config = {"extra": "allow", "frozen": True}


Payload = Union[CronReminderPayload, MediaPayload, UnknownPayload]

"""
Results of parsing or decoding payload text.

Every codec call returns exactly one of these; none of them is an error
to be raised.
"""

from typing import Literal, Union

from pydantic import BaseModel

from qqbot_payload.models.payload import Payload


class NotAPayload(BaseModel):
    """Plain conversational text, returned unmodified."""
    status: Literal["not_a_payload"] = "not_a_payload"
    text: str


class NotDeferred(BaseModel):
    """The message carries no deferred envelope."""
    status: Literal["not_deferred"] = "not_deferred"


class Invalid(BaseModel):
    status: Literal["invalid"] = "invalid"
    reason: str


class Valid(BaseModel):
    status: Literal["valid"] = "valid"
    payload: Payload


ParseOutcome = Union[NotAPayload, Invalid, Valid]
DeferredOutcome = Union[NotDeferred, Invalid, Valid]

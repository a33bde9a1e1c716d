"""
Known-user records — targets that have interacted with the bot.
"""

from typing import Literal, Optional

from pydantic import BaseModel

UserType = Literal["c2c", "group", "channel"]


class KnownUser(BaseModel):
    openid: str
    type: UserType = "c2c"
    account_id: str = "default"
    nickname: Optional[str] = None
    first_seen_at: int = 0          # epoch milliseconds
    last_interaction_at: int = 0    # epoch milliseconds
    interaction_count: int = 0


class KnownUsersStats(BaseModel):
    total: int = 0
    c2c: int = 0
    group: int = 0
    channel: int = 0

"""
Known-users directory.

The platform rejects proactive messages to targets that never talked to
the bot, so every inbound interaction is recorded here and checked before
sending.
"""

from __future__ import annotations

import json
import logging
import os
import time
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from qqbot_payload.errors import StoreError
from qqbot_payload.models.user import KnownUser, KnownUsersStats, UserType

logger = logging.getLogger(__name__)

KNOWN_USERS_FILE = "known_users.json"


def _key(user_type: str, openid: str, account_id: str) -> str:
    return f"{account_id}:{user_type}:{openid}"


class KnownUsersStore:
    def __init__(self, data_dir: str):
        self._path = Path(data_dir).expanduser() / KNOWN_USERS_FILE

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> dict[str, KnownUser]:
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return {}
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise StoreError(f"Known-users file {self._path} is corrupt: {e}")
        if not isinstance(raw, list):
            raise StoreError(f"Known-users file {self._path} does not hold a list")
        try:
            users = [KnownUser.model_validate(item) for item in raw]
        except ValidationError as e:
            raise StoreError(f"Known-users file {self._path} has a bad record: {e}")
        return {_key(u.type, u.openid, u.account_id): u for u in users}

    def _save(self, users: dict[str, KnownUser]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        data = [u.model_dump() for u in users.values()]
        tmp = self._path.with_suffix(".json.tmp")
        tmp.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")
        os.replace(tmp, self._path)

    def record(
        self,
        openid: str,
        user_type: UserType = "c2c",
        account_id: str = "default",
        nickname: Optional[str] = None,
    ) -> KnownUser:
        """Upsert a user after an inbound interaction."""
        users = self._load()
        key = _key(user_type, openid, account_id)
        now = int(time.time() * 1000)
        existing = users.get(key)
        if existing:
            user = existing.model_copy(update={
                "nickname": nickname or existing.nickname,
                "last_interaction_at": now,
                "interaction_count": existing.interaction_count + 1,
            })
        else:
            user = KnownUser(
                openid=openid, type=user_type, account_id=account_id, nickname=nickname,
                first_seen_at=now, last_interaction_at=now, interaction_count=1,
            )
        users[key] = user
        self._save(users)
        logger.debug("Recorded %s user %s (%d interactions)", user_type, openid, user.interaction_count)
        return user

    def get(self, user_type: str, openid: str, account_id: str = "default") -> Optional[KnownUser]:
        return self._load().get(_key(user_type, openid, account_id))

    def is_known(self, user_type: str, openid: str, account_id: str = "default") -> bool:
        return self.get(user_type, openid, account_id) is not None

    def list(
        self,
        user_type: Optional[str] = None,
        account_id: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> list[KnownUser]:
        """Users sorted by most recent interaction first."""
        users = [
            u for u in self._load().values()
            if (user_type is None or u.type == user_type)
            and (account_id is None or u.account_id == account_id)
        ]
        users.sort(key=lambda u: u.last_interaction_at, reverse=True)
        return users[:limit] if limit else users

    def stats(self, account_id: Optional[str] = None) -> KnownUsersStats:
        stats = KnownUsersStats()
        for u in self.list(account_id=account_id):
            stats.total += 1
            setattr(stats, u.type, getattr(stats, u.type) + 1)
        return stats

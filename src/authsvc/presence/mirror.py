"""
Presence mirror: a best-effort copy of each user's online state in Redis.

The relational store stays authoritative for identity. Records here are written
after the primary transaction commits, and the composite helpers
(`record_registration`, `mark_online`) swallow and log every failure so a Redis
outage never fails a registration or login.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

import structlog

if TYPE_CHECKING:
    from redis.asyncio import Redis

logger = structlog.get_logger()

_KEY_PREFIX = "presence"


def presence_key(user_id: int) -> str:
    return f"{_KEY_PREFIX}:{user_id}"


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class PresenceRecord:
    """Mirror of display, online and provider state for one user."""

    user_id: int
    display_name: str = ""
    photo_url: str | None = None
    phone: str | None = None
    online: bool = False
    last_seen: str | None = None
    created_at: str | None = None
    user_type: str | None = None
    auth_provider: str | None = None

    def to_hash(self) -> dict[str, str]:
        fields = asdict(self)
        fields.pop("user_id")
        return {name: _encode(value) for name, value in fields.items()}

    @classmethod
    def from_hash(cls, user_id: int, data: dict[str, str]) -> PresenceRecord:
        return cls(
            user_id=user_id,
            display_name=data.get("display_name", ""),
            photo_url=data.get("photo_url") or None,
            phone=data.get("phone") or None,
            online=data.get("online") == "true",
            last_seen=data.get("last_seen") or None,
            created_at=data.get("created_at") or None,
            user_type=data.get("user_type") or None,
            auth_provider=data.get("auth_provider") or None,
        )


def _encode(value: Any) -> str:  # noqa: ANN401
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class PresenceMirror:
    """Reads and writes presence records keyed by user_id."""

    def __init__(self, redis: Redis) -> None:
        self._redis = redis

    async def create(self, record: PresenceRecord) -> None:
        """Write a full presence record, replacing any existing one."""
        key = presence_key(record.user_id)
        pipe = self._redis.pipeline()
        pipe.delete(key)
        pipe.hset(key, mapping=record.to_hash())
        await pipe.execute()

    async def update(self, user_id: int, **fields: Any) -> None:  # noqa: ANN401
        """Overwrite selected fields of an existing record."""
        if not fields:
            return
        await self._redis.hset(
            presence_key(user_id),
            mapping={name: _encode(value) for name, value in fields.items()},
        )

    async def get(self, user_id: int) -> PresenceRecord | None:
        """Read a presence record once; None if the user has none."""
        data = await self._redis.hgetall(presence_key(user_id))
        if not data:
            return None
        return PresenceRecord.from_hash(user_id, data)

    # -----------------------------------------------------------------------
    # Best-effort composites used by the identity service
    # -----------------------------------------------------------------------

    async def record_registration(self, record: PresenceRecord) -> bool:
        """Create the record for a newly registered user. Returns False on failure."""
        record.created_at = record.created_at or _now_iso()
        try:
            await self.create(record)
        except Exception:
            logger.warning("presence_mirror_failed", op="register", user_id=record.user_id, exc_info=True)
            return False
        return True

    async def mark_online(self, record: PresenceRecord) -> bool:
        """
        Set the user online and refresh last_seen.

        Creates the record from `record` when none exists yet; otherwise only the
        online flag, last_seen and auth_provider are updated. Returns False on failure.
        """
        now = _now_iso()
        try:
            if await self.get(record.user_id) is None:
                record.online = True
                record.last_seen = now
                record.created_at = record.created_at or now
                await self.create(record)
            else:
                await self.update(
                    record.user_id,
                    online=True,
                    last_seen=now,
                    auth_provider=record.auth_provider,
                )
        except Exception:
            logger.warning("presence_mirror_failed", op="online", user_id=record.user_id, exc_info=True)
            return False
        return True

"""Cache entry model."""

from datetime import UTC, datetime, timedelta
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class CacheEntry(BaseModel):
    """A cached resolver result."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    value: Any = None
    expires_at: datetime | None = Field(
        default=None, description="Entry is a miss from this instant on; None never expires"
    )
    single_serve: bool = Field(
        default=False, description="Entry is removed by the lookup that returns it"
    )
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at is not None and self.expires_at <= now

    @classmethod
    def create(
        cls,
        value: Any,
        now: datetime,
        ttl: timedelta | None = None,
        single_serve: bool = False,
    ) -> "CacheEntry":
        return cls(
            value=value,
            expires_at=now + ttl if ttl is not None else None,
            single_serve=single_serve,
            created_at=now,
        )

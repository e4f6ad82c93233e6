"""
Unicache — Expiration Policies

Describes when a local cache entry becomes eligible for removal.
"""

from __future__ import annotations

import math
from datetime import datetime, timedelta, timezone

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ExpirationPolicy(BaseModel):
    """
    Absolute and/or sliding expiration for a local cache entry.

    - absolute_expiration: wall-clock deadline; naive datetimes are local time
    - sliding_expiration: the entry expires after this long without a read;
      every successful read renews the deadline

    When both are set the earlier deadline wins. With neither set the entry
    never expires.
    """

    absolute_expiration: datetime | None = Field(default=None, description="Wall-clock deadline")
    sliding_expiration: timedelta | None = Field(default=None, description="Idle period before expiry")

    model_config = ConfigDict(frozen=True)

    @field_validator("absolute_expiration")
    @classmethod
    def make_aware(cls, v: datetime | None) -> datetime | None:
        if v is not None and v.tzinfo is None:
            return v.astimezone()
        return v

    @field_validator("sliding_expiration")
    @classmethod
    def positive_period(cls, v: timedelta | None) -> timedelta | None:
        if v is not None and v <= timedelta(0):
            raise ValueError("sliding_expiration must be a positive period")
        return v

    @classmethod
    def in_minutes(cls, minutes: float) -> ExpirationPolicy:
        """Absolute expiration `minutes` from now (0 = never expires)."""
        if minutes <= 0:
            return cls()
        return cls(absolute_expiration=datetime.now(timezone.utc) + timedelta(minutes=minutes))

    @classmethod
    def sliding(cls, period: timedelta) -> ExpirationPolicy:
        return cls(sliding_expiration=period)

    @property
    def is_sliding(self) -> bool:
        return self.sliding_expiration is not None

    @property
    def expires(self) -> bool:
        return self.absolute_expiration is not None or self.sliding_expiration is not None

    def deadline(self, now: float) -> float:
        """
        Compute the expiry instant as a POSIX timestamp.

        Args:
            now: Current POSIX time (the local store's timer)

        Returns:
            Deadline in seconds since the epoch, math.inf when the entry never expires
        """
        deadline = math.inf
        if self.absolute_expiration is not None:
            deadline = min(deadline, self.absolute_expiration.timestamp())
        if self.sliding_expiration is not None:
            deadline = min(deadline, now + self.sliding_expiration.total_seconds())
        return deadline

"""OAuth2 token with expiry bookkeeping."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any


def _trunc_div(value: int, divisor: int) -> int:
    quotient = abs(value) // divisor
    return quotient if value >= 0 else -quotient


@dataclass
class Token:
    """An OAuth2 token."""

    access_token: str = ""
    refresh_token: str = ""
    expires_in: int = 0
    expires_at: int = 0

    def set_expires_at(self) -> None:
        """Set expires_at from the current time plus expires_in seconds."""
        self.expires_at = int(time.time() + self.expires_in)

    def is_expired(self) -> bool:
        """True if expired or within the last tenth of the lifetime."""
        return int(time.time()) >= self.expires_at - _trunc_div(self.expires_in, 10)

    def set_expires_in(self) -> None:
        """Set expires_in to the seconds remaining until expires_at."""
        self.expires_in = int(self.expires_at - time.time())

    def to_dict(self) -> dict[str, Any]:
        return {
            "access_token": self.access_token,
            "refresh_token": self.refresh_token,
            "expires_in": self.expires_in,
            "expires_at": self.expires_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Token":
        return cls(
            access_token=data.get("access_token", ""),
            refresh_token=data.get("refresh_token", ""),
            expires_in=int(data.get("expires_in", 0)),
            expires_at=int(data.get("expires_at", 0)),
        )
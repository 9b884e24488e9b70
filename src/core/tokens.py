"""Continuation token helpers (core domain).

Tokens are short HMAC digests bound to an action, a user and a time tick.
A token stays valid for the current tick and the one before it, so its
lifetime falls between half and one full ``lifetime_seconds``.
"""

from __future__ import annotations

import hashlib
import hmac
import math
import time
from typing import Callable, Optional

BACKFILL_ACTION = "autotagger_backfill"
SETTINGS_ACTION = "autotagger_settings"

_TOKEN_CHARS = 20


class ContinuationTokens:
    """Issue and verify anti-replay tokens for multi-request actions."""

    def __init__(
        self,
        secret: str,
        lifetime_seconds: int = 86400,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if not secret:
            raise ValueError("A non-empty secret is required for continuation tokens")
        if lifetime_seconds < 2:
            raise ValueError("lifetime_seconds must be at least 2")
        self._secret = secret.encode("utf-8")
        self._lifetime = lifetime_seconds
        self._clock = clock

    def _tick(self) -> int:
        return math.ceil(self._clock() / (self._lifetime / 2))

    def _digest(self, tick: int, action: str, user_id: str) -> str:
        payload = f"{tick}|{action}|{user_id}".encode("utf-8")
        return hmac.new(self._secret, payload, hashlib.sha256).hexdigest()[:_TOKEN_CHARS]

    def issue(self, action: str, user_id: str) -> str:
        return self._digest(self._tick(), action, user_id)

    def verify(self, token: Optional[str], action: str, user_id: str) -> bool:
        """Return True if token was issued for this action/user recently."""

        if not token:
            return False
        tick = self._tick()
        for candidate in (tick, tick - 1):
            expected = self._digest(candidate, action, user_id)
            if hmac.compare_digest(token.encode("utf-8"), expected.encode("utf-8")):
                return True
        return False

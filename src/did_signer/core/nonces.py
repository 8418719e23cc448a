"""Nonce tracking for replay protection.

The signer itself never consults this tracker: every auth payload gets a
fresh nonce and replay rejection belongs to whoever verifies the payload.
``NonceManager`` is provided for that side.

Usage:
    manager = NonceManager()

    if manager.is_used(payload.nonce, payload.timestamp):
        reject("Replayed payload")
"""

import logging
import threading
import time
from typing import Optional

logger = logging.getLogger(__name__)

# Nonces older than this are forgotten (5 minutes, matching the auth window)
DEFAULT_MAX_AGE_MS = 5 * 60 * 1000


class NonceManager:
    """Remembers seen nonces with the timestamp they were first used at.

    Args:
        max_age_ms: Age after which ``cleanup`` forgets a nonce.
    """

    def __init__(self, max_age_ms: int = DEFAULT_MAX_AGE_MS) -> None:
        self._max_age_ms = max_age_ms
        # nonce -> timestamp (ms)
        self._used: dict[str, int] = {}
        self._lock = threading.Lock()

    def is_used(self, nonce: str, timestamp: int) -> bool:
        """Check a nonce and record it if it is new.

        Args:
            nonce: Nonce from the payload
            timestamp: Payload timestamp in milliseconds

        Returns:
            True if the nonce was already recorded (a replay)
        """
        with self._lock:
            if nonce in self._used:
                logger.warning("Nonce reuse detected")
                return True
            self._used[nonce] = timestamp
            return False

    def cleanup(self, now: Optional[int] = None) -> int:
        """Forget nonces older than the max age.

        Returns:
            Number of nonces removed
        """
        if now is None:
            now = int(time.time() * 1000)

        with self._lock:
            expired = [
                nonce
                for nonce, timestamp in self._used.items()
                if now - timestamp > self._max_age_ms
            ]
            for nonce in expired:
                del self._used[nonce]

        if expired:
            logger.debug("Cleaned up %d expired nonces", len(expired))
        return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return len(self._used)

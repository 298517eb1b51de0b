"""
Artifact id generation

Ids look like ``a_`` followed by 26 Crockford base32 characters: 10 encode the
millisecond timestamp, 16 encode 80 random bits. Ids created within the same
millisecond increment the random part, so ids sort in creation order.
"""

import secrets
import threading
import time
from typing import Optional

ALPHABET = "0123456789ABCDEFGHJKMNPQRSTVWXYZ"
PREFIX = "a_"
TIME_LENGTH = 10
RANDOM_LENGTH = 16


class ArtifactIdGenerator:
    """Thread-safe, monotonic generator of ULID-style artifact ids"""

    def __init__(self, clock=None):
        self._clock = clock or (lambda: int(time.time() * 1000))
        self._lock = threading.Lock()
        self._last_time: Optional[int] = None
        self._last_random: int = 0

    def new_id(self) -> str:
        with self._lock:
            now = self._clock()
            if now == self._last_time:
                # wraps to zero on overflow of the 80-bit random part
                random_part = (self._last_random + 1) % (1 << (5 * RANDOM_LENGTH))
            else:
                random_part = secrets.randbits(5 * RANDOM_LENGTH)
            self._last_time = now
            self._last_random = random_part

        return PREFIX + _encode(now, TIME_LENGTH) + _encode(random_part, RANDOM_LENGTH)


def _encode(value: int, length: int) -> str:
    chars = []
    for _ in range(length):
        chars.append(ALPHABET[value & 31])
        value >>= 5
    return "".join(reversed(chars))


_default_generator = ArtifactIdGenerator()


def new_artifact_id() -> str:
    return _default_generator.new_id()

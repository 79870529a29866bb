"""Injectable sources of time and randomness.

Message-ID, boundary and vendor identifier generation, as well as the
default ``Date`` header, are the only nondeterministic inputs of the
composer. They are consulted through the small capabilities defined here
so tests can pin them.
"""

from __future__ import annotations

import random
import secrets
import uuid
from datetime import datetime, timezone
from typing import Protocol


class Clock(Protocol):
    """Provides the current instant."""

    def now(self) -> datetime: ...


class EntropySource(Protocol):
    """Provides random bytes."""

    def token_bytes(self, nbytes: int) -> bytes: ...


class SystemClock:
    """Wall clock in the local timezone (always timezone-aware)."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc).astimezone()


class FixedClock:
    """Clock frozen at a single instant."""

    def __init__(self, instant: datetime) -> None:
        if instant.tzinfo is None:
            instant = instant.replace(tzinfo=timezone.utc)
        self._instant = instant

    def now(self) -> datetime:
        return self._instant


class SystemEntropy:
    """Cryptographically strong randomness from the operating system."""

    def token_bytes(self, nbytes: int) -> bytes:
        return secrets.token_bytes(nbytes)


class SeededEntropy:
    """Reproducible pseudo-randomness for tests and golden files."""

    def __init__(self, seed: int = 0) -> None:
        self._random = random.Random(seed)

    def token_bytes(self, nbytes: int) -> bytes:
        return self._random.randbytes(nbytes)


def random_token(entropy: EntropySource, nbytes: int = 16) -> str:
    """Return ``nbytes`` of entropy as lower-case hex."""
    return entropy.token_bytes(nbytes).hex()


def random_uuid(entropy: EntropySource) -> str:
    """Return an upper-case version 4 UUID drawn from ``entropy``."""
    return str(uuid.UUID(bytes=entropy.token_bytes(16), version=4)).upper()

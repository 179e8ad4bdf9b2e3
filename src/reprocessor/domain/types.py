"""Entity identifiers: validation and generation."""

import random
import re
import time

# Crockford base32 (no I, L, O, U)
CROCKFORD_ALPHABET = "0123456789ABCDEFGHJKMNPQRSTVWXYZ"

PI_PATTERN = re.compile(r"^[0-9A-HJKMNP-TV-Z]{26}$")

# All-zero identifier used by the store as "no parent"
ROOT_SENTINEL = "00000000000000000000000000"

_system_random = random.SystemRandom()


def is_valid_pi(value: object) -> bool:
    """Return True if value is a 26-character Crockford base32 identifier."""
    return isinstance(value, str) and PI_PATTERN.match(value) is not None


def _encode_base32(value: int, length: int) -> str:
    chars = []
    for _ in range(length):
        chars.append(CROCKFORD_ALPHABET[value % 32])
        value //= 32
    return "".join(reversed(chars))


def generate_ulid(timestamp_ms: int | None = None) -> str:
    """
    Generate a ULID-style identifier.

    Format: 26 Crockford base32 characters, the first 10 encoding the
    millisecond timestamp and the last 16 random.
    """
    if timestamp_ms is None:
        timestamp_ms = int(time.time() * 1000)
    random_part = "".join(_system_random.choice(CROCKFORD_ALPHABET) for _ in range(16))
    return _encode_base32(timestamp_ms, 10) + random_part


def entity_path(entity_id: str) -> str:
    """Logical directory path for an entity."""
    return f"/{entity_id}"

"""Unit tests for entity identifier helpers."""

from reprocessor.domain.types import (
    CROCKFORD_ALPHABET,
    ROOT_SENTINEL,
    entity_path,
    generate_ulid,
    is_valid_pi,
)


def test_is_valid_pi_accepts_crockford_identifiers():
    """Test that 26-character uppercase Crockford base32 ids are valid."""
    assert is_valid_pi("01K8TARGET".ljust(26, "0"))
    assert is_valid_pi("0123456789ABCDEFGHJKMNPQRS")
    assert is_valid_pi(ROOT_SENTINEL)


def test_is_valid_pi_rejects_malformed_identifiers():
    """Test length, case, excluded letters and non-string values."""
    assert not is_valid_pi("01K8TARGET".ljust(25, "0"))
    assert not is_valid_pi("01K8TARGET".ljust(27, "0"))
    assert not is_valid_pi("01k8target".ljust(26, "0"))
    # I, L, O and U are not part of the alphabet
    for letter in "ILOU":
        assert not is_valid_pi(letter * 26)
    assert not is_valid_pi(None)
    assert not is_valid_pi(12345)
    assert not is_valid_pi("")


def test_generate_ulid_shape():
    """Test generated ids are valid identifiers."""
    for _ in range(50):
        ulid = generate_ulid()
        assert len(ulid) == 26
        assert all(c in CROCKFORD_ALPHABET for c in ulid)
        assert is_valid_pi(ulid)


def test_generate_ulid_timestamp_prefix_sorts_by_time():
    """Test the 10-character time prefix orders ids by creation time."""
    earlier = generate_ulid(timestamp_ms=1_700_000_000_000)
    later = generate_ulid(timestamp_ms=1_700_000_000_001)

    assert earlier[:10] < later[:10]
    assert generate_ulid(timestamp_ms=0)[:10] == "0" * 10


def test_generate_ulid_random_part_differs():
    """Test two ids for the same millisecond still differ."""
    first = generate_ulid(timestamp_ms=1_700_000_000_000)
    second = generate_ulid(timestamp_ms=1_700_000_000_000)

    assert first[:10] == second[:10]
    assert first != second


def test_entity_path():
    """Test logical directory path is the id under the root."""
    pi = "01K8TARGET".ljust(26, "0")
    assert entity_path(pi) == f"/{pi}"

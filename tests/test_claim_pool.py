import pytest

from souls_codec.binary.bin_errors import FormatError
from souls_codec.utils.claim_pool import ClaimPool


def test_claim_moves_item_out():
    pool = ClaimPool(["a", "b", "c"], "face set")
    assert pool.claim_all([2, 0]) == ["c", "a"]
    assert pool.remaining() == [1]
    assert 1 in pool and 0 not in pool


def test_claim_twice_fails():
    pool = ClaimPool(["a"], "face set")
    pool.claim(0)
    with pytest.raises(FormatError, match="Face set not found or already claimed: 0"):
        pool.claim(0)


def test_missing_index_fails():
    pool = ClaimPool(["a"], "vertex buffer")
    with pytest.raises(FormatError, match="Vertex buffer not found"):
        pool.claim(5)


def test_orphans_reported():
    pool = ClaimPool(["a", "b", "c"], "vertex buffer")
    pool.claim(1)
    with pytest.raises(FormatError, match=r"Orphaned vertex buffers found: \[0, 2\]"):
        pool.ensure_empty()
    pool.claim_all([0, 2])
    pool.ensure_empty()
    assert len(pool) == 0

import hashlib

import pytest

from pinmap.domain.errors import ValidationError
from pinmap.services.digest.cid_strategy import (
    UnixFsCidStrategy,
    base58btc_encode,
    encode_varint,
)
from pinmap.services.digest.hash_strategy import HashlibDigestStrategy


def test_sha256_hex_default():
    s = HashlibDigestStrategy()
    assert s.name == "hashlib:sha256:hex"
    assert s.digest(b"hello") == hashlib.sha256(b"hello").hexdigest()
    assert s.digest(b"hello") == s.digest(b"hello")


def test_other_encodings():
    raw = hashlib.sha256(b"x").digest()
    assert HashlibDigestStrategy(encoding="base64").digest(b"x").endswith("=")
    assert "=" not in HashlibDigestStrategy(encoding="base64url").digest(b"x")
    assert HashlibDigestStrategy(encoding="latin1").digest(b"x") == raw.decode("latin-1")
    assert HashlibDigestStrategy("md5").digest(b"") == "d41d8cd98f00b204e9800998ecf8427e"


def test_invalid_algorithm_or_encoding():
    with pytest.raises(ValidationError):
        HashlibDigestStrategy("not-a-hash")
    with pytest.raises(ValidationError):
        HashlibDigestStrategy(encoding="rot13")


def test_base58_and_varint():
    assert base58btc_encode(b"hello world") == "StV1DL6CwTryKyV"
    assert base58btc_encode(b"\0\0hello world") == "11StV1DL6CwTryKyV"
    assert encode_varint(1) == b"\x01"
    assert encode_varint(300) == b"\xac\x02"


@pytest.mark.parametrize(
    "content, cid",
    [
        (b"", "QmbFMke1KXqnYyBBWxB74N4c5SBnJMVAiMNRcGu6x1AwQH"),
        (b"Hello\n", "QmY9cxiHqTFoWamkQVkpmmqzBrY3hCBEL2XNu3NtX74Fuu"),
        (b"a", "QmfDmsHTywy6L9Ne5RXsj5YumDedfBLMvCvmaxjBoe6w4d"),
        (b"b", "QmQLd9KEkw5eLKfr9VwfthiWbuqa9LXhRchWqD4kRPPWEf"),
        (b"ab", "QmYfhYCLvZCNdb6SQiuPmL6qFTLtW4AtT88PP9FmhN8SiR"),
    ],
)
def test_cidv0_matches_ipfs_add(content, cid):
    assert UnixFsCidStrategy().digest(content) == cid


def test_cidv0_multi_chunk_layouts():
    assert UnixFsCidStrategy(chunk_size=1).digest(b"ab") == "QmPbeHNLMBbUfMbCkixtSKaXvh1sipPaw7FDRo6hjuPeeb"
    # 174 leaves fit under one root; 175 need another level
    assert UnixFsCidStrategy(chunk_size=2).digest(b"ab" * 174) == "QmQ7bXhmbRw1uU2hGP1mEfdcAjb8dbRUVhXU7MHgzDiBNp"
    assert UnixFsCidStrategy(chunk_size=2).digest(b"ab" * 175) == "QmZs63KnTCwvU8H3mT5uUbTyah9BqwKv1EedpVFJFBXRd3"


def test_cid_strategy_rejects_bad_layout():
    with pytest.raises(ValueError):
        UnixFsCidStrategy(chunk_size=0)
    with pytest.raises(ValueError):
        UnixFsCidStrategy(max_links=1)

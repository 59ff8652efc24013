from __future__ import annotations

import hashlib
from typing import List, Tuple

from pinmap.domain.ports.digest import DigestStrategy

BASE58_BITCOIN_ALPHABET = "123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz"

# multihash header: sha2-256 (0x12), 32-byte digest (0x20)
SHA2_256_MULTIHASH_PREFIX = b"\x12\x20"

# 'ipfs add' defaults: fixed 256 KiB chunker, balanced layout,
# (8 * 1024) // (34 + 8 + 5) = 174 links per intermediate node
DEFAULT_CHUNK_SIZE = 262144
DEFAULT_MAX_LINKS = 174


def base58btc_encode(data: bytes) -> str:
    """Encode bytes with the Base58 Bitcoin alphabet (leading zero bytes -> '1')."""
    value = int.from_bytes(data, "big")
    leading_zeros = len(data) - len(data.lstrip(b"\0"))
    out: List[str] = []
    while value:
        value, rem = divmod(value, 58)
        out.append(BASE58_BITCOIN_ALPHABET[rem])
    return BASE58_BITCOIN_ALPHABET[0] * leading_zeros + "".join(reversed(out))


def encode_varint(value: int) -> bytes:
    """Unsigned LEB128 varint, as used by protobuf and multiformats."""
    buf = bytearray()
    while value >= 0x80:
        buf.append(0x80 | (value & 0x7F))
        value >>= 7
    buf.append(value)
    return bytes(buf)


def _leaf_node(chunk: bytes) -> bytes:
    """
    dag-pb PBNode { Data: unixfs.Data { Type: File, Data: chunk, filesize } }
    """
    size = encode_varint(len(chunk))
    unixfs = b"\x08\x02"  # Type = File
    if chunk:
        unixfs += b"\x12" + size + chunk
    unixfs += b"\x18" + size
    return b"\x0a" + encode_varint(len(unixfs)) + unixfs


def _parent_node(children: List[Tuple[bytes, int, int]]) -> Tuple[bytes, int, int]:
    """
    Hash an intermediate node linking `children` [(sha256, file_bytes, dag_bytes)].
    Returns the same triple for the new node.
    """
    h = hashlib.sha256()
    dag_size = 0
    file_size = 0
    blocksizes = bytearray()
    for digest, child_file_size, child_dag_size in children:
        # PBLink { Hash: multihash, Name: "", Tsize }
        link = b"\x0a\x22" + SHA2_256_MULTIHASH_PREFIX + digest + b"\x12\x00\x18" + encode_varint(child_dag_size)
        field = b"\x12" + encode_varint(len(link)) + link
        h.update(field)
        dag_size += child_dag_size + len(field)
        file_size += child_file_size
        blocksizes += b"\x20" + encode_varint(child_file_size)

    unixfs = b"\x08\x02\x18" + encode_varint(file_size) + bytes(blocksizes)
    data_field = b"\x0a" + encode_varint(len(unixfs)) + unixfs
    h.update(data_field)
    dag_size += len(data_field)
    return h.digest(), file_size, dag_size


def unixfs_sha256(content: bytes, chunk_size: int = DEFAULT_CHUNK_SIZE, max_links: int = DEFAULT_MAX_LINKS) -> bytes:
    """SHA-256 of the root dag-pb node 'ipfs add' would build for `content`."""
    if not content:
        return hashlib.sha256(_leaf_node(b"")).digest()

    level: List[Tuple[bytes, int, int]] = []
    for offset in range(0, len(content), chunk_size):
        chunk = content[offset:offset + chunk_size]
        node = _leaf_node(chunk)
        level.append((hashlib.sha256(node).digest(), len(chunk), len(node)))

    # a single chunk is its own root
    while len(level) > 1:
        level = [_parent_node(level[i:i + max_links]) for i in range(0, len(level), max_links)]
    return level[0][0]


class UnixFsCidStrategy(DigestStrategy):
    """
    CIDv0 ("Qm...") of a file's bytes, matching 'ipfs add --only-hash'
    with default options. Depends on content only, never on name or path.
    """

    algorithm = "dag-pb/unixfs sha2-256"

    def __init__(self, chunk_size: int = DEFAULT_CHUNK_SIZE, max_links: int = DEFAULT_MAX_LINKS) -> None:
        if chunk_size < 1 or max_links < 2:
            raise ValueError("chunk_size must be >= 1 and max_links >= 2")
        self.chunk_size = chunk_size
        self.max_links = max_links
        self.name = f"unixfs-cidv0:{chunk_size}:{max_links}"

    def digest(self, content: bytes) -> str:
        root = unixfs_sha256(content, self.chunk_size, self.max_links)
        return base58btc_encode(SHA2_256_MULTIHASH_PREFIX + root)

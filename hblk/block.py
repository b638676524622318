"""Blocks: creation, hashing, proof-of-work mining and validation."""

from __future__ import annotations

import struct
import sys
import time
from dataclasses import dataclass, field

from hblk.crypto import SHA256_DIGEST_LENGTH, sha256

BLOCKCHAIN_DATA_MAX = 1024

GENESIS_TIMESTAMP = 1537578000
GENESIS_DATA = b"Holberton School"
GENESIS_HASH = bytes.fromhex(
    "c52c26c8b5461639635d8edf2a97d48d0c8e0009c817f2b1d3d7ff2f04515803"
)

# index, difficulty, timestamp, nonce, prev_hash
_INFO_FORMAT = struct.Struct("<IIQQ32s")
INFO_SIZE = _INFO_FORMAT.size

_ZERO_HASH = bytes(SHA256_DIGEST_LENGTH)


def _digest_field(value: bytes, name: str) -> bytes:
    value = bytes(value)
    if len(value) != SHA256_DIGEST_LENGTH:
        raise ValueError(f"{name} must be {SHA256_DIGEST_LENGTH} bytes")
    return value


@dataclass
class Block:
    """A block: its info header, its data and its stored hash."""

    index: int = 0
    difficulty: int = 0
    timestamp: int = 0
    nonce: int = 0
    prev_hash: bytes = _ZERO_HASH
    data: bytes = b""
    hash: bytes = field(default=_ZERO_HASH)

    def __post_init__(self) -> None:
        self.prev_hash = _digest_field(self.prev_hash, "prev_hash")
        self.hash = _digest_field(self.hash, "hash")
        self.data = bytes(self.data)

    def info_bytes(self) -> bytes:
        """Return the 56-byte packed info header."""
        return _INFO_FORMAT.pack(
            self.index, self.difficulty, self.timestamp, self.nonce, self.prev_hash
        )

    def compute_hash(self) -> bytes:
        """Return the SHA-256 of the info header followed by the data."""
        return sha256(self.info_bytes() + self.data)

    def is_valid(self, prev_block: Block | None) -> bool:
        """Return True if this block correctly follows ``prev_block``."""
        if prev_block is None and self.index != 0:
            return False
        if self.index == 0:
            return is_genesis(self)
        assert prev_block is not None
        if self.index != prev_block.index + 1:
            return False
        if prev_block.compute_hash() != prev_block.hash:
            return False
        if prev_block.hash != self.prev_hash:
            return False
        if self.compute_hash() != self.hash:
            return False
        if len(self.data) > BLOCKCHAIN_DATA_MAX:
            return True
        return hash_matches_difficulty(self.hash, self.difficulty)

    def mine(self) -> None:
        """Increase the nonce until the hash meets the block's difficulty."""
        if hash_matches_difficulty(self.hash, self.difficulty):
            return
        while True:
            digest = self.compute_hash()
            self.hash = digest
            if hash_matches_difficulty(digest, self.difficulty):
                return
            self.nonce += 1


def block_create(prev: Block, data: bytes) -> Block:
    """Create the block that follows ``prev``, holding at most 1024 data bytes."""
    return Block(
        index=prev.index + 1,
        difficulty=0,
        timestamp=int(time.time()),
        nonce=0,
        prev_hash=prev.hash,
        data=bytes(data)[:BLOCKCHAIN_DATA_MAX],
        hash=_ZERO_HASH,
    )


def genesis_block() -> Block:
    """Return a fresh copy of the genesis block."""
    return Block(
        index=0,
        difficulty=0,
        timestamp=GENESIS_TIMESTAMP,
        nonce=0,
        prev_hash=_ZERO_HASH,
        data=GENESIS_DATA,
        hash=GENESIS_HASH,
    )


def is_genesis(block: Block) -> bool:
    """Return True if ``block`` is identical to the genesis block."""
    return block == genesis_block()


def hash_matches_difficulty(hash: bytes | None, difficulty: int) -> bool:
    """Return True if ``hash`` has at least ``difficulty`` leading zero bits."""
    if hash is None:
        return False
    raw = bytes(hash)
    leading_zeros = len(raw) * 8 - int.from_bytes(raw, "big").bit_length()
    return leading_zeros >= difficulty


def get_endianness() -> int:
    """Return 1 on a little-endian host, 2 on a big-endian one."""
    return 1 if sys.byteorder == "little" else 2


def swap_endian(data: bytes) -> bytes:
    """Return ``data`` with its byte order reversed."""
    return bytes(reversed(bytes(data)))
"""The blockchain: creation, difficulty adjustment, file storage and display."""

from __future__ import annotations

import struct
from collections.abc import Iterable, Iterator
from pathlib import Path

from hblk.block import (
    BLOCKCHAIN_DATA_MAX,
    INFO_SIZE,
    Block,
    genesis_block,
    get_endianness,
)
from hblk.crypto import SHA256_DIGEST_LENGTH, hex_buffer

FILE_MAGIC = b"HBLK"
FILE_VERSION = b"0.1"
FILE_HEADER = FILE_MAGIC + FILE_VERSION
HEADER_SIZE = len(FILE_HEADER) + 1 + 4

BLOCK_GENERATION_INTERVAL = 1
DIFF_ADJUSTMENT_INTERVAL = 5

_UINT32_MASK = 0xFFFFFFFF
_UINT64_MASK = 0xFFFFFFFFFFFFFFFF

_LITTLE = 1
_BIG = 2


class BlockchainError(Exception):
    """Raised when a blockchain cannot be built, stored or loaded."""


def _order_prefix(endianness: int) -> str:
    if endianness == _LITTLE:
        return "<"
    if endianness == _BIG:
        return ">"
    raise BlockchainError(f"unknown endianness marker: {endianness}")


def _info_struct(prefix: str) -> struct.Struct:
    return struct.Struct(f"{prefix}IIQQ{SHA256_DIGEST_LENGTH}s")


class Blockchain:
    """An ordered list of blocks starting, by default, with the genesis block."""

    def __init__(self, blocks: Iterable[Block] | None = None) -> None:
        self._blocks: list[Block] = (
            [genesis_block()] if blocks is None else list(blocks)
        )

    def __len__(self) -> int:
        return len(self._blocks)

    def __iter__(self) -> Iterator[Block]:
        return iter(self._blocks)

    def __getitem__(self, index: int) -> Block:
        return self._blocks[index]

    def add_block(self, block: Block) -> None:
        """Append ``block`` at the end of the chain."""
        if not isinstance(block, Block):
            raise BlockchainError(f"not a block: {type(block).__name__}")
        self._blocks.append(block)

    @property
    def tail(self) -> Block:
        """The last block of the chain."""
        if not self._blocks:
            raise BlockchainError("the blockchain is empty")
        return self._blocks[-1]

    def difficulty(self) -> int:
        """Return the difficulty to assign to the next block."""
        block = self.tail
        current = block.difficulty
        if block.index == 0 or block.index % DIFF_ADJUSTMENT_INTERVAL:
            return current
        adj_block = self._blocks[len(self._blocks) - DIFF_ADJUSTMENT_INTERVAL]
        expected = (
            (block.index - adj_block.index) * BLOCK_GENERATION_INTERVAL
        ) & _UINT32_MASK
        actual = (block.timestamp - adj_block.timestamp) & _UINT64_MASK
        if actual > expected << 1:
            return (current - 1) & _UINT32_MASK
        if actual < expected >> 1:
            return (current + 1) & _UINT32_MASK
        return current

    def serialize(self, path: str | Path) -> None:
        """Write the chain to ``path`` in the host's byte order."""
        endianness = get_endianness()
        prefix = _order_prefix(endianness)
        info = _info_struct(prefix)
        length = struct.Struct(f"{prefix}I")

        parts = [FILE_HEADER, bytes([endianness]), length.pack(len(self._blocks))]
        for block in self._blocks:
            parts.append(
                info.pack(
                    block.index,
                    block.difficulty,
                    block.timestamp,
                    block.nonce,
                    block.prev_hash,
                )
            )
            parts.append(length.pack(len(block.data)))
            parts.append(block.data)
            parts.append(block.hash)
        try:
            Path(path).write_bytes(b"".join(parts))
        except OSError as exc:
            raise BlockchainError(f"cannot write {path}: {exc}") from exc

    @classmethod
    def deserialize(cls, path: str | Path) -> Blockchain:
        """Load a chain written by :meth:`serialize`."""
        try:
            raw = Path(path).read_bytes()
        except OSError as exc:
            raise BlockchainError(f"cannot read {path}: {exc}") from exc

        if raw[: len(FILE_HEADER)] != FILE_HEADER:
            raise BlockchainError(f"{path} is not a blockchain file")
        if len(raw) < HEADER_SIZE:
            raise BlockchainError(f"{path} is truncated")

        prefix = _order_prefix(raw[len(FILE_HEADER)])
        info = _info_struct(prefix)
        length = struct.Struct(f"{prefix}I")
        (count,) = length.unpack_from(raw, len(FILE_HEADER) + 1)

        reader = _Reader(raw, HEADER_SIZE, path)
        blocks = []
        for _ in range(count):
            index, difficulty, timestamp, nonce, prev_hash = info.unpack(
                reader.take(INFO_SIZE)
            )
            (data_len,) = length.unpack(reader.take(length.size))
            if data_len > BLOCKCHAIN_DATA_MAX:
                raise BlockchainError(
                    f"block {index} in {path} holds {data_len} bytes of data"
                )
            data = reader.take(data_len)
            digest = reader.take(SHA256_DIGEST_LENGTH)
            blocks.append(
                Block(
                    index=index,
                    difficulty=difficulty,
                    timestamp=timestamp,
                    nonce=nonce,
                    prev_hash=prev_hash,
                    data=data,
                    hash=digest,
                )
            )
        return cls(blocks)

    def format(self, brief: bool = False) -> str:
        """Return a printable description of the whole chain."""
        body = "".join(format_block(block, "\t\t", brief) for block in self._blocks)
        return (
            "Blockchain: {\n"
            f"\tchain [{len(self._blocks)}]: [\n"
            f"{body}"
            "\t]\n"
            "}\n"
        )


class _Reader:
    """Consumes a byte string front to back, failing on truncation."""

    def __init__(self, raw: bytes, offset: int, path: str | Path) -> None:
        self._raw = raw
        self._offset = offset
        self._path = path

    def take(self, size: int) -> bytes:
        end = self._offset + size
        if end > len(self._raw):
            raise BlockchainError(f"{self._path} is truncated")
        chunk = self._raw[self._offset:end]
        self._offset = end
        return chunk


def _data_text(data: bytes) -> str:
    return data.split(b"\0", 1)[0].decode("utf-8", errors="replace")


def format_block(block: Block | None, indent: str = "", brief: bool = False) -> str:
    """Return a printable description of ``block``, each line prefixed by ``indent``."""
    if block is None:
        return f"{indent}nil\n"

    prev_hash = hex_buffer(block.prev_hash)
    digest = hex_buffer(block.hash)
    text = _data_text(block.data)

    if brief:
        lines = [
            f"{indent}Block: {{",
            f"{indent}\tinfo: {{ {block.index}, {block.difficulty}, "
            f"{block.timestamp}, {block.nonce}, {prev_hash} }},",
            f'{indent}\tdata: {{ "{text}", {len(block.data)} }},',
            f"{indent}\thash: {digest}",
            f"{indent}}}",
        ]
    else:
        lines = [
            f"{indent}Block: {{",
            f"{indent}\tinfo: {{",
            f"{indent}\t\tindex: {block.index},",
            f"{indent}\t\tdifficulty: {block.difficulty},",
            f"{indent}\t\ttimestamp: {block.timestamp},",
            f"{indent}\t\tnonce: {block.nonce},",
            f"{indent}\t\tprev_hash: {prev_hash}",
            f"{indent}\t}},",
            f"{indent}\tdata: {{",
            f'{indent}\t\tbuffer: "{text}",',
            f"{indent}\t\tlen: {len(block.data)}",
            f"{indent}\t}},",
            f"{indent}\thash: {digest}",
            f"{indent}}}",
        ]
    return "\n".join(lines) + "\n"
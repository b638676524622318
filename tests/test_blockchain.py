import struct

import pytest

from hblk.block import Block, block_create, genesis_block, get_endianness
from hblk.blockchain import Blockchain, BlockchainError, format_block

GENESIS_HEX = "c52c26c8b5461639635d8edf2a97d48d0c8e0009c817f2b1d3d7ff2f04515803"


def _grown_chain(count):
    chain = Blockchain()
    for i in range(count):
        block = block_create(chain.tail, f"block {i}".encode())
        block.difficulty = 4
        block.mine()
        chain.add_block(block)
    return chain


def _timed_chain(tail_difficulty, start, end):
    blocks = [genesis_block()]
    for index in range(1, 6):
        blocks.append(Block(index=index, timestamp=start, difficulty=tail_difficulty))
    blocks[-1].timestamp = end
    return Blockchain(blocks)


def test_new_chain_holds_genesis():
    chain = Blockchain()
    assert len(chain) == 1
    assert list(chain) == [genesis_block()]
    assert chain.tail.hash.hex() == GENESIS_HEX


def test_add_block_appends():
    chain = Blockchain()
    block = block_create(chain.tail, b"Hello")
    chain.add_block(block)
    assert len(chain) == 2
    assert chain.tail is block


def test_add_block_rejects_non_block():
    with pytest.raises(BlockchainError):
        Blockchain().add_block(b"not a block")


def test_serialize_round_trip(tmp_path):
    chain = _grown_chain(3)
    path = tmp_path / "save.hblk"
    chain.serialize(path)
    loaded = Blockchain.deserialize(path)
    assert list(loaded) == list(chain)
    blocks = list(loaded)
    assert all(b.is_valid(p) for p, b in zip([None] + blocks, blocks))


def test_serialize_header_and_size(tmp_path):
    chain = _grown_chain(2)
    path = tmp_path / "save.hblk"
    chain.serialize(path)
    raw = path.read_bytes()
    assert raw[:7] == b"HBLK0.1"
    assert raw[7] == get_endianness()
    assert len(raw) == 12 + sum(92 + len(b.data) for b in chain)


def test_deserialize_bad_header(tmp_path):
    path = tmp_path / "bad.hblk"
    path.write_bytes(b"XXXX0.1\x01\x00\x00\x00\x00")
    with pytest.raises(BlockchainError):
        Blockchain.deserialize(path)


def test_deserialize_truncated(tmp_path):
    path = tmp_path / "save.hblk"
    Blockchain().serialize(path)
    path.write_bytes(path.read_bytes()[:-5])
    with pytest.raises(BlockchainError):
        Blockchain.deserialize(path)


def test_deserialize_missing_file(tmp_path):
    with pytest.raises(BlockchainError):
        Blockchain.deserialize(tmp_path / "absent.hblk")


def test_deserialize_big_endian_file(tmp_path):
    genesis = genesis_block()
    raw = b"HBLK0.1\x02" + struct.pack(">I", 1)
    raw += struct.pack(
        ">IIQQ32s",
        genesis.index,
        genesis.difficulty,
        genesis.timestamp,
        genesis.nonce,
        genesis.prev_hash,
    )
    raw += struct.pack(">I", len(genesis.data)) + genesis.data + genesis.hash
    path = tmp_path / "big.hblk"
    path.write_bytes(raw)
    assert list(Blockchain.deserialize(path)) == [genesis]


def test_difficulty_unchanged_off_interval():
    chain = Blockchain([genesis_block(), Block(index=1, difficulty=7)])
    assert chain.difficulty() == 7


def test_difficulty_genesis_only():
    assert Blockchain().difficulty() == 0


@pytest.mark.parametrize(
    "end, expected",
    [(1000, 4), (1004, 3), (1100, 2)],
)
def test_difficulty_adjusts(end, expected):
    assert _timed_chain(3, 1000, end).difficulty() == expected


def test_difficulty_empty_chain():
    with pytest.raises(BlockchainError):
        Blockchain([]).difficulty()


def test_format_genesis_full():
    text = Blockchain().format()
    lines = text.splitlines()
    assert lines[0] == "Blockchain: {"
    assert lines[1] == "\tchain [1]: ["
    assert "\t\t\t\ttimestamp: 1537578000," in lines
    assert '\t\t\t\tbuffer: "Holberton School",' in lines
    assert f"\t\t\thash: {GENESIS_HEX}" in lines
    assert lines[-2:] == ["\t]", "}"]


def test_format_genesis_brief():
    text = format_block(genesis_block(), "\t\t", True)
    assert f"\t\t\tinfo: {{ 0, 0, 1537578000, 0, {'0' * 64} }}," in text
    assert '\t\t\tdata: { "Holberton School", 16 },' in text
    assert text.endswith("\t\t}\n")


def test_format_none_block():
    assert format_block(None, "\t") == "\tnil\n"
# hblk

A small proof-of-work blockchain library in three modules:

- `hblk.crypto`: SHA-256 hashing and secp256k1 keys. It creates key pairs,
  saves them to a folder as `key.pem` and `key_pub.pem` and loads them back,
  converts a public key to and from its 65-byte uncompressed form, and signs
  and verifies with ECDSA.
- `hblk.block`: the `Block` dataclass (index, difficulty, timestamp, nonce,
  previous hash, data, hash), the genesis block, hashing, validation and
  proof-of-work mining.
- `hblk.blockchain`: the `Blockchain` class. It adjusts difficulty, writes and
  reads a binary chain file, and formats a readable view of the chain.

## Installation

```
pip install .
```

## Keys and signatures

```python
from hblk.crypto import (
    ec_create, ec_to_pub, ec_from_pub, ec_sign, ec_verify,
    ec_save, ec_load, hex_buffer, sha256,
)

key = ec_create()
pub = ec_to_pub(key)                 # 65 bytes, starting with 0x04
print(hex_buffer(pub))

digest = sha256(b"Holberton")
sig = ec_sign(key, digest)           # DER-encoded, at most 72 bytes
assert ec_verify(ec_from_pub(pub), digest, sig)

ec_save(key, "alice")                # writes alice/key.pem and alice/key_pub.pem
again = ec_load("alice")
assert ec_to_pub(again) == pub
```

`ec_sign` and `ec_verify` treat the message as an already computed digest:
only its first 32 bytes are used, and a shorter message is read as a
big-endian number. Hash longer messages with `sha256` first.

`ec_verify` accepts a private or public key and returns `False` for a bad or
empty signature. Other failures (a wrong-sized or invalid public key, a
missing folder, unreadable or malformed key files, a key not on secp256k1)
raise `hblk.crypto.CryptoError`.

## Blocks

```python
from hblk.block import genesis_block, block_create, is_genesis, hash_matches_difficulty

genesis = genesis_block()
assert is_genesis(genesis) and genesis.is_valid(None)

block = block_create(genesis, b"Holberton")   # data is cut to 1024 bytes
block.difficulty = 8
block.mine()                                  # raises the nonce until the hash fits
assert hash_matches_difficulty(block.hash, 8)
assert block.is_valid(genesis)
```

A block's hash is the SHA-256 of its 56-byte little-endian info header
(`Block.info_bytes()`) followed by its data; `Block.compute_hash()` returns it.
`Block.is_valid(prev_block)` checks the index sequence, the stored hashes of
both blocks, the link to the previous hash and the difficulty. The module also
has `get_endianness()` (1 for a little-endian host, 2 for big-endian) and
`swap_endian(data)`.

## Chains

```python
from hblk.block import block_create
from hblk.blockchain import Blockchain

chain = Blockchain()                 # starts with the genesis block
block = block_create(chain.tail, b"Holberton")
block.difficulty = chain.difficulty()
block.mine()
chain.add_block(block)

chain.serialize("save.hblk")
loaded = Blockchain.deserialize("save.hblk")
print(loaded.format(brief=True))
```

`Blockchain` supports `len()`, iteration and indexing. `difficulty()` returns
the difficulty for the next block: every 5 blocks it compares the time taken
against one second per block, raising the difficulty by one if blocks came
more than twice as fast and lowering it by one if they came more than twice as
slow. `format_block(block, indent, brief)` formats a single block.

### File format

A chain file starts with `HBLK0.1`, one byte giving the byte order (1 little,
2 big), and the block count as a 32-bit integer. Each block follows as its
56-byte info header, a 32-bit data length, the data and the 32-byte hash.
`serialize` writes in the host's byte order; `deserialize` honours the marker
in the file. Both raise `hblk.blockchain.BlockchainError` on failure, including
a wrong header, a truncated file or a block with more than 1024 bytes of data.

## What it does not do

There is no command-line program, no transactions, no wallet beyond the key
functions above, and no networking: chains live in memory or in a single file.

## Tests

```
pip install .[test]
pytest
```
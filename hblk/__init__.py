"""A small proof-of-work blockchain with secp256k1 keys and a binary chain format."""

__version__ = "0.2.0"
__all__ = ["crypto", "block", "blockchain"]
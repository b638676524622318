"""Hashing and secp256k1 key handling: creation, storage, signing, verification."""

from __future__ import annotations

import hashlib
from pathlib import Path
from typing import Union

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.asymmetric.utils import Prehashed

EC_CURVE = ec.SECP256K1
EC_PUB_LEN = 65
SIG_MAX_LEN = 72
SHA256_DIGEST_LENGTH = 32
PRI_FILENAME = "key.pem"
PUB_FILENAME = "key_pub.pem"

ECKey = Union[ec.EllipticCurvePrivateKey, ec.EllipticCurvePublicKey]


class CryptoError(Exception):
    """Raised when a key or signature operation cannot be carried out."""


def _public(key: ECKey) -> ec.EllipticCurvePublicKey:
    if isinstance(key, ec.EllipticCurvePrivateKey):
        return key.public_key()
    if isinstance(key, ec.EllipticCurvePublicKey):
        return key
    raise CryptoError(f"not an EC key: {type(key).__name__}")


def _as_digest(msg: bytes) -> bytes:
    """Fit a message to the curve order size the way ECDSA treats raw digests.

    Longer input keeps its leftmost bytes; shorter input is read as a
    big-endian integer, which left-padding with zeros preserves.
    """
    return bytes(msg[:SHA256_DIGEST_LENGTH]).rjust(SHA256_DIGEST_LENGTH, b"\0")


def sha256(data: bytes) -> bytes:
    """Return the SHA-256 digest of ``data``."""
    return hashlib.sha256(bytes(data)).digest()


def ec_create() -> ec.EllipticCurvePrivateKey:
    """Generate a new secp256k1 key pair."""
    return ec.generate_private_key(EC_CURVE())


def ec_to_pub(key: ECKey) -> bytes:
    """Return the uncompressed public point of ``key`` (65 bytes)."""
    return _public(key).public_bytes(
        serialization.Encoding.X962,
        serialization.PublicFormat.UncompressedPoint,
    )


def ec_from_pub(pub: bytes) -> ec.EllipticCurvePublicKey:
    """Build a secp256k1 public key from its 65-byte uncompressed encoding."""
    if pub is None or len(pub) != EC_PUB_LEN:
        raise CryptoError(f"public key must be {EC_PUB_LEN} bytes")
    try:
        return ec.EllipticCurvePublicKey.from_encoded_point(EC_CURVE(), bytes(pub))
    except ValueError as exc:
        raise CryptoError(f"invalid public key: {exc}") from exc


def ec_save(key: ec.EllipticCurvePrivateKey, folder: str | Path) -> None:
    """Write ``key`` as PEM files ``key.pem`` and ``key_pub.pem`` in ``folder``."""
    if not isinstance(key, ec.EllipticCurvePrivateKey):
        raise CryptoError("a private key is required to save a key pair")
    directory = Path(folder)
    try:
        directory.mkdir(mode=0o755, parents=True, exist_ok=True)
    except OSError as exc:
        raise CryptoError(f"cannot create folder {directory}: {exc}") from exc

    pub_pem = key.public_key().public_bytes(
        serialization.Encoding.PEM,
        serialization.PublicFormat.SubjectPublicKeyInfo,
    )
    priv_pem = key.private_bytes(
        serialization.Encoding.PEM,
        serialization.PrivateFormat.TraditionalOpenSSL,
        serialization.NoEncryption(),
    )
    try:
        (directory / PUB_FILENAME).write_bytes(pub_pem)
        (directory / PRI_FILENAME).write_bytes(priv_pem)
    except OSError as exc:
        raise CryptoError(f"cannot write key files in {directory}: {exc}") from exc


def ec_load(folder: str | Path) -> ec.EllipticCurvePrivateKey:
    """Load the key pair stored in ``folder`` by :func:`ec_save`."""
    directory = Path(folder)
    if not directory.is_dir():
        raise CryptoError(f"not a directory: {directory}")
    try:
        pub_pem = (directory / PUB_FILENAME).read_bytes()
        priv_pem = (directory / PRI_FILENAME).read_bytes()
    except OSError as exc:
        raise CryptoError(f"cannot read key files in {directory}: {exc}") from exc

    try:
        public_key = serialization.load_pem_public_key(pub_pem)
        private_key = serialization.load_pem_private_key(priv_pem, password=None)
    except (ValueError, TypeError) as exc:
        raise CryptoError(f"malformed key file in {directory}: {exc}") from exc

    if not isinstance(public_key, ec.EllipticCurvePublicKey) or not isinstance(
        private_key, ec.EllipticCurvePrivateKey
    ):
        raise CryptoError(f"key files in {directory} do not hold EC keys")
    if not isinstance(private_key.curve, EC_CURVE):
        raise CryptoError(f"key in {directory} is not on {EC_CURVE.name}")
    return private_key


def ec_sign(key: ec.EllipticCurvePrivateKey, msg: bytes) -> bytes:
    """Sign ``msg`` (taken as a digest) and return a DER-encoded signature."""
    if not isinstance(key, ec.EllipticCurvePrivateKey):
        raise CryptoError("a private key is required to sign")
    if msg is None:
        raise CryptoError("no message to sign")
    signature = key.sign(_as_digest(msg), ec.ECDSA(Prehashed(hashes.SHA256())))
    if len(signature) > SIG_MAX_LEN:
        raise CryptoError("signature exceeds maximum length")
    return signature


def ec_verify(key: ECKey, msg: bytes, sig: bytes) -> bool:
    """Return True if ``sig`` is a valid signature of ``msg`` under ``key``."""
    if msg is None or not sig:
        return False
    try:
        _public(key).verify(
            bytes(sig), _as_digest(msg), ec.ECDSA(Prehashed(hashes.SHA256()))
        )
    except InvalidSignature:
        return False
    return True


def hex_buffer(buf: bytes | None) -> str:
    """Return ``buf`` as lower-case hexadecimal, two digits per byte."""
    if not buf:
        return ""
    return bytes(buf).hex()
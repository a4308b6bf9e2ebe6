"""Nostr key handling (NIP-19 bech32 and BIP-340 x-only keys)."""

import re
from dataclasses import dataclass

from bech32 import bech32_decode, bech32_encode, convertbits
from coincurve import PrivateKey, PublicKeyXOnly

from anonymousface.errors import SigningError

_HEX_KEY_RE = re.compile(r"^[0-9a-fA-F]{64}$")


@dataclass(frozen=True)
class KeyPair:
    """Secp256k1 key pair; ``public_key`` is the 32-byte x-only key as hex."""

    secret: bytes
    public_key: str

    @property
    def npub(self) -> str:
        return encode_bech32("npub", bytes.fromhex(self.public_key))


def decode_bech32(value: str, expected_hrp: str) -> bytes:
    """Decode a NIP-19 bech32 string such as ``nsec1...`` into raw bytes."""
    hrp, data = bech32_decode(value)
    if hrp is None or data is None:
        raise SigningError(f"invalid bech32 string for {expected_hrp}")
    if hrp != expected_hrp:
        raise SigningError(f"expected {expected_hrp} prefix, got {hrp}")
    decoded = convertbits(data, 5, 8, False)
    if decoded is None:
        raise SigningError(f"invalid {expected_hrp} payload")
    return bytes(decoded)


def encode_bech32(hrp: str, data: bytes) -> str:
    return bech32_encode(hrp, convertbits(data, 8, 5))


def parse_secret_key(value: str) -> bytes:
    """Accept an ``nsec`` bech32 string or a 64-char hex secret."""
    value = value.strip()
    if not value:
        raise SigningError("signing secret is empty")
    if value.startswith("nsec1"):
        secret = decode_bech32(value, "nsec")
    elif _HEX_KEY_RE.match(value):
        secret = bytes.fromhex(value)
    else:
        raise SigningError("signing secret must be an nsec or 64 hex characters")
    if len(secret) != 32:
        raise SigningError(f"signing secret must be 32 bytes, got {len(secret)}")
    return secret


def derive_keys(value: str) -> KeyPair:
    """Derive the key pair used to sign replies."""
    secret = parse_secret_key(value)
    try:
        public_key = PublicKeyXOnly.from_secret(secret).format().hex()
    except ValueError as exc:
        raise SigningError(f"invalid signing secret: {exc}") from exc
    return KeyPair(secret=secret, public_key=public_key)


def sign_digest(secret: bytes, digest: bytes) -> str:
    """Schnorr-sign a 32-byte digest, returning the 64-byte signature as hex."""
    try:
        return PrivateKey(secret).sign_schnorr(digest).hex()
    except ValueError as exc:
        raise SigningError(f"cannot sign event: {exc}") from exc


def verify_digest(public_key: str, digest: bytes, signature: str) -> bool:
    """Check a Schnorr signature against an x-only public key."""
    try:
        key = PublicKeyXOnly(bytes.fromhex(public_key))
        return key.verify(bytes.fromhex(signature), digest)
    except ValueError:
        return False

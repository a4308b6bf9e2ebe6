"""Nostr events: parsing, canonical encoding, signing and verification (NIP-01)."""

import hashlib
import json
import re
from dataclasses import dataclass, field

from anonymousface.errors import ParseError, SigningError
from anonymousface.nostr.keys import KeyPair, sign_digest, verify_digest

_HEX64_RE = re.compile(r"^[0-9a-f]{64}$")
_HEX128_RE = re.compile(r"^[0-9a-f]{128}$")


@dataclass
class Event:
    """A single Nostr event."""

    pubkey: str
    created_at: int
    kind: int
    tags: list[list[str]] = field(default_factory=list)
    content: str = ""
    id: str = ""
    sig: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> "Event":
        """Build an event from decoded JSON, checking field types."""
        if not isinstance(data, dict):
            raise ParseError("event must be a JSON object")

        def require(name: str, kind: type):
            if name not in data:
                raise ParseError(f"event is missing '{name}'")
            value = data[name]
            if not isinstance(value, kind) or (kind is int and isinstance(value, bool)):
                raise ParseError(f"event field '{name}' has the wrong type")
            return value

        tags = data.get("tags", [])
        if not isinstance(tags, list) or not all(
            isinstance(tag, list) and all(isinstance(item, str) for item in tag) for tag in tags
        ):
            raise ParseError("event tags must be a list of string lists")

        return cls(
            pubkey=require("pubkey", str).lower(),
            created_at=require("created_at", int),
            kind=require("kind", int),
            tags=tags,
            content=require("content", str),
            id=str(data.get("id", "")).lower(),
            sig=str(data.get("sig", "")).lower(),
        )

    @classmethod
    def from_json(cls, raw: bytes | str) -> "Event":
        try:
            data = json.loads(raw)
        except (UnicodeDecodeError, json.JSONDecodeError, RecursionError) as exc:
            raise ParseError(f"invalid JSON: {exc}") from exc
        return cls.from_dict(data)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "pubkey": self.pubkey,
            "created_at": self.created_at,
            "kind": self.kind,
            "tags": self.tags,
            "content": self.content,
            "sig": self.sig,
        }

    def serialize(self) -> bytes:
        """Canonical encoding: ``[0, pubkey, created_at, kind, tags, content]``."""
        payload = [0, self.pubkey, self.created_at, self.kind, self.tags, self.content]
        return json.dumps(payload, separators=(",", ":"), ensure_ascii=False).encode("utf-8")

    def compute_id(self) -> str:
        return hashlib.sha256(self.serialize()).hexdigest()

    def has_tag(self, key: str, value: str) -> bool:
        """True when some tag is exactly ``[key, value, ...]``."""
        return any(len(tag) >= 2 and tag[0] == key and tag[1] == value for tag in self.tags)

    def sign(self, keys: KeyPair) -> None:
        """Set pubkey, id and sig from ``keys`` over the current fields."""
        self.pubkey = keys.public_key
        self.id = self.compute_id()
        self.sig = sign_digest(keys.secret, bytes.fromhex(self.id))
        if not self.check_signature():
            raise SigningError("produced signature does not verify")

    def check_signature(self) -> bool:
        """Verify id and signature against the canonical encoding."""
        if not (_HEX64_RE.match(self.pubkey) and _HEX64_RE.match(self.id)):
            return False
        if not _HEX128_RE.match(self.sig):
            return False
        if self.id != self.compute_id():
            return False
        return verify_digest(self.pubkey, bytes.fromhex(self.id), self.sig)

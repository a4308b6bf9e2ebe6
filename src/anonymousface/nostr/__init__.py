"""Nostr event model and signing."""

from anonymousface.nostr.event import Event
from anonymousface.nostr.keys import KeyPair, derive_keys

__all__ = ["Event", "KeyPair", "derive_keys"]

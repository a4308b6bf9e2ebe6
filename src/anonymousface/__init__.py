"""Mask faces in images posted to Nostr and reply with a signed event."""

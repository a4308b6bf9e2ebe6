"""Turn a tagged inbound event into a signed reply pointing at the masked image."""

import hashlib
import logging
import re
import time
from enum import Enum

from anonymousface.context import AppContext
from anonymousface.errors import AnonymousFaceError, ParseError, ValidationError
from anonymousface.imaging.codec import OUTPUT_EXTENSION
from anonymousface.nostr.event import Event
from anonymousface.nostr.keys import derive_keys
from anonymousface.pipeline import anonymize_bytes
from anonymousface.remote import Fetcher, Publisher

logger = logging.getLogger(__name__)

URL_RE = re.compile(r"https?://[-A-Za-z0-9+&@#/%?=~_|!:,.;()*]+")


class Stage(str, Enum):
    """Linear states of one request; any transition may fail."""

    RECEIVED = "received"
    VALIDATED = "validated"
    TARGET_EXTRACTED = "target_extracted"
    IMAGE_FETCHED = "image_fetched"
    PROCESSED = "processed"
    PUBLISHED = "published"
    SIGNED = "signed"
    EMITTED = "emitted"


def extract_url(content: str) -> str | None:
    """Return the first http(s) URL in ``content``."""
    match = URL_RE.search(content)
    return match.group(0) if match else None


def normalize_location(location: str) -> str:
    """Force https and append the output file extension."""
    if location.startswith("http://"):
        location = "https://" + location[len("http://") :]
    return location + OUTPUT_EXTENSION


def build_reply(inbound: Event, content: str, secret: str, now: int | None = None) -> Event:
    """Create and sign the reply to ``inbound``."""
    keys = derive_keys(secret)
    reply = Event(
        pubkey=keys.public_key,
        created_at=int(time.time()) if now is None else now,
        kind=inbound.kind,
        tags=[["e", inbound.pubkey, "", "reply"]],
        content=content,
    )
    reply.sign(keys)
    return reply


class Workflow:
    """One request's path from inbound JSON to a signed reply.

    Create one per request. ``run`` is synchronous and shares only the
    read-only ``context``; ``stage`` is the last state reached.
    """

    def __init__(self, context: AppContext, fetcher: Fetcher, publisher: Publisher) -> None:
        self.context = context
        self.fetcher = fetcher
        self.publisher = publisher
        self.stage = Stage.RECEIVED

    def run(self, body: bytes | str) -> Event:
        """Process one inbound event.

        Raises:
            ParseError, ValidationError, FetchError, DecodeError, PublishError,
            SigningError: The stage that failed; nothing is emitted.
        """
        try:
            inbound = self._validate(body)
            self._advance(Stage.VALIDATED)

            url = self._extract_target(inbound)
            self._advance(Stage.TARGET_EXTRACTED)

            data = self.fetcher(url)
            self._advance(Stage.IMAGE_FETCHED)

            result = anonymize_bytes(data, self.context)
            self._advance(Stage.PROCESSED)
            logger.debug("Masked %d face(s) in %s", len(result.faces), url)

            digest = hashlib.sha256(result.data).hexdigest()
            location = normalize_location(self.publisher(result.data, digest))
            self._advance(Stage.PUBLISHED)

            reply = build_reply(inbound, location, self.context.secret)
            self._advance(Stage.SIGNED)
        except AnonymousFaceError as exc:
            logger.warning("Request failed after %s: %s", self.stage.value, exc)
            raise

        self._advance(Stage.EMITTED)
        logger.info("Replied to %s with %s (%d face(s))", inbound.id, location, len(result.faces))
        return reply

    def _advance(self, stage: Stage) -> None:
        logger.debug("%s -> %s", self.stage.value, stage.value)
        self.stage = stage

    def _validate(self, body: bytes | str) -> Event:
        inbound = Event.from_json(body)
        if self.context.verify_signatures and not inbound.check_signature():
            raise ParseError("event id or signature is invalid")
        if not inbound.has_tag("t", self.context.trigger_tag):
            raise ValidationError(f"event is not tagged '{self.context.trigger_tag}'")
        return inbound

    def _extract_target(self, inbound: Event) -> str:
        url = extract_url(inbound.content)
        if url is None:
            raise ValidationError("no URL found in event content")
        return url


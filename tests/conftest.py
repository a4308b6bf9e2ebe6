"""Shared test fixtures."""

import json
from io import BytesIO

import pytest
from PIL import Image

from anonymousface.context import AppContext
from anonymousface.models import DetectionCandidate
from anonymousface.nostr.event import Event
from anonymousface.nostr.keys import derive_keys

# Arbitrary valid secp256k1 secrets
BOT_SECRET = "11" * 32
AUTHOR_SECRET = "22" * 32

MASK_COLOR = (255, 0, 0, 255)


class FakeCascade:
    """Stands in for FaceCascade and returns fixed candidates."""

    def __init__(self, candidates: list[DetectionCandidate] | None = None) -> None:
        self.candidates = candidates or []
        self.shapes: list[tuple[int, ...]] = []

    def run(self, gray, params) -> list[DetectionCandidate]:
        self.shapes.append(gray.shape)
        return list(self.candidates)


class FakeFetcher:
    """Returns canned bytes (or raises) and records requested URLs."""

    def __init__(self, data: bytes = b"", error: Exception | None = None) -> None:
        self.data = data
        self.error = error
        self.calls: list[str] = []

    def __call__(self, url: str) -> bytes:
        self.calls.append(url)
        if self.error is not None:
            raise self.error
        return self.data


class FakePublisher:
    """Records uploads and returns a fixed location."""

    def __init__(self, location: str = "http://void.cat/d/Abc123", error: Exception | None = None):
        self.location = location
        self.error = error
        self.calls: list[tuple[bytes, str]] = []

    def __call__(self, data: bytes, digest: str) -> str:
        self.calls.append((data, digest))
        if self.error is not None:
            raise self.error
        return self.location


def make_image_bytes(
    width: int = 200,
    height: int = 200,
    color: tuple[int, int, int] = (255, 255, 255),
    fmt: str = "PNG",
) -> bytes:
    """Encode a solid-color image."""
    buf = BytesIO()
    Image.new("RGB", (width, height), color).save(buf, format=fmt)
    return buf.getvalue()


def make_event(
    content: str = "check this out https://example.com/a.jpg #anonymousface",
    tags: list[list[str]] | None = None,
    secret: str = AUTHOR_SECRET,
    kind: int = 1,
) -> Event:
    """Helper to create a signed inbound event."""
    event = Event(
        pubkey="",
        created_at=1700000000,
        kind=kind,
        tags=[["t", "anonymousface"]] if tags is None else tags,
        content=content,
    )
    event.sign(derive_keys(secret))
    return event


def event_body(event: Event) -> bytes:
    return json.dumps(event.to_dict()).encode("utf-8")


@pytest.fixture
def mask() -> Image.Image:
    """Opaque solid-red 10x10 mask."""
    return Image.new("RGBA", (10, 10), MASK_COLOR)


@pytest.fixture
def face_image_bytes() -> bytes:
    """A white 200x200 PNG."""
    return make_image_bytes()


@pytest.fixture
def one_face_cascade() -> FakeCascade:
    """One face at center (100, 100) with scale 40."""
    return FakeCascade([DetectionCandidate(row=100, col=100, scale=40, confidence=12.0)])


@pytest.fixture
def context(mask, one_face_cascade) -> AppContext:
    return AppContext(
        cascade=one_face_cascade,
        mask=mask,
        secret=BOT_SECRET,
        usage="POST a tagged event here.\n",
    )

"""Tests for the inbound-event-to-reply workflow."""

import dataclasses
import hashlib
import json

import pytest
from conftest import (
    AUTHOR_SECRET,
    BOT_SECRET,
    MASK_COLOR,
    FakeCascade,
    FakeFetcher,
    FakePublisher,
    event_body,
    make_event,
)

from anonymousface.errors import (
    DecodeError,
    FetchError,
    ParseError,
    PublishError,
    ValidationError,
)
from anonymousface.imaging.codec import decode_image, encode_png
from anonymousface.nostr.keys import derive_keys
from anonymousface.workflow import (
    Stage,
    Workflow,
    build_reply,
    extract_url,
    normalize_location,
)


def test_extract_url_first_match():
    content = "look http://a.example/x.png and https://b.example/y.jpg"
    assert extract_url(content) == "http://a.example/x.png"


def test_extract_url_stops_at_whitespace():
    content = "check this out https://example.com/a.jpg #anonymousface"
    assert extract_url(content) == "https://example.com/a.jpg"


def test_extract_url_permissive_grammar():
    assert extract_url("(https://x.test/i.jpg?s=1&t=2)") == "https://x.test/i.jpg?s=1&t=2)"


def test_extract_url_none():
    assert extract_url("no links here, just ftp://nope") is None


def test_normalize_location():
    assert normalize_location("http://void.cat/d/Abc") == "https://void.cat/d/Abc.png"
    assert normalize_location("https://void.cat/d/Abc") == "https://void.cat/d/Abc.png"


def test_build_reply_is_signed_for_exact_content():
    inbound = make_event()
    reply = build_reply(inbound, "https://void.cat/d/Abc.png", BOT_SECRET, now=1700000100)
    assert reply.pubkey == derive_keys(BOT_SECRET).public_key
    assert reply.created_at == 1700000100
    assert reply.content == "https://void.cat/d/Abc.png"
    assert reply.check_signature()


def test_scenario_single_face(context, face_image_bytes):
    fetcher = FakeFetcher(face_image_bytes)
    publisher = FakePublisher("http://void.cat/d/Abc123")
    inbound = make_event()
    workflow = Workflow(context, fetcher, publisher)

    reply = workflow.run(event_body(inbound))

    assert workflow.stage is Stage.EMITTED
    assert fetcher.calls == ["https://example.com/a.jpg"]
    assert reply.content == "https://void.cat/d/Abc123.png"
    assert reply.tags == [["e", inbound.pubkey, "", "reply"]]
    assert reply.kind == inbound.kind
    assert reply.pubkey == derive_keys(BOT_SECRET).public_key
    assert reply.check_signature()

    data, digest = publisher.calls[0]
    assert digest == hashlib.sha256(data).hexdigest()
    published = decode_image(data).image
    assert published.size == (200, 200)
    assert published.getpixel((100, 100)) == MASK_COLOR
    assert published.getpixel((10, 10)) == (255, 255, 255, 255)


def test_scenario_unsigned_event_when_verification_disabled(context, face_image_bytes):
    context = dataclasses.replace(context, verify_signatures=False)
    author = derive_keys(AUTHOR_SECRET).public_key
    body = json.dumps(
        {
            "pubkey": author,
            "created_at": 1700000000,
            "kind": 1,
            "content": "check this out https://example.com/a.jpg #anonymousface",
            "tags": [["t", "anonymousface"]],
        }
    )

    reply = Workflow(context, FakeFetcher(face_image_bytes), FakePublisher()).run(body)

    assert reply.content.endswith(".png")
    assert reply.tags == [["e", author, "", "reply"]]


def test_zero_faces_publishes_plain_roundtrip(context, face_image_bytes):
    context = dataclasses.replace(context, cascade=FakeCascade([]))
    publisher = FakePublisher()

    Workflow(context, FakeFetcher(face_image_bytes), publisher).run(event_body(make_event()))

    data, _ = publisher.calls[0]
    assert data == encode_png(decode_image(face_image_bytes))


def test_missing_trigger_tag_rejected_before_fetch(context, face_image_bytes):
    fetcher = FakeFetcher(face_image_bytes)
    workflow = Workflow(context, fetcher, FakePublisher())

    with pytest.raises(ValidationError):
        workflow.run(event_body(make_event(tags=[["t", "cats"]])))

    assert fetcher.calls == []
    assert workflow.stage is Stage.RECEIVED


def test_missing_url_rejected_before_fetch(context, face_image_bytes):
    fetcher = FakeFetcher(face_image_bytes)
    workflow = Workflow(context, fetcher, FakePublisher())

    with pytest.raises(ValidationError):
        workflow.run(event_body(make_event(content="no link here #anonymousface")))

    assert fetcher.calls == []
    assert workflow.stage is Stage.VALIDATED


def test_bad_signature_rejected_before_fetch(context, face_image_bytes):
    fetcher = FakeFetcher(face_image_bytes)
    inbound = make_event()
    inbound.content = "https://evil.example/other.jpg #anonymousface"

    with pytest.raises(ParseError):
        Workflow(context, fetcher, FakePublisher()).run(event_body(inbound))

    assert fetcher.calls == []


def test_malformed_body(context):
    with pytest.raises(ParseError):
        Workflow(context, FakeFetcher(), FakePublisher()).run(b"\xff\xfe not json")


def test_fetch_failure_is_terminal(context):
    publisher = FakePublisher()
    fetcher = FakeFetcher(error=FetchError("fetching failed"))
    workflow = Workflow(context, fetcher, publisher)

    with pytest.raises(FetchError):
        workflow.run(event_body(make_event()))

    assert publisher.calls == []
    assert workflow.stage is Stage.TARGET_EXTRACTED


def test_corrupt_image_is_not_published(context):
    publisher = FakePublisher()
    workflow = Workflow(context, FakeFetcher(b"\x00\x01corrupt"), publisher)

    with pytest.raises(DecodeError):
        workflow.run(event_body(make_event()))

    assert publisher.calls == []
    assert workflow.stage is Stage.IMAGE_FETCHED


def test_publish_failure_leaves_no_reply(context, face_image_bytes):
    publisher = FakePublisher(error=PublishError("upload returned 503"))
    workflow = Workflow(context, FakeFetcher(face_image_bytes), publisher)

    with pytest.raises(PublishError):
        workflow.run(event_body(make_event()))

    assert len(publisher.calls) == 1
    assert workflow.stage is Stage.PROCESSED

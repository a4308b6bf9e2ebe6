"""Post a signed, tagged test event to a running anonymousface server."""

import argparse
import json
import time

import httpx

from anonymousface.config import NSEC, TRIGGER_TAG
from anonymousface.nostr.event import Event
from anonymousface.nostr.keys import derive_keys


def main() -> None:
    parser = argparse.ArgumentParser(description="Send an image URL to anonymousface")
    parser.add_argument("image_url", help="URL of the image to anonymize")
    parser.add_argument("--server", default="http://localhost:8080/", help="Server URL")
    parser.add_argument(
        "--nsec",
        default=None,
        help="Author secret, nsec or hex (default: ANONYMOUSFACE_NSEC from .env)",
    )
    args = parser.parse_args()

    secret = args.nsec or NSEC
    if not secret:
        print("Error: pass --nsec or set ANONYMOUSFACE_NSEC in .env")
        return

    event = Event(
        pubkey="",
        created_at=int(time.time()),
        kind=1,
        tags=[["t", TRIGGER_TAG]],
        content=f"{args.image_url} #{TRIGGER_TAG}",
    )
    event.sign(derive_keys(secret))

    resp = httpx.post(args.server, json=event.to_dict(), timeout=None)
    if resp.status_code != 200:
        print(f"Error {resp.status_code}: {resp.text}")
        return

    reply = Event.from_dict(resp.json())
    print(json.dumps(reply.to_dict(), indent=2, ensure_ascii=False))
    print(f"\nSignature valid: {reply.check_signature()}")
    print(f"Masked image: {reply.content}")


if __name__ == "__main__":
    main()

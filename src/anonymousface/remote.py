"""HTTP collaborators: fetch the target image and publish the result."""

import logging
from typing import Protocol

import httpx

from anonymousface.config import HTTP_TIMEOUT, UPLOAD_URL
from anonymousface.errors import DecodeError, FetchError, PublishError
from anonymousface.imaging.codec import OUTPUT_CONTENT_TYPE

logger = logging.getLogger(__name__)


class Fetcher(Protocol):
    def __call__(self, url: str) -> bytes: ...


class Publisher(Protocol):
    def __call__(self, data: bytes, digest: str) -> str: ...


class ImageFetcher:
    """Download an image with a single GET (no retries)."""

    def __init__(
        self,
        timeout: float | None = HTTP_TIMEOUT,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.timeout = timeout
        self.transport = transport

    def __call__(self, url: str) -> bytes:
        try:
            with httpx.Client(
                timeout=self.timeout, transport=self.transport, follow_redirects=True
            ) as client:
                resp = client.get(url)
                resp.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise FetchError(f"fetching {url} returned {exc.response.status_code}") from exc
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise FetchError(f"fetching {url} failed: {exc}") from exc

        content_type = resp.headers.get("content-type", "")
        # A missing content type is left to the decoder
        if content_type and not content_type.lower().startswith("image/"):
            raise DecodeError(f"{url} is not an image (content type {content_type})")

        logger.debug("Fetched %s (%d bytes)", url, len(resp.content))
        return resp.content


class VoidCatPublisher:
    """Upload bytes to a void.cat compatible endpoint and return the file URL."""

    def __init__(
        self,
        upload_url: str = UPLOAD_URL,
        timeout: float | None = HTTP_TIMEOUT,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.upload_url = upload_url
        self.timeout = timeout
        self.transport = transport

    def __call__(self, data: bytes, digest: str) -> str:
        headers = {
            "V-Content-Type": OUTPUT_CONTENT_TYPE,
            "V-Full-Digest": digest,
            "V-Filename": "image.png",
        }
        try:
            with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
                resp = client.post(self.upload_url, content=data, headers=headers)
                resp.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise PublishError(f"upload returned {exc.response.status_code}") from exc
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise PublishError(f"upload failed: {exc}") from exc

        location = resp.text.strip()
        if not location:
            raise PublishError("upload returned an empty location")
        return location

"""Decode, detect, mask and re-encode a single image."""

import logging
from dataclasses import dataclass

from anonymousface.context import AppContext
from anonymousface.detection.cluster import cluster_detections
from anonymousface.imaging.codec import decode_image, encode_png
from anonymousface.imaging.compositor import MaskCompositor
from anonymousface.models import DetectionCluster

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AnonymizedImage:
    """Encoded output plus the faces that were masked."""

    data: bytes
    faces: list[DetectionCluster]
    width: int
    height: int


def anonymize_bytes(data: bytes, context: AppContext) -> AnonymizedImage:
    """Run the whole image pipeline with the singletons held by ``context``.

    Raises:
        DecodeError: ``data`` is not a supported image.
    """
    image = decode_image(data)
    candidates = context.cascade.run(image.grayscale(), context.cascade_params)
    faces = cluster_detections(candidates, context.iou_threshold)
    logger.debug(
        "%dx%d image: %d candidates, %d faces",
        image.width,
        image.height,
        len(candidates),
        len(faces),
    )
    masked = MaskCompositor(context.mask).composite(image, faces)
    return AnonymizedImage(
        data=encode_png(masked),
        faces=faces,
        width=image.width,
        height=image.height,
    )

"""Blend the mask overlay over detected faces."""

from collections.abc import Iterable
from pathlib import Path

from PIL import Image

from anonymousface.errors import AssetError
from anonymousface.imaging.codec import PixelImage
from anonymousface.models import DetectionCluster


def load_mask(path: str | Path) -> Image.Image:
    """Load the overlay raster as RGBA."""
    try:
        with Image.open(path) as img:
            img.load()
            return img.convert("RGBA")
    except (OSError, SyntaxError) as exc:
        raise AssetError(f"cannot decode mask {path}: {exc}") from exc


def mask_anchor(cluster: DetectionCluster) -> tuple[int, int]:
    """Top-left corner of the square the mask is drawn into."""
    return cluster.col - cluster.scale // 2, cluster.row - cluster.scale // 2


def clip_region(
    cluster: DetectionCluster, width: int, height: int
) -> tuple[int, int, int, int] | None:
    """Clip the cluster's square to the canvas.

    Returns:
        (left, top, right, bottom) in canvas coordinates, or None when the
        square does not touch the canvas at all.
    """
    if cluster.scale <= 0:
        return None
    x, y = mask_anchor(cluster)
    left, top = max(x, 0), max(y, 0)
    right, bottom = min(x + cluster.scale, width), min(y + cluster.scale, height)
    if left >= right or top >= bottom:
        return None
    return left, top, right, bottom


class MaskCompositor:
    """Scale a fixed RGBA mask onto every detected face."""

    def __init__(self, mask: Image.Image) -> None:
        self.mask = mask if mask.mode == "RGBA" else mask.convert("RGBA")

    def composite(self, image: PixelImage, clusters: Iterable[DetectionCluster]) -> PixelImage:
        """Return a copy of ``image`` with the mask drawn over each cluster.

        Later clusters are drawn on top of earlier ones. Squares that run off
        the canvas are clipped.
        """
        canvas = image.image.copy()
        for cluster in clusters:
            region = clip_region(cluster, canvas.width, canvas.height)
            if region is None:
                continue
            left, top, right, bottom = region
            x, y = mask_anchor(cluster)

            overlay = self.mask.resize(
                (cluster.scale, cluster.scale), Image.Resampling.NEAREST
            )
            overlay = overlay.crop((left - x, top - y, right - x, bottom - y))
            canvas.alpha_composite(overlay, dest=(left, top))
        return PixelImage(canvas)

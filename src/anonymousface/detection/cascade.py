"""OpenCV cascade wrapper for face detection."""

from pathlib import Path

import cv2
import numpy as np

from anonymousface.errors import AssetError
from anonymousface.models import CascadeParams, DetectionCandidate


class FaceCascade:
    """Detect frontal faces with a trained cascade classifier.

    The classifier is loaded once and only read afterwards, so a single
    instance is shared by all requests.
    """

    def __init__(self, cascade_path: str | Path) -> None:
        path = Path(cascade_path)
        if not path.is_file():
            raise AssetError(f"cascade file not found: {path}")
        self.classifier = cv2.CascadeClassifier(str(path))
        if self.classifier.empty():
            raise AssetError(f"cannot unpack cascade: {path}")
        self.path = path

    def run(self, gray: np.ndarray, params: CascadeParams) -> list[DetectionCandidate]:
        """Run the cascade over a grayscale buffer and return raw candidates.

        Args:
            gray: 2-D uint8 array of shape (rows, cols).
            params: Window sizes, pyramid growth and quality threshold.

        Returns:
            Ungrouped candidates, one per accepted window. Neighbouring windows
            over the same face are all reported; merge them with
            ``cluster_detections``.
        """
        params.validate()
        if gray.ndim != 2:
            raise ValueError(f"expected a 2-D grayscale buffer, got shape {gray.shape}")

        rows, cols = gray.shape
        if min(rows, cols) < params.min_size:
            return []

        # minNeighbors=0 disables OpenCV's own grouping
        rects, _levels, weights = self.classifier.detectMultiScale3(
            gray,
            scaleFactor=params.scale_factor,
            minNeighbors=0,
            minSize=(params.min_size, params.min_size),
            maxSize=(params.max_size, params.max_size),
            outputRejectLevels=True,
        )
        if len(rects) == 0:
            return []

        candidates: list[DetectionCandidate] = []
        for (x, y, w, h), weight in zip(rects, np.asarray(weights).reshape(-1)):
            confidence = float(weight)
            if confidence < params.quality_threshold:
                continue
            candidates.append(
                DetectionCandidate(
                    row=int(y + h // 2),
                    col=int(x + w // 2),
                    scale=int(w),
                    confidence=confidence,
                )
            )
        return candidates

"""Data models for face detection."""

from dataclasses import dataclass


@dataclass(frozen=True)
class DetectionCandidate:
    """A square face region reported by the cascade, or a merged cluster of them.

    ``row``/``col`` are the center of the square in pixel coordinates and
    ``scale`` its side length.
    """

    row: int
    col: int
    scale: int
    confidence: float

    @property
    def bounds(self) -> tuple[float, float, float, float]:
        """Return the square as (x1, y1, x2, y2)."""
        half = self.scale / 2
        return (self.col - half, self.row - half, self.col + half, self.row + half)


# A cluster has the same shape as a candidate once merged.
DetectionCluster = DetectionCandidate


@dataclass(frozen=True)
class CascadeParams:
    """Sliding-window parameters for a cascade run."""

    min_size: int = 20
    max_size: int = 2000
    shift_factor: float = 0.1
    scale_factor: float = 1.1
    quality_threshold: float = 0.0

    def validate(self) -> None:
        if self.min_size <= 0:
            raise ValueError(f"min_size must be positive, got {self.min_size}")
        if self.max_size < self.min_size:
            raise ValueError(f"max_size {self.max_size} is smaller than min_size {self.min_size}")
        if not 0 < self.shift_factor <= 1:
            raise ValueError(f"shift_factor must be in (0, 1], got {self.shift_factor}")
        if self.scale_factor <= 1:
            raise ValueError(f"scale_factor must be greater than 1, got {self.scale_factor}")

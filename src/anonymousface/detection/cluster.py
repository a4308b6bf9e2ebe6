"""Merge overlapping cascade detections into one region per face."""

import numpy as np

from anonymousface.models import DetectionCandidate, DetectionCluster

DEFAULT_IOU_THRESHOLD = 0.18


def iou(a: DetectionCandidate, b: DetectionCandidate) -> float:
    """Intersection-over-union of two square regions."""
    ax1, ay1, ax2, ay2 = a.bounds
    bx1, by1, bx2, by2 = b.bounds
    inter_w = min(ax2, bx2) - max(ax1, bx1)
    inter_h = min(ay2, by2) - max(ay1, by1)
    if inter_w <= 0 or inter_h <= 0:
        return 0.0
    inter = inter_w * inter_h
    union = a.scale * a.scale + b.scale * b.scale - inter
    return inter / union


def _iou_matrix(candidates: list[DetectionCandidate]) -> np.ndarray:
    boxes = np.array([c.bounds for c in candidates], dtype=np.float64)
    x1, y1, x2, y2 = boxes.T
    inter_w = np.clip(np.minimum(x2[:, None], x2) - np.maximum(x1[:, None], x1), 0, None)
    inter_h = np.clip(np.minimum(y2[:, None], y2) - np.maximum(y1[:, None], y1), 0, None)
    inter = inter_w * inter_h
    area = (x2 - x1) * (y2 - y1)
    return inter / (area[:, None] + area - inter)


def _components(adjacency: np.ndarray) -> list[list[int]]:
    """Connected components of an undirected adjacency matrix."""
    seen = np.zeros(len(adjacency), dtype=bool)
    groups: list[list[int]] = []
    for start in range(len(adjacency)):
        if seen[start]:
            continue
        seen[start] = True
        stack = [start]
        members = []
        while stack:
            node = stack.pop()
            members.append(node)
            for neighbour in np.flatnonzero(adjacency[node] & ~seen):
                seen[neighbour] = True
                stack.append(int(neighbour))
        groups.append(sorted(members))
    return groups


def _merge(group: list[DetectionCandidate]) -> DetectionCluster:
    if len(group) == 1:
        return group[0]
    n = len(group)
    return DetectionCluster(
        row=round(sum(c.row for c in group) / n),
        col=round(sum(c.col for c in group) / n),
        scale=round(sum(c.scale for c in group) / n),
        confidence=sum(c.confidence for c in group),
    )


def cluster_detections(
    candidates: list[DetectionCandidate],
    threshold: float = DEFAULT_IOU_THRESHOLD,
) -> list[DetectionCluster]:
    """Group candidates whose IoU is at least ``threshold`` and merge each group.

    Grouping is transitive (connected components), so the result does not
    depend on input order. Each group becomes the mean of its members'
    position and scale with summed confidence. Zero-scale candidates are
    dropped.
    """
    # Sort first so float summation order, and therefore the output, is stable
    valid = sorted(
        (c for c in candidates if c.scale > 0),
        key=lambda c: (c.row, c.col, c.scale, c.confidence),
    )
    if not valid:
        return []

    adjacency = _iou_matrix(valid) >= threshold
    clusters = [_merge([valid[i] for i in group]) for group in _components(adjacency)]
    return sorted(clusters, key=lambda c: (c.row, c.col, c.scale))

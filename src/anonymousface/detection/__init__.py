"""Face detection: cascade classifier and detection clustering."""

from anonymousface.detection.cascade import FaceCascade
from anonymousface.detection.cluster import cluster_detections, iou

__all__ = ["FaceCascade", "cluster_detections", "iou"]

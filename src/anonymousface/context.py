"""Process-wide singletons built once at startup."""

import logging
from dataclasses import dataclass, field
from pathlib import Path

from PIL import Image

from anonymousface import config
from anonymousface.detection.cascade import FaceCascade
from anonymousface.errors import AssetError, ConfigurationError
from anonymousface.imaging.compositor import load_mask
from anonymousface.models import CascadeParams
from anonymousface.nostr.keys import derive_keys

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AppContext:
    """Read-only state shared by every request."""

    cascade: FaceCascade
    mask: Image.Image
    secret: str
    usage: str = ""
    trigger_tag: str = config.TRIGGER_TAG
    verify_signatures: bool = config.VERIFY_SIGNATURES
    cascade_params: CascadeParams = field(default_factory=CascadeParams)
    iou_threshold: float = config.CLUSTER_IOU_THRESHOLD


def default_cascade_params() -> CascadeParams:
    return CascadeParams(
        min_size=config.CASCADE_MIN_SIZE,
        max_size=config.CASCADE_MAX_SIZE,
        shift_factor=config.CASCADE_SHIFT_FACTOR,
        scale_factor=config.CASCADE_SCALE_FACTOR,
        quality_threshold=config.CASCADE_QUALITY_THRESHOLD,
    )


def build_context(
    secret: str | None = None,
    cascade_path: str | Path | None = None,
    mask_path: str | Path | None = None,
    usage_path: str | Path | None = None,
) -> AppContext:
    """Load the signing secret, cascade and mask.

    Any failure here is fatal for the process.

    Raises:
        ConfigurationError: No signing secret is configured.
        SigningError: The secret cannot be decoded into a key.
        AssetError: An asset file is missing or unreadable.
    """
    secret = secret if secret is not None else config.NSEC
    if not secret:
        raise ConfigurationError("ANONYMOUSFACE_NSEC is not set")
    keys = derive_keys(secret)

    params = default_cascade_params()
    params.validate()

    cascade = FaceCascade(cascade_path or config.CASCADE_PATH)
    mask = load_mask(mask_path or config.MASK_PATH)

    usage_file = Path(usage_path or config.USAGE_PATH)
    try:
        usage = usage_file.read_text(encoding="utf-8")
    except OSError as exc:
        raise AssetError(f"cannot read usage text {usage_file}: {exc}") from exc

    logger.info(
        "Loaded cascade %s and %dx%d mask; replying as %s",
        cascade.path.name,
        mask.width,
        mask.height,
        keys.npub,
    )
    return AppContext(
        cascade=cascade,
        mask=mask,
        secret=secret,
        usage=usage,
        cascade_params=params,
    )

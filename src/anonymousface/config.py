"""Project-wide configuration."""

import os
from pathlib import Path

import cv2
from dotenv import load_dotenv

PROJECT_ROOT = Path(os.environ.get("ANONYMOUSFACE_PROJECT_ROOT", Path.cwd()))

load_dotenv(PROJECT_ROOT / ".env")

STATIC_DIR = Path(__file__).parent / "static"
USAGE_PATH = STATIC_DIR / "usage.txt"

# Signing secret (nsec bech32 or 64-char hex)
NSEC = os.environ.get("ANONYMOUSFACE_NSEC", "")

# Server
HOST = os.environ.get("HOST", "0.0.0.0")
PORT = int(os.environ.get("PORT") or 8080)
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

# Inbound events
TRIGGER_TAG = os.environ.get("TRIGGER_TAG", "anonymousface")
VERIFY_SIGNATURES = os.environ.get("VERIFY_SIGNATURES", "true").lower() not in ("0", "false", "no")

# Remote collaborators
UPLOAD_URL = os.environ.get("UPLOAD_URL", "https://void.cat/upload?cli=true")
# No timeout unless one is configured explicitly
HTTP_TIMEOUT = float(os.environ["HTTP_TIMEOUT"]) if os.environ.get("HTTP_TIMEOUT") else None

# Assets
_DEFAULT_CASCADE = Path(cv2.data.haarcascades) / "haarcascade_frontalface_default.xml"
CASCADE_PATH = Path(os.environ.get("CASCADE_PATH", _DEFAULT_CASCADE))
MASK_PATH = Path(os.environ.get("MASK_PATH", STATIC_DIR / "mask.png"))

# Face detection – cascade parameters
CASCADE_MIN_SIZE = int(os.environ.get("CASCADE_MIN_SIZE", 20))
CASCADE_MAX_SIZE = int(os.environ.get("CASCADE_MAX_SIZE", 2000))
CASCADE_SHIFT_FACTOR = float(os.environ.get("CASCADE_SHIFT_FACTOR", 0.1))
CASCADE_SCALE_FACTOR = float(os.environ.get("CASCADE_SCALE_FACTOR", 1.1))
CASCADE_QUALITY_THRESHOLD = float(os.environ.get("CASCADE_QUALITY_THRESHOLD", 0.0))

# Face detection – clustering
CLUSTER_IOU_THRESHOLD = float(os.environ.get("CLUSTER_IOU_THRESHOLD", 0.18))

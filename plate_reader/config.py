import os
from dataclasses import dataclass, field, replace
from typing import Tuple

# Edge map used for both the contour tree and the per-plate noise mask
CANNY_LOW = 50
CANNY_HIGH = 100

# Candidate search heuristics
MIN_CONTOUR_AREA = 400.0
MIN_CHILDREN = 3  # a plate holds at least 3 characters
ASPECT_MIN = 3.0
ASPECT_MAX = 10.0

# Character height around 10-12 px gives the best tesseract accuracy
PLATE_BOUNDING_SIZE = (240, 180)
EDGE_TRIM = 3

BINARIZE_THRESHOLD = 120
MAX_CHARACTER_BOXES = 10

PLATE_WHITELIST = 'ABCDEFGHIJKLMNOPQRSTUVWXYZ-.1234567890'

RESULTS_DIR = os.getenv('PLATE_RESULTS_DIR', os.path.join('results', 'detected_images'))
DB_PATH = os.getenv('PLATE_DB_PATH', os.path.join('results', 'plates.db'))
OCR_BACKEND = os.getenv('PLATE_OCR_BACKEND', 'tesseract')
TESSDATA_DIR = os.getenv('TESSDATA_DIR') or None


@dataclass(frozen=True)
class DetectorConfig:
    """Tunable thresholds of the detection pipeline."""
    canny_low: int = CANNY_LOW
    canny_high: int = CANNY_HIGH
    min_contour_area: float = MIN_CONTOUR_AREA
    min_children: int = MIN_CHILDREN
    aspect_min: float = ASPECT_MIN
    aspect_max: float = ASPECT_MAX
    plate_bounding_size: Tuple[int, int] = field(default=PLATE_BOUNDING_SIZE)
    edge_trim: int = EDGE_TRIM
    binarize_threshold: int = BINARIZE_THRESHOLD
    max_character_boxes: int = MAX_CHARACTER_BOXES

    def __post_init__(self):
        if self.aspect_min >= self.aspect_max:
            raise ValueError('aspect_min must be smaller than aspect_max')
        if self.min_children < 1:
            raise ValueError('min_children must be at least 1')
        bw, bh = self.plate_bounding_size
        if bw <= 0 or bh <= 0:
            raise ValueError(f'plate_bounding_size must be positive, got {self.plate_bounding_size}')
        if self.edge_trim < 0:
            raise ValueError('edge_trim must not be negative')
        if not 0 <= self.binarize_threshold <= 255:
            raise ValueError('binarize_threshold must be within 0-255')

    def with_overrides(self, **overrides) -> 'DetectorConfig':
        """Copy of this config with the non-None overrides applied."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})


DEFAULT_CONFIG = DetectorConfig()

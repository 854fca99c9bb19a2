from dataclasses import dataclass
from typing import Optional

import cv2
import numpy as np

from .config import DEFAULT_CONFIG, DetectorConfig
from .logger import get_logger
from .utils import CandidateRegion, fit_scale

logger = get_logger('plate_reader.plate_normalization')


@dataclass
class PlateImagePair:
    """Co-registered crops of one region: grayscale for OCR, color for display."""
    gray: np.ndarray
    color: np.ndarray

    @property
    def size(self):
        h, w = self.gray.shape[:2]
        return (w, h)


def rectify_plate(gray: np.ndarray, color: np.ndarray, region: CandidateRegion,
                  config: DetectorConfig = DEFAULT_CONFIG) -> Optional[PlateImagePair]:
    """Warp `region` upright out of both buffers, rescale toward the canonical size and trim the borders.

    Returns None when the region (or what is left after trimming) has no area.
    """
    out_w, out_h = int(round(region.width)), int(round(region.height))
    if out_w <= 0 or out_h <= 0:
        logger.debug('degenerate region skipped: %s', region)
        return None

    src = region.vertices()
    # bottom-left, top-left, top-right; the fourth corner follows for an affine map
    dst = np.array([
        [0, region.height - 1],
        [0, 0],
        [region.width - 1, 0],
    ], dtype=np.float32)
    rot = cv2.getAffineTransform(src[:3], dst)
    gray_plate = cv2.warpAffine(gray, rot, (out_w, out_h))
    color_plate = cv2.warpAffine(color, rot, (out_w, out_h))

    scale = fit_scale(region.size, config.plate_bounding_size)
    new_size = (int(round(region.width * scale)), int(round(region.height * scale)))
    trim = config.edge_trim
    if new_size[0] - 2 * trim <= 0 or new_size[1] - 2 * trim <= 0:
        logger.debug('region too small after trimming %d px: %s', trim, region)
        return None
    gray_plate = cv2.resize(gray_plate, new_size, interpolation=cv2.INTER_CUBIC)
    color_plate = cv2.resize(color_plate, new_size, interpolation=cv2.INTER_CUBIC)

    # removes warp artifacts along the edges
    w, h = new_size
    return PlateImagePair(
        gray=gray_plate[trim:h - trim, trim:w - trim].copy(),
        color=color_plate[trim:h - trim, trim:w - trim].copy(),
    )

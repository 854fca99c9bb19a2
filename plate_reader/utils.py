import math
from dataclasses import dataclass, replace
from typing import Tuple

import cv2
import numpy as np

from .config import ASPECT_MAX, ASPECT_MIN, PLATE_BOUNDING_SIZE


@dataclass(frozen=True)
class CandidateRegion:
    """Rotated rectangle around a candidate plate (OpenCV RotatedRect semantics)."""
    center: Tuple[float, float]
    width: float
    height: float
    angle: float

    @classmethod
    def from_cv(cls, rect) -> 'CandidateRegion':
        (cx, cy), (w, h), angle = rect
        return cls((float(cx), float(cy)), float(w), float(h), float(angle))

    def to_cv(self):
        return (self.center, (self.width, self.height), self.angle)

    @property
    def size(self) -> Tuple[float, float]:
        return (self.width, self.height)

    @property
    def aspect_ratio(self) -> float:
        if self.height <= 0:
            return 0.0
        return self.width / self.height

    def vertices(self) -> np.ndarray:
        """Corners as float32 (4, 2): bottom-left, top-left, top-right, bottom-right."""
        return cv2.boxPoints(self.to_cv()).astype(np.float32)


def normalize_angle(rect: CandidateRegion) -> CandidateRegion:
    """Rotate the description of `rect` by quarter turns until its angle is in (-45, 45].

    Every quarter turn swaps width and height, so the described area never changes.
    """
    if not math.isfinite(rect.angle):
        raise ValueError(f'Invalid rectangle angle: {rect.angle}')
    turns = math.ceil((rect.angle - 45.0) / 90.0)
    if turns == 0:
        return rect
    w, h = (rect.height, rect.width) if turns % 2 else (rect.width, rect.height)
    return replace(rect, width=w, height=h, angle=rect.angle - 90.0 * turns)


def aspect_ratio_in_range(rect: CandidateRegion, lo: float = ASPECT_MIN, hi: float = ASPECT_MAX) -> bool:
    # plates are markedly wider than tall; both bounds are exclusive
    if rect.height <= 0 or rect.width <= 0:
        return False
    ratio = rect.width / rect.height
    return lo < ratio < hi


def fit_scale(src_size: Tuple[float, float], bounding_size: Tuple[int, int] = PLATE_BOUNDING_SIZE) -> float:
    """Scale factor that fits `src_size` (w, h) inside `bounding_size` (w, h)."""
    sw, sh = src_size
    if sw <= 0 or sh <= 0:
        raise ValueError(f'Cannot scale a region of size {src_size}')
    bw, bh = bounding_size
    return min(bw / float(sw), bh / float(sh))


def draw_region(image, region: CandidateRegion, color=(0, 0, 255), thickness=2):
    """Outline the rotated region on a copy of `image` (red by default)."""
    out = image.copy()
    pts = np.round(region.vertices()).astype(np.int32).reshape(-1, 1, 2)
    cv2.polylines(out, [pts], True, color, thickness)
    return out


def show_image(window_name, img, scale=1.0):
    # Utility to display an image (for local testing)
    h, w = img.shape[:2]
    disp = cv2.resize(img, (int(w*scale), int(h*scale)))
    cv2.imshow(window_name, disp)
    cv2.waitKey(0)
    cv2.destroyAllWindows()

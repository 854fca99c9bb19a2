import cv2
import numpy as np
from typing import Iterator, List, Sequence, Tuple

from .config import DEFAULT_CONFIG, DetectorConfig
from .logger import get_logger
from .utils import CandidateRegion, aspect_ratio_in_range, normalize_angle

logger = get_logger('plate_reader.plate_detection')

# Columns of an OpenCV hierarchy row
NEXT, PREVIOUS, FIRST_CHILD, PARENT = 0, 1, 2, 3


def detect_contour_tree(gray: np.ndarray, config: DetectorConfig = DEFAULT_CONFIG):
    """Edge map plus full contour tree of a grayscale image.

    Returns (edges, contours, hierarchy) where hierarchy is an (N, 4) int array of
    [next, previous, first_child, parent] rows; N is 0 when nothing was found.
    """
    edges = cv2.Canny(gray, config.canny_low, config.canny_high)
    contours, hierarchy = cv2.findContours(edges, cv2.RETR_TREE, cv2.CHAIN_APPROX_SIMPLE)[-2:]
    if hierarchy is None:
        return edges, [], np.empty((0, 4), dtype=np.int32)
    return edges, list(contours), hierarchy.reshape(-1, 4)


def count_children(hierarchy: np.ndarray, idx: int) -> int:
    """Number of direct children of contour `idx` (walks the first child's sibling chain)."""
    child = int(hierarchy[idx][FIRST_CHILD])
    count = 0
    while child >= 0:
        count += 1
        child = int(hierarchy[child][NEXT])
    return count


def find_license_plates(contours: Sequence[np.ndarray], hierarchy: np.ndarray, start: int = 0,
                        config: DetectorConfig = DEFAULT_CONFIG) -> Iterator[Tuple[int, CandidateRegion]]:
    """Walk the contour tree from `start` and yield (index, region) for plate-like contours.

    Siblings are visited in hierarchy order. A contour rejected for having too few
    children or a bad aspect ratio still has its children searched, before its next
    sibling. Accepted contours are not descended into. Neither `contours` nor
    `hierarchy` is modified.
    """
    if len(contours) == 0:
        return
    # explicit stack: the next sibling waits underneath the children of the current contour
    stack: List[int] = [start]
    while stack:
        idx = stack.pop()
        if idx < 0:
            continue
        stack.append(int(hierarchy[idx][NEXT]))

        n_children = count_children(hierarchy, idx)
        # no children (characters) means no plate and nothing to search below
        if n_children == 0:
            continue

        contour = contours[idx]
        area = cv2.contourArea(contour)
        if area <= config.min_contour_area:
            logger.debug('contour %d rejected: area %.1f', idx, area)
            continue

        first_child = int(hierarchy[idx][FIRST_CHILD])
        if n_children < config.min_children:
            logger.debug('contour %d rejected: %d children, searching inside', idx, n_children)
            stack.append(first_child)
            continue

        region = normalize_angle(CandidateRegion.from_cv(cv2.minAreaRect(contour)))
        if not aspect_ratio_in_range(region, config.aspect_min, config.aspect_max):
            logger.debug('contour %d rejected: aspect ratio %.2f, searching inside', idx, region.aspect_ratio)
            stack.append(first_child)
            continue

        logger.debug('contour %d accepted: %s', idx, region)
        yield idx, region


def first_root(hierarchy: np.ndarray) -> int:
    """Index of the first top-level contour (no parent, no previous sibling)."""
    roots = np.where((hierarchy[:, PARENT] < 0) & (hierarchy[:, PREVIOUS] < 0))[0]
    return int(roots[0]) if len(roots) else 0

import cv2
import imutils
import numpy as np

from .config import DEFAULT_CONFIG, DetectorConfig


def filter_plate(plate: np.ndarray, config: DetectorConfig = DEFAULT_CONFIG) -> np.ndarray:
    """Binarize a grayscale plate crop and drop everything outside character-sized blobs.

    Dark pixels become foreground (255). Only pixels inside the (1 px grown) bounding
    box of an edge contour taller than half the plate survive, then an opening removes
    leftover speckles.
    """
    if plate is None or plate.size == 0:
        raise ValueError('Cannot filter an empty plate image')
    if plate.ndim != 2:
        plate = cv2.cvtColor(plate, cv2.COLOR_BGR2GRAY)

    _, thresh = cv2.threshold(plate, config.binarize_threshold, 255, cv2.THRESH_BINARY_INV)

    h, w = plate.shape[:2]
    mask = np.full((h, w), 255, dtype=np.uint8)
    edges = cv2.Canny(plate, config.canny_low, config.canny_high)
    cnts = cv2.findContours(edges, cv2.RETR_EXTERNAL, cv2.CHAIN_APPROX_SIMPLE)
    for c in imutils.grab_contours(cnts):
        x, y, bw, bh = cv2.boundingRect(c)
        # a character spans at least half the plate height
        if bh > (h >> 1):
            x0, y0 = max(0, x - 1), max(0, y - 1)
            x1, y1 = min(w, x + bw + 1), min(h, y + bh + 1)
            mask[y0:y1, x0:x1] = 0

    thresh[mask == 255] = 0

    thresh = cv2.erode(thresh, None, iterations=1)
    thresh = cv2.dilate(thresh, None, iterations=1)
    return thresh

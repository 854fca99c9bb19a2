"""
Pytest configuration and shared fixtures for the plate reader tests.

This module provides:
- Synthetic scene builders (a white plate with dark characters on a car body)
- A fake recognition engine standing in for tesseract / easyocr
- Helpers to build contour hierarchies by hand

Usage:
    pytest tests/ -v
"""

import sys
from pathlib import Path

import cv2
import numpy as np
import pytest

# Add parent directory to path for imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))


# =============================================================================
# Fake recognition engine
# =============================================================================

class FakeEngine:
    """Returns queued texts (then `default`) and records every image it was given."""

    def __init__(self, texts=None, default='AB123', error=None):
        self.texts = list(texts or [])
        self.default = default
        self.error = error
        self.calls = []

    def recognize(self, image):
        self.calls.append(image)
        if self.error is not None:
            raise self.error
        if self.texts:
            return self.texts.pop(0)
        return self.default


@pytest.fixture
def fake_engine():
    return FakeEngine()


# =============================================================================
# Synthetic images
# =============================================================================

BODY_COLOR = (90, 90, 90)


def draw_plate_scene(angle=0.0, n_chars=6, size=(400, 300)):
    """BGR image of a 240x50 white plate carrying `n_chars` black characters, rotated by `angle` degrees."""
    w, h = size
    img = np.full((h, w, 3), BODY_COLOR, dtype=np.uint8)
    x0, y0 = 80, 125
    cv2.rectangle(img, (x0, y0), (x0 + 239, y0 + 49), (255, 255, 255), -1)
    for i in range(n_chars):
        cx = x0 + 20 + i * 36
        cv2.rectangle(img, (cx, y0 + 10), (cx + 17, y0 + 39), (0, 0, 0), -1)
    if angle:
        rot = cv2.getRotationMatrix2D((w / 2.0, h / 2.0), angle, 1.0)
        img = cv2.warpAffine(img, rot, (w, h), flags=cv2.INTER_LINEAR, borderValue=BODY_COLOR)
    return img


@pytest.fixture
def plate_scene():
    return draw_plate_scene()


@pytest.fixture
def scene_builder():
    return draw_plate_scene


# =============================================================================
# Hand-built contour hierarchies
# =============================================================================

def rect_contour(x, y, w, h):
    """Axis-aligned rectangle contour in OpenCV (N, 1, 2) int32 layout."""
    pts = [(x, y), (x + w, y), (x + w, y + h), (x, y + h)]
    return np.array(pts, dtype=np.int32).reshape(-1, 1, 2)


def build_hierarchy(parents):
    """(N, 4) [next, previous, first_child, parent] rows from a list of parent indices.

    Siblings are linked in index order.
    """
    n = len(parents)
    hierarchy = np.full((n, 4), -1, dtype=np.int32)
    last_child = {}
    for idx, parent in enumerate(parents):
        hierarchy[idx][3] = parent
        prev = last_child.get(parent)
        if prev is None:
            if parent >= 0:
                hierarchy[parent][2] = idx
        else:
            hierarchy[prev][0] = idx
            hierarchy[idx][1] = prev
        last_child[parent] = idx
    return hierarchy

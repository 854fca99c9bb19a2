import cv2
import imutils

from .config import BINARIZE_THRESHOLD, MAX_CHARACTER_BOXES


def segment_characters(plate_img, max_boxes=MAX_CHARACTER_BOXES, threshold=BINARIZE_THRESHOLD):
    """Character segmentation of a rectified plate using external contours.
    Returns up to `max_boxes` (x,y,w,h) bounding boxes relative to the plate image,
    largest contour area first (ties keep discovery order).
    """
    gray = cv2.cvtColor(plate_img, cv2.COLOR_BGR2GRAY) if plate_img.ndim == 3 else plate_img
    blurred = cv2.GaussianBlur(gray, (3, 3), 1)
    # invert so characters are white
    _, thresh = cv2.threshold(blurred, threshold, 255, cv2.THRESH_BINARY_INV)
    kernel = cv2.getStructuringElement(cv2.MORPH_RECT, (3, 3))
    thresh = cv2.dilate(thresh, kernel)
    cnts = imutils.grab_contours(cv2.findContours(thresh, cv2.RETR_EXTERNAL, cv2.CHAIN_APPROX_SIMPLE))
    cnts = sorted(cnts, key=cv2.contourArea, reverse=True)[:max_boxes]
    return [cv2.boundingRect(c) for c in cnts]


def draw_character_boxes(plate_img, canvas, max_boxes=MAX_CHARACTER_BOXES, color=(0, 255, 0), thickness=2):
    """Draw the character boxes found in `plate_img` onto a copy of `canvas` (the color crop)."""
    out = canvas.copy()
    if out.ndim == 2:
        out = cv2.cvtColor(out, cv2.COLOR_GRAY2BGR)
    for (x, y, w, h) in segment_characters(plate_img, max_boxes=max_boxes):
        cv2.rectangle(out, (x, y), (x + w - 1, y + h - 1), color, thickness)
    return out


def character_box_image(plate_img, canvas=None, max_boxes=MAX_CHARACTER_BOXES):
    # canvas missing -> nothing to draw on, hand the crop back untouched
    if canvas is None:
        return plate_img
    return draw_character_boxes(plate_img, canvas, max_boxes=max_boxes)

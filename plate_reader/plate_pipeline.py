import time
from dataclasses import dataclass
from typing import List, Optional

import cv2
import numpy as np

from .config import DEFAULT_CONFIG, DetectorConfig
from .logger import get_logger
from .noise_filter import filter_plate
from .plate_detection import detect_contour_tree, find_license_plates, first_root
from .plate_normalization import rectify_plate
from .recognition_session import DetectionSession, RecognitionResult
from .utils import CandidateRegion

logger = get_logger('plate_reader.plate_pipeline')


@dataclass
class DetectionResult:
    """Outcome of one detect_license_plate call."""
    session: DetectionSession
    elapsed_ms: float

    @property
    def found(self) -> bool:
        return self.session.found

    @property
    def state(self):
        return self.session.state

    @property
    def best_text(self) -> Optional[str]:
        return self.session.best_text

    @property
    def best_result(self) -> Optional[RecognitionResult]:
        return self.session.best_result

    @property
    def texts(self) -> List[str]:
        return self.session.texts

    @property
    def plate_images(self) -> List[np.ndarray]:
        return self.session.plate_images

    @property
    def filtered_images(self) -> List[np.ndarray]:
        return self.session.filtered_images

    @property
    def regions(self) -> List[CandidateRegion]:
        return self.session.regions

    def character_boxes(self) -> Optional[np.ndarray]:
        """Color crop of the best plate with its character boxes drawn, or None if nothing was found."""
        best = self.best_result
        if best is None:
            return None
        return self.session.character_boxes(best.text, best.plate_image)


class LicensePlateDetector:
    """
    Finds plate-like regions through the contour hierarchy of an edge map and reads them:
    - candidate regions: contours with >= 3 children and a plate aspect ratio
    - each candidate is rectified, noise filtered and passed to the OCR engine
    - the plate for the image is the first candidate with the longest text

    `engine` is anything with recognize(image) -> str (see OCRReader). An engine error
    while reading a candidate aborts the whole image.
    """

    def __init__(self, engine, config: DetectorConfig = DEFAULT_CONFIG):
        if not callable(getattr(engine, 'recognize', None)):
            raise TypeError('engine must provide recognize(image) -> str')
        self.engine = engine
        self.config = config

    def _to_gray(self, image: np.ndarray) -> np.ndarray:
        if image is None or image.size == 0:
            raise ValueError('empty image')
        if image.ndim == 2:
            return image
        if image.ndim == 3 and image.shape[2] == 3:
            return cv2.cvtColor(image, cv2.COLOR_BGR2GRAY)
        if image.ndim == 3 and image.shape[2] == 4:
            return cv2.cvtColor(image, cv2.COLOR_BGRA2GRAY)
        raise ValueError(f'Unsupported image shape {image.shape}')

    def detect_license_plate(self, image: np.ndarray) -> DetectionResult:
        """Run the full pipeline on one BGR (or grayscale) image with a fresh session."""
        start = time.perf_counter()
        gray = self._to_gray(image)
        color = image if image.ndim == 3 else cv2.cvtColor(image, cv2.COLOR_GRAY2BGR)
        if color.shape[2] == 4:
            color = cv2.cvtColor(color, cv2.COLOR_BGRA2BGR)

        session = DetectionSession()
        session.start()
        _, contours, hierarchy = detect_contour_tree(gray, self.config)
        start_idx = first_root(hierarchy) if len(contours) else 0
        for idx, region in find_license_plates(contours, hierarchy, start_idx, self.config):
            pair = rectify_plate(gray, color, region, self.config)
            if pair is None:
                continue
            filtered = filter_plate(pair.gray, self.config)
            text = self.engine.recognize(filtered)
            is_best = session.add(RecognitionResult(
                text=text,
                region=region,
                plate_image=pair.gray,
                color_image=pair.color,
                filtered_image=filtered,
            ))
            logger.info('candidate %d (contour %d): %r%s', len(session.results) - 1, idx, text,
                        ' [best]' if is_best else '')
        state = session.finish()

        elapsed_ms = (time.perf_counter() - start) * 1000.0
        if session.found:
            logger.info('%d candidate(s), plate %r in %.1f ms', len(session.results), session.best_text, elapsed_ms)
        else:
            logger.info('no plate found (%s) in %.1f ms', state.value, elapsed_ms)
        return DetectionResult(session=session, elapsed_ms=elapsed_ms)

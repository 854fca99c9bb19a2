"""
Contour-hierarchy license plate reader.

- utils: rotated rectangle type and geometry helpers
- plate_detection: contour tree search for plate-like regions
- plate_normalization: rotation correction, rescale and border trim
- noise_filter: binarization with a character-height noise mask
- ocr_recognition: tesseract / easyocr adapters
- recognition_session / plate_pipeline: per-image orchestration and best plate selection
"""

from .config import DetectorConfig, DEFAULT_CONFIG
from .utils import CandidateRegion, normalize_angle, aspect_ratio_in_range, fit_scale, draw_region
from .plate_detection import detect_contour_tree, count_children, find_license_plates, first_root
from .plate_normalization import PlateImagePair, rectify_plate
from .noise_filter import filter_plate
from .character_segmentation import segment_characters, draw_character_boxes
from .ocr_recognition import OCRReader, EngineError, EngineConfigError, download_lang_file
from .recognition_session import DetectionSession, RecognitionResult, SessionState
from .plate_pipeline import LicensePlateDetector, DetectionResult

__version__ = '0.1.0'

__all__ = [
    "DetectorConfig",
    "DEFAULT_CONFIG",
    "CandidateRegion",
    "normalize_angle",
    "aspect_ratio_in_range",
    "fit_scale",
    "draw_region",
    "detect_contour_tree",
    "count_children",
    "find_license_plates",
    "first_root",
    "PlateImagePair",
    "rectify_plate",
    "filter_plate",
    "segment_characters",
    "draw_character_boxes",
    "OCRReader",
    "EngineError",
    "EngineConfigError",
    "download_lang_file",
    "DetectionSession",
    "RecognitionResult",
    "SessionState",
    "LicensePlateDetector",
    "DetectionResult",
]

"""
Per-image bookkeeping of recognized plate candidates.

A DetectionSession collects one RecognitionResult per accepted candidate, in
traversal order, and keeps the "longest text so far" list used to pick the plate
reported for the image.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

import numpy as np

from .character_segmentation import character_box_image
from .config import MAX_CHARACTER_BOXES
from .logger import get_logger
from .utils import CandidateRegion

logger = get_logger('plate_reader.recognition_session')


class SessionState(str, Enum):
    IDLE = 'idle'
    SEARCHING = 'searching'
    DONE = 'done'
    NONE_FOUND = 'none_found'


@dataclass
class RecognitionResult:
    """One accepted candidate: its text, region and the crops it was read from."""
    text: str
    region: CandidateRegion
    plate_image: np.ndarray
    color_image: np.ndarray
    filtered_image: np.ndarray


@dataclass
class DetectionSession:
    results: List[RecognitionResult] = field(default_factory=list)
    longest_words: List[str] = field(default_factory=list)
    plate_rois: Dict[str, np.ndarray] = field(default_factory=dict)
    state: SessionState = SessionState.IDLE
    _best_index: Optional[int] = field(default=None, init=False, repr=False)

    def start(self):
        if self.state is not SessionState.IDLE:
            raise RuntimeError(f'Session already used (state={self.state.value}); call reset() first')
        self.state = SessionState.SEARCHING

    def add(self, result: RecognitionResult) -> bool:
        """Append a result. Returns True when it became the new best candidate.

        The new text only has to beat the most recent best-list entry. Entries are
        appended only when strictly longer, so that entry is also the longest text
        seen so far and ties keep the earlier candidate.
        """
        if self.state is not SessionState.SEARCHING:
            raise RuntimeError(f'Cannot add results in state {self.state.value}')
        self.results.append(result)
        if not self.longest_words or len(self.longest_words[-1]) < len(result.text):
            self.longest_words.append(result.text)
            self.plate_rois[result.text] = result.color_image
            self._best_index = len(self.results) - 1
            return True
        return False

    def finish(self) -> SessionState:
        if self.state is not SessionState.SEARCHING:
            raise RuntimeError(f'Cannot finish a session in state {self.state.value}')
        self.state = SessionState.DONE if self.results else SessionState.NONE_FOUND
        return self.state

    def reset(self):
        self.results.clear()
        self.longest_words.clear()
        self.plate_rois.clear()
        self._best_index = None
        self.state = SessionState.IDLE

    @property
    def found(self) -> bool:
        return self.state is SessionState.DONE

    @property
    def best_text(self) -> Optional[str]:
        return self.longest_words[-1] if self.longest_words else None

    @property
    def best_result(self) -> Optional[RecognitionResult]:
        if self._best_index is None:
            return None
        return self.results[self._best_index]

    @property
    def texts(self) -> List[str]:
        return [r.text for r in self.results]

    @property
    def plate_images(self) -> List[np.ndarray]:
        return [r.plate_image for r in self.results]

    @property
    def filtered_images(self) -> List[np.ndarray]:
        return [r.filtered_image for r in self.results]

    @property
    def regions(self) -> List[CandidateRegion]:
        return [r.region for r in self.results]

    def character_boxes(self, text: str, plate_image: np.ndarray, max_boxes: int = MAX_CHARACTER_BOXES) -> np.ndarray:
        """Character boxes of `plate_image` drawn on the color crop registered for `text`.

        Returns `plate_image` unchanged when no crop is registered for `text`.
        """
        canvas = self.plate_rois.get(text)
        if canvas is None:
            logger.warning('No color crop registered for %r', text)
        return character_box_image(plate_image, canvas, max_boxes=max_boxes)

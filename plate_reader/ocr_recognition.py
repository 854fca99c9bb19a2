import os
from pathlib import Path

import cv2
import numpy as np
import requests

from .config import PLATE_WHITELIST
from .logger import get_logger

logger = get_logger('plate_reader.ocr_recognition')

TESSDATA_URL = 'https://github.com/tesseract-ocr/tessdata/raw/main/{lang}.traineddata'

# easyocr and tesseract name the same language differently
_EASYOCR_LANGS = {'eng': 'en'}


class EngineError(RuntimeError):
    """The recognition engine failed while reading a plate."""


class EngineConfigError(EngineError):
    """The recognition engine could not be set up (missing binary, model or language data)."""


def download_lang_file(folder, lang, timeout=60):
    """Download `<lang>.traineddata` into `folder` unless it is already there. Returns the file path."""
    folder = Path(folder)
    folder.mkdir(parents=True, exist_ok=True)
    dest = folder / f'{lang}.traineddata'
    if dest.exists():
        return dest

    url = TESSDATA_URL.format(lang=lang)
    logger.info("Downloading file from '%s' to '%s'", url, dest)
    tmp = dest.with_suffix('.part')
    try:
        r = requests.get(url, stream=True, timeout=timeout)
        r.raise_for_status()
        with open(tmp, 'wb') as f:
            for chunk in r.iter_content(chunk_size=8192):
                if chunk:
                    f.write(chunk)
    except requests.RequestException as e:
        if tmp.exists():
            tmp.unlink()
        raise EngineConfigError('Unable to download tesseract lang file. Please check internet connection.') from e
    tmp.replace(dest)
    logger.info('Download completed')
    return dest


class OCRReader:
    """Plate text recognizer. One operation: recognize(image) -> str."""

    def __init__(self, backend='tesseract', lang='eng', tessdata_dir=None, whitelist=PLATE_WHITELIST):
        self.backend = backend.lower()
        self.lang = lang
        self.whitelist = whitelist
        self.tessdata_dir = tessdata_dir
        self.reader = None
        if self.backend == 'tesseract':
            self._init_tesseract()
        elif self.backend == 'easyocr':
            self._init_easyocr()
        else:
            raise EngineConfigError('Unsupported backend: ' + backend)
        logger.info('OCR engine ready (backend=%s, lang=%s)', self.backend, self.lang)

    def _init_tesseract(self):
        import pytesseract
        try:
            pytesseract.get_tesseract_version()
        except pytesseract.TesseractNotFoundError as e:
            raise EngineConfigError('tesseract is not installed or not on PATH') from e
        if self.tessdata_dir:
            download_lang_file(self.tessdata_dir, self.lang)
            # script orientation detection
            download_lang_file(self.tessdata_dir, 'osd')
        langs_config = f'--tessdata-dir "{os.path.abspath(self.tessdata_dir)}"' if self.tessdata_dir else ''
        try:
            available = pytesseract.get_languages(config=langs_config)
        except pytesseract.TesseractError as e:
            raise EngineConfigError(f'tesseract could not list its languages: {e}') from e
        if self.lang not in available:
            raise EngineConfigError(f'tesseract language data for {self.lang!r} not found')
        self._pytesseract = pytesseract

    def _init_easyocr(self):
        import easyocr
        lang = _EASYOCR_LANGS.get(self.lang, self.lang)
        try:
            self.reader = easyocr.Reader([lang], gpu=False)
        except (OSError, ValueError, RuntimeError) as e:
            raise EngineConfigError(f'easyocr could not load models for {lang!r}') from e

    @property
    def tesseract_config(self):
        config = f'--psm 7 -c tessedit_char_whitelist={self.whitelist}'
        if self.tessdata_dir:
            config = f'--tessdata-dir "{os.path.abspath(self.tessdata_dir)}" ' + config
        return config

    def recognize(self, plate_img: np.ndarray) -> str:
        """Text of a single-channel (filtered) plate image, possibly empty."""
        if plate_img is None or plate_img.size == 0:
            return ''
        if self.backend == 'tesseract':
            try:
                text = self._pytesseract.image_to_string(plate_img, lang=self.lang, config=self.tesseract_config)
            except self._pytesseract.TesseractError as e:
                raise EngineError(f'tesseract failed: {e}') from e
            return text.strip()
        img = plate_img if plate_img.ndim == 2 else cv2.cvtColor(plate_img, cv2.COLOR_BGR2GRAY)
        try:
            texts = self.reader.readtext(img, allowlist=self.whitelist, detail=0)
        except (RuntimeError, ValueError) as e:
            raise EngineError(f'easyocr failed: {e}') from e
        return ''.join(texts).replace(' ', '')

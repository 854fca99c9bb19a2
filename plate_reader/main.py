import argparse
import datetime
import logging
import os
import sys

import cv2

from . import config
from .database import init_db, insert_plate
from .logger import get_logger, set_level
from .ocr_recognition import EngineConfigError, EngineError, OCRReader
from .plate_pipeline import LicensePlateDetector
from .utils import draw_region, show_image

logger = get_logger('plate_reader.main')

EXIT_OK = 0
EXIT_NO_PLATE = 1
EXIT_CONFIG_ERROR = 2
EXIT_BAD_INPUT = 3
EXIT_RECOGNITION_ERROR = 4

EXIT_CODES_HELP = '''exit codes:
  0  plate found
  1  no plate found in the image
  2  OCR engine could not be set up
  3  input image missing or unreadable
  4  OCR engine failed while reading the image'''


def save_outputs(image, result, out_dir, image_path):
    """Write the best plate crops and an annotated copy of the input. Returns the color crop path."""
    os.makedirs(out_dir, exist_ok=True)
    stem = os.path.splitext(os.path.basename(image_path))[0]
    best = result.best_result
    paths = {
        'plate': os.path.join(out_dir, f'{stem}_plate.png'),
        'filtered': os.path.join(out_dir, f'{stem}_filtered.png'),
        'characters': os.path.join(out_dir, f'{stem}_characters.png'),
        'annotated': os.path.join(out_dir, f'{stem}_annotated.png'),
    }
    cv2.imwrite(paths['plate'], best.color_image)
    cv2.imwrite(paths['filtered'], best.filtered_image)
    cv2.imwrite(paths['characters'], result.character_boxes())
    cv2.imwrite(paths['annotated'], draw_region(image, best.region))
    return paths


def run_single_image(image_path, detector, out_dir=config.RESULTS_DIR, db_path=config.DB_PATH,
                     store=True, show=False):
    image = cv2.imread(image_path)
    if image is None:
        logger.error('Failed to read %s', image_path)
        return EXIT_BAD_INPUT

    result = detector.detect_license_plate(image)
    if not result.found:
        print('No plate found for', image_path)
        return EXIT_NO_PLATE

    print(f'Detected: {result.best_text} ({len(result.texts)} candidate(s), {result.elapsed_ms:.0f} ms)')
    paths = save_outputs(image, result, out_dir, image_path)
    if store:
        init_db(db_path)
        insert_plate(result.best_text, datetime.datetime.now().isoformat(), candidates=len(result.texts),
                     elapsed_ms=result.elapsed_ms, image_path=paths['plate'], db_path=db_path)
    if show:
        show_image('plate', result.character_boxes(), scale=2.0)
        show_image('detection', draw_region(image, result.best_result.region))
    return EXIT_OK


def build_parser():
    parser = argparse.ArgumentParser(description='Read the license plate of a photograph',
                                     epilog=EXIT_CODES_HELP,
                                     formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument('--input', required=True, help='Path to input image')
    parser.add_argument('--ocr', default=config.OCR_BACKEND, choices=['tesseract', 'easyocr'],
                        help='OCR backend')
    parser.add_argument('--lang', default='eng', help='OCR language')
    parser.add_argument('--tessdata', default=config.TESSDATA_DIR,
                        help='Folder holding tesseract language data (downloaded when missing)')
    parser.add_argument('--out', default=config.RESULTS_DIR, help='Folder for the saved crops')
    parser.add_argument('--db', default=config.DB_PATH, help='SQLite database for recognized plates')
    parser.add_argument('--no-db', action='store_true', help='Do not store the result')
    parser.add_argument('--min-area', type=float, default=None, help='Minimum contour area of a candidate')
    parser.add_argument('--show', action='store_true', help='Display the result windows')
    parser.add_argument('-v', '--verbose', action='store_true', help='Log every rejected contour')
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    if args.verbose:
        set_level(logging.DEBUG)
    try:
        engine = OCRReader(backend=args.ocr, lang=args.lang, tessdata_dir=args.tessdata)
    except EngineConfigError as e:
        logger.error('OCR engine unavailable: %s', e)
        return EXIT_CONFIG_ERROR
    detector = LicensePlateDetector(engine, config.DEFAULT_CONFIG.with_overrides(min_contour_area=args.min_area))
    try:
        return run_single_image(args.input, detector, out_dir=args.out, db_path=args.db,
                                store=not args.no_db, show=args.show)
    except EngineError as e:
        logger.error('Recognition failed for %s: %s', args.input, e)
        return EXIT_RECOGNITION_ERROR


if __name__ == '__main__':
    sys.exit(main())

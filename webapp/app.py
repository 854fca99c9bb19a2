import datetime
import os
import time
from pathlib import Path

import cv2
import numpy as np
from flask import Flask, current_app, jsonify, request, send_from_directory
from werkzeug.utils import secure_filename

from plate_reader import config
from plate_reader.database import init_db, insert_plate, query_plates
from plate_reader.logger import get_logger
from plate_reader.ocr_recognition import EngineConfigError, EngineError, OCRReader
from plate_reader.plate_pipeline import LicensePlateDetector
from plate_reader.utils import draw_region

logger = get_logger('webapp.app')

ALLOWED_EXTENSIONS = {'png', 'jpg', 'jpeg', 'gif', 'bmp'}


def allowed_file(filename):
    return '.' in filename and filename.rsplit('.', 1)[1].lower() in ALLOWED_EXTENSIONS


def _get_detector():
    detector = current_app.config.get('DETECTOR')
    if detector is None:
        # built on first use so the app can start without an OCR engine installed
        engine = OCRReader(backend=current_app.config['OCR_BACKEND'], tessdata_dir=config.TESSDATA_DIR)
        detector = LicensePlateDetector(engine)
        current_app.config['DETECTOR'] = detector
    return detector


def _candidate_json(result):
    return [
        {
            'text': r.text,
            'center': list(r.region.center),
            'size': [r.region.width, r.region.height],
            'angle': r.region.angle,
        }
        for r in result.session.results
    ]


def create_app(detector=None, results_dir=None, db_path=None):
    app = Flask(__name__)
    app.config['MAX_CONTENT_LENGTH'] = 16 * 1024 * 1024  # 16MB max file size
    app.config['DETECTOR'] = detector
    app.config['OCR_BACKEND'] = config.OCR_BACKEND
    app.config['RESULTS_DIR'] = Path(results_dir or config.RESULTS_DIR).resolve()
    app.config['DB_PATH'] = str(db_path or config.DB_PATH)
    app.config['RESULTS_DIR'].mkdir(parents=True, exist_ok=True)

    @app.route('/api/detect', methods=['POST'])
    def api_detect():
        if 'file' not in request.files:
            return jsonify({'error': 'No file selected'}), 400
        file = request.files['file']
        if file.filename == '':
            return jsonify({'error': 'No file selected'}), 400
        if not allowed_file(file.filename):
            return jsonify({'error': 'Invalid file type. Please upload an image file.'}), 400

        data = np.frombuffer(file.read(), dtype=np.uint8)
        image = cv2.imdecode(data, cv2.IMREAD_COLOR) if data.size else None
        if image is None:
            return jsonify({'error': 'Failed to read image'}), 400

        try:
            result = _get_detector().detect_license_plate(image)
        except EngineConfigError as e:
            logger.error('OCR engine unavailable: %s', e)
            return jsonify({'error': f'OCR engine unavailable: {e}'}), 503
        except EngineError as e:
            logger.error('Recognition failed: %s', e)
            return jsonify({'error': f'Recognition failed: {e}'}), 500

        payload = {
            'found': result.found,
            'plate': result.best_text,
            'candidates': _candidate_json(result),
            'elapsed_ms': result.elapsed_ms,
            'image': None,
        }
        if not result.found:
            return jsonify(payload)

        best = result.best_result
        filename = f"detected_{int(time.time() * 1000)}_{secure_filename(file.filename)}"
        cv2.imwrite(str(app.config['RESULTS_DIR'] / filename), best.color_image)
        cv2.imwrite(str(app.config['RESULTS_DIR'] / f'annotated_{filename}'), draw_region(image, best.region))
        init_db(app.config['DB_PATH'])
        insert_plate(result.best_text, datetime.datetime.now().isoformat(), candidates=len(result.texts),
                     elapsed_ms=result.elapsed_ms, image_path=str(app.config['RESULTS_DIR'] / filename),
                     db_path=app.config['DB_PATH'])
        payload['image'] = f'/static-results/{filename}'
        return jsonify(payload)

    @app.route('/api/plates', methods=['GET'])
    def api_plates():
        limit = request.args.get('limit', 500, type=int)
        rows = query_plates(limit, db_path=app.config['DB_PATH'])
        data = []
        for r in rows:
            data.append({'id': r[0], 'plate': r[1], 'timestamp': r[2], 'candidates': r[3],
                         'elapsed_ms': r[4], 'image': (os.path.basename(r[5]) if r[5] else None)})
        return jsonify(data)

    @app.route('/static-results/<path:filename>')
    def static_results(filename):
        # safe join inside RESULTS_DIR; 404 for missing files and paths escaping it
        return send_from_directory(str(app.config['RESULTS_DIR']), filename)

    return app


if __name__ == '__main__':
    create_app().run(debug=True, host='0.0.0.0')

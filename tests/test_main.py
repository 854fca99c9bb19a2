import cv2
import pytest

from plate_reader import main as cli
from plate_reader.database import query_plates
from plate_reader.ocr_recognition import EngineConfigError, EngineError

from conftest import FakeEngine, draw_plate_scene


@pytest.fixture
def engine_factory(monkeypatch):
    """Replace OCRReader in the CLI; returns the list of constructor kwargs seen."""
    created = []

    def install(engine=None, error=None):
        def factory(**kwargs):
            created.append(kwargs)
            if error is not None:
                raise error
            return engine or FakeEngine()
        monkeypatch.setattr(cli, 'OCRReader', factory)
        return created

    return install


@pytest.fixture
def scene_file(tmp_path):
    path = tmp_path / 'car.png'
    cv2.imwrite(str(path), draw_plate_scene())
    return str(path)


def test_plate_found(engine_factory, scene_file, tmp_path, capsys):
    created = engine_factory()
    out_dir = tmp_path / 'out'
    db = tmp_path / 'plates.db'
    code = cli.main(['--input', scene_file, '--out', str(out_dir), '--db', str(db), '--ocr', 'easyocr'])
    assert code == cli.EXIT_OK
    assert created[0]['backend'] == 'easyocr'
    assert 'Detected: AB123' in capsys.readouterr().out
    for suffix in ('plate', 'filtered', 'characters', 'annotated'):
        assert (out_dir / f'car_{suffix}.png').exists()
    rows = query_plates(db_path=str(db))
    assert [r[1] for r in rows] == ['AB123']


def test_no_db(engine_factory, scene_file, tmp_path):
    engine_factory()
    db = tmp_path / 'plates.db'
    code = cli.main(['--input', scene_file, '--out', str(tmp_path / 'out'), '--db', str(db), '--no-db'])
    assert code == cli.EXIT_OK
    assert not db.exists()


def test_no_plate(engine_factory, tmp_path):
    engine_factory()
    path = tmp_path / 'blank.png'
    cv2.imwrite(str(path), draw_plate_scene()[:40, :40].copy())
    code = cli.main(['--input', str(path), '--out', str(tmp_path / 'out'), '--no-db'])
    assert code == cli.EXIT_NO_PLATE


def test_unreadable_image(engine_factory, tmp_path):
    engine_factory()
    missing = cli.main(['--input', str(tmp_path / 'missing.png'), '--no-db'])
    blank = tmp_path / 'blank.png'
    cv2.imwrite(str(blank), draw_plate_scene()[:40, :40].copy())
    empty = cli.main(['--input', str(blank), '--out', str(tmp_path / 'out'), '--no-db'])
    assert missing == cli.EXIT_BAD_INPUT
    assert empty == cli.EXIT_NO_PLATE


def test_corrupt_image_file(engine_factory, tmp_path):
    engine_factory()
    path = tmp_path / 'car.png'
    path.write_bytes(b'not a png')
    assert cli.main(['--input', str(path), '--no-db']) == cli.EXIT_BAD_INPUT


def test_exit_codes_are_distinct():
    codes = [cli.EXIT_OK, cli.EXIT_NO_PLATE, cli.EXIT_CONFIG_ERROR, cli.EXIT_BAD_INPUT, cli.EXIT_RECOGNITION_ERROR]
    assert len(set(codes)) == len(codes)


def test_help_lists_exit_codes(capsys):
    with pytest.raises(SystemExit):
        cli.main(['--help'])
    out = capsys.readouterr().out
    assert 'exit codes:' in out
    assert '3  input image missing or unreadable' in out


def test_engine_config_error(engine_factory, scene_file):
    engine_factory(error=EngineConfigError('tesseract is not installed'))
    assert cli.main(['--input', scene_file, '--no-db']) == cli.EXIT_CONFIG_ERROR


def test_engine_error_during_recognition(engine_factory, scene_file, tmp_path):
    engine_factory(engine=FakeEngine(error=EngineError('crashed')))
    code = cli.main(['--input', scene_file, '--out', str(tmp_path / 'out'), '--no-db'])
    assert code == cli.EXIT_RECOGNITION_ERROR


def test_min_area_override(engine_factory, scene_file, tmp_path):
    engine_factory()
    code = cli.main(['--input', scene_file, '--out', str(tmp_path / 'out'), '--no-db', '--min-area', '1e6'])
    assert code == cli.EXIT_NO_PLATE

from plate_reader.database import init_db, insert_plate, query_plates


def test_query_missing_db_is_empty(tmp_path):
    assert query_plates(db_path=str(tmp_path / 'missing.db')) == []


def test_insert_and_query_newest_first(tmp_path):
    db = str(tmp_path / 'data' / 'plates.db')
    init_db(db)
    first = insert_plate('AB123', '2026-01-01T10:00:00', candidates=2, elapsed_ms=12.5, db_path=db)
    second = insert_plate('XY9', '2026-01-01T10:01:00', image_path='results/x.png', db_path=db)
    assert second > first

    rows = query_plates(db_path=db)
    assert [r[1] for r in rows] == ['XY9', 'AB123']
    assert rows[1] == (first, 'AB123', '2026-01-01T10:00:00', 2, 12.5, None)
    assert rows[0][5] == 'results/x.png'


def test_query_limit(tmp_path):
    db = str(tmp_path / 'plates.db')
    init_db(db)
    for i in range(5):
        insert_plate(f'P{i}', '2026-01-01', db_path=db)
    assert [r[1] for r in query_plates(limit=2, db_path=db)] == ['P4', 'P3']


def test_init_is_idempotent(tmp_path):
    db = str(tmp_path / 'plates.db')
    init_db(db)
    insert_plate('AB123', '2026-01-01', db_path=db)
    init_db(db)
    assert len(query_plates(db_path=db)) == 1

# Simple SQLite storage for recognized plates
import os
import sqlite3

from .config import DB_PATH


def init_db(db_path=DB_PATH):
    parent = os.path.dirname(db_path)
    if parent:
        os.makedirs(parent, exist_ok=True)
    conn = sqlite3.connect(db_path)
    c = conn.cursor()
    c.execute('''CREATE TABLE IF NOT EXISTS plates
                 (id INTEGER PRIMARY KEY AUTOINCREMENT,
                  plate TEXT,
                  timestamp TEXT,
                  candidates INTEGER,
                  elapsed_ms REAL,
                  image_path TEXT)''')
    conn.commit()
    conn.close()


def insert_plate(plate, timestamp, candidates=None, elapsed_ms=None, image_path=None, db_path=DB_PATH):
    conn = sqlite3.connect(db_path)
    c = conn.cursor()
    c.execute('INSERT INTO plates (plate, timestamp, candidates, elapsed_ms, image_path) VALUES (?,?,?,?,?)',
              (plate, timestamp, candidates, elapsed_ms, image_path))
    row_id = c.lastrowid
    conn.commit()
    conn.close()
    return row_id


def query_plates(limit=100, db_path=DB_PATH):
    if not os.path.exists(db_path):
        return []
    conn = sqlite3.connect(db_path)
    cur = conn.cursor()
    cur.execute('SELECT id, plate, timestamp, candidates, elapsed_ms, image_path FROM plates ORDER BY id DESC LIMIT ?',
                (limit,))
    rows = cur.fetchall()
    conn.close()
    return rows

# scripts/init_db.py
import sqlite3
import os

from filmlib.storage import SCHEMA

DB = os.path.join("data", "filmlib.db")
os.makedirs(os.path.dirname(DB), exist_ok=True)
with sqlite3.connect(DB) as c:
    c.executescript(SCHEMA)
    print("initialized db at", DB)

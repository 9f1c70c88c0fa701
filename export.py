# export.py
from __future__ import annotations
from pathlib import Path
import pandas as pd
from database import Database


def export_to_excel(db: Database, output_file: Path) -> int:
    assert db.conn is not None
    query = """
        SELECT date, time, temperature, humidity, fetched_at
        FROM readings
        ORDER BY id ASC
    """
    df = pd.read_sql_query(query, db.conn)
    df.to_excel(output_file, index=False, engine="openpyxl")
    return len(df)

"""Content store: CRUD and filtered queries over notes, questions, flashcards."""

import json
import re
import sqlite3

KINDS = {
    "notes": ("title", "content", "grade", "subject", "unit", "is_premium"),
    "questions": ("question_text", "options", "correct_answer", "subject", "grade", "unit"),
    "flashcards": ("front_text", "back_text", "grade", "subject", "unit", "is_premium"),
}

_SEARCH_COLUMNS = {
    "notes": ("title", "content"),
    "questions": ("question_text",),
    "flashcards": ("front_text", "back_text"),
}

_UNIT_NUMBER_RE = re.compile(r"\d+")


def _columns(kind: str) -> tuple[str, ...]:
    if kind not in KINDS:
        raise ValueError(f"Unknown record kind: {kind}")
    return KINDS[kind]


def _encode(column: str, value):
    if column == "options":
        return json.dumps(value or [])
    if column == "is_premium":
        return 1 if value else 0
    return value


def _decode(row: sqlite3.Row) -> dict:
    record = dict(row)
    if "options" in record:
        record["options"] = json.loads(record["options"]) if record["options"] else []
    if "is_premium" in record:
        record["is_premium"] = bool(record["is_premium"])
    return record


def insert_records(conn: sqlite3.Connection, kind: str, rows: list[dict]) -> list[int]:
    """Insert rows in one transaction. Returns the new ids in input order."""
    columns = _columns(kind)
    placeholders = ", ".join("?" * len(columns))
    ids = []
    with conn:
        for row in rows:
            cur = conn.execute(
                f"INSERT INTO {kind} ({', '.join(columns)}) VALUES ({placeholders})",
                [_encode(c, row.get(c)) for c in columns])
            ids.append(cur.lastrowid)
    return ids


def get_record(conn: sqlite3.Connection, kind: str, record_id: int) -> dict | None:
    _columns(kind)
    row = conn.execute(f"SELECT * FROM {kind} WHERE id=?", (record_id,)).fetchone()
    return _decode(row) if row else None


def update_record(conn: sqlite3.Connection, kind: str, record_id: int, fields: dict) -> bool:
    """Update the given known columns. Returns False if no such record."""
    columns = [c for c in _columns(kind) if c in fields]
    if not columns:
        return get_record(conn, kind, record_id) is not None
    assignments = ", ".join(f"{c}=?" for c in columns)
    cur = conn.execute(
        f"UPDATE {kind} SET {assignments} WHERE id=?",
        [_encode(c, fields[c]) for c in columns] + [record_id])
    conn.commit()
    return cur.rowcount > 0


def delete_record(conn: sqlite3.Connection, kind: str, record_id: int) -> bool:
    _columns(kind)
    cur = conn.execute(f"DELETE FROM {kind} WHERE id=?", (record_id,))
    conn.commit()
    return cur.rowcount > 0


def unit_filter(unit: str) -> tuple[str, list]:
    """SQL condition matching ``Unit 3`` as well as ``u3`` and ``unit3``."""
    conditions = ["unit = ?"]
    params = [unit]
    m = _UNIT_NUMBER_RE.search(unit)
    if m:
        conditions.extend(["unit LIKE ?", "unit LIKE ?"])
        params.extend([f"u{m.group(0)}", f"unit{m.group(0)}"])
    return "(" + " OR ".join(conditions) + ")", params


def query_records(conn: sqlite3.Connection, kind: str, subject: str | None = None,
                  grade: str | None = None, unit: str | None = None,
                  search: str | None = None, limit: int | None = None) -> list[dict]:
    _columns(kind)
    where = []
    params: list = []
    if subject:
        where.append("subject = ? COLLATE NOCASE")
        params.append(subject)
    if grade:
        where.append("grade = ?")
        params.append(grade)
    if unit:
        sql, unit_params = unit_filter(unit)
        where.append(sql)
        params.extend(unit_params)
    if search:
        cols = _SEARCH_COLUMNS[kind]
        where.append("(" + " OR ".join(f"{c} LIKE ?" for c in cols) + ")")
        params.extend([f"%{search}%"] * len(cols))

    sql = f"SELECT * FROM {kind}"
    if where:
        sql += " WHERE " + " AND ".join(where)
    sql += " ORDER BY created_at DESC, id DESC"
    if limit is not None:
        sql += " LIMIT ?"
        params.append(limit)
    return [_decode(r) for r in conn.execute(sql, params)]

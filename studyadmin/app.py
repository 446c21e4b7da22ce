"""App: central object that wires together data_dir, settings, db, and auth."""

import pathlib
import sqlite3

from studyadmin.auth import SubjectAuth
from studyadmin.config import get_data_dir, load_settings, load_subject_passwords
from studyadmin.db import init_db
from studyadmin.editor import BulkEditor


class App:
    """Holds all shared state for an admin session.

    Usage:
        app = App(data_dir="/path/to/data")
        app.init_db()                    # uses data_dir/studyadmin.db
        app.auth.login("Math", "secret")
        editor = app.bulk_editor("flashcards")
        app.close()

    For testing:
        app = App(data_dir=tmp_path, passwords={"Math": "pw"})
        app.init_db(":memory:")
    """

    def __init__(self, data_dir: pathlib.Path | str | None = None,
                 passwords: dict[str, str] | None = None):
        if data_dir is None:
            data_dir = get_data_dir()
        self.data_dir = pathlib.Path(data_dir)
        self.settings = load_settings(self.data_dir)
        if passwords is None:
            passwords = load_subject_passwords()
        self.auth = SubjectAuth(passwords, self.data_dir / "session")
        self.conn: sqlite3.Connection | None = None

    @property
    def db_path(self) -> pathlib.Path:
        return self.data_dir / "studyadmin.db"

    def init_db(self, db_path: pathlib.Path | str | None = None) -> sqlite3.Connection:
        """Initialize (or connect to) the database.

        Args:
            db_path: Path to the SQLite database file, or ":memory:" for
                     in-memory databases (useful for testing). Defaults to
                     data_dir/studyadmin.db.
        """
        if db_path is None:
            db_path = self.db_path
        self.conn = init_db(db_path)
        return self.conn

    def bulk_editor(self, kind: str, on_change=None, initial_content: str = "") -> BulkEditor:
        return BulkEditor(kind, on_change=on_change, initial_content=initial_content,
                          char_limit=self.settings.get("char_limit"))

    def close(self):
        """Close the database connection."""
        if self.conn:
            self.conn.close()
            self.conn = None

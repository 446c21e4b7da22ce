"""Configuration helpers: data directory discovery, settings, catalog constants."""

import os
import pathlib

ALL_GRADES = ["Grade 9", "Grade 10", "Grade 11", "Grade 12"]
ALL_UNITS = [f"Unit {i}" for i in range(1, 10)]
ALL_SUBJECTS = [
    "Math", "Physics", "Chemistry", "Biology", "History",
    "Geography", "Literature", "SAT", "Economics",
]
MAX_NOTE_LENGTH = 5000
BULK_CHAR_LIMIT = MAX_NOTE_LENGTH * 5


def get_data_dir() -> pathlib.Path:
    config_path = pathlib.Path.home() / ".config" / "studyadmin" / "config"
    if config_path.exists():
        for line in config_path.read_text().splitlines():
            line = line.strip()
            if line.startswith("DIR="):
                return pathlib.Path(line[4:].strip())
    return pathlib.Path.home() / ".local" / "share" / "studyadmin"


def load_settings(data_dir: pathlib.Path) -> dict:
    settings_path = data_dir / "settings.toml"
    settings = {"server_port": 8795, "char_limit": BULK_CHAR_LIMIT}
    if settings_path.exists():
        settings.update(_parse_toml_simple(settings_path.read_text()))
    return settings


def _parse_toml_simple(text: str) -> dict:
    """Minimal TOML parser for flat key=value files."""
    result = {}
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        if "=" in line:
            k, v = line.split("=", 1)
            k = k.strip()
            v = v.strip()
            if v.startswith('"') and v.endswith('"'):
                v = v[1:-1]
            elif v.isdigit():
                v = int(v)
            elif v == "true":
                v = True
            elif v == "false":
                v = False
            result[k] = v
    return result


def password_env_var(subject: str) -> str:
    """``Math`` -> ``MATH_PASSWORD``."""
    return f"{subject.upper().replace(' ', '_')}_PASSWORD"


def load_subject_passwords(environ=None) -> dict[str, str]:
    """Read one shared password per subject from the environment.

    Subjects without a non-empty variable are left out, so nobody can log
    into them.
    """
    if environ is None:
        environ = os.environ
    passwords = {}
    for subject in ALL_SUBJECTS:
        value = environ.get(password_env_var(subject), "")
        if value:
            passwords[subject] = value
    return passwords

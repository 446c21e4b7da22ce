"""Subject login: one shared password per subject, session kept in a file."""

import hmac
import pathlib

LOGIN_ERROR = "Incorrect subject or password."


class SubjectAuth:
    """Identity provider for the admin tool.

    The logged-in subject survives restarts through ``session_path``; pass
    ``None`` to keep the session in memory only (useful for testing).
    """

    def __init__(self, passwords: dict[str, str],
                 session_path: pathlib.Path | str | None = None):
        self.passwords = dict(passwords)
        self.session_path = pathlib.Path(session_path) if session_path else None
        self._subject: str | None = None
        if self.session_path is not None and self.session_path.exists():
            stored = self.session_path.read_text().strip()
            self._subject = stored or None

    def check(self, subject: str, password: str) -> bool:
        expected = self.passwords.get(subject, "")
        return bool(expected) and hmac.compare_digest(password.encode(), expected.encode())

    def login(self, subject: str, password: str) -> tuple[bool, str | None]:
        if not self.check(subject, password):
            return False, LOGIN_ERROR
        self._subject = subject
        if self.session_path is not None:
            self.session_path.parent.mkdir(parents=True, exist_ok=True)
            self.session_path.write_text(subject)
        return True, None

    def logout(self):
        self._subject = None
        if self.session_path is not None and self.session_path.exists():
            self.session_path.unlink()

    def current_subject(self) -> str | None:
        return self._subject

    def can_access(self, subject: str) -> bool:
        """Whether the logged-in subject may manage ``subject``'s content."""
        return self._subject is not None and self._subject.lower() == subject.lower()

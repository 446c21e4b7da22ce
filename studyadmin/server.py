"""Admin web server: bulk editor page, live parsing, and subject-scoped CRUD."""

import dataclasses
import http.server
import json
import urllib.parse
from importlib.resources import files

from studyadmin.config import BULK_CHAR_LIMIT, MAX_NOTE_LENGTH
from studyadmin.editor import BulkEditor
from studyadmin.models import ParsedFlashcard, ParsedOption, ParsedQuestion
from studyadmin.options import apply_option_edit, options_from_strings
from studyadmin.parsers import parse, parser_names
from studyadmin.records import (
    flashcard_rows, question_rows, row_to_question, validate_flashcards, validate_questions,
)
from studyadmin.store import (
    KINDS, delete_record, get_record, insert_records, query_records, update_record,
)


def _load_template(name: str) -> str:
    return files("studyadmin.templates").joinpath(name).read_text()


def _flashcard_from_dict(d: dict) -> ParsedFlashcard:
    return ParsedFlashcard(front_text=d.get("front_text") or "", back_text=d.get("back_text") or "")


def _options_from_list(values) -> list[ParsedOption]:
    """Options given as ``{key, text}`` objects or stored ``"k. text"`` strings."""
    options = []
    for o in values or []:
        if isinstance(o, dict):
            options.append(ParsedOption(key=o.get("key", ""), text=o.get("text", "")))
        else:
            options.extend(options_from_strings([str(o)]))
    return options


def _question_from_dict(d: dict) -> ParsedQuestion:
    return ParsedQuestion(
        question_text=d.get("question_text", ""),
        options=_options_from_list(d.get("options")),
        correct_answer=d.get("correct_answer", ""))


def _note_error(title: str, content: str, grade: str) -> str | None:
    if not title or not content or not grade:
        return "Please fill in the title, content, and grade."
    if len(content) > MAX_NOTE_LENGTH:
        return f"Note content exceeds {MAX_NOTE_LENGTH} characters."
    return None


class AdminHandler(http.server.BaseHTTPRequestHandler):
    conn = None
    auth = None
    settings: dict = {}

    def log_message(self, format, *args):
        pass

    def _json_response(self, data, status=200):
        body = json.dumps(data).encode()
        self.send_response(status)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def _error(self, status, msg):
        self._json_response({"error": msg}, status)

    def _read_body(self) -> dict:
        length = int(self.headers.get("Content-Length", 0))
        if length:
            return json.loads(self.rfile.read(length))
        return {}

    def _parse_path(self):
        parsed = urllib.parse.urlparse(self.path)
        return parsed.path, urllib.parse.parse_qs(parsed.query)

    def _subject(self) -> str | None:
        """Logged-in subject, or None after answering 401."""
        subject = self.auth.current_subject()
        if subject is None:
            self._error(401, "Not logged in")
        return subject

    def _owned_record(self, kind: str, raw_id: str) -> dict | None:
        try:
            record_id = int(raw_id)
        except ValueError:
            self._error(400, "Invalid record ID")
            return None
        record = get_record(self.conn, kind, record_id)
        if record is None or not self.auth.can_access(record.get("subject") or ""):
            self._error(404, "Record not found")
            return None
        return record

    def do_GET(self):
        path, qs = self._parse_path()
        parts = path.strip("/").split("/")

        if path == "/":
            body = _load_template("editor.html").encode()
            self.send_response(200)
            self.send_header("Content-Type", "text/html; charset=utf-8")
            self.send_header("Content-Length", str(len(body)))
            self.end_headers()
            self.wfile.write(body)

        elif path == "/api/session":
            self._json_response({"subject": self.auth.current_subject()})

        elif len(parts) == 2 and parts[0] == "api" and parts[1] in KINDS:
            subject = self._subject()
            if subject is None:
                return
            records = query_records(
                self.conn, parts[1], subject=subject,
                grade=qs.get("grade", [None])[0],
                unit=qs.get("unit", [None])[0],
                search=qs.get("q", [None])[0])
            self._json_response({"records": records, "total": len(records)})

        elif len(parts) == 3 and parts[0] == "api" and parts[1] in KINDS:
            if self._subject() is None:
                return
            record = self._owned_record(parts[1], parts[2])
            if record is not None:
                self._json_response(record)

        else:
            self._error(404, "Not found")

    def do_POST(self):
        path, _ = self._parse_path()
        parts = path.strip("/").split("/")
        try:
            body = self._read_body()
        except json.JSONDecodeError:
            self._error(400, "Invalid JSON body")
            return


        if path == "/api/login":
            ok, error = self.auth.login(body.get("subject", ""), body.get("password", ""))
            if ok:
                self._json_response({"ok": True, "subject": self.auth.current_subject()})
            else:
                self._error(401, error)

        elif path == "/api/logout":
            self.auth.logout()
            self._json_response({"ok": True})

        elif len(parts) == 3 and parts[:2] == ["api", "parse"]:
            kind = parts[2]
            if kind not in parser_names():
                self._error(404, f"Unknown parser: {kind}")
                return
            if body.get("markup"):
                editor = BulkEditor(kind, initial_content=body["markup"],
                                    char_limit=self.settings.get("char_limit", BULK_CHAR_LIMIT))
                records, raw_markup = editor.records, editor.raw_markup
            else:
                records, raw_markup = parse(kind, body.get("text", ""))
            self._json_response({
                "records": [dataclasses.asdict(r) for r in records],
                "raw_markup": raw_markup,
            })

        elif len(parts) == 2 and parts[0] == "api" and parts[1] in KINDS:
            subject = self._subject()
            if subject is None:
                return
            self._create(parts[1], subject, body)

        elif len(parts) == 4 and parts[0] == "api" and parts[1] in KINDS:
            if self._subject() is None:
                return
            kind, raw_id, action = parts[1], parts[2], parts[3]
            record = self._owned_record(kind, raw_id)
            if record is None:
                return
            if action == "delete":
                delete_record(self.conn, kind, record["id"])
                self._json_response({"ok": True})
            elif action == "update":
                fields, error = self._updated_fields(kind, record, body)
                if error:
                    self._error(400, error)
                    return
                update_record(self.conn, kind, record["id"], fields)
                self._json_response(get_record(self.conn, kind, record["id"]))
            else:
                self._error(404, "Not found")

        else:
            self._error(404, "Not found")

    def _create(self, kind: str, subject: str, body: dict):
        grade = body.get("grade", "")
        unit = body.get("unit", "")
        if kind == "flashcards":
            cards = [_flashcard_from_dict(d) for d in body.get("records", [])]
            error = validate_flashcards(cards, grade)
            rows = flashcard_rows(cards, subject, grade, unit, bool(body.get("is_premium")))
        elif kind == "questions":
            questions = [_question_from_dict(d) for d in body.get("records", [])]
            error = validate_questions(questions, grade)
            rows = question_rows(questions, subject, grade, unit)
        else:
            title = body.get("title", "")
            content = body.get("content", "")
            error = _note_error(title, content, grade)
            rows = [{"title": title, "content": content, "grade": grade, "unit": unit,
                     "subject": subject, "is_premium": bool(body.get("is_premium"))}]
        if error:
            self._error(400, error)
            return
        ids = insert_records(self.conn, kind, rows)
        self._json_response({"ok": True, "ids": ids})

    def _updated_fields(self, kind: str, record: dict, body: dict) -> tuple[dict | None, str | None]:
        """Merge ``body`` over ``record`` and validate the result.

        Questions also take ``option_edits``, a list of ``{"op", "index",
        "text"}`` edits applied in order after any ``options`` replacement.
        The record's subject never changes.
        """
        subject = record["subject"]
        grade = body.get("grade", record.get("grade")) or ""
        unit = body.get("unit", record.get("unit")) or ""
        premium = bool(body.get("is_premium", record.get("is_premium")))
        if kind == "flashcards":
            card = _flashcard_from_dict({**record, **body})
            error = validate_flashcards([card], grade)
            rows = flashcard_rows([card], subject, grade, unit, premium)
        elif kind == "questions":
            question = row_to_question(record)
            if "question_text" in body:
                question.question_text = body["question_text"] or ""
            if "options" in body:
                question.options = _options_from_list(body["options"])
            if "correct_answer" in body:
                question.correct_answer = body["correct_answer"] or ""
            for edit in body.get("option_edits", []):
                try:
                    apply_option_edit(question, edit)
                except (AttributeError, KeyError, IndexError, ValueError) as e:
                    return None, f"Invalid option edit: {e}"
            error = validate_questions([question], grade)
            rows = question_rows([question], subject, grade, unit)
        else:
            title = body.get("title", record.get("title")) or ""
            content = body.get("content", record.get("content")) or ""
            error = _note_error(title, content, grade)
            rows = [{"title": title, "content": content, "grade": grade, "unit": unit,
                     "subject": subject, "is_premium": premium}]
        return rows[0], error


def start_server(conn, auth, settings):
    import threading
    port = settings.get("server_port", 8795)
    AdminHandler.conn = conn
    AdminHandler.auth = auth
    AdminHandler.settings = settings

    server = http.server.HTTPServer(("127.0.0.1", port), AdminHandler)
    url = f"http://127.0.0.1:{port}"
    print(f"Admin server running at {url}")
    print(f"Press Ctrl+C to stop")

    try:
        import webbrowser
        threading.Timer(0.5, lambda: webbrowser.open(url)).start()
    except Exception:
        pass

    try:
        server.serve_forever()
    except KeyboardInterrupt:
        print("\nAdmin session ended.")
    finally:
        server.server_close()

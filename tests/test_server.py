"""HTTP integration tests for the admin server."""

import http.server
import json
import threading
import urllib.error
import urllib.request

import pytest

from studyadmin.db import init_db
from studyadmin.server import AdminHandler
from studyadmin.store import get_record, insert_records


def _setup_server(conn, auth):
    """Set up an admin server on an ephemeral port."""
    AdminHandler.conn = conn
    AdminHandler.auth = auth
    AdminHandler.settings = {}

    server = http.server.HTTPServer(("127.0.0.1", 0), AdminHandler)
    port = server.server_address[1]
    t = threading.Thread(target=server.serve_forever, daemon=True)
    t.start()
    return server, port


def _api(port, method, path, body=None):
    url = f"http://127.0.0.1:{port}{path}"
    data = json.dumps(body).encode() if body is not None else None
    req = urllib.request.Request(url, data=data, method=method)
    req.add_header("Content-Type", "application/json")
    with urllib.request.urlopen(req) as resp:
        return json.loads(resp.read())


def _api_status(port, method, path, body=None):
    """Like _api but returns (status_code, parsed_body) without raising."""
    url = f"http://127.0.0.1:{port}{path}"
    data = json.dumps(body).encode() if body is not None else None
    req = urllib.request.Request(url, data=data, method=method)
    req.add_header("Content-Type", "application/json")
    try:
        with urllib.request.urlopen(req) as resp:
            return resp.status, json.loads(resp.read())
    except urllib.error.HTTPError as e:
        return e.code, json.loads(e.read())


@pytest.fixture
def server(auth):
    conn = init_db(":memory:")
    srv, port = _setup_server(conn, auth)
    yield port, conn, auth
    srv.shutdown()
    srv.server_close()
    conn.close()


def _login(port, subject="Math", password="matthew123"):
    return _api(port, "POST", "/api/login", {"subject": subject, "password": password})


QUESTION = {
    "question_text": "2+2?",
    "options": [{"key": "a", "text": "3"}, {"key": "b", "text": "4"}],
    "correct_answer": "b. 4",
}


# ---------------------------------------------------------------------------
# Pages and session
# ---------------------------------------------------------------------------

class TestSession:
    def test_index_serves_editor(self, server):
        port, _, _ = server
        with urllib.request.urlopen(f"http://127.0.0.1:{port}/") as resp:
            assert resp.status == 200
            assert "text/html" in resp.headers["Content-Type"]
            assert b"<html" in resp.read().lower()

    def test_session_initially_empty(self, server):
        port, _, _ = server
        assert _api(port, "GET", "/api/session") == {"subject": None}

    def test_login_and_logout(self, server):
        port, _, _ = server
        assert _login(port) == {"ok": True, "subject": "Math"}
        assert _api(port, "GET", "/api/session") == {"subject": "Math"}
        assert _api(port, "POST", "/api/logout") == {"ok": True}
        assert _api(port, "GET", "/api/session") == {"subject": None}

    def test_login_wrong_password(self, server):
        port, _, _ = server
        status, body = _api_status(port, "POST", "/api/login",
                                   {"subject": "Math", "password": "nope"})
        assert status == 401
        assert body["error"] == "Incorrect subject or password."

    def test_invalid_json(self, server):
        port, _, _ = server
        req = urllib.request.Request(f"http://127.0.0.1:{port}/api/login",
                                     data=b"{not json", method="POST")
        with pytest.raises(urllib.error.HTTPError) as exc:
            urllib.request.urlopen(req)
        assert exc.value.code == 400

    def test_unknown_path(self, server):
        port, _, _ = server
        status, _ = _api_status(port, "GET", "/api/users")
        assert status == 404


# ---------------------------------------------------------------------------
# Live parsing
# ---------------------------------------------------------------------------

class TestParse:
    def test_parse_flashcard_text(self, server):
        port, _, _ = server
        result = _api(port, "POST", "/api/parse/flashcards", {"text": "A >> B\nC :: D"})
        assert result["records"] == [
            {"front_text": "A", "back_text": "B"},
            {"front_text": "C", "back_text": "D"},
        ]
        assert result["raw_markup"] == "<p>A &gt;&gt; B</p><p>C :: D</p>"

    def test_parse_question_markup(self, server):
        port, _, _ = server
        markup = ('<p>Q: 2+2?</p><p>a. 3</p>'
                  '<p><span class="correct-answer-indicator">b. 4</span></p>')
        result = _api(port, "POST", "/api/parse/questions", {"markup": markup})
        [q] = result["records"]
        assert q["options"] == QUESTION["options"]
        assert q["correct_answer"] == "b. 4"
        assert result["raw_markup"] == markup

    def test_parse_empty(self, server):
        port, _, _ = server
        assert _api(port, "POST", "/api/parse/questions", {}) == {"records": [], "raw_markup": ""}

    def test_parse_unknown_kind(self, server):
        port, _, _ = server
        status, _ = _api_status(port, "POST", "/api/parse/notes", {"text": "x"})
        assert status == 404

    def test_parse_text_starting_with_angle_bracket(self, server):
        port, _, _ = server
        result = _api(port, "POST", "/api/parse/flashcards", {"text": "<b> >> bold"})
        assert result["records"] == [{"front_text": "<b>", "back_text": "bold"}]
        assert result["raw_markup"] == "<p>&lt;b&gt; &gt;&gt; bold</p>"

    def test_parse_needs_no_login(self, server):
        port, _, auth = server
        assert auth.current_subject() is None
        result = _api(port, "POST", "/api/parse/flashcards", {"text": "A >> B"})
        assert len(result["records"]) == 1


# ---------------------------------------------------------------------------
# Records CRUD
# ---------------------------------------------------------------------------

class TestRecords:
    def test_list_requires_login(self, server):
        port, _, _ = server
        status, body = _api_status(port, "GET", "/api/flashcards")
        assert status == 401
        assert "error" in body

    def test_create_flashcards(self, server):
        port, conn, _ = server
        _login(port)
        result = _api(port, "POST", "/api/flashcards", {
            "grade": "Grade 10", "unit": "Unit 1", "is_premium": True,
            "records": [{"front_text": "A", "back_text": "B"}]})
        assert result["ok"] is True
        [cid] = result["ids"]
        record = _api(port, "GET", f"/api/flashcards/{cid}")
        assert record["subject"] == "Math"
        assert record["is_premium"] is True

    def test_create_flashcards_validation(self, server):
        port, _, _ = server
        _login(port)
        status, body = _api_status(port, "POST", "/api/flashcards", {
            "grade": "", "records": [{"front_text": "A", "back_text": "B"}]})
        assert status == 400
        assert "select a grade" in body["error"]

    def test_create_questions(self, server):
        port, _, _ = server
        _login(port)
        result = _api(port, "POST", "/api/questions", {"grade": "Grade 9", "records": [QUESTION]})
        [qid] = result["ids"]
        record = _api(port, "GET", f"/api/questions/{qid}")
        assert record["options"] == ["a. 3", "b. 4"]
        assert record["correct_answer"] == "b. 4"

    def test_create_question_without_answer(self, server):
        port, _, _ = server
        _login(port)
        status, _ = _api_status(port, "POST", "/api/questions", {
            "grade": "Grade 9", "records": [dict(QUESTION, correct_answer="")]})
        assert status == 400

    def test_create_note(self, server):
        port, _, _ = server
        _login(port)
        result = _api(port, "POST", "/api/notes",
                      {"title": "Cells", "content": "Basic unit", "grade": "Grade 9"})
        assert len(result["ids"]) == 1

    def test_create_note_too_long(self, server):
        port, _, _ = server
        _login(port)
        status, body = _api_status(port, "POST", "/api/notes",
                                   {"title": "T", "content": "x" * 5001, "grade": "Grade 9"})
        assert status == 400
        assert "5000" in body["error"]

    def test_list_scoped_to_subject(self, server):
        port, conn, _ = server
        insert_records(conn, "flashcards", [
            {"front_text": "A", "back_text": "1", "subject": "Math", "grade": "Grade 10", "unit": "U3"},
            {"front_text": "B", "back_text": "2", "subject": "Physics", "grade": "Grade 10"},
        ])
        _login(port)
        result = _api(port, "GET", "/api/flashcards?unit=Unit+3")
        assert result["total"] == 1
        assert result["records"][0]["front_text"] == "A"

    def test_other_subject_record_hidden(self, server):
        port, conn, _ = server
        [cid] = insert_records(conn, "flashcards", [
            {"front_text": "B", "back_text": "2", "subject": "Physics"}])
        _login(port)
        status, _ = _api_status(port, "GET", f"/api/flashcards/{cid}")
        assert status == 404
        status, _ = _api_status(port, "POST", f"/api/flashcards/{cid}/delete")
        assert status == 404

    def test_bad_record_id(self, server):
        port, _, _ = server
        _login(port)
        status, _ = _api_status(port, "GET", "/api/flashcards/abc")
        assert status == 400

    def test_update_and_delete(self, server):
        port, conn, _ = server
        [cid] = insert_records(conn, "flashcards", [
            {"front_text": "A", "back_text": "1", "subject": "Math", "grade": "Grade 10"}])
        _login(port)
        updated = _api(port, "POST", f"/api/flashcards/{cid}/update",
                       {"back_text": "one", "subject": "Physics"})
        assert updated["back_text"] == "one"
        assert updated["subject"] == "Math"
        assert _api(port, "POST", f"/api/flashcards/{cid}/delete") == {"ok": True}
        status, _ = _api_status(port, "GET", f"/api/flashcards/{cid}")
        assert status == 404

    def test_update_question_options_stored_as_strings(self, server):
        port, conn, _ = server
        _login(port)
        [qid] = _api(port, "POST", "/api/questions", {"grade": "Grade 9", "records": [QUESTION]})["ids"]
        updated = _api(port, "POST", f"/api/questions/{qid}/update", {
            "options": [{"key": "a", "text": "4"}, {"key": "b", "text": "5"}],
            "correct_answer": "a. 4"})
        assert updated["options"] == ["a. 4", "b. 5"]
        assert updated["correct_answer"] == "a. 4"
        assert updated["grade"] == "Grade 9"

    def test_update_question_option_edits(self, server):
        port, _, _ = server
        _login(port)
        [qid] = _api(port, "POST", "/api/questions", {"grade": "Grade 9", "records": [QUESTION]})["ids"]
        updated = _api(port, "POST", f"/api/questions/{qid}/update", {"option_edits": [
            {"op": "add"},
            {"op": "text", "index": 2, "text": "5"},
            {"op": "text", "index": 1, "text": "four"},
        ]})
        assert updated["options"] == ["a. 3", "b. four", "c. 5"]
        assert updated["correct_answer"] == "b. four"

    def test_update_question_removing_correct_option_refused(self, server):
        port, conn, _ = server
        _login(port)
        [qid] = _api(port, "POST", "/api/questions", {
            "grade": "Grade 9",
            "records": [dict(QUESTION, options=QUESTION["options"] + [{"key": "c", "text": "5"}])]})["ids"]
        status, body = _api_status(port, "POST", f"/api/questions/{qid}/update",
                                   {"option_edits": [{"op": "remove", "index": 1}]})
        assert status == 400
        assert "correct answer" in body["error"]
        assert get_record(conn, "questions", qid)["options"] == ["a. 3", "b. 4", "c. 5"]

    def test_update_question_bad_option_edit(self, server):
        port, _, _ = server
        _login(port)
        [qid] = _api(port, "POST", "/api/questions", {"grade": "Grade 9", "records": [QUESTION]})["ids"]
        status, body = _api_status(port, "POST", f"/api/questions/{qid}/update",
                                   {"option_edits": [{"op": "correct", "index": 7}]})
        assert status == 400
        assert "Invalid option edit" in body["error"]

    def test_update_question_answer_must_name_option(self, server):
        port, _, _ = server
        _login(port)
        [qid] = _api(port, "POST", "/api/questions", {"grade": "Grade 9", "records": [QUESTION]})["ids"]
        status, _ = _api_status(port, "POST", f"/api/questions/{qid}/update",
                                {"correct_answer": "d. 9"})
        assert status == 400

    def test_update_flashcard_validates(self, server):
        port, conn, _ = server
        [cid] = insert_records(conn, "flashcards", [
            {"front_text": "A", "back_text": "1", "subject": "Math", "grade": "Grade 10"}])
        _login(port)
        status, _ = _api_status(port, "POST", f"/api/flashcards/{cid}/update", {"back_text": ""})
        assert status == 400
        assert get_record(conn, "flashcards", cid)["back_text"] == "1"

    def test_update_note(self, server):
        port, conn, _ = server
        [nid] = insert_records(conn, "notes", [
            {"title": "Cells", "content": "x", "grade": "Grade 9", "subject": "Math"}])
        _login(port)
        updated = _api(port, "POST", f"/api/notes/{nid}/update", {"content": "Basic unit"})
        assert updated["content"] == "Basic unit"
        assert updated["title"] == "Cells"
        status, _ = _api_status(port, "POST", f"/api/notes/{nid}/update", {"content": "y" * 5001})
        assert status == 400

    def test_record_access_ignores_subject_case(self, server):
        port, conn, _ = server
        [cid] = insert_records(conn, "flashcards", [
            {"front_text": "A", "back_text": "1", "subject": "math"}])
        _login(port)
        assert _api(port, "GET", f"/api/flashcards/{cid}")["front_text"] == "A"

"""CLI: command-line interface for studyadmin."""

import argparse
import dataclasses
import getpass
import json
import pathlib
import sys

from studyadmin.app import App
from studyadmin.parsers import load_parser, parse, parser_names
from studyadmin.records import (
    flashcard_rows, question_rows, row_to_flashcard, row_to_question,
    validate_flashcards, validate_questions,
)
from studyadmin.store import KINDS, delete_record, get_record, insert_records, query_records


def _read_source(path: str | None) -> str:
    if not path or path == "-":
        return sys.stdin.read()
    return pathlib.Path(path).read_text()


def _require_subject(app: App) -> str | None:
    subject = app.auth.current_subject()
    if subject is None:
        print("Not logged in. Run 'studyadmin login SUBJECT' first.", file=sys.stderr)
    return subject


def cmd_login(args, app: App):
    password = args.password
    if password is None:
        password = getpass.getpass(f"Password for {args.subject}: ")
    ok, error = app.auth.login(args.subject, password)
    if not ok:
        print(error, file=sys.stderr)
        sys.exit(1)
    print(f"Logged in as {args.subject}")


def cmd_logout(args, app: App):
    app.auth.logout()
    print("Logged out")


def cmd_parse(args, app: App):
    text = _read_source(args.file)
    records, markup = parse(args.kind, text)
    out = {"records": [dataclasses.asdict(r) for r in records]}
    if args.markup:
        out["raw_markup"] = markup
    print(json.dumps(out, indent=2, ensure_ascii=False))


def cmd_import(args, app: App):
    subject = _require_subject(app)
    if subject is None:
        sys.exit(1)
    try:
        text = _read_source(args.file)
    except OSError as e:
        print(f"Error: cannot read {args.file}: {e}", file=sys.stderr)
        sys.exit(1)

    records, _markup = parse(args.kind, text)
    if args.kind == "flashcards":
        error = validate_flashcards(records, args.grade)
        rows = flashcard_rows(records, subject, args.grade, args.unit or "", args.premium)
    else:
        error = validate_questions(records, args.grade)
        rows = question_rows(records, subject, args.grade, args.unit or "")
    if error:
        print(f"Error: {error}", file=sys.stderr)
        sys.exit(1)

    app.init_db()
    ids = insert_records(app.conn, args.kind, rows)
    print(f"Imported {len(ids)} {args.kind} for {subject}")
    app.close()


def cmd_list(args, app: App):
    subject = _require_subject(app)
    if subject is None:
        sys.exit(1)
    app.init_db()
    records = query_records(app.conn, args.kind, subject=subject, grade=args.grade,
                            unit=args.unit, search=args.search)
    if not records:
        print(f"No {args.kind} found.")
    for r in records:
        if args.kind == "flashcards":
            summary = r["front_text"]
        elif args.kind == "questions":
            summary = r["question_text"] or ""
        else:
            summary = r["title"] or ""
        summary = summary.splitlines()[0] if summary else ""
        print(f"{r['id']:>5}  {r['grade'] or '-':<9} {r['unit'] or '-':<7} {summary[:70]}")
    app.close()


def cmd_delete(args, app: App):
    subject = _require_subject(app)
    if subject is None:
        sys.exit(1)
    app.init_db()
    record = get_record(app.conn, args.kind, args.id)
    if record is None or not app.auth.can_access(record.get("subject") or ""):
        print(f"Error: no {args.kind} record {args.id} for {subject}", file=sys.stderr)
        app.close()
        sys.exit(1)
    delete_record(app.conn, args.kind, args.id)
    print(f"Deleted {args.kind} record {args.id}")
    app.close()


def cmd_export(args, app: App):
    subject = _require_subject(app)
    if subject is None:
        sys.exit(1)
    app.init_db()
    rows = query_records(app.conn, args.kind, subject=subject, grade=args.grade, unit=args.unit)
    rows.reverse()
    to_record = row_to_flashcard if args.kind == "flashcards" else row_to_question
    parser = load_parser(args.kind)
    records = []
    for row in rows:
        record = to_record(row)
        if not parser.round_trips(record):
            print(f"Warning: {args.kind} record {row['id']} will not parse back unchanged",
                  file=sys.stderr)
        records.append(record)
    print(parser.format(records))
    app.close()


def cmd_status(args, app: App):
    subject = app.auth.current_subject()
    print(f"Subject:        {subject or '(not logged in)'}")
    if not app.db_path.exists():
        print("No database found. Run 'studyadmin import' first.")
        return
    app.init_db()
    for kind in KINDS:
        where, params = "", []
        if subject:
            where, params = " WHERE subject = ? COLLATE NOCASE", [subject]
        cnt = app.conn.execute(f"SELECT COUNT(*) as cnt FROM {kind}{where}", params).fetchone()["cnt"]
        print(f"{kind.capitalize() + ':':<15} {cnt}")
    app.close()


def cmd_serve(args, app: App):
    from studyadmin.server import start_server

    app.init_db()
    if args.port:
        app.settings = dict(app.settings)
        app.settings["server_port"] = args.port
    start_server(app.conn, app.auth, app.settings)
    app.close()


def main():
    parser = argparse.ArgumentParser(prog="studyadmin", description="Study content admin")
    subparsers = parser.add_subparsers(dest="command")

    p_login = subparsers.add_parser("login", help="Log in to a subject")
    p_login.add_argument("subject")
    p_login.add_argument("--password", help="Subject password (prompted if omitted)")

    subparsers.add_parser("logout", help="End the current session")

    p_parse = subparsers.add_parser("parse", help="Parse bulk text and print records as JSON")
    p_parse.add_argument("kind", choices=parser_names())
    p_parse.add_argument("file", nargs="?", help="Input file (default: stdin)")
    p_parse.add_argument("--markup", action="store_true", help="Include the raw HTML markup")

    p_import = subparsers.add_parser("import", help="Parse bulk text and save the records")
    p_import.add_argument("kind", choices=parser_names())
    p_import.add_argument("file", help="Input file ('-' for stdin)")
    p_import.add_argument("--grade", default="", help="Grade, e.g. 'Grade 10'")
    p_import.add_argument("--unit", help="Unit, e.g. 'Unit 3'")
    p_import.add_argument("--premium", action="store_true", help="Mark flashcards as premium")

    p_list = subparsers.add_parser("list", help="List saved records")
    p_list.add_argument("kind", choices=sorted(KINDS))
    p_list.add_argument("--grade")
    p_list.add_argument("--unit")
    p_list.add_argument("--search")

    p_delete = subparsers.add_parser("delete", help="Delete a saved record")
    p_delete.add_argument("kind", choices=sorted(KINDS))
    p_delete.add_argument("id", type=int)

    p_export = subparsers.add_parser("export", help="Print saved records as bulk text")
    p_export.add_argument("kind", choices=parser_names())
    p_export.add_argument("--grade")
    p_export.add_argument("--unit")

    subparsers.add_parser("status", help="Show session and record counts")

    p_serve = subparsers.add_parser("serve", help="Start the admin web server")
    p_serve.add_argument("--port", type=int, help="Server port (default: server_port setting)")

    args = parser.parse_args()
    if not args.command:
        parser.print_help()
        sys.exit(1)

    app = App()
    if not app.data_dir.exists():
        app.data_dir.mkdir(parents=True, exist_ok=True)
        print(f"Created data directory: {app.data_dir}", file=sys.stderr)

    commands = {
        "login": cmd_login,
        "logout": cmd_logout,
        "parse": cmd_parse,
        "import": cmd_import,
        "list": cmd_list,
        "delete": cmd_delete,
        "export": cmd_export,
        "status": cmd_status,
        "serve": cmd_serve,
    }
    commands[args.command](args, app)

"""Bulk parsers with a built-in registry.

Each parser module exposes a ``Parser`` class with ``parse(text)`` and
``format(records)``. The module-level helpers return the parsed records
together with the raw editor markup so the host can keep both.
"""

import importlib

from studyadmin.markup import text_to_html
from studyadmin.models import ParsedFlashcard, ParsedQuestion

_BUILTIN_PARSERS = {
    "flashcards": "studyadmin.parsers.flashcards",
    "questions": "studyadmin.parsers.questions",
}


def parser_names() -> list[str]:
    return sorted(_BUILTIN_PARSERS)


def load_parser(name: str):
    if name not in _BUILTIN_PARSERS:
        raise FileNotFoundError(f"Parser not found: {name}")
    mod = importlib.import_module(_BUILTIN_PARSERS[name])
    return mod.Parser()


def parse(name: str, text: str, markup: str | None = None) -> tuple[list, str]:
    """Parse plain text with the named parser.

    ``markup`` is the editor's own serialized form and is passed through
    unchanged; without it, the markup is derived from the text.
    """
    records = load_parser(name).parse(text)
    if markup is None:
        markup = text_to_html(text)
    return records, markup


def parse_flashcards(text: str, markup: str | None = None
                     ) -> tuple[list[ParsedFlashcard], str]:
    return parse("flashcards", text, markup)


def parse_questions(text: str, markup: str | None = None
                    ) -> tuple[list[ParsedQuestion], str]:
    return parse("questions", text, markup)

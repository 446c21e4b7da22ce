"""Editor input rules: cosmetic rewrites of typed character sequences.

A rule's pattern is matched against the cursor block's text up to the cursor
after every typed character, and must end at the cursor. Rules never run on
pasted text. They only change what the admin sees; the parsers re-derive
everything from the plain-text projection, which keeps every rewrite
recognizable (the ``↓`` glyph is a flashcard separator, and the
correct-answer mark projects back to a trailing ``<``).
"""

import re
from dataclasses import dataclass
from typing import Callable

from studyadmin.markup import CORRECT_ANSWER_MARK
from studyadmin.parsers.flashcards import SEPARATOR_GLYPH


@dataclass
class InputRule:
    find: re.Pattern
    handler: Callable  # (document, start, end, match) -> None


def _replace_and_split(glyph: str):
    def handler(doc, start, end, match):
        doc.replace_range(start, end, glyph)
        doc.split_block()
    return handler


def _replace(glyph: str):
    def handler(doc, start, end, match):
        doc.replace_range(start, end, glyph)
    return handler


def _line_break(doc, start, end, match):
    doc.delete_range(start, end)
    doc.split_block()


def _mark_correct(doc, start, end, match):
    doc.delete_range(start, end)
    doc.add_mark(CORRECT_ANSWER_MARK)


FLASHCARD_RULES = [
    InputRule(re.compile(r">>$"), _replace_and_split(f" {SEPARATOR_GLYPH} ")),
    InputRule(re.compile(r"::$"), _replace_and_split(f" {SEPARATOR_GLYPH} ")),
]

QUESTION_RULES = [
    InputRule(re.compile(r"(>>|::)$"), _replace(f" {SEPARATOR_GLYPH}")),
    InputRule(re.compile(r"/n$"), _line_break),
    InputRule(re.compile(r"(\s*<|\s*\*)$"), _mark_correct),
]

_RULES = {
    "flashcards": FLASHCARD_RULES,
    "questions": QUESTION_RULES,
}


def rules_for(kind: str) -> list[InputRule]:
    return list(_RULES.get(kind, []))


def apply_input_rules(doc, rules: list[InputRule]) -> bool:
    """Run the first rule matching at the cursor. Returns True if one fired."""
    before = doc.text_before_cursor()
    for rule in rules:
        m = rule.find.search(before)
        if m:
            rule.handler(doc, m.start(), m.end(), m)
            return True
    return False

"""Question bulk parser: multiple-choice questions from freeform text.

Syntax:
    Q: What is 2+2?         also "Question:" or "1." (case-insensitive)
    a. 3                    option: letter, optional . or :, whitespace
    b. 4 <                  trailing < (or *) marks the correct option
    c. 5
    ---                     block separator

A non-option line while a question is open continues the question text.
The first line of a block without a marker opens a question on its own.
Questions need text, at least one option and a correct answer to be kept.
When several options carry the marker, the last one wins.
"""

import re

from studyadmin.models import ParsedOption, ParsedQuestion
from studyadmin.parsers.base import BLOCK_SEPARATOR, RecordAccumulator

CORRECT_MARKERS = ("<", "*")

_QUESTION_RE = re.compile(r"^(Q:|Question:|\d+\.)\s*(.*)$", re.IGNORECASE)
_OPTION_RE = re.compile(r"^([a-zA-Z])[.:]?\s+(.*)$")


def _strip_marker(text: str) -> tuple[str, bool]:
    """Remove a trailing correct-answer marker. Returns (text, was_marked)."""
    for marker in CORRECT_MARKERS:
        if text.endswith(marker):
            return text[:-len(marker)].strip(), True
    return text, False


def _append_text(question: ParsedQuestion, line: str):
    question.question_text = f"{question.question_text}\n{line}".strip()


class QuestionAccumulator(RecordAccumulator):
    def is_complete(self, question: ParsedQuestion) -> bool:
        return question.is_complete()

    def feed(self, line: str):
        line = line.strip()

        m = _QUESTION_RE.match(line)
        if m:
            self.start(ParsedQuestion(question_text=m.group(2).strip()))
            return

        if self.current is None:
            self.current = ParsedQuestion(question_text=line)
            return

        m = _OPTION_RE.match(line)
        if m:
            key = m.group(1).lower()
            text, marked = _strip_marker(m.group(2).strip())
            option = ParsedOption(key=key, text=text)
            if marked:
                self.current.correct_answer = option.formatted()
            self.current.options.append(option)
            return

        _append_text(self.current, line)


class Parser:
    name = "questions"

    def parse(self, text: str) -> list[ParsedQuestion]:
        return QuestionAccumulator().run(text)

    def format(self, questions: list[ParsedQuestion]) -> str:
        """Render questions back into bulk-editor text.

        The correct option gets a trailing `` <``. Question text with a line
        that looks like an option, or option text ending in ``<`` or ``*``,
        does not survive a second parse; check with ``round_trips``.
        """
        blocks = []
        for q in questions:
            lines = [f"Q: {q.question_text}"]
            for opt in q.options:
                line = opt.formatted()
                if line == q.correct_answer:
                    line += f" {CORRECT_MARKERS[0]}"
                lines.append(line)
            blocks.append("\n".join(lines))
        return f"\n{BLOCK_SEPARATOR}\n".join(blocks)

    def round_trips(self, question: ParsedQuestion) -> bool:
        """Whether ``question`` parses back unchanged from its formatted text."""
        return self.parse(self.format([question])) == [question]


def format_questions(questions: list[ParsedQuestion]) -> str:
    return Parser().format(questions)

"""Option editing for a single question, plus the stored ``"k. text"`` form.

``correct_answer`` is a denormalized copy of the correct option's formatted
text, not a reference. Every edit below keeps it either equal to exactly one
option's formatted form or empty.
"""

import re

from studyadmin.models import ParsedOption, ParsedQuestion, format_option, option_key

MIN_OPTIONS = 2
MAX_OPTIONS = 5

_STORED_OPTION_RE = re.compile(r"^([a-zA-Z])[.:]?\s*(.*)", re.DOTALL)


def add_option(question: ParsedQuestion) -> bool:
    """Append an empty option with the next letter. No-op at MAX_OPTIONS."""
    if len(question.options) >= MAX_OPTIONS:
        return False
    question.options.append(ParsedOption(key=option_key(len(question.options)), text=""))
    return True


def remove_option(question: ParsedQuestion, index: int) -> bool:
    """Remove an option and re-key the rest densely from ``a``.

    ``correct_answer`` is cleared when the removed option was correct or sat
    after the removed one, since its letter changes either way. It is also
    cleared when it named no option to begin with.
    """
    if len(question.options) <= MIN_OPTIONS:
        return False
    correct = question.correct_index()
    del question.options[index]
    question.options = [ParsedOption(key=option_key(i), text=opt.text)
                        for i, opt in enumerate(question.options)]
    if correct is None or correct >= index:
        question.correct_answer = ""
    return True


def update_option_text(question: ParsedQuestion, index: int, text: str):
    old = question.options[index]
    was_correct = question.correct_answer == old.formatted()
    question.options[index] = ParsedOption(key=old.key, text=text)
    if was_correct:
        question.correct_answer = format_option(old.key, text)


def set_correct_answer(question: ParsedQuestion, index: int):
    question.correct_answer = question.options[index].formatted()


def apply_option_edit(question: ParsedQuestion, edit: dict) -> bool:
    """Apply one ``{"op": ..., "index": ..., "text": ...}`` edit.

    Ops are ``add``, ``remove``, ``text`` and ``correct``. Returns False when
    an add or remove is refused by the option bounds.
    """
    op = edit.get("op")
    if op == "add":
        return add_option(question)
    if op not in ("remove", "text", "correct"):
        raise ValueError(f"Unknown option edit: {op}")
    index = edit["index"]
    if not isinstance(index, int) or not 0 <= index < len(question.options):
        raise IndexError(f"Option index out of range: {index}")
    if op == "remove":
        return remove_option(question, index)
    if op == "text":
        update_option_text(question, index, edit.get("text", ""))
    else:
        set_correct_answer(question, index)
    return True


def options_to_strings(options: list[ParsedOption]) -> list[str]:
    return [opt.formatted() for opt in options]


def options_from_strings(values: list[str] | None) -> list[ParsedOption]:
    """Parse stored ``"k. text"`` strings. Unmatched strings get an empty key."""
    options = []
    for value in values or []:
        m = _STORED_OPTION_RE.match(value or "")
        if m:
            options.append(ParsedOption(key=m.group(1).lower(), text=m.group(2).strip()))
        else:
            options.append(ParsedOption(key="", text=value or ""))
    return options

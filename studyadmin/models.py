"""Shared data classes used across the parsers, editor, and store."""

from dataclasses import dataclass, field


def format_option(key: str, text: str) -> str:
    """The stored form of an option, e.g. ``"b. 4"``."""
    return f"{key}. {text}"


def option_key(index: int) -> str:
    return chr(ord("a") + index)


@dataclass
class ParsedFlashcard:
    front_text: str
    back_text: str

    def is_complete(self) -> bool:
        return bool(self.front_text.strip()) and bool(self.back_text.strip())


@dataclass
class ParsedOption:
    key: str
    text: str

    def formatted(self) -> str:
        return format_option(self.key, self.text)


@dataclass
class ParsedQuestion:
    question_text: str
    options: list[ParsedOption] = field(default_factory=list)
    correct_answer: str = ""

    def is_complete(self) -> bool:
        return (bool(self.question_text.strip())
                and len(self.options) > 0
                and bool(self.correct_answer.strip()))

    def correct_index(self) -> int | None:
        """Index of the option whose formatted form equals correct_answer."""
        if not self.correct_answer:
            return None
        for i, opt in enumerate(self.options):
            if opt.formatted() == self.correct_answer:
                return i
        return None


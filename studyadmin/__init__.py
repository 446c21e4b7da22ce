"""studyadmin: bulk content editor and admin tool for study material."""

__version__ = "0.1.0"

from studyadmin.models import ParsedFlashcard, ParsedOption, ParsedQuestion
from studyadmin.parsers import parse_flashcards, parse_questions
from studyadmin.app import App

__all__ = [
    "App", "ParsedFlashcard", "ParsedOption", "ParsedQuestion",
    "parse_flashcards", "parse_questions",
]

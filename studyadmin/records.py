"""Pre-submit validation and store rows built from parsed records."""

from studyadmin.models import ParsedFlashcard, ParsedQuestion
from studyadmin.options import options_from_strings, options_to_strings

FLASHCARD_ERROR = "Please select a grade and ensure all flashcards have front and back text."
QUESTION_ERROR = ("Please select a grade and ensure all questions have text, "
                  "options, and a correct answer.")


def validate_flashcards(cards: list[ParsedFlashcard], grade: str) -> str | None:
    """Return a user-facing error message, or None if the cards can be saved."""
    if (not grade or not cards
            or any(not c.front_text or not c.back_text for c in cards)):
        return FLASHCARD_ERROR
    return None


def validate_questions(questions: list[ParsedQuestion], grade: str) -> str | None:
    if (not grade or not questions
            or any(not q.question_text or not q.options or q.correct_index() is None
                   for q in questions)):
        return QUESTION_ERROR
    return None


def flashcard_rows(cards: list[ParsedFlashcard], subject: str, grade: str,
                   unit: str = "", is_premium: bool = False) -> list[dict]:
    return [{
        "front_text": c.front_text,
        "back_text": c.back_text,
        "subject": subject,
        "grade": grade,
        "unit": unit,
        "is_premium": is_premium,
    } for c in cards]


def question_rows(questions: list[ParsedQuestion], subject: str, grade: str,
                  unit: str = "") -> list[dict]:
    return [{
        "question_text": q.question_text,
        "options": options_to_strings(q.options),
        "correct_answer": q.correct_answer,
        "subject": subject,
        "grade": grade,
        "unit": unit,
    } for q in questions]


def row_to_flashcard(row: dict) -> ParsedFlashcard:
    return ParsedFlashcard(front_text=row.get("front_text") or "",
                           back_text=row.get("back_text") or "")


def row_to_question(row: dict) -> ParsedQuestion:
    return ParsedQuestion(question_text=row.get("question_text") or "",
                          options=options_from_strings(row.get("options")),
                          correct_answer=row.get("correct_answer") or "")

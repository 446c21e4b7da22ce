"""Flashcard bulk parser: front/back pairs from freeform text.

Syntax:
    Front >> Back           inline separator
    Front :: Back           same
    Front ↓                 the glyph the editor substitutes for >> / ::
    more back text          continuation lines extend the back
    ---                     explicit card boundary

A card only begins at a separator line. Lines seen before any separator are
ignored, and cards missing either side are dropped at flush time.
"""

from dataclasses import dataclass, field

from studyadmin.models import ParsedFlashcard
from studyadmin.parsers.base import BLOCK_SEPARATOR, RecordAccumulator

SEPARATOR_GLYPH = "↓"
INLINE_SEPARATORS = (">>", "::")


@dataclass
class _CardDraft:
    front: str
    back_lines: list[str] = field(default_factory=list)


def _find_separator(line: str) -> tuple[int, int] | None:
    """Return (index, length) of the separator to split on, or None.

    The editor glyph wins over the typed forms, then ``>>`` over ``::``.
    """
    idx = line.find(SEPARATOR_GLYPH)
    if idx != -1:
        return idx, len(SEPARATOR_GLYPH)
    for sep in INLINE_SEPARATORS:
        idx = line.find(sep)
        if idx != -1:
            return idx, len(sep)
    return None


class FlashcardAccumulator(RecordAccumulator):
    def is_complete(self, draft: _CardDraft) -> bool:
        return bool(draft.front.strip()) and bool("\n".join(draft.back_lines).strip())

    def finish(self, draft: _CardDraft) -> ParsedFlashcard:
        return ParsedFlashcard(front_text=draft.front.strip(),
                               back_text="\n".join(draft.back_lines).strip())

    def feed(self, line: str):
        found = _find_separator(line)
        if found is not None:
            idx, length = found
            after = line[idx + length:].lstrip()
            self.start(_CardDraft(front=line[:idx].strip(),
                                  back_lines=[after] if after else []))
        elif self.current is not None and self.current.front:
            self.current.back_lines.append(line)
        # orphan line: no card can begin without a separator


class Parser:
    name = "flashcards"

    def parse(self, text: str) -> list[ParsedFlashcard]:
        return FlashcardAccumulator().run(text)

    def format(self, cards: list[ParsedFlashcard]) -> str:
        """Render cards back into bulk-editor text.

        A back line that itself contains ``>>``, ``::`` or ``↓`` reads as a new
        card when parsed again; check with ``round_trips``.
        """
        blocks = [f"{card.front_text} >> {card.back_text}" for card in cards]
        return f"\n{BLOCK_SEPARATOR}\n".join(blocks)

    def round_trips(self, card: ParsedFlashcard) -> bool:
        """Whether ``card`` parses back unchanged from its formatted text."""
        return self.parse(self.format([card])) == [card]


def format_flashcards(cards: list[ParsedFlashcard]) -> str:
    return Parser().format(cards)

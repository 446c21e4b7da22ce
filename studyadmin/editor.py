"""Bulk editor: a block document with a cursor, wired to a bulk parser.

``EditorDocument`` is the editing surface: paragraphs, a cursor, typed input
with input rules, paste without them. ``BulkEditor`` re-parses the plain-text
projection after every change and hands ``(records, raw_markup)`` to the host.
"""

from typing import Callable

from studyadmin.config import BULK_CHAR_LIMIT
from studyadmin.input_rules import apply_input_rules, rules_for
from studyadmin.markup import (
    Block, blocks_to_html, blocks_to_text, html_to_blocks, text_to_blocks,
)
from studyadmin.parsers import load_parser


class EditorDocument:
    def __init__(self, blocks: list[Block] | None = None, rules=None):
        self.rules = list(rules or [])
        self.blocks: list[Block] = []
        self.cursor: tuple[int, int] = (0, 0)
        self.set_blocks(blocks or [])

    @classmethod
    def from_html(cls, markup: str, rules=None) -> "EditorDocument":
        return cls(html_to_blocks(markup), rules)

    @classmethod
    def from_text(cls, text: str, rules=None) -> "EditorDocument":
        return cls(text_to_blocks(text), rules)

    def set_blocks(self, blocks: list[Block]):
        """Replace the content; the cursor moves to the end."""
        self.blocks = list(blocks) or [Block()]
        last = len(self.blocks) - 1
        self.cursor = (last, len(self.blocks[last].text))

    def move_cursor(self, block_index: int, offset: int):
        if not 0 <= block_index < len(self.blocks):
            raise IndexError(f"No block at index {block_index}")
        text = self.blocks[block_index].text
        self.cursor = (block_index, max(0, min(offset, len(text))))

    @property
    def current_block(self) -> Block:
        return self.blocks[self.cursor[0]]

    def text_before_cursor(self) -> str:
        return self.current_block.text[:self.cursor[1]]

    def replace_range(self, start: int, end: int, text: str):
        """Replace [start, end) of the cursor block; the cursor lands after ``text``."""
        block = self.current_block
        block.text = block.text[:start] + text + block.text[end:]
        self.cursor = (self.cursor[0], start + len(text))

    def delete_range(self, start: int, end: int):
        self.replace_range(start, end, "")

    def split_block(self):
        """Split at the cursor. The new block starts empty of marks."""
        index, offset = self.cursor
        block = self.blocks[index]
        tail = block.text[offset:]
        block.text = block.text[:offset]
        self.blocks.insert(index + 1, Block(text=tail))
        self.cursor = (index + 1, 0)

    def add_mark(self, mark: str):
        self.current_block.marks.add(mark)

    def insert_text(self, text: str, apply_rules: bool = True):
        """Insert at the cursor one character at a time, as if typed."""
        for ch in text:
            if ch == "\n":
                self.split_block()
                continue
            _, offset = self.cursor
            self.replace_range(offset, offset, ch)
            if apply_rules:
                apply_input_rules(self, self.rules)

    def paste(self, text: str):
        self.insert_text(text.replace("\r\n", "\n").replace("\r", "\n"), apply_rules=False)

    def character_count(self) -> int:
        return sum(len(b.text) for b in self.blocks)

    def get_text(self) -> str:
        return blocks_to_text(self.blocks)

    def get_html(self) -> str:
        return blocks_to_html(self.blocks)


class BulkEditor:
    """Host-facing adapter: one parser kind, one document, one change callback.

    Usage:
        editor = BulkEditor("questions", on_change=handle)
        editor.type("Q: 2+2?\\na. 3\\nb. 4 <")
        editor.records  # [ParsedQuestion(...)]
    """

    def __init__(self, kind: str, on_change: Callable[[list, str], None] | None = None,
                 initial_content: str = "", char_limit: int = BULK_CHAR_LIMIT):
        self.kind = kind
        self.parser = load_parser(kind)
        self.on_change = on_change
        self.char_limit = char_limit
        self.document = EditorDocument(rules=rules_for(kind))
        self.records: list = []
        self.raw_markup = ""
        self.set_content(initial_content)

    def set_content(self, markup: str):
        """Load saved markup (or plain text) and re-parse."""
        if markup.lstrip().startswith("<"):
            self.document.set_blocks(html_to_blocks(markup))
        else:
            self.document.set_blocks(text_to_blocks(markup))
        self._emit()

    def _fits(self, text: str) -> bool:
        added = len(text.replace("\n", ""))
        return self.document.character_count() + added <= self.char_limit

    def type(self, text: str) -> bool:
        """Type text at the cursor. Returns False if it would exceed the limit."""
        if not self._fits(text):
            return False
        self.document.insert_text(text)
        self._emit()
        return True

    def paste(self, text: str) -> bool:
        if not self._fits(text):
            return False
        self.document.paste(text)
        self._emit()
        return True

    def _emit(self):
        self.records = self.parser.parse(self.document.get_text())
        self.raw_markup = self.document.get_html()
        if self.on_change is not None:
            self.on_change(self.records, self.raw_markup)

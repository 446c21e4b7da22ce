"""Rich-text markup: editor blocks to HTML and back, and the plain-text projection.

The markup mirrors what a ProseMirror-style editor serializes: one ``<p>`` per
block, with the correct-answer mark rendered as a highlighted ``<span>``.
Marks are block-level here; inline styling tags are flattened to text when
markup is read back.
"""

import html
import re
from dataclasses import dataclass, field
from html.parser import HTMLParser

CORRECT_ANSWER_MARK = "correctAnswer"
CORRECT_ANSWER_CLASS = "correct-answer-indicator"
CORRECT_ANSWER_SUFFIX = " <"

_BLOCK_TAGS = {"p", "h1", "h2", "h3", "h4", "h5", "h6", "li", "blockquote", "pre", "div"}
_NEWLINE_RE = re.compile(r"\r\n?")


@dataclass
class Block:
    text: str = ""
    marks: set[str] = field(default_factory=set)


def text_to_blocks(text: str) -> list[Block]:
    if not text:
        return []
    return [Block(text=line) for line in _NEWLINE_RE.sub("\n", text).split("\n")]


def block_text(block: Block) -> str:
    """Plain-text projection of one block.

    A block carrying the correct-answer mark ends with `` <`` so the question
    parser sees the marker the input rule removed from the visible text.
    """
    if CORRECT_ANSWER_MARK in block.marks and block.text.strip():
        return block.text.rstrip() + CORRECT_ANSWER_SUFFIX
    return block.text


def blocks_to_text(blocks: list[Block]) -> str:
    return "\n".join(block_text(b) for b in blocks)


def blocks_to_html(blocks: list[Block]) -> str:
    if not any(b.text for b in blocks):
        return ""
    parts = []
    for block in blocks:
        inner = html.escape(block.text, quote=False)
        if CORRECT_ANSWER_MARK in block.marks and inner:
            inner = f'<span class="{CORRECT_ANSWER_CLASS}">{inner}</span>'
        parts.append(f"<p>{inner}</p>")
    return "".join(parts)


def text_to_html(text: str) -> str:
    return blocks_to_html(text_to_blocks(text))


class _BlockCollector(HTMLParser):
    def __init__(self):
        super().__init__(convert_charrefs=True)
        self.blocks: list[Block] = []
        self._current: Block | None = None

    def _close(self):
        if self._current is not None:
            self.blocks.append(self._current)
            self._current = None

    def handle_starttag(self, tag, attrs):
        if tag in _BLOCK_TAGS:
            # <li><p>..</p></li> is one block, not two
            if self._current is None or self._current.text:
                self._close()
                self._current = Block()
        elif tag == "br":
            self._close()
            self._current = Block()
        elif tag == "span":
            classes = (dict(attrs).get("class") or "").split()
            if CORRECT_ANSWER_CLASS in classes:
                if self._current is None:
                    self._current = Block()
                self._current.marks.add(CORRECT_ANSWER_MARK)

    def handle_endtag(self, tag):
        if tag in _BLOCK_TAGS:
            self._close()

    def handle_data(self, data):
        if self._current is None:
            if not data.strip():
                return
            self._current = Block()
        self._current.text += data

    def close(self):
        super().close()
        self._close()


def html_to_blocks(markup: str) -> list[Block]:
    collector = _BlockCollector()
    collector.feed(markup)
    collector.close()
    return collector.blocks


def html_to_text(markup: str) -> str:
    return blocks_to_text(html_to_blocks(markup))

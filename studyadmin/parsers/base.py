"""Line-driven record accumulator shared by the bulk parsers.

A parse pass walks the plain-text snapshot line by line. The accumulator is
a two-state machine: either no record is under construction, or one is.
Subclasses supply the per-kind grammar (``feed``) and the completeness
predicate (``is_complete``); the driver handles blank lines, the ``---``
block separator and the end-of-document flush.
"""

import re

BLOCK_SEPARATOR = "---"

_NEWLINE_RE = re.compile(r"\r\n?")


def split_lines(text: str) -> list[str]:
    """Normalize newlines and strip trailing whitespace from each line."""
    return [line.rstrip() for line in _NEWLINE_RE.sub("\n", text).split("\n")]


class RecordAccumulator:
    def __init__(self):
        self.records: list = []
        self.current = None

    def is_complete(self, record) -> bool:
        raise NotImplementedError

    def feed(self, line: str):
        """Classify one non-blank, non-separator line."""
        raise NotImplementedError

    def finish(self, record):
        return record

    def start(self, record):
        self.flush()
        self.current = record

    def flush(self):
        """Commit the in-progress record if complete, else drop it."""
        if self.current is not None and self.is_complete(self.current):
            self.records.append(self.finish(self.current))
        self.current = None

    def run(self, text: str) -> list:
        for line in split_lines(text):
            stripped = line.strip()
            if stripped == "":
                continue
            if stripped == BLOCK_SEPARATOR:
                self.flush()
                continue
            self.feed(line)
        self.flush()
        return self.records

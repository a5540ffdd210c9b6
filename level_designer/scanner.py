"""
Escape-aware bracket scanner shared by extraction and truncation repair.

Walks JSON-like text and tracks string-literal state so that braces and
brackets inside strings are never counted.
"""

from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Tuple

CLOSERS = {"{": "}", "[": "]"}


@dataclass
class BracketScanner:
    """Incremental scanner state: string/escape flags plus the open-container stack."""
    in_string: bool = False
    escaped: bool = False
    stack: List[str] = field(default_factory=list)

    @property
    def depth(self) -> int:
        return len(self.stack)

    def feed(self, ch: str) -> bool:
        """Consume one character. Returns True if it opened or closed a container."""
        if self.in_string:
            if self.escaped:
                self.escaped = False
            elif ch == "\\":
                self.escaped = True
            elif ch == '"':
                self.in_string = False
            return False

        if ch == '"':
            self.in_string = True
        elif ch in CLOSERS:
            self.stack.append(ch)
            return True
        elif ch in ("}", "]"):
            # Unmatched closers are ignored
            if self.stack and CLOSERS[self.stack[-1]] == ch:
                self.stack.pop()
                return True
        return False

    def missing_closers(self) -> str:
        """Closers that balance every still-open container, innermost first."""
        return "".join(CLOSERS[opener] for opener in reversed(self.stack))


def scan(text: str, start: int = 0) -> Iterator[Tuple[int, str, BracketScanner]]:
    """Yield (index, char, scanner) for every structural bracket in text[start:]."""
    scanner = BracketScanner()
    for i in range(start, len(text)):
        if scanner.feed(text[i]):
            yield i, text[i], scanner


def find_matching_close(text: str, start: int) -> Optional[int]:
    """Index of the brace closing the object opened at text[start], or None."""
    for i, ch, scanner in scan(text, start):
        if ch == "}" and scanner.depth == 0:
            return i
    return None


def scan_to_end(text: str, start: int = 0) -> BracketScanner:
    """Scanner state after consuming all of text[start:]."""
    scanner = BracketScanner()
    for ch in text[start:]:
        scanner.feed(ch)
    return scanner

"""Bounded, line-addressed reads over plain-text log files.

Offsets are absolute line indices counted from the start of the file. Files
are streamed so at most one page of lines is held in memory, whatever the
size of the log.
"""

from __future__ import annotations

from collections import deque
from pathlib import Path


def _strip(line: str) -> str:
    return line.rstrip("\r\n")


def read_range(path: Path, start: int, stop: int) -> tuple[list[str], bool]:
    """Return lines ``[start, stop)`` and whether any line follows ``stop``.

    Reading ends one line past ``stop``. A missing file reads as an empty log.
    """
    lines: list[str] = []
    try:
        with open(path, "r", encoding="utf-8", errors="replace") as f:
            for index, line in enumerate(f):
                if index >= stop:
                    return lines, True
                if index >= start:
                    lines.append(_strip(line))
    except FileNotFoundError:
        return [], False
    return lines, False


def read_tail(path: Path, limit: int, end: int | None = None) -> tuple[list[str], int]:
    """Return the last ``limit`` lines before ``end`` and the total line count.

    With no ``end`` the window closes at the end of the file.
    """
    total = 0
    window: deque[str] = deque(maxlen=limit)
    try:
        with open(path, "r", encoding="utf-8", errors="replace") as f:
            for line in f:
                if end is None or total < end:
                    window.append(line)
                total += 1
    except FileNotFoundError:
        return [], 0
    return [_strip(line) for line in window], total

"""Terminal mode handling and keyboard reading.

``TerminalSession`` puts stdin into cbreak mode for the lifetime of a
``with`` block and always restores the saved attributes. ``KeyReader``
turns raw stdin bytes into key tokens, one token per poll.
"""

from __future__ import annotations

import codecs
import logging
import os
import select
import sys
from collections import deque
from typing import TextIO

from ..exceptions import TerminalError

logger = logging.getLogger(__name__)

ESCAPE = "escape"
ENTER = "enter"
BACKSPACE = "backspace"

_ARROWS = {
    "A": "up",
    "B": "down",
    "C": "right",
    "D": "left",
}


def _sequence_end(text: str, start: int) -> int | None:
    """Return the index just past the CSI or SS3 sequence at ``text[start]``.

    ``text[start:start + 2]`` is ``ESC [`` or ``ESC O``. A CSI sequence may
    carry parameter bytes (0x30-0x3F) and intermediate bytes (0x20-0x2F)
    before its final byte (0x40-0x7E). SS3 is followed directly by the
    final byte. Returns None when the sequence is incomplete.
    """
    end = start + 2
    if text[start + 1] == "[":
        while end < len(text) and "\x30" <= text[end] <= "\x3f":
            end += 1
        while end < len(text) and "\x20" <= text[end] <= "\x2f":
            end += 1
    if end < len(text) and "\x40" <= text[end] <= "\x7e":
        return end + 1
    return None


def split_keys(text: str) -> list[str]:
    """Split a chunk of terminal input into key tokens.

    Arrow sequences become arrow names. Any other complete escape sequence
    (Delete, Home, function keys) is dropped.

    Args:
        text: Decoded bytes read from stdin in one go

    Returns:
        Key tokens: printable characters as-is, plus ``"enter"``,
        ``"backspace"``, ``"escape"`` and arrow names

    Examples:
        >>> split_keys("ab\\r")
        ['a', 'b', 'enter']
        >>> split_keys("\\x1b[A\\x1b")
        ['up', 'escape']
        >>> split_keys("x\\x1b[3~")
        ['x']
    """
    keys: list[str] = []
    i = 0
    while i < len(text):
        char = text[i]
        if char == "\x1b":
            end = _sequence_end(text, i) if text[i + 1 : i + 2] in ("[", "O") else None
            if end is not None:
                final = text[end - 1]
                if final in _ARROWS:
                    keys.append(_ARROWS[final])
                i = end
                continue
            keys.append(ESCAPE)
        elif char in ("\r", "\n"):
            keys.append(ENTER)
        elif char in ("\x7f", "\x08"):
            keys.append(BACKSPACE)
        elif char == "\t" or char.isprintable():
            keys.append(char)
        i += 1
    return keys


class KeyReader:
    """Polls stdin with a timeout and hands out one key token at a time."""

    def __init__(self, stream: TextIO | None = None, chunk_size: int = 1024):
        self.stream = stream if stream is not None else sys.stdin
        self.chunk_size = chunk_size
        self._pending: deque[str] = deque()
        # Keeps a multi-byte character split across two reads
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")

    def poll(self, timeout: float) -> str | None:
        """Return the next key token, waiting at most ``timeout`` seconds.

        Returns:
            Key token, or None on timeout or read error
        """
        if self._pending:
            return self._pending.popleft()

        ready, _, _ = select.select([self.stream], [], [], timeout)
        if not ready:
            return None

        try:
            data = os.read(self.stream.fileno(), self.chunk_size)
        except OSError as err:
            logger.warning(f"Error reading keyboard input: {err}")
            return None

        self._pending.extend(split_keys(self._decoder.decode(data)))
        if self._pending:
            return self._pending.popleft()
        return None


class TerminalSession:
    """Context manager holding stdin in cbreak mode.

    Does nothing when stdin is not a TTY, so the app can run under test
    harnesses and pipes.
    """

    def __init__(self, stream: TextIO | None = None):
        self.stream = stream if stream is not None else sys.stdin
        self._saved_attrs: list | None = None
        self._fd: int | None = None

    def __enter__(self) -> TerminalSession:
        if not self.stream.isatty():
            logger.info("stdin is not a TTY, leaving terminal mode unchanged")
            return self

        import termios
        import tty

        try:
            self._fd = self.stream.fileno()
            self._saved_attrs = termios.tcgetattr(self._fd)
            tty.setcbreak(self._fd)
        except termios.error as err:
            raise TerminalError(f"could not enter cbreak mode: {err}") from err
        logger.debug("Terminal switched to cbreak mode")
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.restore()

    def restore(self) -> None:
        """Restore the saved terminal attributes. Safe to call twice."""
        if self._saved_attrs is None or self._fd is None:
            return

        import termios

        try:
            termios.tcsetattr(self._fd, termios.TCSADRAIN, self._saved_attrs)
        except termios.error as err:
            logger.error(f"Failed to restore terminal attributes: {err}")
        finally:
            self._saved_attrs = None
        logger.debug("Terminal attributes restored")

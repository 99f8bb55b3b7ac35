"""Assembly of newline-terminated lines from a stream of received bytes."""

from __future__ import annotations

import enum

DEFAULT_LIMIT = 2047
"""Longest line, in bytes, that is held before the overflow policy applies."""

OVERFLOW_MESSAGE = "Ошибка: слишком длинная строка\n".encode("utf-8")
"""Reply sent to the client when a line exceeds the limit under ``REPORT``."""

LINE_ENDINGS = frozenset(b"\r\n")


class OverflowPolicy(enum.Enum):
    """What to do with a byte that arrives when the line is already full."""

    REPORT = "report"
    """Reply with :data:`OVERFLOW_MESSAGE` and start a fresh line."""

    TRUNCATE = "truncate"
    """Silently drop bytes until the line ends."""


class LineAccumulator:
    """Collects bytes into lines and produces the echo replies for them.

    A line ends at either ``\\n`` or ``\\r``; empty lines are skipped, so a
    ``\\r\\n`` pair yields a single reply. Every reply line ends in ``\\n``.
    """

    def __init__(
        self,
        limit: int = DEFAULT_LIMIT,
        policy: OverflowPolicy | str = OverflowPolicy.REPORT,
    ) -> None:
        if limit < 1:
            raise ValueError(f"line limit must be positive, got {limit}")
        self.limit = limit
        self.policy = OverflowPolicy(policy)
        self._buffer = bytearray()

    @property
    def pending(self) -> bytes:
        """Bytes of the line that has not been terminated yet."""
        return bytes(self._buffer)

    def feed(self, data: bytes) -> list[bytes]:
        """Take received bytes and return the replies they complete, in order."""
        replies: list[bytes] = []
        for byte in data:
            if byte in LINE_ENDINGS:
                if self._buffer:
                    replies.append(bytes(self._buffer) + b"\n")
                    self._buffer.clear()
            elif len(self._buffer) < self.limit:
                self._buffer.append(byte)
            elif self.policy is OverflowPolicy.REPORT:
                replies.append(OVERFLOW_MESSAGE)
                self._buffer.clear()
        return replies

    def flush(self) -> bytes:
        """Return the unterminated line as a reply and clear it; empty if none."""
        if not self._buffer:
            return b""
        reply = bytes(self._buffer) + b"\n"
        self._buffer.clear()
        return reply

    def reset(self) -> None:
        """Discard the unterminated line."""
        self._buffer.clear()
"""Append-only content accumulator for one EPS document."""

from __future__ import annotations


class EpsWriter:
    """Line buffer: append content lines, then hand the text over once.

    After ``finalize`` the buffer belongs to the caller; the writer is closed
    and rejects further use.
    """

    def __init__(self) -> None:
        self._parts: list[str] | None = []

    @property
    def closed(self) -> bool:
        return self._parts is None

    def append(self, line: str) -> None:
        """Append one content line plus a newline (no validation)."""
        if self._parts is None:
            raise RuntimeError('EPS document has already been finalized')
        self._parts.append(line)
        self._parts.append('\n')

    def extend(self, lines: list[str]) -> None:
        for line in lines:
            self.append(line)

    def getvalue(self) -> str:
        """Content accumulated so far, without header or footer."""
        if self._parts is None:
            raise RuntimeError('EPS document has already been finalized')
        return ''.join(self._parts)

    def finalize(self, header: str, footer: str) -> str:
        """Return ``header + content + footer`` and close the writer."""
        if self._parts is None:
            raise RuntimeError('EPS document has already been finalized')
        parts, self._parts = self._parts, None
        return header + ''.join(parts) + footer

"""Half-open spans over the joined text of a document."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True, frozen=True)
class TextRange:
    """``[start, end)`` using absolute offsets; both ends are non-negative."""

    start: int
    end: int

    def __post_init__(self) -> None:
        if self.start < 0 or self.end < self.start:
            raise ValueError(f"Invalid text range [{self.start}, {self.end})")

    @property
    def length(self) -> int:
        return self.end - self.start

    def contains(self, offset: int) -> bool:
        """Return ``True`` when ``offset`` falls inside ``[start, end)``."""

        return self.start <= offset < self.end

    def covers(self, start: int, length: int) -> bool:
        """Return ``True`` when ``[start, start + length)`` lies inside the range."""

        return length >= 0 and self.start <= start and start + length <= self.end

    def slice(self, text: str) -> str:
        return text[self.start : self.end]

    def shift(self, delta: int) -> TextRange:
        """Return a copy moved by ``delta`` characters, clamped at zero."""

        return TextRange(max(0, self.start + delta), max(0, self.end + delta))

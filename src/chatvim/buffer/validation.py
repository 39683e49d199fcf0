"""Validation helpers shared across buffer services."""

from __future__ import annotations

from chatvim.errors import ChatvimError


class BufferValidationError(ChatvimError):
    """Raised when a caller provides an out-of-bounds offset."""

    def __init__(self, message: str, *, offset: int | None = None) -> None:
        super().__init__(message)
        self.offset = offset


def ensure_offset(text: str, offset: int) -> int:
    if isinstance(offset, bool) or not isinstance(offset, int):
        raise BufferValidationError(f"Offset must be an integer, got {offset!r}")
    if offset < 0 or offset > len(text):
        raise BufferValidationError(
            f"Offset {offset} out of range 0..{len(text)}", offset=offset
        )
    return offset

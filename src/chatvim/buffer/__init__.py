"""Message buffer, semantic units, clipboard and the auxiliary line."""

from .auxline import AuxiliaryInputLine, AuxlineView
from .buffer import CURSOR, BufferDelta, BufferView, Position, TextBuffer, Transaction
from .registers import ClipboardRegister
from .units import UNITS, Motion, backward, boundary, forward, is_unit
from .validation import BufferValidationError, ensure_offset

__all__ = [
    "AuxiliaryInputLine",
    "AuxlineView",
    "CURSOR",
    "BufferDelta",
    "BufferView",
    "Position",
    "TextBuffer",
    "Transaction",
    "ClipboardRegister",
    "UNITS",
    "Motion",
    "backward",
    "boundary",
    "forward",
    "is_unit",
    "BufferValidationError",
    "ensure_offset",
]

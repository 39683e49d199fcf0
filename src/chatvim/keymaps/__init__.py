"""Key notation, the binding registry and the chain resolver."""

from .models import NAMED_KEYS, Binding, KeyChord, KeySequence
from .registry import KeymapRegistry, RegistrySnapshot, RegistryStats
from .resolver import KeymapResolver, ResolutionResult

__all__ = [
    "NAMED_KEYS",
    "Binding",
    "KeyChord",
    "KeySequence",
    "KeymapRegistry",
    "RegistrySnapshot",
    "RegistryStats",
    "KeymapResolver",
    "ResolutionResult",
]

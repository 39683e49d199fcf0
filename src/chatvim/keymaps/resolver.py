"""Trie-based keymap resolution over a chain of modes."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Literal, Optional, Sequence

from chatvim.runtime.telemetry import span

from .models import Binding
from .registry import KeymapRegistry


@dataclass(slots=True)
class TrieNode:
    """Single trie node tracking a binding and child transitions."""

    binding: Optional[Binding] = None
    children: Dict[str, "TrieNode"] = field(default_factory=dict)

    def child(self, token: str) -> "TrieNode":
        return self.children.setdefault(token, TrieNode())

    def next_tokens(self) -> tuple[str, ...]:
        return tuple(sorted(self.children.keys()))


@dataclass(slots=True)
class KeymapTrie:
    """Concrete trie built for a given mode."""

    mode: str
    root: TrieNode = field(default_factory=TrieNode)

    def add_binding(self, binding: Binding) -> None:
        node = self.root
        for token in binding.sequence.tokens:
            node = node.child(token)
        node.binding = binding

    def walk(self, tokens: Sequence[str]) -> Optional[TrieNode]:
        node = self.root
        for token in tokens:
            found = node.children.get(token)
            if found is None:
                return None
            node = found
        return node


@dataclass(frozen=True, slots=True)
class ResolutionResult:
    """Outcome returned from the resolver.

    ``mode`` names the chain member that decided the outcome.
    """

    status: Literal["match", "pending", "miss"]
    binding: Optional[Binding] = None
    mode: Optional[str] = None
    consumed: int = 0
    next_expected: tuple[str, ...] = ()


class KeymapResolver:
    """Builds mode-specific tries and resolves sequences against a chain.

    Modes are tried from the most specific to the root. The first mode whose
    trie contains the buffered tokens decides: a node with children keeps the
    sequence pending, a leaf binding matches. Ancestors are only consulted
    when a mode has no entry at all for the buffer, so a child's ``dd``
    shadows a parent's ``d`` prefix and a child's ``c`` beats a parent's
    ``cc``.
    """

    def __init__(
        self, registry: KeymapRegistry, *, logger_name: str | None = None
    ) -> None:
        self._registry = registry
        self._logger_name = logger_name
        self._cache: Dict[str, tuple[int, KeymapTrie]] = {}

    def resolve(self, chain: Sequence[str], tokens: Sequence[str]) -> ResolutionResult:
        normalized = tuple(tokens)
        with span(
            "keymaps::resolve",
            logger_name=self._logger_name,
            component="keymaps",
            metadata={"mode": chain[0] if chain else "", "length": len(normalized)},
        ) as handle:
            if not normalized:
                handle.add_metadata("status", "miss")
                return ResolutionResult(status="miss")
            for mode in chain:
                node = self._ensure_trie(mode).walk(normalized)
                if node is None:
                    continue
                if node.children:
                    handle.add_metadata("status", "pending")
                    handle.add_metadata("decided_by", mode)
                    return ResolutionResult(
                        status="pending",
                        mode=mode,
                        consumed=len(normalized),
                        next_expected=node.next_tokens(),
                    )
                if node.binding is not None:
                    handle.add_metadata("status", "match")
                    handle.add_metadata("decided_by", mode)
                    return ResolutionResult(
                        status="match",
                        binding=node.binding,
                        mode=mode,
                        consumed=len(normalized),
                    )
            handle.add_metadata("status", "miss")
            return ResolutionResult(status="miss")

    def reset(self, mode: Optional[str] = None) -> None:
        if mode is None:
            self._cache.clear()
        else:
            self._cache.pop(mode, None)

    def _ensure_trie(self, mode: str) -> KeymapTrie:
        revision = self._registry.revision()
        cached = self._cache.get(mode)
        if cached and cached[0] == revision:
            return cached[1]

        trie = KeymapTrie(mode=mode)
        for binding in self._registry.iter_bindings(mode):
            trie.add_binding(binding)
        self._cache[mode] = (revision, trie)
        return trie


__all__ = [
    "KeymapResolver",
    "KeymapTrie",
    "ResolutionResult",
    "TrieNode",
]

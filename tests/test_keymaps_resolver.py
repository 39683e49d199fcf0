from __future__ import annotations

from chatvim.actions import OK
from chatvim.keymaps import Binding, KeymapRegistry, KeymapResolver, KeySequence


def make_binding(mode: str, keys: str) -> Binding:
    return Binding(
        mode=mode,
        sequence=KeySequence.parse(keys),
        command=lambda _context: OK,
        description=f"{mode}:{keys}",
    )


def build_registry(bindings: list[Binding]) -> KeymapRegistry:
    registry = KeymapRegistry()
    for binding in bindings:
        registry.register_binding(binding)
    return registry


def tokens(keys: str) -> tuple[str, ...]:
    return KeySequence.parse(keys).tokens


def test_resolver_matches_exact_sequence() -> None:
    binding = make_binding("normal", "gg")
    resolver = KeymapResolver(build_registry([binding]))

    result = resolver.resolve(("normal",), tokens("gg"))

    assert result.status == "match"
    assert result.binding == binding
    assert result.consumed == 2


def test_resolver_reports_pending_for_prefix() -> None:
    resolver = KeymapResolver(
        build_registry([make_binding("normal", "gg"), make_binding("normal", "gd")])
    )

    result = resolver.resolve(("normal",), tokens("g"))

    assert result.status == "pending"
    assert result.next_expected == ("d", "g")


def test_resolver_miss() -> None:
    resolver = KeymapResolver(build_registry([make_binding("normal", "gg")]))

    assert resolver.resolve(("normal",), tokens("x")).status == "miss"
    assert resolver.resolve(("normal",), ()).status == "miss"


def test_child_binding_shadows_parent() -> None:
    child = make_binding("visual", "dd")
    registry = build_registry([make_binding("normal", "dd"), child])
    resolver = KeymapResolver(registry)

    result = resolver.resolve(("visual", "normal"), tokens("dd"))

    assert result.status == "match"
    assert result.binding == child
    assert result.mode == "visual"


def test_child_sequence_beats_parent_prefix() -> None:
    child = make_binding("visual", "dd")
    registry = build_registry([make_binding("normal", "d"), child])
    resolver = KeymapResolver(registry)

    first = resolver.resolve(("visual", "normal"), tokens("d"))
    second = resolver.resolve(("visual", "normal"), tokens("dd"))

    assert first.status == "pending"
    assert first.mode == "visual"
    assert second.binding == child


def test_child_leaf_beats_parent_sequence() -> None:
    child = make_binding("visual", "c")
    registry = build_registry([make_binding("normal", "cc"), child])
    resolver = KeymapResolver(registry)

    result = resolver.resolve(("visual", "normal"), tokens("c"))

    assert result.status == "match"
    assert result.binding == child


def test_parent_used_when_child_has_no_entry() -> None:
    parent = make_binding("normal", "q")
    resolver = KeymapResolver(build_registry([parent, make_binding("visual", "j")]))

    result = resolver.resolve(("visual", "normal"), tokens("q"))

    assert result.binding == parent
    assert result.mode == "normal"


def test_resolver_rebuilds_after_registry_changes() -> None:
    registry = build_registry([make_binding("normal", "gg")])
    resolver = KeymapResolver(registry)
    assert resolver.resolve(("normal",), tokens("gx")).status == "miss"

    registry.register_binding(make_binding("normal", "gx"))

    assert resolver.resolve(("normal",), tokens("gx")).status == "match"

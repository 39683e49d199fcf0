from chatvim.actions import NOOP, OK
from chatvim.keymaps import Binding, KeymapRegistry, KeySequence


def make_binding(
    *,
    mode: str = "normal",
    keys: str = "gg",
    result=OK,
    source: str = "base",
) -> Binding:
    return Binding(
        mode=mode,
        sequence=KeySequence.parse(keys),
        command=lambda _context: result,
        source=source,
    )


def test_register_binding_success() -> None:
    registry = KeymapRegistry()
    binding = make_binding()

    previous = registry.register_binding(binding)

    assert previous is None
    assert registry.stats().binding_count == 1
    assert list(registry.iter_bindings(mode="normal")) == [binding]


def test_register_binding_last_write_wins() -> None:
    registry = KeymapRegistry()
    first = make_binding(keys="q", source="base")
    second = make_binding(keys="q", result=NOOP, source="user")

    registry.register_binding(first)
    replaced = registry.register_binding(second)

    assert replaced == first
    assert list(registry.iter_bindings()) == [second]
    assert registry.get_binding("normal", KeySequence.parse("q")) == second


def test_same_sequence_in_other_mode_is_separate() -> None:
    registry = KeymapRegistry()

    registry.register_binding(make_binding(mode="normal"))
    registry.register_binding(make_binding(mode="visual"))

    assert registry.stats().binding_count == 2
    assert registry.stats().modes == ("normal", "visual")


def test_unregister_binding() -> None:
    registry = KeymapRegistry()
    binding = make_binding()
    registry.register_binding(binding)

    removed = registry.unregister_binding("normal", KeySequence.parse("gg"))

    assert removed == binding
    assert registry.stats().binding_count == 0
    assert registry.unregister_binding("normal", KeySequence.parse("gg")) is None


def test_clear_by_mode() -> None:
    registry = KeymapRegistry()
    registry.register_binding(make_binding(mode="normal", keys="a"))
    registry.register_binding(make_binding(mode="normal", keys="b"))
    registry.register_binding(make_binding(mode="insert", keys="a"))

    assert registry.clear("normal") == 2
    assert registry.stats().modes == ("insert",)
    assert registry.clear() == 1


def test_snapshot_restore_and_revision() -> None:
    registry = KeymapRegistry()
    registry.register_binding(make_binding(keys="a"))
    snapshot = registry.snapshot()
    revision = registry.revision()

    registry.register_binding(make_binding(keys="b"))
    registry.restore(snapshot)

    assert registry.revision() > revision
    assert [b.key_signature for b in registry.iter_bindings()] == ["a"]

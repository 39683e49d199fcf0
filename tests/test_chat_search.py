import pytest

from chatvim.chat import FilterSyntaxError, Message, parse_filter
from chatvim.chat.model import RoomSelectionHistory
from chatvim.chat.search import AndFilter, BodyFilter, NotFilter, OrFilter, SenderFilter

MESSAGES = [
    Message(id="$1", sender="@alice:test", body="deploy finished"),
    Message(id="$2", sender="@bob:test", body="lunch at noon"),
    Message(id="$3", sender="@alice:test", body="lunch? maybe"),
]


def matching(source: str) -> list[str]:
    query = parse_filter(source)
    return [message.id for message in MESSAGES if query.matches(message)]


def test_body_is_the_default_field() -> None:
    assert parse_filter("lunch") == BodyFilter("lunch")
    assert matching("lunch") == ["$2", "$3"]


def test_words_join_into_one_needle() -> None:
    assert parse_filter("lunch at") == BodyFilter("lunch at")
    assert matching("lunch at") == ["$2"]


def test_sender_and_combinations() -> None:
    assert parse_filter("~f alice ~b lunch") == AndFilter(
        (SenderFilter("alice"), BodyFilter("lunch"))
    )
    assert matching("~f alice ~b lunch") == ["$3"]
    assert matching("~f bob | deploy") == ["$1", "$2"]
    assert matching("!~f alice") == ["$2"]
    assert matching("!(~f bob | deploy)") == ["$3"]


def test_quoted_strings_and_escapes() -> None:
    assert parse_filter('"a \\"b\\""') == BodyFilter('a "b"')
    assert matching('"lunch?"') == ["$3"]
    assert isinstance(parse_filter("!x"), NotFilter)
    assert isinstance(parse_filter("a | b"), OrFilter)
    assert parse_filter("a|b") == BodyFilter("a|b")


@pytest.mark.parametrize(
    ("source", "message"),
    [
        ("", "Need at least one filter"),
        ('"open', "Unfinished string"),
        ("(lunch", "Parenthesis not closed"),
        ("~x lunch", "Invalid filter type"),
        ("~", "Unfinished filter type"),
        ('"\\q"', "Invalid escape expression"),
        ("lunch)", "Unexpected"),
    ],
)
def test_syntax_errors(source: str, message: str) -> None:
    with pytest.raises(FilterSyntaxError, match=message):
        parse_filter(source)


def test_room_selection_history() -> None:
    history = RoomSelectionHistory()
    for room_id in ("!a", "!b", "!c"):
        history.select(room_id)

    history.select("!a")
    assert list(history) == ["!b", "!c", "!a"]
    assert history.back()
    assert history.current() == "!c"
    assert history.back() and history.current() == "!b"
    assert not history.back()
    assert history.forward() and history.forward()
    assert not history.forward()
    history.deselect()
    assert history.current() is None

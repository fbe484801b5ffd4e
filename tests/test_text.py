import pytest

from octoproto.text import split2, split2_reversed, to_snake_case


@pytest.mark.parametrize(
    "source, left, right",
    [
        ("blabla,qqq", "blabla", "qqq"),
        ("", "", ""),
        (",", "", ""),
        ("blabla", "blabla", ""),
        ("blabla,", "blabla", ""),
        (",blabla", "", "blabla"),
    ],
)
def test_split2(source, left, right):
    assert split2(source, ",") == (left, right)


def test_split2_uses_first_separator():
    assert split2("a,b,c", ",") == ("a", "b,c")


def test_split2_reversed_uses_last_separator():
    assert split2_reversed("a,b,c", ",") == ("a,b", "c")


@pytest.mark.parametrize(
    "source, left, right",
    [
        ("", "", ""),
        (",", "", ""),
        ("blabla", "blabla", ""),
        ("blabla,", "blabla", ""),
        (",blabla", "", "blabla"),
    ],
)
def test_split2_reversed_single_separator(source, left, right):
    assert split2_reversed(source, ",") == (left, right)


@pytest.mark.parametrize(
    "source, expected",
    [
        ("", ""),
        ("A", "a"),
        ("SimpleExample", "simple_example"),
        ("internalField", "internal_field"),
        ("SomeHTTPStuff", "some_http_stuff"),
        ("WriteJSON", "write_json"),
        ("HTTP2Server", "http2_server"),
        ("Some_Mixed_Case", "some_mixed_case"),
        ("do_nothing", "do_nothing"),
        ("JSONHTTPRPCServer", "jsonhttprpc_server"),
    ],
)
def test_to_snake_case(source, expected):
    assert to_snake_case(source) == expected


def test_to_snake_case_is_idempotent():
    once = to_snake_case("SomeHTTPStuff")
    assert to_snake_case(once) == once
import pytest

from parley.argument import RestArgument, StringArgument
from parley.exceptions import InvalidArgumentError, ParseError


def test_string_consumes_one_token():
    arg = StringArgument(name="word")
    assert arg.validate("hello world  foo") == ("hello", "world  foo")
    assert arg.validate("hello") == ("hello", "")


def test_string_min_length():
    arg = StringArgument().set_name("word").min(3)
    with pytest.raises(ParseError) as error:
        arg.validate("ab cde")
    assert error.value.message == (
        "String length not greater or equal! Expected at least 3, but got 2"
    )
    assert error.value.argument is arg


def test_string_max_length():
    arg = StringArgument().set_name("word").max(3)
    with pytest.raises(ParseError) as error:
        arg.validate("abcd")
    assert error.value.message == (
        "String length not less or equal! Maximum 3 chars allowed, but got 4"
    )


def test_string_whitelist():
    arg = StringArgument().set_name("action").whitelist(["chat"]).whitelist(["poke"])
    assert arg.validate("poke them") == ("poke", "them")
    with pytest.raises(ParseError) as error:
        arg.validate("yell hi")
    assert error.value.message == "Invalid Input for yell. Allowed words: chat, poke"


def test_string_pattern():
    arg = StringArgument(name="digits", pattern=r"^\d+$")
    assert arg.validate("123 x") == ("123", "x")
    with pytest.raises(ParseError) as error:
        arg.validate("abc")
    assert error.value.message == (
        "Regex mismatch, the input 'abc' did not match the expression ^\\d+$"
    )


def test_case_folding_runs_before_whitelist():
    arg = StringArgument().force_upper_case().whitelist(["ABC"])
    assert arg.validate("abc") == ("ABC", "")
    lower = StringArgument().force_lower_case()
    assert lower.validate("MiXeD rest") == ("mixed", "rest")


def test_min_length_checked_before_whitelist():
    arg = StringArgument().min(5).whitelist(["chat"])
    with pytest.raises(ParseError, match="String length not greater or equal"):
        arg.validate("chat")


def test_rest_consumes_everything():
    arg = RestArgument().set_name("message").min(3)
    assert arg.validate("hello there  friend") == ("hello there  friend", "")
    with pytest.raises(ParseError):
        arg.validate("hi")


def test_manual_rendering():
    assert StringArgument(name="word").get_manual() == "<word>"
    assert StringArgument(name="word").optional().get_manual() == "[word]"
    assert StringArgument(name="word").optional("foo").get_manual() == "[word=foo]"
    assert (
        StringArgument(name="word").optional("foo", display_default=False).get_manual()
        == "[word]"
    )
    assert StringArgument().set_name("word", "text").get_manual() == "<text>"


def test_invalid_argument_name():
    with pytest.raises(InvalidArgumentError):
        StringArgument().set_name("no spaces")
    with pytest.raises(InvalidArgumentError):
        StringArgument(name="")

import pytest

from parley.argument import NumberArgument
from parley.exceptions import ParseError


def test_number_parses_one_token():
    arg = NumberArgument(name="amount")
    assert arg.validate("5 rest of it") == (5.0, "rest of it")
    assert arg.validate("-3.5") == (-3.5, "")


@pytest.mark.parametrize("text", ["abc", "1e5", "5.", ".5", "+1", ""])
def test_number_rejects_invalid_syntax(text):
    with pytest.raises(ParseError) as error:
        NumberArgument().validate(text)
    assert error.value.message == f'"{text}" is not a valid number'


def test_number_minimum_and_maximum():
    arg = NumberArgument().min(1).max(10)
    assert arg.validate("10") == (10.0, "")
    with pytest.raises(ParseError) as error:
        arg.validate("0")
    assert error.value.message == (
        "Number not greater or equal! Expected at least 1, but got 0"
    )
    with pytest.raises(ParseError) as error:
        arg.validate("11")
    assert error.value.message == "Number not less or equal! Expected at most 10, but got 11"


def test_number_integer():
    arg = NumberArgument().integer()
    value, _ = arg.validate("42")
    assert value == 42
    assert isinstance(value, int)
    with pytest.raises(ParseError) as error:
        arg.validate("2.5")
    assert error.value.message == "Given Number is not an Integer! (2.5)"


def test_number_positive_and_negative():
    with pytest.raises(ParseError) as error:
        NumberArgument().positive().validate("0")
    assert error.value.message == "Given Number is not Positive! (0)"
    with pytest.raises(ParseError) as error:
        NumberArgument().negative().validate("1")
    assert error.value.message == "Given Number is not Negative! (1)"
    assert NumberArgument().negative().validate("-1") == (-1.0, "")


def test_number_check_order():
    arg = NumberArgument(minimum=5, integer_only=True)
    with pytest.raises(ParseError, match="Number not greater or equal"):
        arg.validate("2.5")


def test_positive_and_negative_replace_each_other():
    arg = NumberArgument().positive().negative()
    assert arg.negative_only
    assert not arg.positive_only

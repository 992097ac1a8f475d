import pytest

from tokend.utils.time_parser import parse_duration


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("1h", 3600),
        ("30m", 1800),
        ("1h30m", 5400),
        ("500ms", 0.5),
        ("1,000ms", 1),
        ("2d", 172800),
        ("1.5s", 1.5),
        ("250us", 0.00025),
        ("10µs", 0.00001),
    ],
)
def test_parse_duration_units(value, expected):
    assert parse_duration(value) == pytest.approx(expected)


def test_bare_numbers_are_seconds():
    assert parse_duration(42) == 42
    assert parse_duration("42") == 42
    assert parse_duration("0.25") == 0.25


@pytest.mark.parametrize("value", [None, "", "   ", "-5m", -3])
def test_empty_or_negative_is_zero(value):
    assert parse_duration(value) == 0


def test_unknown_unit_raises():
    with pytest.raises(ValueError, match="Unknown unit"):
        parse_duration("5y")

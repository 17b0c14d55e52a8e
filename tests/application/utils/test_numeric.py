import pytest

from vocab_srs.application.utils.numeric import as_finite, clamp, round_half_up


@pytest.mark.parametrize(
    "value, expected", [(2.5, 3), (12.5, 13), (2.4999, 2), (0.5, 1), (7.0, 7), (-0.4, 0)]
)
def test_round_half_up(value, expected):
    assert round_half_up(value) == expected


def test_clamp():
    assert clamp(3.0, 1.3, 2.5) == 2.5
    assert clamp(1.0, 1.3, 2.5) == 1.3
    assert clamp(2.0, 1.3, 2.5) == 2.0


@pytest.mark.parametrize(
    "value, expected",
    [(3, 3.0), (2.5, 2.5), (" 4 ", 4.0), ("1e3", 1000.0)],
)
def test_as_finite_numbers(value, expected):
    assert as_finite(value) == expected


@pytest.mark.parametrize(
    "value", [None, True, False, "abc", float("nan"), float("inf"), "-inf", [1], {}]
)
def test_as_finite_rejects(value):
    assert as_finite(value) is None

import pytest

from skirmishd.conversion import S16_MAX, S16_MIN, U8_MAX, U16_MAX, to_s16, to_u8, to_u16


def test_to_u8_accepts_bounds():
    assert to_u8(0) == 0
    assert to_u8(U8_MAX) == U8_MAX


@pytest.mark.parametrize("value", [U8_MAX + 1, -1])
def test_to_u8_rejects_out_of_range(value):
    with pytest.raises(ValueError):
        to_u8(value)


def test_to_u16_accepts_bounds():
    assert to_u16(U16_MAX) == U16_MAX
    assert to_u16(0) == 0


@pytest.mark.parametrize("value", [U16_MAX + 1, -1])
def test_to_u16_rejects_out_of_range(value):
    with pytest.raises(ValueError):
        to_u16(value)


def test_to_s16_accepts_bounds():
    assert to_s16(S16_MIN) == S16_MIN
    assert to_s16(S16_MAX) == S16_MAX


@pytest.mark.parametrize("value", [S16_MAX + 1, S16_MIN - 1])
def test_to_s16_rejects_out_of_range(value):
    with pytest.raises(ValueError):
        to_s16(value)
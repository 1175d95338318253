import pytest

from skirmishd.geometry import IRect, IVec2


def test_add_componentwise():
    assert IVec2(1, 2) + IVec2(10, 20) == IVec2(11, 22)


def test_sub_componentwise():
    assert IVec2(5, 5) - IVec2(2, 7) == IVec2(3, -2)


def test_add_then_sub_round_trip():
    a = IVec2(-700, 500)
    b = IVec2(33, -41)
    assert (a + b) - b == a


def test_add_rejects_other_types():
    with pytest.raises(TypeError):
        IVec2(1, 1) + (1, 1)


def test_vectors_are_hashable_and_equal_by_value():
    assert {IVec2(1, 2), IVec2(1, 2)} == {IVec2(1, 2)}


def test_rect_contains_inside_point():
    rect = IRect(IVec2(-10, -10), IVec2(10, 10))
    assert rect.contains(IVec2(0, 0))
    assert rect.contains(IVec2(-10, -10))


def test_rect_excludes_outside_point():
    rect = IRect(IVec2(-10, -10), IVec2(10, 10))
    assert not rect.contains(IVec2(11, 0))
    assert not rect.contains(IVec2(0, -11))
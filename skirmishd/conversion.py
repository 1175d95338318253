"""Range-checked conversions to fixed-width integers."""

U8_MAX = 0xFF
U16_MAX = 0xFFFF
S16_MIN = -0x8000
S16_MAX = 0x7FFF


def _checked(value: int, low: int, high: int, name: str) -> int:
    value = int(value)
    if not low <= value <= high:
        raise ValueError(f"{value} does not fit in {name}")
    return value


def to_u8(value: int) -> int:
    """Return ``value`` if it fits in an unsigned 8-bit integer."""
    return _checked(value, 0, U8_MAX, "u8")


def to_u16(value: int) -> int:
    """Return ``value`` if it fits in an unsigned 16-bit integer."""
    return _checked(value, 0, U16_MAX, "u16")


def to_s16(value: int) -> int:
    """Return ``value`` if it fits in a signed 16-bit integer."""
    return _checked(value, S16_MIN, S16_MAX, "s16")
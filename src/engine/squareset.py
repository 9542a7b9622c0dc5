from __future__ import annotations

from typing import Iterator, Union


MASK_64 = (1 << 64) - 1


def _set_bit(bb: int, sq: int) -> int:
    return bb | (1 << sq)


def _clear_bit(bb: int, sq: int) -> int:
    return bb & ~(1 << sq) & MASK_64


def _get_bit(bb: int, sq: int) -> bool:
    return (bb >> sq) & 1 == 1


class SquareSet:
    """Mutable set of board squares backed by a 64-bit mask.

    Bit ``i`` set means square ``i`` is a member. Square indices follow the
    board layout ``rank * 8 + file`` with rank 0 at the top (rank 8).
    """

    __slots__ = ("bits",)

    def __init__(self, bits: int = 0) -> None:
        self.bits = bits & MASK_64

    # ---- Single-square operations ----
    def test(self, sq: int) -> bool:
        return _get_bit(self.bits, sq)

    def set(self, sq: int) -> None:
        self.bits = _set_bit(self.bits, sq)

    def clear(self, sq: int) -> None:
        self.bits = _clear_bit(self.bits, sq)

    def __contains__(self, sq: object) -> bool:
        return isinstance(sq, int) and 0 <= sq < 64 and _get_bit(self.bits, sq)

    # ---- Set algebra ----
    def __or__(self, other: Union["SquareSet", int]) -> "SquareSet":
        return SquareSet(self.bits | _bits_of(other))

    def __and__(self, other: Union["SquareSet", int]) -> "SquareSet":
        return SquareSet(self.bits & _bits_of(other))

    def __ior__(self, other: Union["SquareSet", int]) -> "SquareSet":
        self.bits = (self.bits | _bits_of(other)) & MASK_64
        return self

    def __iand__(self, other: Union["SquareSet", int]) -> "SquareSet":
        self.bits &= _bits_of(other)
        return self

    def union(self, other: Union["SquareSet", int]) -> "SquareSet":
        return self | other

    def intersect(self, other: Union["SquareSet", int]) -> "SquareSet":
        return self & other

    # ---- Enumeration ----
    def __iter__(self) -> Iterator[int]:
        """Yield member squares in ascending order."""
        bb = self.bits
        while bb:
            lsb = bb & -bb
            yield lsb.bit_length() - 1
            bb ^= lsb

    def __len__(self) -> int:
        return bin(self.bits).count("1")

    def __bool__(self) -> bool:
        return self.bits != 0

    def copy(self) -> "SquareSet":
        return SquareSet(self.bits)

    # ---- Comparison / formatting ----
    def __eq__(self, other: object) -> bool:
        if isinstance(other, SquareSet):
            return self.bits == other.bits
        if isinstance(other, int):
            return self.bits == other
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self.bits)

    def __int__(self) -> int:
        return self.bits

    def __str__(self) -> str:
        return f"{self.bits:#018x}"

    def __repr__(self) -> str:
        return f"SquareSet({self.bits:#018x})"


def _bits_of(value: Union[SquareSet, int]) -> int:
    if isinstance(value, SquareSet):
        return value.bits
    return value & MASK_64

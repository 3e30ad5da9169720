"""Helpers for implementing Castling rules. Need to be imported by multiple sources"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from src.chess.square import Square
from src.core.shared_types import CastlingSide, Color


class CastlingDirection(Enum):
    """The four castling directions. Values represent their encodings in FEN string."""

    WHITE_KING_SIDE = "K"
    WHITE_QUEEN_SIDE = "Q"
    BLACK_KING_SIDE = "k"
    BLACK_QUEEN_SIDE = "q"

    @property
    def color(self) -> Color:
        return Color.WHITE if self.value.isupper() else Color.BLACK

    @property
    def side(self) -> CastlingSide:
        return (
            CastlingSide.KINGSIDE
            if self.value.lower() == "k"
            else CastlingSide.QUEENSIDE
        )


CASTLING_ORDER: tuple[CastlingDirection, ...] = (
    CastlingDirection.WHITE_KING_SIDE,
    CastlingDirection.WHITE_QUEEN_SIDE,
    CastlingDirection.BLACK_KING_SIDE,
    CastlingDirection.BLACK_QUEEN_SIDE,
)


@dataclass(frozen=True)
class CastlingSquares:
    """
    Store the squares where king/rook start from/end up in by castling.
    NOTE: If castling rights have not been revoked, the king / rook are expected to still be at their starting squares.
    """

    king_from: Square
    king_to: Square
    rook_from: Square
    rook_to: Square

    @classmethod
    def from_algebraic(cls, k_from: str, k_to: str, r_from: str, r_to: str) -> CastlingSquares:
        """Convenience method: to make mapping shown below (from CastlingDirection) more readable"""
        king_from = Square.from_algebraic(k_from)
        king_to = Square.from_algebraic(k_to)
        rook_from = Square.from_algebraic(r_from)
        rook_to = Square.from_algebraic(r_to)
        return cls(king_from, king_to, rook_from, rook_to)

    @property
    def path(self) -> list[Square]:
        """Squares in between king and rook. All of them must be empty."""
        return squares_between_on_rank(self.king_from, self.rook_from)

    @property
    def king_walk(self) -> list[Square]:
        """The square the king starts on, crosses, and lands on. None of them may be attacked."""
        step = 1 if self.king_to.col > self.king_from.col else -1
        return [
            Square(self.king_from.row, col)
            for col in range(self.king_from.col, self.king_to.col + step, step)
        ]


def squares_between_on_rank(from_square: Square, to_square: Square) -> list[Square]:
    """
    Find the squares in between the two squares specified that are on the same rank (exclusive on both ends)
    """
    if from_square.row != to_square.row:
        raise ValueError(
            f"squares_between_on_rank requires both squares to lie on the same rank. \n from: {from_square}\n to:{to_square}"
        )

    step = 1 if to_square.col > from_square.col else -1
    return [
        Square(from_square.row, col)
        for col in range(from_square.col + step, to_square.col, step)
    ]


# The moves (in classical chess) made when castling
CASTLING_RULES: dict[CastlingDirection, CastlingSquares] = {
    CastlingDirection.WHITE_KING_SIDE: CastlingSquares.from_algebraic(
        "e1", "g1", "h1", "f1"
    ),
    CastlingDirection.WHITE_QUEEN_SIDE: CastlingSquares.from_algebraic(
        "e1", "c1", "a1", "d1"
    ),
    CastlingDirection.BLACK_KING_SIDE: CastlingSquares.from_algebraic(
        "e8", "g8", "h8", "f8"
    ),
    CastlingDirection.BLACK_QUEEN_SIDE: CastlingSquares.from_algebraic(
        "e8", "c8", "a8", "d8"
    ),
}


@dataclass
class CastlingRights:
    """Rights only get revoked during a game, never granted again."""

    white_king: bool = True
    white_queen: bool = True
    black_king: bool = True
    black_queen: bool = True

    @classmethod
    def from_fen(cls, castle_fen: str) -> CastlingRights:
        """parse the part of the FEN string that encodes castling rights"""
        return cls(
            *(direction.value in castle_fen for direction in CASTLING_ORDER)
        )

    def to_fen(self) -> str:
        castling_chars = "".join(
            direction.value for direction in CASTLING_ORDER if self.has(direction)
        )
        return castling_chars or "-"

    def has(self, direction: CastlingDirection) -> bool:
        return getattr(self, _RIGHTS_FIELDS[direction])

    def revoke(self, direction: CastlingDirection) -> None:
        setattr(self, _RIGHTS_FIELDS[direction], False)

    def revoke_all(self, color: Color) -> None:
        for direction in directions_for(color):
            self.revoke(direction)

    def copy(self) -> CastlingRights:
        return CastlingRights(
            self.white_king, self.white_queen, self.black_king, self.black_queen
        )


_RIGHTS_FIELDS: dict[CastlingDirection, str] = {
    CastlingDirection.WHITE_KING_SIDE: "white_king",
    CastlingDirection.WHITE_QUEEN_SIDE: "white_queen",
    CastlingDirection.BLACK_KING_SIDE: "black_king",
    CastlingDirection.BLACK_QUEEN_SIDE: "black_queen",
}


def directions_for(color: Color) -> list[CastlingDirection]:
    """Kingside first, then queenside."""
    return [direction for direction in CASTLING_ORDER if direction.color == color]

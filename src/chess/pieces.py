"""Defines the chess pieces"""

from __future__ import annotations

from dataclasses import dataclass, replace

from src.core.exceptions import InvalidDescriptorError
from src.core.shared_types import Color, PieceType

FEN_TO_PIECE: dict[str, PieceType] = {
    "p": PieceType.PAWN,
    "n": PieceType.KNIGHT,
    "b": PieceType.BISHOP,
    "r": PieceType.ROOK,
    "q": PieceType.QUEEN,
    "k": PieceType.KING,
}

PIECE_TO_FEN: dict[PieceType, str] = {value: key for key, value in FEN_TO_PIECE.items()}


# Relative values used by the evaluation. The king's value is only a sentinel weight (it is always on the board for both sides).
PIECE_VALUES: dict[PieceType, int] = {
    PieceType.PAWN: 100,
    PieceType.KNIGHT: 320,
    PieceType.BISHOP: 330,
    PieceType.ROOK: 500,
    PieceType.QUEEN: 900,
    PieceType.KING: 20000,
}


@dataclass(frozen=True)
class Piece:
    type: PieceType
    color: Color

    @property
    def value(self) -> int:
        return PIECE_VALUES[self.type]

    @classmethod
    def from_fen(cls, character: str) -> Piece:
        # lower case: Black pieces, upper case: White pieces
        if character.lower() not in FEN_TO_PIECE:
            raise InvalidDescriptorError(f"Unknown piece character: {character!r}")
        color = Color.WHITE if character.isupper() else Color.BLACK
        piece_type = FEN_TO_PIECE[character.lower()]
        return cls(piece_type, color)

    def to_fen(self) -> str:
        return (
            PIECE_TO_FEN[self.type].upper()
            if self.color == Color.WHITE
            else PIECE_TO_FEN[self.type].lower()
        )

    def promote_to(self, new_type: PieceType) -> Piece:
        """Pieces are values: promotion hands back a new piece of the same color."""
        return replace(self, type=new_type)

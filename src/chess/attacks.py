"""
Attack detection
----

Answers "is this square attacked by that color?" with direct geometric probes around the square.

NOTE: Never import from moves.py here. Castling generation in moves.py asks this module which squares are attacked,
so going through the move generator would recurse back into king-move generation.
"""

from typing import Protocol

from src.chess.pieces import Piece
from src.chess.square import Square
from src.core.shared_types import Color, PieceType

Vector = tuple[int, int]


class Board(Protocol):
    """Just the parts the attack probes need"""

    def piece(self, square: Square) -> Piece | None: ...
    def find_king(self, color: Color) -> Square | None: ...


KNIGHT_OFFSETS: list[Vector] = [
    (-2, -1),
    (-2, 1),
    (-1, -2),
    (-1, 2),
    (1, -2),
    (1, 2),
    (2, -1),
    (2, 1),
]
KING_OFFSETS: list[Vector] = [
    (d_row, d_col)
    for d_row in (-1, 0, 1)
    for d_col in (-1, 0, 1)
    if (d_row, d_col) != (0, 0)
]
ORTHOGONALS: list[Vector] = [(-1, 0), (1, 0), (0, -1), (0, 1)]
DIAGONALS: list[Vector] = [(-1, -1), (-1, 1), (1, -1), (1, 1)]


def pawn_direction(color: Color) -> int:
    """White pawns move towards row 0 (the 8th rank), black pawns towards row 7"""
    return -1 if color == Color.WHITE else 1


def single_step_attack(
    square: Square,
    by_color: Color,
    piece_types: set[PieceType],
    board: Board,
    deltas: list[Vector],
) -> bool:
    """Is one of the squares at the given offsets occupied by a piece of `by_color` with one of the given types?"""
    for d_row, d_col in deltas:
        piece_found = board.piece(square.offset(d_row, d_col))
        if (
            piece_found is not None
            and piece_found.color == by_color
            and piece_found.type in piece_types
        ):
            return True
    return False


def raycasting_attack(
    square: Square,
    by_color: Color,
    piece_types: set[PieceType],
    board: Board,
    directions: list[Vector],
) -> bool:
    """
    Raycasting algorithm for attacks.
    ---

    Walk away from the square along every direction until the edge of the board or the first piece.
    Only that first piece can see the square: it attacks if it has the attacking color and is a slider
    of the right kind for this direction.
    """
    for d_row, d_col in directions:
        target_square = square.offset(d_row, d_col)
        while target_square.is_within_bounds():
            piece_found = board.piece(target_square)
            if piece_found is not None:
                if piece_found.color == by_color and piece_found.type in piece_types:
                    return True
                break
            target_square = target_square.offset(d_row, d_col)
    return False


def is_attacked_by_pawn(square: Square, by_color: Color, board: Board) -> bool:
    """
    Pawns take diagonally forward. So an attacking pawn stands one row *behind* the square, seen from its own direction
    of travel (a white pawn attacking e4 stands on d3 or f3).
    """
    pawn_row = -pawn_direction(by_color)
    return single_step_attack(
        square, by_color, {PieceType.PAWN}, board, [(pawn_row, -1), (pawn_row, 1)]
    )


def is_attacked_by_knight(square: Square, by_color: Color, board: Board) -> bool:
    return single_step_attack(
        square, by_color, {PieceType.KNIGHT}, board, KNIGHT_OFFSETS
    )


def is_attacked_by_king(square: Square, by_color: Color, board: Board) -> bool:
    return single_step_attack(square, by_color, {PieceType.KING}, board, KING_OFFSETS)


def is_attacked_along_straights(square: Square, by_color: Color, board: Board) -> bool:
    return raycasting_attack(
        square, by_color, {PieceType.ROOK, PieceType.QUEEN}, board, ORTHOGONALS
    )


def is_attacked_along_diagonals(square: Square, by_color: Color, board: Board) -> bool:
    return raycasting_attack(
        square, by_color, {PieceType.BISHOP, PieceType.QUEEN}, board, DIAGONALS
    )


def is_square_attacked(square: Square, by_color: Color, board: Board) -> bool:
    return (
        is_attacked_by_pawn(square, by_color, board)
        or is_attacked_by_knight(square, by_color, board)
        or is_attacked_by_king(square, by_color, board)
        or is_attacked_along_straights(square, by_color, board)
        or is_attacked_along_diagonals(square, by_color, board)
    )


def is_in_check(color: Color, board: Board) -> bool:
    """A side without a king (incomplete custom setups) is never in check."""
    king_square = board.find_king(color)
    if king_square is None:
        return False
    return is_square_attacked(king_square, color.opponent, board)

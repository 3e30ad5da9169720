"""Unit tests for /src/chess/board.py"""

from typing import Callable

import pytest

from src.chess.board import Board
from src.chess.pieces import PIECE_TO_FEN, Piece
from src.chess.square import Square
from src.core.exceptions import InvalidDescriptorError
from src.core.shared_types import Color, PieceType

STARTING_POSITION = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR"
EMPTY_POSITION = "/".join(["8"] * 8)


@pytest.fixture
def board_with_single_piece() -> Callable[[PieceType, Color, str], Board]:
    """Call the inner function that will be returned with the desired piece type, color, and square"""

    def _create_board(piece_type: PieceType, color: Color, square_name: str = "d4") -> Board:
        fen_char = PIECE_TO_FEN[piece_type]
        fen_char = fen_char.upper() if color == Color.WHITE else fen_char

        square = Square.from_algebraic(square_name)
        fen_rows = ["8"] * 8
        before, after = square.col, 7 - square.col
        fen_rows[square.row] = f"{before or ''}{fen_char}{after or ''}"
        return Board.from_fen("/".join(fen_rows))

    return _create_board


def test_starting_position_round_trip() -> None:
    board = Board.from_fen(STARTING_POSITION)
    assert board.to_fen() == STARTING_POSITION


def test_starting_position_piece_placement() -> None:
    """Black pieces on row 0 (8th rank), white pieces on row 7 (1st rank)"""
    board = Board.from_fen(STARTING_POSITION)
    assert board.piece(Square.from_algebraic("e1")) == Piece(PieceType.KING, Color.WHITE)
    assert board.piece(Square.from_algebraic("d8")) == Piece(PieceType.QUEEN, Color.BLACK)
    assert board.piece(Square.from_algebraic("a7")) == Piece(PieceType.PAWN, Color.BLACK)
    assert board.is_empty(Square.from_algebraic("e4"))


@pytest.mark.parametrize(
    "position",
    [
        "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP",  # 7 ranks
        "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNRR",  # 9 files on the last rank
        "rnbqkbnr/pppppppp/9/8/8/8/PPPPPPPP/RNBQKBNR",  # 9 empty squares
        "rnbqkbnr/ppppxppp/8/8/8/8/PPPPPPPP/RNBQKBNR",  # unknown piece
        "",
    ],
)
def test_invalid_position_rejected(position: str) -> None:
    with pytest.raises(InvalidDescriptorError):
        Board.from_fen(position)


@pytest.mark.parametrize("piece_type", list(PieceType))
@pytest.mark.parametrize("color", list(Color))
def test_single_piece_board(
    board_with_single_piece: Callable[[PieceType, Color, str], Board],
    piece_type: PieceType,
    color: Color,
) -> None:
    board = board_with_single_piece(piece_type, color, "f3")
    assert board.piece(Square.from_algebraic("f3")) == Piece(piece_type, color)
    assert board.occupied_squares(color) == [Square.from_algebraic("f3")]
    assert board.occupied_squares(color.opponent) == []


def test_piece_outside_of_board_is_none() -> None:
    board = Board.from_fen(STARTING_POSITION)
    assert board.piece(Square(-1, 0)) is None
    assert board.piece(Square(8, 8)) is None


def test_move_piece_returns_captured_piece() -> None:
    board = Board.from_fen("8/8/8/3p4/4P3/8/8/8")
    e4 = Square.from_algebraic("e4")
    d5 = Square.from_algebraic("d5")

    captured = board.move_piece(e4, d5)

    assert captured == Piece(PieceType.PAWN, Color.BLACK)
    assert board.is_empty(e4)
    assert board.piece(d5) == Piece(PieceType.PAWN, Color.WHITE)


def test_move_piece_onto_empty_square() -> None:
    board = Board.from_fen(STARTING_POSITION)
    assert board.move_piece(Square.from_algebraic("g1"), Square.from_algebraic("f3")) is None
    assert board.to_fen() == "rnbqkbnr/pppppppp/8/8/8/5N2/PPPPPPPP/RNBQKB1R"


def test_remove_piece() -> None:
    board = Board.from_fen(STARTING_POSITION)
    removed = board.remove_piece(Square.from_algebraic("a1"))
    assert removed == Piece(PieceType.ROOK, Color.WHITE)
    assert board.remove_piece(Square.from_algebraic("a1")) is None


def test_occupied_squares_in_row_major_order() -> None:
    """a8, b8, ..., h8, a7, ..."""
    board = Board.from_fen(STARTING_POSITION)
    black_squares = board.occupied_squares(Color.BLACK)
    assert len(black_squares) == 16
    assert black_squares[0] == Square.from_algebraic("a8")
    assert black_squares[7] == Square.from_algebraic("h8")
    assert black_squares[8] == Square.from_algebraic("a7")


def test_find_king() -> None:
    board = Board.from_fen(STARTING_POSITION)
    assert board.find_king(Color.WHITE) == Square.from_algebraic("e1")
    assert board.find_king(Color.BLACK) == Square.from_algebraic("e8")


def test_find_king_on_board_without_one() -> None:
    """Custom setups may lack a king, that is not an error"""
    board = Board.from_fen("8/8/8/8/8/8/8/K7")
    assert board.find_king(Color.BLACK) is None


def test_copy_is_independent() -> None:
    board = Board.from_fen(STARTING_POSITION)
    copied = board.copy()
    copied.move_piece(Square.from_algebraic("e2"), Square.from_algebraic("e4"))

    assert board.to_fen() == STARTING_POSITION
    assert copied.to_fen() != STARTING_POSITION


def test_count_material() -> None:
    board = Board.from_fen(STARTING_POSITION)
    material = board.count_material()
    # 8 pawns, 2 knights, 2 bishops, 2 rooks, queen, king
    expected = 8 * 100 + 2 * 320 + 2 * 330 + 2 * 500 + 900 + 20000
    assert material == {Color.WHITE: expected, Color.BLACK: expected}


def test_empty_board() -> None:
    board = Board.empty()
    assert board.to_fen() == EMPTY_POSITION
    assert board.count_material() == {Color.WHITE: 0, Color.BLACK: 0}

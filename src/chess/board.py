"""The board: which piece stands on which square. Knows nothing about the rules of the game."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from src.chess.fen import is_valid_position
from src.chess.pieces import Piece
from src.chess.square import BOARD_DIMENSIONS, Square
from src.core.exceptions import InvalidDescriptorError
from src.core.shared_types import Color, PieceType

Grid = list[list[Optional[Piece]]]


@dataclass
class Board:
    squares: Grid

    @classmethod
    def empty(cls) -> Board:
        num_rows, num_cols = BOARD_DIMENSIONS
        return cls([[None] * num_cols for _ in range(num_rows)])

    @classmethod
    def from_fen(cls, fen_str: str) -> Board:
        """Construct a board using the board position part of a descriptor.

        ex. standard starting position:
        rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR
        means:
        * black pieces are on the 8th rank (row 0), read from the a-file to the h-file
        * pawns cover 7th rank entirely
        * ranks 6 through 3 have 8 consecutive empty squares
        * rank 2 are the white pawns (capital letters)
        * 1st rank (row 7) are the white pieces.
        """
        if not is_valid_position(fen_str):
            raise InvalidDescriptorError(f"Invalid board position: {fen_str!r}")

        board = cls.empty()
        for row, fen_one_rank in enumerate(fen_str.split("/")):
            col = 0
            for character in fen_one_rank:
                if character.isalpha():
                    board.squares[row][col] = Piece.from_fen(character)
                    col += 1
                else:
                    # A number denotes the amount of empty squares after each other
                    col += int(character)
        return board

    def to_fen(self) -> str:
        """Ranks are separated by slashes in FEN string."""
        return "/".join(self._rank_to_fen(row) for row in self.squares)

    def _rank_to_fen(self, row: list[Optional[Piece]]) -> str:
        fen_characters: list[str] = []
        empty_count = 0
        for piece in row:
            if piece is None:
                empty_count += 1
                continue
            if empty_count > 0:
                fen_characters.append(str(empty_count))
                empty_count = 0
            fen_characters.append(piece.to_fen())

        # if the entire rank is empty, then we still place this number in the string
        if empty_count > 0:
            fen_characters.append(str(empty_count))
        return "".join(fen_characters)

    def piece(self, square: Square) -> Optional[Piece]:
        if not square.is_within_bounds():
            return None
        return self.squares[square.row][square.col]

    def is_empty(self, square: Square) -> bool:
        return self.piece(square) is None

    def place_piece(self, piece: Piece, square: Square) -> None:
        self.squares[square.row][square.col] = piece

    def remove_piece(self, square: Square) -> Optional[Piece]:
        """Clear the square, returning whatever stood there."""
        removed = self.squares[square.row][square.col]
        self.squares[square.row][square.col] = None
        return removed

    def move_piece(self, from_square: Square, to_square: Square) -> Optional[Piece]:
        """Update the position on the board. Returns the piece that got displaced (captured) on the target square."""
        moving_piece = self.remove_piece(from_square)
        captured = self.piece(to_square)
        self.squares[to_square.row][to_square.col] = moving_piece
        return captured

    def occupied_squares(self, color: Color) -> list[Square]:
        """Squares holding a piece of the given color, in row-major order (a8, b8, ..., h1)."""
        return [
            Square(row, col)
            for row, rank in enumerate(self.squares)
            for col, piece in enumerate(rank)
            if piece is not None and piece.color == color
        ]

    def find_king(self, color: Color) -> Optional[Square]:
        """Custom positions may lack a king: return None instead of failing."""
        king = Piece(PieceType.KING, color)
        return next(
            (
                Square(row, col)
                for row, rank in enumerate(self.squares)
                for col, piece in enumerate(rank)
                if piece == king
            ),
            None,
        )

    def copy(self) -> Board:
        """Pieces are immutable, so copying the rows is enough for an independent board."""
        return Board([list(rank) for rank in self.squares])

    def count_material(self) -> dict[Color, int]:
        """Tally the value of the material each player has on the board"""
        return {color: self._count_material_player(color) for color in Color}

    def _player_pieces(self, color: Color) -> list[Piece]:
        return [
            piece
            for rank in self.squares
            for piece in rank
            if piece is not None and piece.color == color
        ]

    def _count_material_player(self, color: Color) -> int:
        return sum(piece.value for piece in self._player_pieces(color))

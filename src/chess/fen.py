"""
Parsing / serializing the position descriptor (FEN-like string) a game starts from.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from itertools import combinations
from string import ascii_lowercase
from typing import Optional

from src.chess.castling import CASTLING_ORDER, CastlingRights
from src.chess.pieces import FEN_TO_PIECE
from src.chess.square import BOARD_DIMENSIONS, Square
from src.core.exceptions import InvalidDescriptorError
from src.core.shared_types import Color

STARTING_FEN = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1"
EMPTY_SQUARE_DIGITS = "12345678"
COLOR_CODES: dict[str, Color] = {"w": Color.WHITE, "b": Color.BLACK}
# "-" or any non-empty selection of "KQkq", kept in that order
VALID_CASTLING_ENCODINGS: set[str] = {"-"} | {
    "".join(direction.value for direction in selection)
    for size in range(1, len(CASTLING_ORDER) + 1)
    for selection in combinations(CASTLING_ORDER, size)
}


def is_valid_fen(fen: str) -> bool:
    """Check if the string is a descriptor we can start a game from."""
    try:
        PositionDescriptor.from_fen(fen)
    except InvalidDescriptorError:
        return False
    return True


def is_valid_position(position: str) -> bool:
    """Only check the part of the FEN encoding for the board position."""
    num_rows, num_cols = BOARD_DIMENSIONS
    rank_fens = position.split("/")
    if len(rank_fens) != num_rows:
        return False

    for rank_fen in rank_fens:
        file_count = 0
        for character in rank_fen:
            if character in EMPTY_SQUARE_DIGITS:
                file_count += int(character)
            elif character.lower() in FEN_TO_PIECE:
                file_count += 1
            else:
                # immediately invalidate if the character is anything else
                return False

        # make sure you are creating a correctly sized board
        if file_count != num_cols:
            return False
    return True


def is_valid_color_code(color: str) -> bool:
    return color in COLOR_CODES


def is_valid_castling_rights(castling: str) -> bool:
    """A valid castling encoding has either KQkq, KQk, etc. or a '-' if all rights have been revoked."""
    return castling in VALID_CASTLING_ENCODINGS


def is_valid_en_passant(en_passant: str) -> bool:
    """Valid en passant square encoding should be a square that exists on the board or a '-'"""
    return (en_passant == "-") or is_valid_square(en_passant)


def is_valid_square(square: str) -> bool:
    """Valid square should be a letter for the file + a number for the rank"""
    num_rows, num_cols = BOARD_DIMENSIONS
    if len(square) < 2:
        return False

    file_char, rank_char = square[0], square[1:]
    if file_char not in ascii_lowercase[:num_cols]:
        return False

    if not rank_char.isdigit():
        return False

    return 1 <= int(rank_char) <= num_rows


def is_valid_move_counter(counter: str) -> bool:
    return counter.isdigit()


def to_descriptor(placement: str, color_to_move: Color) -> str:
    """Inverse of parsing, limited to board + side to move.

    NOTE: castling / en passant / clock fields are accepted on input but not written back out.
    """
    color_code = next(code for code, color in COLOR_CODES.items() if color == color_to_move)
    return f"{placement} {color_code}"


@dataclass
class PositionDescriptor:
    """
    Data that can be constructed from a position descriptor.
    ----

    <board position string> <active color> [castling rights] [en passant square] [half move clock] [number turns]

    * The board position is 8 ranks separated by '/', starting from the 8th rank. Letters are pieces
      (upper case white, lower case black), digits are runs of empty squares.
    * The active color is either "w" or "b"
    * The remaining fields are optional. Castling rights default to all available, no en passant square.

    ex) The standard starting position
    rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1
    """

    position: str
    color_to_move: Color
    castling_rights: CastlingRights = field(default_factory=CastlingRights)
    en_passant_square: Optional[Square] = None
    half_move_clock: int = 0
    num_turns: int = 1

    @classmethod
    def from_fen(cls, fen: str) -> PositionDescriptor:
        """Parse the descriptor, raising InvalidDescriptorError on anything malformed."""
        parts = fen.split()
        if not 2 <= len(parts) <= 6:
            raise InvalidDescriptorError(
                f"Expected board position and side to move (plus up to 4 optional fields): {fen!r}"
            )

        position, active_color, *extended = parts
        if not is_valid_position(position):
            raise InvalidDescriptorError(f"Invalid board position: {position!r}")
        if not is_valid_color_code(active_color):
            raise InvalidDescriptorError(f"Invalid side to move: {active_color!r}")
        color_to_move = COLOR_CODES[active_color]

        # pad the optional fields with their defaults
        castling_str, en_passant_algebraic, half_move_clock, num_turns = (
            extended + ["KQkq", "-", "0", "1"][len(extended) :]
        )

        if not is_valid_castling_rights(castling_str):
            raise InvalidDescriptorError(f"Invalid castling rights: {castling_str!r}")
        if not is_valid_en_passant(en_passant_algebraic):
            raise InvalidDescriptorError(
                f"Invalid en passant square: {en_passant_algebraic!r}"
            )
        if not (
            is_valid_move_counter(half_move_clock) and is_valid_move_counter(num_turns)
        ):
            raise InvalidDescriptorError(
                f"Invalid move counters: {half_move_clock!r} {num_turns!r}"
            )

        en_passant_square = (
            Square.from_algebraic(en_passant_algebraic)
            if en_passant_algebraic != "-"
            else None
        )
        return cls(
            position,
            color_to_move,
            CastlingRights.from_fen(castling_str),
            en_passant_square,
            int(half_move_clock),
            int(num_turns),
        )

    def to_fen(self) -> str:
        return to_descriptor(self.position, self.color_to_move)

    @classmethod
    def starting_position(cls) -> PositionDescriptor:
        return cls.from_fen(STARTING_FEN)

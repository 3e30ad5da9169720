"""
Geometry/Base movement and capturing rules

Key idea: Use strategy pattern to define pseudo-legal move sets for each piece type.
Legality (not leaving your own king attacked) is checked afterwards on a scratch copy of the board.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional, Protocol

from src.chess.attacks import (
    DIAGONALS,
    KING_OFFSETS,
    KNIGHT_OFFSETS,
    ORTHOGONALS,
    Vector,
    is_square_attacked,
    pawn_direction,
)
from src.chess.board import Board
from src.chess.castling import (
    CASTLING_RULES,
    CastlingDirection,
    CastlingRights,
    directions_for,
)
from src.chess.pieces import FEN_TO_PIECE, PIECE_TO_FEN, Piece
from src.chess.square import BOARD_DIMENSIONS, Square
from src.core.shared_types import Color, PieceType


class Position(Protocol):
    """Just the parts the movement strategies need"""

    board: Board
    castling_rights: CastlingRights
    en_passant_square: Optional[Square]


# --- MOVES ---
@dataclass(frozen=True)
class NormalMove:
    """Any move that just relocates a single piece (captures and pawn promotions included)"""

    from_square: Square
    to_square: Square

    def to_uci(self) -> str:
        return f"{self.from_square.to_algebraic()}{self.to_square.to_algebraic()}"


@dataclass(frozen=True)
class EnPassantMove(NormalMove):
    """Pawn takes the pawn that just passed it. It lands behind that pawn."""

    @property
    def captured_square(self) -> Square:
        """The captured pawn stands on the landing file, in the rank the capturing pawn started from."""
        return Square(self.from_square.row, self.to_square.col)


@dataclass(frozen=True)
class CastlingMove(NormalMove):
    """Encoded as the king's move. The rook tags along."""

    direction: CastlingDirection = CastlingDirection.WHITE_KING_SIDE


Move = NormalMove | EnPassantMove | CastlingMove


@dataclass(frozen=True)
class MoveRecord:
    """A move once it has been committed to the game."""

    from_square: Square
    to_square: Square
    piece: PieceType
    captured: Optional[Piece]
    notation: str
    promote_to: Optional[PieceType] = None

    def to_uci(self) -> str:
        """
        Universal Chess Interface notation, e.g. "e2e4" or "e7e8q" (promotion into a queen)
        """
        piece_char = PIECE_TO_FEN[self.promote_to] if self.promote_to else ""
        return f"{self.from_square.to_algebraic()}{self.to_square.to_algebraic()}{piece_char}"


def parse_uci(uci: str) -> tuple[Square, Square, Optional[PieceType]]:
    """Split "e7e8q" into origin, destination and (optional) promotion type"""
    from_square = Square.from_algebraic(uci[:2])
    to_square = Square.from_algebraic(uci[2:4])
    promote_to = FEN_TO_PIECE[uci[4]] if len(uci) == 5 else None
    return from_square, to_square, promote_to


def move_notation(
    from_square: Square, to_square: Square, piece: Piece, captured: Optional[Piece]
) -> str:
    """Coordinate notation: 'e2-e4', 'Ng1-f3', 'Bc4xf7'. Pawns carry no piece letter."""
    prefix = "" if piece.type == PieceType.PAWN else PIECE_TO_FEN[piece.type].upper()
    separator = "x" if captured else "-"
    return f"{prefix}{from_square.to_algebraic()}{separator}{to_square.to_algebraic()}"


# --- MOVEMENT RULES ---
def raycasting_move(square: Square, board: Board, directions: list[Vector]) -> list[Move]:
    """
    Raycasting algorithm
    -----

    Define move directions and move along them until we hit another piece or the edge of the board.
    The first occupied square is included only when it holds an opponent's piece (it can be captured).
    """
    player_color = board.piece(square).color

    moves: list[Move] = []
    for d_row, d_col in directions:
        target_square = square.offset(d_row, d_col)
        while target_square.is_within_bounds():
            piece_found = board.piece(target_square)
            if piece_found is not None:
                if piece_found.color != player_color:
                    moves.append(NormalMove(square, target_square))
                break
            moves.append(NormalMove(square, target_square))
            target_square = target_square.offset(d_row, d_col)
    return moves


def single_step_move(square: Square, board: Board, deltas: list[Vector]) -> list[Move]:
    """Raycasting is for sliding pieces. This is the equivalent for kings and knights that just make a single step along a direction"""
    player_color = board.piece(square).color

    moves: list[Move] = []
    for d_row, d_col in deltas:
        target_square = square.offset(d_row, d_col)
        if not target_square.is_within_bounds():
            continue

        piece_found = board.piece(target_square)
        if piece_found is None or piece_found.color != player_color:
            moves.append(NormalMove(square, target_square))
    return moves


def candidate_pawn_moves(square: Square, position: Position) -> list[Move]:
    """
    A pawn:
    - moves by a single square forward onto an empty square.
    - It can move by two from its starting rank, if both squares are empty
    - takes diagonally forward, onto an opponent's piece or onto the en passant square
    """
    board = position.board
    pawn = board.piece(square)
    direction = pawn_direction(pawn.color)
    starting_row = BOARD_DIMENSIONS[0] - 2 if pawn.color == Color.WHITE else 1

    moves: list[Move] = []
    one_step = square.offset(direction, 0)
    if one_step.is_within_bounds() and board.is_empty(one_step):
        moves.append(NormalMove(square, one_step))

        two_steps = square.offset(2 * direction, 0)
        if square.row == starting_row and board.is_empty(two_steps):
            moves.append(NormalMove(square, two_steps))

    for d_col in (-1, 1):
        target_square = square.offset(direction, d_col)
        if not target_square.is_within_bounds():
            continue

        target = board.piece(target_square)
        if target is not None and target.color != pawn.color:
            moves.append(NormalMove(square, target_square))

        if target_square == position.en_passant_square and _passed_pawn_beside(
            square, target_square, pawn.color, board
        ):
            moves.append(EnPassantMove(square, target_square))
    return moves


def _passed_pawn_beside(
    square: Square, en_passant_square: Square, color: Color, board: Board
) -> bool:
    """The pawn that just made a double step stands next to ours (guards against odd custom en passant squares)"""
    beside = Square(square.row, en_passant_square.col)
    return board.piece(beside) == Piece(PieceType.PAWN, color.opponent)


def candidate_knight_moves(square: Square, position: Position) -> list[Move]:
    """Knights always move such that |delta_row| + |delta_col| = 3"""
    return single_step_move(square, position.board, KNIGHT_OFFSETS)


def candidate_bishop_moves(square: Square, position: Position) -> list[Move]:
    """Bishops move diagonally: |delta_row| = |delta_col|"""
    return raycasting_move(square, position.board, DIAGONALS)


def candidate_rook_moves(square: Square, position: Position) -> list[Move]:
    """Rooks move either horizontally or vertically"""
    return raycasting_move(square, position.board, ORTHOGONALS)


QUEEN_DIRECTIONS: list[Vector] = KING_OFFSETS


def candidate_queen_moves(square: Square, position: Position) -> list[Move]:
    """The Queen combines the rook moves and bishop moves (rays in all 8 directions)"""
    return raycasting_move(square, position.board, QUEEN_DIRECTIONS)


def candidate_king_moves(square: Square, position: Position) -> list[Move]:
    """
    The king can move by a single square at the time.

    Castling is modelled as a special king move, appended after the regular steps (kingside first).
    """
    moves = single_step_move(square, position.board, KING_OFFSETS)
    moves.extend(candidate_castling_moves(square, position))
    return moves


def candidate_castling_moves(square: Square, position: Position) -> list[Move]:
    """
    **you are allowed to castle if**

    * The king stands on its home square and the rook on its corner.
    * Castling rights are not yet revoked.
    * All squares in between king and rook are empty.
    * The king is not in check, and neither the square it passes nor the square it lands on is under attack.

    NOTE: attacks are checked with the attack probes only, never by generating the opponent's moves.
    """
    board = position.board
    king = board.piece(square)

    moves: list[Move] = []
    for direction in directions_for(king.color):
        rule = CASTLING_RULES[direction]
        if square != rule.king_from or not position.castling_rights.has(direction):
            continue
        if board.piece(rule.rook_from) != Piece(PieceType.ROOK, king.color):
            continue
        if not all(board.is_empty(between) for between in rule.path):
            continue
        if any(
            is_square_attacked(walked, king.color.opponent, board)
            for walked in rule.king_walk
        ):
            continue
        moves.append(CastlingMove(rule.king_from, rule.king_to, direction))
    return moves


# -- STRATEGY PATTERN: MOVEMENT RULES ---
CandidateMovesFn = Callable[[Square, Position], list[Move]]
MOVEMENT_RULES: dict[PieceType, CandidateMovesFn] = {
    PieceType.PAWN: candidate_pawn_moves,
    PieceType.KNIGHT: candidate_knight_moves,
    PieceType.BISHOP: candidate_bishop_moves,
    PieceType.ROOK: candidate_rook_moves,
    PieceType.QUEEN: candidate_queen_moves,
    PieceType.KING: candidate_king_moves,
}


def pseudo_legal_moves(square: Square, position: Position) -> list[Move]:
    """Moves obeying the movement shape of the piece on the square. Empty square: no moves."""
    piece = position.board.piece(square)
    if piece is None:
        return []
    return MOVEMENT_RULES[piece.type](square, position)


def legal_moves(square: Square, position: Position) -> list[Move]:
    """Pseudo-legal moves that do not leave the mover's own king under attack."""
    return [
        move
        for move in pseudo_legal_moves(square, position)
        if leaves_king_safe(move, position.board)
    ]


# -- MOVE EXECUTION --
PROMOTION_OPTIONS: list[PieceType] = [
    PieceType.KNIGHT,
    PieceType.BISHOP,
    PieceType.ROOK,
    PieceType.QUEEN,
]


def is_promotion(move: Move, board: Board) -> bool:
    """check if the move is a pawn move reaching either the first or the final rank"""
    moving_piece = board.piece(move.from_square)
    is_pawn_move = moving_piece is not None and moving_piece.type == PieceType.PAWN
    return is_pawn_move and move.to_square.row in (0, BOARD_DIMENSIONS[0] - 1)


def play_on_board(
    board: Board, move: Move, promote_to: PieceType = PieceType.QUEEN
) -> Optional[Piece]:
    """
    Make the cell writes belonging to the move. Returns the captured piece (if any).

    Shared by the legality probe (on a scratch copy) and by the game itself.
    """
    match move:
        case CastlingMove(direction=direction):
            squares = CASTLING_RULES[direction]
            board.move_piece(squares.rook_from, squares.rook_to)
            board.move_piece(squares.king_from, squares.king_to)
            return None
        case EnPassantMove():
            captured = board.remove_piece(move.captured_square)
            board.move_piece(move.from_square, move.to_square)
            return captured
        case NormalMove():
            promoting = is_promotion(move, board)
            captured = board.move_piece(move.from_square, move.to_square)
            if promoting:
                pawn = board.piece(move.to_square)
                board.place_piece(pawn.promote_to(promote_to), move.to_square)
            return captured
        case _:
            raise TypeError(f"Unknown move type: {move!r}")


def leaves_king_safe(move: Move, board: Board) -> bool:
    """
    Simulate the move on a scratch copy of the board and look for the mover's king.

    The real board is never touched. If the mover has no king at all, the move counts as illegal.
    """
    mover = board.piece(move.from_square)
    if mover is None:
        return False

    scratch = board.copy()
    play_on_board(scratch, move)
    king_square = scratch.find_king(mover.color)
    if king_square is None:
        return False
    return not is_square_attacked(king_square, mover.color.opponent, scratch)

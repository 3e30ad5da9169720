"""
The Game class is the entrypoint into the domain layer for the service layer (and for the search engine).
It owns the mutable state of one game and is responsible for orchestrating all the rules required to play a move:
checking legality, updating the board, the castling rights, the en passant square, the history, and the game status.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from loguru import logger

from src.chess.attacks import is_in_check
from src.chess.board import Board
from src.chess.castling import CASTLING_RULES, CastlingRights, directions_for
from src.chess.fen import STARTING_FEN, PositionDescriptor, to_descriptor
from src.chess.moves import (
    PROMOTION_OPTIONS,
    Move,
    MoveRecord,
    is_promotion,
    legal_moves,
    move_notation,
    parse_uci,
    play_on_board,
)
from src.chess.pieces import Piece
from src.chess.square import Square
from src.core.exceptions import IllegalMoveError, NoMoveHistoryError
from src.core.models import GameModel
from src.core.shared_types import Color, GameStatus, PieceType


@dataclass
class Game:
    board: Board
    current_player: Color
    castling_rights: CastlingRights
    en_passant_square: Optional[Square]
    move_history: list[MoveRecord]
    captured_pieces: dict[Color, list[Piece]]
    status: GameStatus
    starting_fen: str

    @classmethod
    def new_game(cls, starting_fen: Optional[str] = None) -> Game:
        """Start a game from the standard starting position, or from a custom descriptor (puzzles, editor setups)."""
        starting_fen = starting_fen or STARTING_FEN
        descriptor = PositionDescriptor.from_fen(starting_fen)
        game = cls(
            board=Board.from_fen(descriptor.position),
            current_player=descriptor.color_to_move,
            castling_rights=descriptor.castling_rights,
            en_passant_square=descriptor.en_passant_square,
            move_history=[],
            captured_pieces={Color.WHITE: [], Color.BLACK: []},
            status=GameStatus.ACTIVE,
            starting_fen=starting_fen,
        )
        # a custom position may already be check / mate
        game._update_game_status()
        return game

    @classmethod
    def from_model(cls, model: GameModel) -> Game:
        """Rebuild a game from what the service layer stores: the starting position + the moves played."""
        game = cls.new_game(model.starting_fen)
        for uci in model.moves_uci:
            from_square, to_square, promote_to = parse_uci(uci)
            game.apply_move(from_square, to_square, promote_to or PieceType.QUEEN)
        return game

    def to_model(self) -> GameModel:
        """Encode back into a format the Service layer uses"""
        return GameModel(
            starting_fen=self.starting_fen,
            current_fen=self.to_fen(),
            moves_uci=[record.to_uci() for record in self.move_history],
            status=self.status.value,
        )

    def to_fen(self) -> str:
        """Board + side to move only."""
        return to_descriptor(self.board.to_fen(), self.current_player)

    @property
    def winner(self) -> Optional[Color]:
        """
        Only defined for checkmate: the side to move just got mated, so the opponent must be the winner
        """
        if self.status != GameStatus.CHECKMATE:
            return None
        return self.current_player.opponent

    def clone(self) -> Game:
        """Independent copy to explore hypothetical continuations with. Pieces, squares, and records are immutable and can be shared."""
        return Game(
            board=self.board.copy(),
            current_player=self.current_player,
            castling_rights=self.castling_rights.copy(),
            en_passant_square=self.en_passant_square,
            move_history=list(self.move_history),
            captured_pieces={
                color: list(pieces) for color, pieces in self.captured_pieces.items()
            },
            status=self.status,
            starting_fen=self.starting_fen,
        )

    # --- MOVE GENERATION ---
    def legal_moves(self, square: Square) -> list[Move]:
        """
        Legal moves of the piece on the square.
        ---
        Empty squares and pieces of the side that is not to move have none. Always recomputed, never cached.
        """
        piece = self.board.piece(square)
        if piece is None or piece.color != self.current_player:
            return []
        return legal_moves(square, self)

    def all_legal_moves(self) -> list[Move]:
        """Every legal move of the side to move. Squares in row-major order (a8 ... h1), then per-piece generation order."""
        return [
            move
            for square in self.board.occupied_squares(self.current_player)
            for move in legal_moves(square, self)
        ]

    def is_in_check(self, color: Optional[Color] = None) -> bool:
        return is_in_check(color or self.current_player, self.board)

    def compute_status(self) -> GameStatus:
        """Pure function of board, side to move, castling rights, and en passant square."""
        in_check = self.is_in_check()
        if not self._has_legal_move():
            return GameStatus.CHECKMATE if in_check else GameStatus.STALEMATE
        return GameStatus.CHECK if in_check else GameStatus.ACTIVE

    # --- MAKING MOVES ---
    def apply_move(
        self,
        from_square: Square,
        to_square: Square,
        promote_to: PieceType = PieceType.QUEEN,
    ) -> MoveRecord:
        """
        Attempt to make a move
        -----

        1. check there is a piece of the side to move on the origin square
        2. check the destination is among its legal moves (and the promotion choice makes sense)
        3. update the board (castling: king + rook, en passant: remove the passed pawn, promotion: replace the pawn)
        4. update castling rights and the en passant square
        5. update the history of moves / captured pieces
        6. hand the turn to the opponent and update the game status

        Nothing gets mutated when the move is rejected.
        """
        piece = self.board.piece(from_square)
        if piece is None or piece.color != self.current_player:
            raise IllegalMoveError(
                f"No {self.current_player} piece to move on {from_square.to_algebraic()}"
            )

        move = next(
            (m for m in self.legal_moves(from_square) if m.to_square == to_square),
            None,
        )
        if move is None:
            raise IllegalMoveError(
                f"Move not allowed: {from_square.to_algebraic()}{to_square.to_algebraic()}"
            )

        promoting = is_promotion(move, self.board)
        if promoting and promote_to not in PROMOTION_OPTIONS:
            raise IllegalMoveError(f"Cannot promote a pawn into a {promote_to}")

        captured = self._update_board(move, promote_to)
        self._revoke_castling_rights_if_needed(move, piece)
        self._update_en_passant_square(move, piece)
        record = MoveRecord(
            from_square=from_square,
            to_square=to_square,
            piece=piece.type,
            captured=captured,
            notation=move_notation(from_square, to_square, piece, captured),
            promote_to=promote_to if promoting else None,
        )
        self._update_moves(record, captured)

        self.current_player = self.current_player.opponent
        self._update_game_status()
        logger.debug(f"{record.notation} played, status: {self.status}")
        return record

    def undo(self) -> None:
        """
        Take back the last move.
        ---
        Rebuilds the whole game from the starting position and replays all but the last move.
        Linear in the length of the game, but always consistent (rights, en passant square, captures).
        """
        if not self.move_history:
            raise NoMoveHistoryError("No moves to undo.")

        replayed = Game.new_game(self.starting_fen)
        for record in self.move_history[:-1]:
            replayed.apply_move(
                record.from_square,
                record.to_square,
                record.promote_to or PieceType.QUEEN,
            )
        logger.debug(
            f"Undid {self.move_history[-1].notation}, replayed {len(replayed.move_history)} moves"
        )
        self._restore_from(replayed)

    # -- PRIVATE HELPERS ---
    def _restore_from(self, other: Game) -> None:
        self.board = other.board
        self.current_player = other.current_player
        self.castling_rights = other.castling_rights
        self.en_passant_square = other.en_passant_square
        self.move_history = other.move_history
        self.captured_pieces = other.captured_pieces
        self.status = other.status

    def _has_legal_move(self) -> bool:
        return any(
            legal_moves(square, self)
            for square in self.board.occupied_squares(self.current_player)
        )

    def _update_board(self, move: Move, promote_to: PieceType) -> Optional[Piece]:
        return play_on_board(self.board, move, promote_to)

    def _update_moves(self, record: MoveRecord, captured: Optional[Piece]) -> None:
        """
        NOTE: captures are filed under the side to move at the time of the capture (the capturing side).
        """
        self.move_history.append(record)
        if captured is not None:
            self.captured_pieces[self.current_player].append(captured)

    def _update_game_status(self) -> None:
        self.status = self.compute_status()

    # -- CASTLING RULE HELPERS ---
    def _revoke_castling_rights_if_needed(self, move: Move, piece: Piece) -> None:
        """
        Checks which rights should get revoked
        ----

        1. If you are moving your king (castling included) --> revoke both
        2. If you are moving a rook away from its corner --> revoke the right on that side
        3. If you capture a rook on its corner --> revoke your opponent's right on that side
        """
        if piece.type == PieceType.KING:
            self.castling_rights.revoke_all(piece.color)

        if piece.type == PieceType.ROOK:
            for direction in directions_for(piece.color):
                if move.from_square == CASTLING_RULES[direction].rook_from:
                    self.castling_rights.revoke(direction)

        for direction in directions_for(piece.color.opponent):
            if move.to_square == CASTLING_RULES[direction].rook_from:
                self.castling_rights.revoke(direction)

    # --- EN PASSANT RULE HELPERS ----
    def _update_en_passant_square(self, move: Move, piece: Piece) -> None:
        """Only a fresh double pawn step creates an en passant square: the square the pawn skipped."""
        rows_moved = abs(move.from_square.row - move.to_square.row)
        if piece.type == PieceType.PAWN and rows_moved == 2:
            self.en_passant_square = Square(
                (move.from_square.row + move.to_square.row) // 2, move.to_square.col
            )
        else:
            self.en_passant_square = None

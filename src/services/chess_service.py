"""Orchestration of communication from the caller (UI, API router) to the engine and persistence layers (and the reverse direction)."""

import random
from dataclasses import replace
from typing import Optional
from uuid import UUID

from loguru import logger

from src.api.models import (
    CreateGameRequest,
    DeleteGameRequest,
    EngineMoveRequest,
    GameResponse,
    GetGameRequest,
    LegalMovesRequest,
    LegalMovesResponse,
    MoveRequest,
    UndoRequest,
)
from src.chess.game import Game
from src.chess.square import Square
from src.core.config import EngineSettings, get_settings
from src.core.exceptions import GameStateError, NotYourTurnError, RepositoryError
from src.core.models import GameModel
from src.core.shared_types import Color, GameStatus, PieceType
from src.db.repository import GameRepository
from src.engine.search import best_move, weighted_move


class ChessService:
    """Orchestration of layers for local chess games (two seats on one device, or a human against the engine)."""

    def __init__(
        self, repository: GameRepository, settings: Optional[EngineSettings] = None
    ) -> None:
        self.repo = repository
        self.settings = settings or get_settings()
        self.rng = random.Random(self.settings.random_seed)

    # -- Operations ---
    def create_new_game(self, request: CreateGameRequest) -> GameResponse:
        """Start a game, from the standard position or a custom one (puzzles)."""
        new_game = Game.new_game(request.starting_fen)
        created_game_data = replace(
            new_game.to_model(),
            engine_color=request.engine_color.value if request.engine_color else None,
            skill_rating=request.skill_rating,
        )

        stored_game, game_id = self.repo.create_game(created_game_data)
        logger.info(
            f"Created game {game_id} (engine: {stored_game.engine_color or 'none'})"
        )
        return self._create_game_response(game_id, new_game, stored_game)

    def get_game_state(self, request: GetGameRequest) -> GameResponse:
        """Retrieve current game state."""
        stored_model = self._fetch_game(request.game_id)
        game = Game.from_model(stored_model)
        return self._create_game_response(request.game_id, game, stored_model)

    def legal_moves(self, request: LegalMovesRequest) -> LegalMovesResponse:
        """Legal destinations of the piece on the requested square (to highlight them, for instance)."""
        stored_model = self._fetch_game(request.game_id)
        game = Game.from_model(stored_model)
        moves = game.legal_moves(Square.from_algebraic(request.square))
        return LegalMovesResponse(
            game_id=request.game_id,
            square=request.square,
            legal_moves=[move.to_uci() for move in moves],
        )

    def make_move(self, request: MoveRequest) -> GameResponse:
        """A human seat makes a move."""
        stored_model = self._fetch_game(request.game_id)
        game = Game.from_model(stored_model)
        self._ensure_in_progress(game)

        if stored_model.engine_color == game.current_player.value:
            raise NotYourTurnError("Waiting for the engine to make a move first.")

        game.apply_move(
            Square.from_algebraic(request.from_square),
            Square.from_algebraic(request.to_square),
            request.promote_to or PieceType.QUEEN,
        )
        return self._store(request.game_id, game, stored_model)

    def engine_move(self, request: EngineMoveRequest) -> GameResponse:
        """
        Let the engine move for the side to move.
        ----
        An explicit depth (capped by the configured maximum) gives the plain best move.
        Otherwise the skill rating of the request, of the game, or the configured default decides how strong (and how random) the move is.
        """
        stored_model = self._fetch_game(request.game_id)
        game = Game.from_model(stored_model)
        self._ensure_in_progress(game)

        engine_color = stored_model.engine_color
        if engine_color is not None and engine_color != game.current_player.value:
            raise NotYourTurnError("Waiting for the player to make a move first.")

        if request.depth is not None:
            depth = min(request.depth, self.settings.max_search_depth)
            move = best_move(game, depth, game.current_player)
        else:
            skill_rating = (
                request.skill_rating
                or stored_model.skill_rating
                or self.settings.default_skill_rating
            )
            move = weighted_move(game, skill_rating, self.rng, self.settings)

        record = game.apply_move(move.from_square, move.to_square)
        logger.info(f"Engine played {record.notation} in game {request.game_id}")
        return self._store(request.game_id, game, stored_model)

    def undo(self, request: UndoRequest) -> GameResponse:
        """Take back one ply, or two (the player's move + the engine's reply). The first one must exist."""
        stored_model = self._fetch_game(request.game_id)
        game = Game.from_model(stored_model)

        game.undo()
        for _ in range(request.plies - 1):
            if game.move_history:
                game.undo()
        return self._store(request.game_id, game, stored_model)

    def delete_game(self, request: DeleteGameRequest) -> None:
        """Handle a request to delete a Game record."""
        if self.repo.delete_game(request.game_id) is None:
            raise RepositoryError(f"Game with game_id={request.game_id} not found.")
        logger.info(f"Deleted game {request.game_id}")

    # -- Internal helpers --
    def _store(self, game_id: UUID, game: Game, stored_model: GameModel) -> GameResponse:
        """Persist the new state of the game (keeping the seat configuration) and build the response."""
        updated = replace(
            game.to_model(),
            engine_color=stored_model.engine_color,
            skill_rating=stored_model.skill_rating,
        )
        self.repo.update_game(game_id, updated)
        return self._create_game_response(game_id, game, updated)

    def _create_game_response(
        self, game_id: UUID, game: Game, model: GameModel
    ) -> GameResponse:
        return GameResponse(
            game_id=game_id,
            fen_state=model.current_fen,
            starting_state=model.starting_fen,
            current_player=game.current_player,
            status=game.status,
            move_history=[record.notation for record in game.move_history],
            moves_uci=model.moves_uci,
            captured_pieces={
                color: [piece.to_fen() for piece in pieces]
                for color, pieces in game.captured_pieces.items()
            },
            winner=game.winner,
            engine_color=Color(model.engine_color) if model.engine_color else None,
        )

    def _fetch_game(self, game_id: UUID) -> GameModel:
        """Attempt to find the game in the repository and raise error if it fails."""
        game_model = self.repo.get_game(game_id)
        if game_model is None:
            raise RepositoryError(f"Game with {game_id=} not found.")
        return game_model

    def _ensure_in_progress(self, game: Game) -> None:
        if game.status in (GameStatus.CHECKMATE, GameStatus.STALEMATE):
            raise GameStateError(f"Game is over ({game.status}), no more moves can be made.")

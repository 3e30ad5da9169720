"""Unit tests for src/services/chess_service.py"""

from unittest.mock import patch
from uuid import UUID, uuid4

import pytest

from src.api.models import (
    CreateGameRequest,
    DeleteGameRequest,
    EngineMoveRequest,
    GameResponse,
    GetGameRequest,
    LegalMovesRequest,
    MoveRequest,
    UndoRequest,
)
from src.core.config import EngineSettings
from src.core.exceptions import (
    GameError,
    GameStateError,
    IllegalMoveError,
    NoMoveHistoryError,
    NotYourTurnError,
    RepositoryError,
)
from src.core.shared_types import Color, GameStatus, PieceType
from src.db.memory_repository import InMemoryGameRepository
from src.engine.search import best_move
from src.services.chess_service import ChessService

STARTING_FEN = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1"
QUEEN_HANGS = "4k3/8/8/3q4/8/8/3R4/4K3 w - - 0 1"
SCHOLARS_MATE = ["e2e4", "e7e5", "f1c4", "b8c6", "d1h5", "g8f6", "h5f7"]


@pytest.fixture
def service(repository: InMemoryGameRepository, settings: EngineSettings) -> ChessService:
    return ChessService(repository, settings)


def play(service: ChessService, game_id: UUID, *moves: str) -> GameResponse:
    response = None
    for uci in moves:
        response = service.make_move(
            MoveRequest(game_id=game_id, from_square=uci[:2], to_square=uci[2:4])
        )
    return response


# --- SERVICE - CREATE NEW GAME ----
def test_create_a_new_game(service: ChessService, repository: InMemoryGameRepository) -> None:
    """Check that new game is created, persisted in repo, and return has the appropriate information."""
    response = service.create_new_game(CreateGameRequest())

    # Check response structure
    assert isinstance(response, GameResponse)
    assert isinstance(response.game_id, UUID)

    # Check response data
    assert response.fen_state == "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w"
    assert response.starting_state == STARTING_FEN
    assert response.current_player == Color.WHITE
    assert response.status == GameStatus.ACTIVE
    assert response.move_history == []
    assert response.captured_pieces == {Color.WHITE: [], Color.BLACK: []}
    assert response.winner is None
    assert response.engine_color is None

    # Check persisted data
    stored_game = repository.get_game(response.game_id)
    assert stored_game is not None
    assert stored_game.starting_fen == STARTING_FEN
    assert stored_game.moves_uci == []
    assert stored_game.status == "active"


def test_create_game_against_engine(service: ChessService, repository: InMemoryGameRepository) -> None:
    response = service.create_new_game(
        CreateGameRequest(engine_color=Color.BLACK, skill_rating=1100)
    )
    assert response.engine_color == Color.BLACK

    stored_game = repository.get_game(response.game_id)
    assert stored_game.engine_color == "black"
    assert stored_game.skill_rating == 1100


def test_create_from_custom_position(service: ChessService) -> None:
    response = service.create_new_game(
        CreateGameRequest(starting_fen="4k3/8/8/8/8/8/8/4R1K1 b - - 0 1")
    )
    assert response.current_player == Color.BLACK
    assert response.status == GameStatus.CHECK


# --- SERVICE - QUERIES ----
def test_get_game_state(service: ChessService) -> None:
    game_id = service.create_new_game(CreateGameRequest()).game_id
    play(service, game_id, "e2e4")

    response = service.get_game_state(GetGameRequest(game_id=game_id))
    assert response.moves_uci == ["e2e4"]
    assert response.move_history == ["e2-e4"]
    assert response.current_player == Color.BLACK


def test_unknown_game(service: ChessService) -> None:
    with pytest.raises(RepositoryError):
        service.get_game_state(GetGameRequest(game_id=uuid4()))


def test_legal_moves_of_a_square(service: ChessService) -> None:
    game_id = service.create_new_game(CreateGameRequest()).game_id
    response = service.legal_moves(LegalMovesRequest(game_id=game_id, square="g1"))
    assert response.legal_moves == ["g1f3", "g1h3"]

    # opponent's piece
    response = service.legal_moves(LegalMovesRequest(game_id=game_id, square="g8"))
    assert response.legal_moves == []


# --- SERVICE - MAKING MOVES ----
def test_make_move_is_persisted(service: ChessService, repository: InMemoryGameRepository) -> None:
    game_id = service.create_new_game(CreateGameRequest()).game_id
    response = play(service, game_id, "e2e4", "d7d5", "e4d5")

    assert response.captured_pieces == {Color.WHITE: ["p"], Color.BLACK: []}
    assert response.move_history == ["e2-e4", "d7-d5", "e4xd5"]
    assert repository.get_game(game_id).moves_uci == ["e2e4", "d7d5", "e4d5"]


def test_illegal_move_is_not_persisted(service: ChessService, repository: InMemoryGameRepository) -> None:
    """Make sure service propagates the exceptions, and the stored game is unchanged."""
    game_id = service.create_new_game(CreateGameRequest()).game_id
    with pytest.raises(GameError):
        play(service, game_id, "e2e5")

    assert repository.get_game(game_id).moves_uci == []


def test_promotion_choice(service: ChessService) -> None:
    game_id = service.create_new_game(
        CreateGameRequest(starting_fen="8/4P2k/8/8/8/8/8/4K3 w - - 0 1")
    ).game_id
    response = service.make_move(
        MoveRequest(game_id=game_id, from_square="e7", to_square="e8", promote_to=PieceType.ROOK)
    )
    assert response.moves_uci == ["e7e8r"]
    assert response.fen_state.startswith("4R3/")


def test_checkmate_ends_the_game(service: ChessService) -> None:
    game_id = service.create_new_game(CreateGameRequest()).game_id
    response = play(service, game_id, *SCHOLARS_MATE)

    assert response.status == GameStatus.CHECKMATE
    assert response.winner == Color.WHITE

    with pytest.raises(GameStateError):
        play(service, game_id, "e8f7")


def test_human_cannot_move_for_engine(service: ChessService) -> None:
    game_id = service.create_new_game(CreateGameRequest(engine_color=Color.WHITE)).game_id
    with pytest.raises(NotYourTurnError):
        play(service, game_id, "e2e4")


# --- SERVICE - ENGINE MOVES ----
def test_engine_move_at_fixed_depth(service: ChessService) -> None:
    game_id = service.create_new_game(
        CreateGameRequest(starting_fen=QUEEN_HANGS, engine_color=Color.WHITE)
    ).game_id
    response = service.engine_move(EngineMoveRequest(game_id=game_id, depth=1))

    assert response.moves_uci == ["d2d5"]
    assert response.move_history == ["Rd2xd5"]
    assert response.current_player == Color.BLACK


def test_engine_refuses_on_human_turn(service: ChessService) -> None:
    game_id = service.create_new_game(CreateGameRequest(engine_color=Color.BLACK)).game_id
    with pytest.raises(NotYourTurnError):
        service.engine_move(EngineMoveRequest(game_id=game_id, depth=1))


def test_engine_reply_in_local_game(service: ChessService) -> None:
    """Without an engine seat the engine can move for whoever is to move (hints, autoplay)"""
    game_id = service.create_new_game(CreateGameRequest()).game_id
    play(service, game_id, "e2e4")
    response = service.engine_move(EngineMoveRequest(game_id=game_id, skill_rating=1500))

    assert len(response.moves_uci) == 2
    assert response.current_player == Color.WHITE


def test_engine_plays_against_human(service: ChessService) -> None:
    game_id = service.create_new_game(
        CreateGameRequest(engine_color=Color.BLACK, skill_rating=600)
    ).game_id
    play(service, game_id, "e2e4")
    response = service.engine_move(EngineMoveRequest(game_id=game_id))
    assert len(response.moves_uci) == 2

    # and it is the human's turn again
    response = play(service, game_id, "d2d4")
    assert len(response.moves_uci) == 3


# --- SERVICE - UNDO ----
def test_undo_single_ply(service: ChessService) -> None:
    game_id = service.create_new_game(CreateGameRequest()).game_id
    play(service, game_id, "e2e4", "e7e5")

    response = service.undo(UndoRequest(game_id=game_id))
    assert response.moves_uci == ["e2e4"]
    assert response.current_player == Color.BLACK


def test_undo_player_and_engine_move(service: ChessService) -> None:
    game_id = service.create_new_game(CreateGameRequest(engine_color=Color.BLACK)).game_id
    play(service, game_id, "e2e4")
    service.engine_move(EngineMoveRequest(game_id=game_id, depth=1))

    response = service.undo(UndoRequest(game_id=game_id, plies=2))
    assert response.moves_uci == []
    assert response.fen_state == "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w"


def test_undo_two_plies_with_one_move_played(service: ChessService) -> None:
    """Only the first ply has to exist"""
    game_id = service.create_new_game(CreateGameRequest()).game_id
    play(service, game_id, "e2e4")
    response = service.undo(UndoRequest(game_id=game_id, plies=2))
    assert response.moves_uci == []


def test_undo_without_moves(service: ChessService) -> None:
    game_id = service.create_new_game(CreateGameRequest()).game_id
    with pytest.raises(NoMoveHistoryError):
        service.undo(UndoRequest(game_id=game_id))


# --- SERVICE - DELETE ----
def test_delete_game(service: ChessService, repository: InMemoryGameRepository) -> None:
    game_id = service.create_new_game(CreateGameRequest()).game_id
    service.delete_game(DeleteGameRequest(game_id=game_id))

    assert repository.get_game(game_id) is None
    with pytest.raises(RepositoryError):
        service.get_game_state(GetGameRequest(game_id=game_id))


def test_service_logs_lifecycle(service: ChessService, captured_logs: list[str]) -> None:
    game_id = service.create_new_game(CreateGameRequest()).game_id
    service.delete_game(DeleteGameRequest(game_id=game_id))

    assert any(f"Created game {game_id}" in message for message in captured_logs)
    assert any(f"Deleted game {game_id}" in message for message in captured_logs)


def test_illegal_move_error_type(service: ChessService) -> None:
    game_id = service.create_new_game(CreateGameRequest()).game_id
    with pytest.raises(IllegalMoveError):
        play(service, game_id, "e2e5")


def test_explicit_depth_is_capped(service: ChessService, settings: EngineSettings) -> None:
    """A requested depth beyond the configured maximum searches at the maximum"""
    game_id = service.create_new_game(CreateGameRequest(starting_fen=QUEEN_HANGS)).game_id

    with patch("src.services.chess_service.best_move", side_effect=best_move) as mock_best_move:
        response = service.engine_move(EngineMoveRequest(game_id=game_id, depth=8))

    assert mock_best_move.call_args.args[1] == settings.max_search_depth
    assert response.moves_uci == ["d2d5"]


def test_delete_unknown_game(service: ChessService, captured_logs: list[str]) -> None:
    game_id = uuid4()
    with pytest.raises(RepositoryError):
        service.delete_game(DeleteGameRequest(game_id=game_id))

    assert not any("Deleted game" in message for message in captured_logs)

"""Requests and Response models"""

from typing import Optional
from uuid import UUID

from pydantic import BaseModel, field_validator

from src.chess.fen import is_valid_fen, is_valid_square
from src.chess.moves import PROMOTION_OPTIONS
from src.core.exceptions import InvalidRequestError
from src.core.shared_types import Color, GameStatus, PieceType

MIN_SKILL_RATING = 100
MAX_SKILL_RATING = 3000
MAX_UNDO_PLIES = 2


def _validate_square(value: str) -> str:
    if not (len(value) == 2 and is_valid_square(value)):
        raise InvalidRequestError(
            f"Cannot interpret {value!r} as a valid square name."
        )
    return value


def _validate_skill_rating(value: Optional[int]) -> Optional[int]:
    if value is not None and not MIN_SKILL_RATING <= value <= MAX_SKILL_RATING:
        raise InvalidRequestError(
            f"Skill rating must lie between {MIN_SKILL_RATING} and {MAX_SKILL_RATING}, got {value}."
        )
    return value


# --- REQUEST MODELS ---
class CreateGameRequest(BaseModel):
    """engine_color left out: both seats are played locally."""

    starting_fen: Optional[str] = None
    engine_color: Optional[Color] = None
    skill_rating: Optional[int] = None

    @field_validator("starting_fen")
    @classmethod
    def validate_starting_fen(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value

        if not is_valid_fen(value):
            raise InvalidRequestError(f"Cannot interpret {value!r} as a position.")
        return value

    @field_validator("skill_rating")
    @classmethod
    def validate_skill_rating(cls, value: Optional[int]) -> Optional[int]:
        return _validate_skill_rating(value)


class GetGameRequest(BaseModel):
    game_id: UUID


class DeleteGameRequest(BaseModel):
    game_id: UUID


class LegalMovesRequest(BaseModel):
    game_id: UUID
    square: str

    @field_validator("square")
    @classmethod
    def validate_square(cls, value: str) -> str:
        return _validate_square(value)


class MoveRequest(BaseModel):
    game_id: UUID
    from_square: str
    to_square: str
    promote_to: Optional[PieceType] = None

    @field_validator("from_square", "to_square")
    @classmethod
    def validate_square(cls, value: str) -> str:
        return _validate_square(value)

    @field_validator("promote_to")
    @classmethod
    def validate_promotion(cls, value: Optional[PieceType]) -> Optional[PieceType]:
        if value is not None and value not in PROMOTION_OPTIONS:
            raise InvalidRequestError(f"A pawn cannot promote into a {value}.")
        return value


class UndoRequest(BaseModel):
    """Two plies take back the player's move and the engine's reply in one go."""

    game_id: UUID
    plies: int = 1

    @field_validator("plies")
    @classmethod
    def validate_plies(cls, value: int) -> int:
        if not 1 <= value <= MAX_UNDO_PLIES:
            raise InvalidRequestError(
                f"Can undo 1 up to {MAX_UNDO_PLIES} plies at once, got {value}."
            )
        return value


class EngineMoveRequest(BaseModel):
    """An explicit depth searches without randomness. Otherwise the skill rating picks depth + randomness."""

    game_id: UUID
    skill_rating: Optional[int] = None
    depth: Optional[int] = None

    @field_validator("skill_rating")
    @classmethod
    def validate_skill_rating(cls, value: Optional[int]) -> Optional[int]:
        return _validate_skill_rating(value)

    @field_validator("depth")
    @classmethod
    def validate_depth(cls, value: Optional[int]) -> Optional[int]:
        if value is not None and value < 1:
            raise InvalidRequestError(f"Search depth must be at least 1, got {value}.")
        return value


# --- RESPONSE MODELS ---
class GameResponse(BaseModel):
    game_id: UUID
    fen_state: str
    starting_state: str
    current_player: Color
    status: GameStatus
    move_history: list[str]
    moves_uci: list[str]
    captured_pieces: dict[Color, list[str]]
    winner: Optional[Color] = None
    engine_color: Optional[Color] = None


class LegalMovesResponse(BaseModel):
    game_id: UUID
    square: str
    legal_moves: list[str]

"""
Depth-limited minimax search with alpha-beta pruning.
----

The game is treated as a black box: every node is a clone of the game with one more move applied,
so branches never share mutable state. Evaluation is material only (positive favours white).

NOTE: terminal positions are scored by material as well, so a mate in 1 and a mate in 5 look the same.
"""

import math
import random
from functools import lru_cache
from typing import Optional

from loguru import logger

from src.chess.game import Game
from src.chess.moves import Move
from src.core.config import EngineSettings, get_settings
from src.core.exceptions import NoLegalMovesError
from src.core.shared_types import Color, GameStatus
from src.engine.skill import skill_profile

TERMINAL_STATUSES = (GameStatus.CHECKMATE, GameStatus.STALEMATE)


@lru_cache
def shared_rng(seed: Optional[int]) -> random.Random:
    """One generator per seed, seeded once: successive engine moves keep drawing from the same sequence."""
    return random.Random(seed)


def evaluate(game: Game) -> int:
    """Material of white minus material of black."""
    material = game.board.count_material()
    return material[Color.WHITE] - material[Color.BLACK]


def play(game: Game, move: Move) -> Game:
    """Clone the game and apply the move to the clone (pawns promote to a queen)."""
    child = game.clone()
    child.apply_move(move.from_square, move.to_square)
    return child


def minimax(
    game: Game, depth: int, alpha: float, beta: float, maximizing: bool
) -> float:
    if depth == 0 or game.status in TERMINAL_STATUSES:
        return evaluate(game)

    if maximizing:
        best_score = -math.inf
        for move in game.all_legal_moves():
            score = minimax(play(game, move), depth - 1, alpha, beta, False)
            best_score = max(best_score, score)
            alpha = max(alpha, score)
            if beta <= alpha:
                break
        return best_score

    best_score = math.inf
    for move in game.all_legal_moves():
        score = minimax(play(game, move), depth - 1, alpha, beta, True)
        best_score = min(best_score, score)
        beta = min(beta, score)
        if beta <= alpha:
            break
    return best_score


def best_move(game: Game, depth: int, engine_color: Color) -> Move:
    """
    Search every legal move of the side to move to the given depth.
    ---

    White maximises the evaluation, black minimises it. On equal scores the first move in generation order wins.
    """
    if depth < 1:
        raise ValueError(f"Search depth must be at least 1, got {depth}")

    moves = game.all_legal_moves()
    if not moves:
        raise NoLegalMovesError(f"No legal moves to search, game status: {game.status}")

    maximizing = engine_color == Color.WHITE
    chosen: Optional[Move] = None
    best_score = -math.inf if maximizing else math.inf
    for move in moves:
        # after our move it is the opponent's turn
        score = minimax(play(game, move), depth - 1, -math.inf, math.inf, not maximizing)
        if (maximizing and score > best_score) or (not maximizing and score < best_score):
            best_score = score
            chosen = move

    # for the type checker: scores are finite, so the first move always replaces the infinite starting value
    assert chosen is not None
    logger.debug(f"Best move {chosen.to_uci()} at depth {depth}, score {best_score}")
    return chosen


def weighted_move(
    game: Game,
    skill_rating: int,
    rng: Optional[random.Random] = None,
    settings: Optional[EngineSettings] = None,
) -> Move:
    """
    Engine move for an opponent of the given rating.
    ---

    Lower ratings search shallower and, now and then, play a random legal move instead.
    """
    settings = settings or get_settings()
    rng = rng or shared_rng(settings.random_seed)
    profile = skill_profile(skill_rating, settings.max_search_depth)

    moves = game.all_legal_moves()
    if not moves:
        raise NoLegalMovesError(f"No legal moves to choose from, game status: {game.status}")

    if rng.random() < profile.random_move_probability:
        move = rng.choice(moves)
        logger.debug(f"Random move {move.to_uci()} at rating {skill_rating}")
        return move

    return best_move(game, profile.search_depth, game.current_player)

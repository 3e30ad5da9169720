"""
Pytest will auto-discover / import this file called 'conftest.py'.
This file defines fixtures/variables required for testing multiple layers.
"""

from typing import Callable, Iterator

import pytest
from loguru import logger

from src.chess.game import Game
from src.chess.square import Square
from src.core.config import EngineSettings
from src.db.memory_repository import InMemoryGameRepository


@pytest.fixture
def repository() -> InMemoryGameRepository:
    """Fresh in-memory repository per test: no records leak between tests."""
    return InMemoryGameRepository()


@pytest.fixture
def settings() -> EngineSettings:
    """Deterministic, shallow engine settings (no environment / .env lookups involved)."""
    return EngineSettings(
        _env_file=None,
        log_level="DEBUG",
        default_skill_rating=1200,
        max_search_depth=2,
        random_seed=7,
    )


@pytest.fixture
def play_moves() -> Callable[..., Game]:
    """Call the inner function with the moves to play (uci strings), optionally from a custom position."""

    def _play(*moves: str, fen: str | None = None) -> Game:
        game = Game.new_game(fen)
        for uci in moves:
            game.apply_move(Square.from_algebraic(uci[:2]), Square.from_algebraic(uci[2:4]))
        return game

    return _play


@pytest.fixture
def captured_logs() -> Iterator[list[str]]:
    """Collect loguru messages emitted during the test."""
    messages: list[str] = []
    handler_id = logger.add(messages.append, level="DEBUG", format="{level} | {message}")
    try:
        yield messages
    finally:
        logger.remove(handler_id)

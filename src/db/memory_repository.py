"""Implementation of (Game)Repository keeping the games in memory (local play, tests)"""

from dataclasses import replace
from uuid import UUID, uuid4

from src.core.models import GameModel


class InMemoryGameRepository:
    """Games stored in a dictionary, keyed by game ID"""

    def __init__(self) -> None:
        self._games: dict[UUID, GameModel] = {}

    def get_game(self, game_id: UUID) -> GameModel | None:
        """Get game by ID, if record exists."""
        game = self._games.get(game_id)
        return self._to_model(game) if game else None

    def create_game(self, game: GameModel) -> tuple[GameModel, UUID]:
        """Store new game and return the stored data + newly created game ID."""
        new_id = uuid4()
        self._games[new_id] = self._to_model(game)
        return self._to_model(game), new_id

    def update_game(self, game_id: UUID, game: GameModel) -> GameModel | None:
        """Add new info to existing record."""
        if game_id not in self._games:
            return None
        self._games[game_id] = self._to_model(game)
        return self._to_model(game)

    def delete_game(self, game_id: UUID) -> GameModel | None:
        """Remove a game's record."""
        return self._games.pop(game_id, None)

    def _to_model(self, game: GameModel) -> GameModel:
        """Hand out copies, so callers cannot change stored records behind the repository's back."""
        return replace(game, moves_uci=list(game.moves_uci))

"""Storage contract for games. The engine never persists anything itself: an embedding application plugs in its own store."""

from typing import Optional, Protocol
from uuid import UUID

from src.core.models import GameModel


class GameRepository(Protocol):
    """Keeps GameModel records under a UUID. Lookups of unknown ids give None instead of raising."""

    def get_game(self, game_id: UUID) -> Optional[GameModel]: ...

    def create_game(self, game: GameModel) -> tuple[GameModel, UUID]:
        """Stores a new record, handing back what was stored together with the id it got."""
        ...

    def update_game(self, game_id: UUID, game: GameModel) -> Optional[GameModel]:
        """Replaces the record (starting position + moves played + seat configuration) of an existing game."""
        ...

    def delete_game(self, game_id: UUID) -> Optional[GameModel]: ...

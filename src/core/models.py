"""
Boundary layer data model(s).

These objects can be used to communicate with the Service.
Both the service layer and the repository use the model defined here to send/receive a game
(decouples whatever storage an embedding application picks from the domain objects in src/chess).
"""

from dataclasses import dataclass
from typing import Optional

# Type aliases to make GameModel easier to read
PieceColor = str


@dataclass
class GameModel:
    """Transport-safe representation of a chess game.

    The game itself is rebuilt by replaying `moves_uci` from `starting_fen`, `current_fen` is informational.
    `engine_color` is None for a local two-seat game.
    """

    starting_fen: str
    current_fen: str
    moves_uci: list[str]
    status: str
    engine_color: Optional[PieceColor] = None
    skill_rating: Optional[int] = None

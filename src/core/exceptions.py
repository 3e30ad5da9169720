"""
Custom exceptions.

Every error the engine signals to a caller derives from GameError, so the service (or whatever embeds the engine)
can catch one type. None of them leave a game in a half-updated state.
"""


class GameError(Exception):
    """Top-level exception for anything going wrong while handling a game."""


class InvalidDescriptorError(GameError):
    """Position descriptor (FEN-like string) cannot be parsed."""


class IllegalMoveError(GameError):
    """No movable piece on the origin square, or the destination is not a legal move."""


class NoMoveHistoryError(GameError):
    """Undo requested while no move has been played yet."""


class NoLegalMovesError(GameError):
    """Search requested on a position where the side to move cannot move (checkmate / stalemate)."""


class GameStateError(GameError):
    """Operation does not fit the current state of the game."""


class NotYourTurnError(GameError):
    """A seat tried to move while the other seat is to move."""


class RepositoryError(GameError):
    """Problem retrieving / storing a game record."""


class InvalidRequestError(GameError):
    """Request data rejected before it reaches the engine."""

"""Exceptions signalling programming contract violations.

Rule violations never raise; they are reported through
:class:`~communistopoly.shared.value_objects.Decision` values instead.
"""


class BoardConfigurationError(ValueError):
    """Raised when the static board tables are internally inconsistent."""


class GameSetupError(ValueError):
    """Raised when a player-setup list cannot produce a valid game."""


class SessionNotInitializedError(RuntimeError):
    """Raised when turn operations run before the game was started."""


__all__ = [
    "BoardConfigurationError",
    "GameSetupError",
    "SessionNotInitializedError",
]

"""Communistopoly rules engine package."""

from communistopoly.game_logic import GameSession, PlayerSetup
from communistopoly.settings import EngineSettings, get_settings

__all__ = [
    "EngineSettings",
    "GameSession",
    "PlayerSetup",
    "get_settings",
]

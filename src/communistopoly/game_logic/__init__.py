"""Core rules and mechanics that drive a game of Communistopoly."""

from communistopoly.game_logic.abilities import AbilityEngine
from communistopoly.game_logic.board import (
    BOARD_SIZE,
    BOARD_SPACES,
    GULAG_POSITION,
    STOY_POSITION,
    BoardSpace,
    get_space,
)
from communistopoly.game_logic.configuration import (
    RulesConfiguration,
    RulesDefaults,
    RulesOverrides,
    build_rules_configuration,
    get_default_rules_configuration,
)
from communistopoly.game_logic.decrees import DecreeEngine
from communistopoly.game_logic.directives import DIRECTIVE_DECK, DirectiveCard
from communistopoly.game_logic.errors import (
    BoardConfigurationError,
    GameSetupError,
    SessionNotInitializedError,
)
from communistopoly.game_logic.gulag import GulagEngine, required_escape_faces
from communistopoly.game_logic.landing import LandingEngine
from communistopoly.game_logic.ledger import PlayerLedger
from communistopoly.game_logic.pending import PendingAction
from communistopoly.game_logic.properties import PropertyEngine
from communistopoly.game_logic.session import GameSession, PlayerSetup
from communistopoly.game_logic.state import (
    GameState,
    Player,
    PropertyState,
    TradeItems,
    TradeOffer,
    Tribunal,
)
from communistopoly.game_logic.trade import TradeEngine
from communistopoly.game_logic.tribunal import TribunalEngine
from communistopoly.game_logic.trivia import QUESTION_BANK, TestQuestion
from communistopoly.game_logic.turns import TurnEngine

__all__ = [
    "BOARD_SIZE",
    "BOARD_SPACES",
    "DIRECTIVE_DECK",
    "GULAG_POSITION",
    "QUESTION_BANK",
    "STOY_POSITION",
    "AbilityEngine",
    "BoardConfigurationError",
    "BoardSpace",
    "DecreeEngine",
    "DirectiveCard",
    "GameSession",
    "GameSetupError",
    "GameState",
    "GulagEngine",
    "LandingEngine",
    "PendingAction",
    "Player",
    "PlayerLedger",
    "PlayerSetup",
    "PropertyEngine",
    "PropertyState",
    "RulesConfiguration",
    "RulesDefaults",
    "RulesOverrides",
    "SessionNotInitializedError",
    "TestQuestion",
    "TradeEngine",
    "TradeItems",
    "TradeOffer",
    "Tribunal",
    "TribunalEngine",
    "TurnEngine",
    "build_rules_configuration",
    "get_default_rules_configuration",
    "get_space",
    "required_escape_faces",
]

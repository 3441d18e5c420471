"""Abstracted poker game, its states and the betting protocol they drive."""

from abstracted_poker.game.actions import AbstractAction, ActionFlag
from abstracted_poker.game.game import AbstractedPokerGame
from abstracted_poker.game.protocol import AcpcBettingState, ActionKind, RaiseRange
from abstracted_poker.game.state import (
    CHANCE_PLAYER_ID,
    TERMINAL_PLAYER_ID,
    AbstractedPokerState,
)

__all__ = [
    "CHANCE_PLAYER_ID",
    "TERMINAL_PLAYER_ID",
    "AbstractAction",
    "AbstractedPokerGame",
    "AbstractedPokerState",
    "ActionFlag",
    "ActionKind",
    "AcpcBettingState",
    "RaiseRange",
]

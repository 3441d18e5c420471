"""Canonical hand indexing and an abstracted poker game built on it."""

from abstracted_poker.game import AbstractedPokerGame, AbstractedPokerState
from abstracted_poker.shared.config import Config
from abstracted_poker.shared.config_loader import load_config

__all__ = ["AbstractedPokerGame", "AbstractedPokerState", "Config", "load_config"]

__version__ = "0.1.0"

"""Suit-isomorphic canonical hand indexing."""

from abstracted_poker.indexing.hand_indexer import HandIndexer
from abstracted_poker.indexing.round_indexers import (
    HOLDEM_SCHEDULE,
    GeneralIndexer,
    PreflopIndexer,
)

__all__ = ["HOLDEM_SCHEDULE", "GeneralIndexer", "HandIndexer", "PreflopIndexer"]

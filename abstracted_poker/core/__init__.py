"""Card primitives shared by the indexers and the game state."""

from abstracted_poker.core.cards import (
    RANK_CHARS,
    SUIT_CHARS,
    CardSet,
    card_from_string,
    card_to_string,
    cards_from_string,
    cards_to_string,
    make_card,
)

__all__ = [
    "RANK_CHARS",
    "SUIT_CHARS",
    "CardSet",
    "card_from_string",
    "card_to_string",
    "cards_from_string",
    "cards_to_string",
    "make_card",
]
